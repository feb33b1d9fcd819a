#!/usr/bin/env python3
"""Convert a treebank to a PCFG, and optionally to binarized versions of it.

The input has one bracketed tree per line. Each output file has one rule per
line in the form: weight lhs -> rhs

Usage:
    python3 convert_trees_to_pcfg.py corpus.trees corpus.pcfg \
        --binary corpus.binary.pcfg --shared corpus.binary.shared.pcfg
"""

import sys
import os
import argparse
import logging

sys.path.insert(0, os.path.dirname(__file__))

import utility
import pcfg
import binarize


def main(argv=None):
    parser = argparse.ArgumentParser(description='Convert treebank to PCFG, optionally binarized.')
    parser.add_argument('input', type=str, help='filename of input treebank')
    parser.add_argument('output', type=str, help='filename of output grammar')
    parser.add_argument('--binary', type=str, default=None,
                        help='filename for the binarized grammar (one new nonterminal per folded pair)')
    parser.add_argument('--shared', type=str, default=None,
                        help='filename for the binarized grammar that shares new nonterminals')
    parser.add_argument('--length', type=int, default=0,
                        help="maximum length of strings to be considered. Ones longer than this are discarded.")
    parser.add_argument('--n', type=int, default=-1,
                        help="Only do the first n samples (default all of them).")
    parser.add_argument('--prefix', type=str, default='X',
                        help='prefix of the new nonterminals made by binarization (default X)')
    parser.add_argument('--verbose', action="store_true", help='log progress')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    grammar = pcfg.Grammar()
    try:
        grammar.count_treebank(args.input, args.length, args.n)
    except utility.CorpusNotFoundException as e:
        logging.warning("%s; writing an empty grammar", e)
    grammar.estimate_weights()

    header = [f" PCFG estimated from {args.input}"]
    grammar.store(args.output, header=header)
    if args.binary:
        pcfg.store_rules(binarize.binarize(grammar, args.prefix), args.binary,
                         header=header + [" binarized"])
    if args.shared:
        pcfg.store_rules(binarize.binarize_shared(grammar, args.prefix), args.shared,
                         header=header + [" binarized with shared nonterminals"])
    return 0


if __name__ == '__main__':
    sys.exit(main())
