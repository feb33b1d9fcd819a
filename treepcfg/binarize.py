"""Binarize a PCFG so that no rule has more than two symbols on the right.

A rule A -> B C D E with weight w is folded from the left:

    X1 -> B C     1.0
    X2 -> X1 D    1.0
    A -> X2 E     w

Each new nonterminal has exactly one rule, so it takes weight 1.0 and all of
the probability stays on the final rule. Rules with one or two symbols on the
right are copied unchanged.

The shared binarizer reuses a new nonterminal whenever the same pair of
symbols is folded again, e.g. A -> B C D and A -> B C E both use X1 -> B C.

Usage:
    binary_rules = binarize(grammar)
    shared_rules = binarize_shared(grammar)

Neither modifies the grammar; each call has its own counter, so passes can
run side by side on the same grammar.
"""

import logging

import utility
from pcfg import Rule


class SymbolGenerator:
    """Fresh nonterminals X1, X2, ... for one pass, skipping any in reserved."""

    def __init__(self, reserved=(), prefix='X'):
        self.prefix = prefix
        self.reserved = set(reserved)
        self.counter = 0

    def __call__(self):
        while True:
            self.counter += 1
            symbol = f'{self.prefix}{self.counter}'
            if symbol not in self.reserved:
                return symbol


class Binarizer:
    """Naive left-folding binarization: one new nonterminal per folded pair."""

    def __init__(self, grammar, prefix='X'):
        self.grammar = grammar
        self.prefix = prefix
        self.synthetic_symbols = []

    def start_pass(self):
        self.reserved = self.grammar.symbols()
        self.new_symbol = SymbolGenerator(self.reserved, self.prefix)
        self.synthetic_symbols = []
        self.minted = set()

    def binarize(self):
        """Return the list of binarized rules, in grammar order."""
        if not self.grammar.normalised:
            logging.warning("Binarizing a grammar whose weights have not been estimated")
        self.start_pass()
        result = []
        for rule in self.grammar.productions():
            if len(rule.rhs) <= 2:
                result.append(Rule(rule.lhs, rule.rhs, rule.lexical, rule.weight))
            else:
                result.extend(self.binarize_rule(rule))
        logging.info("%s: %d rules became %d, with %d new nonterminals",
                     type(self).__name__, len(self.grammar), len(result), len(self.synthetic_symbols))
        return result

    def binarize_rule(self, rule):
        output = []
        prev = rule.rhs[0]
        for symbol in rule.rhs[1:-1]:
            prev = self.fold(prev, symbol, output)
        output.append(Rule(rule.lhs, (prev, rule.rhs[-1]), False, rule.weight))
        return output

    def fold(self, left, right, output):
        symbol = self.mint()
        output.append(Rule(symbol, (left, right), False, 1.0))
        return symbol

    def mint(self):
        symbol = self.new_symbol()
        if symbol in self.reserved or symbol in self.minted:
            raise utility.InconsistentGrammarException(f"New nonterminal {symbol} is already in use")
        self.minted.add(symbol)
        self.synthetic_symbols.append(symbol)
        return symbol


class SharedBinarizer(Binarizer):
    """
    Like Binarizer but reuses the nonterminal for a pair of symbols seen
    earlier in the same pass. The final rule carrying the original weight is
    always written out, even if its pair was folded before.
    """

    def start_pass(self):
        super().start_pass()
        self.memo = {}

    def fold(self, left, right, output):
        pair = (left, right)
        if pair in self.memo:
            return self.memo[pair]
        symbol = super().fold(left, right, output)
        self.memo[pair] = symbol
        return symbol


def binarize(grammar, prefix='X'):
    return Binarizer(grammar, prefix).binarize()


def binarize_shared(grammar, prefix='X'):
    return SharedBinarizer(grammar, prefix).binarize()
