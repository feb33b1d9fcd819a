"""Shared fixtures and test utilities for the treebank PCFG test suite."""

import os
import sys
import tempfile
import pytest
import numpy as np

# Add treepcfg to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'treepcfg'))

import pcfg
import utility


DOG_TREE = "(S (NP (DT the) (NN dog)) (VP (VBD barked)))"
GAVE_TREE = "(VP (VBD gave) (NP (DT the) (NN dog)) (NP (DT a) (NN bone)))"

SMALL_TREEBANK = [
    "(S (NP (DT the) (NN dog)) (VP (VBD barked)))",
    "(S (NP (DT the) (NN cat)) (VP (VBD saw) (NP (DT a) (NN dog))))",
    "(S (NP (NNP Kim)) (VP (VBD gave) (NP (DT the) (NN dog)) (NP (DT a) (NN bone))))",
    "(S (NP (DT a) (JJ big) (NN dog)) (VP (VBD barked)))",
]


def write_corpus(lines):
    """Write lines to a temporary file and return its name; the caller deletes it."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.trees', delete=False) as f:
        f.write('\n'.join(lines))
        f.write('\n')
    return f.name


@pytest.fixture
def dog_grammar():
    """Normalised grammar from the single tree DOG_TREE."""
    g = pcfg.Grammar()
    g.count_tree(utility.string_to_tree(DOG_TREE))
    g.estimate_weights()
    return g


@pytest.fixture
def gave_grammar():
    """Normalised grammar from the single tree GAVE_TREE (one ternary rule)."""
    g = pcfg.Grammar()
    g.count_tree(utility.string_to_tree(GAVE_TREE))
    g.estimate_weights()
    return g


@pytest.fixture
def small_grammar():
    """Normalised grammar from SMALL_TREEBANK."""
    g = pcfg.Grammar()
    g.count_trees(utility.string_to_tree(s) for s in SMALL_TREEBANK)
    g.estimate_weights()
    return g


@pytest.fixture
def shared_pair_grammar():
    """
    Two ternary-or-longer rules with the same leading pair:

    NP -> DT JJ NN (0.5)
    NP -> DT JJ JJ NN (0.5)
    """
    g = pcfg.Grammar()
    g.count_tree(utility.string_to_tree("(NP (DT a) (JJ big) (NN dog))"))
    g.count_tree(utility.string_to_tree("(NP (DT a) (JJ big) (JJ old) (NN dog))"))
    g.estimate_weights()
    return g


@pytest.fixture
def tmp_corpus_file():
    """Create a temporary treebank file and return its path."""
    name = write_corpus(SMALL_TREEBANK)
    yield name
    os.unlink(name)


@pytest.fixture
def tmp_output_dir():
    """A temporary directory for grammar files."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def rng():
    """Provide a seeded random number generator for reproducibility."""
    return np.random.default_rng(42)


def random_tree(rng, depth=3, labels=('A', 'B', 'C'), words=('a', 'b', 'c')):
    """A random tree with branching factor 1 to 4, lexical at the bottom."""
    label = labels[rng.integers(len(labels))]
    if depth == 0:
        return utility.Tree(label, [utility.Tree(words[rng.integers(len(words))])])
    n = int(rng.integers(1, 5))
    return utility.Tree(label, [random_tree(rng, depth - 1, labels, words) for _ in range(n)])
