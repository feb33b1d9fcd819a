#pcfg.py

# Induce a PCFG from a treebank by counting the productions used in the trees
# and taking the maximum likelihood estimate of each rule.

import logging
from collections import Counter
import numpy as np

import utility
from utility import Tree


class Rule:
	"""
	A production lhs -> rhs.

	Two rules are equal if they have the same lhs, rhs and lexical flag;
	the weight is not part of the identity, so a rule can be used as a key
	while its weight is being estimated.
	"""

	def __init__(self, lhs, rhs, lexical=False, weight=0.0):
		self._lhs = lhs
		self._rhs = tuple(rhs)
		if lexical and len(self._rhs) != 1:
			raise ValueError("A lexical rule has exactly one symbol on the right: %s -> %s" % (lhs, " ".join(self._rhs)))
		self._lexical = bool(lexical)
		self.weight = weight

	@property
	def lhs(self):
		return self._lhs

	@property
	def rhs(self):
		return self._rhs

	@property
	def lexical(self):
		return self._lexical

	def key(self):
		return (self._lhs, self._rhs, self._lexical)

	def __eq__(self, other):
		if not isinstance(other, Rule):
			return NotImplemented
		return self.key() == other.key()

	def __hash__(self):
		return hash(self.key())

	def __str__(self):
		return "%r %s -> %s" % (self.weight, self._lhs, " ".join(self._rhs))

	def __repr__(self):
		return "Rule(%r, %r, lexical=%r, weight=%r)" % (self._lhs, self._rhs, self._lexical, self.weight)


def collect_rules(tree):
	"""
	Return the list of rules used in the tree, in preorder.

	The whole tree is checked first, so that a malformed tree raises
	MalformedTreeException before anything is counted.
	"""
	if not isinstance(tree, Tree):
		raise utility.MalformedTreeException("Not a tree: %r" % (tree,))
	result = []
	stack = [tree]
	while stack:
		node = stack.pop()
		if node.is_terminal():
			continue
		if not node.label:
			raise utility.MalformedTreeException("Nonterminal node with empty label")
		for child in node.children:
			if not isinstance(child, Tree):
				raise utility.MalformedTreeException("Child of %s is not a tree: %r" % (node.label, child))
			if not child.label:
				raise utility.MalformedTreeException("Child of %s has an empty label" % node.label)
		## Only a single terminal child makes a lexical rule; NP -> the NN is not lexical.
		lexical = len(node.children) == 1 and node.children[0].is_terminal()
		result.append(Rule(node.label, node.child_labels(), lexical))
		stack.extend(reversed(node.children))
	return result


class Grammar:
	"""
	Counts of nonterminals and productions, and the rule weights estimated from them.

	symbol_counts is a Counter of the number of times each nonterminal was the lhs of a node.
	rules_by_symbol maps each nonterminal to a Counter of its Rules.
	Both should be treated as read only outside this class.
	"""

	def __init__(self):
		self.symbol_counts = Counter()
		self.rules_by_symbol = {}
		self.normalised = False

	def _add(self, rule, count):
		lhs = rule.lhs
		self.symbol_counts[lhs] += count
		if lhs not in self.rules_by_symbol:
			self.rules_by_symbol[lhs] = Counter()
		self.rules_by_symbol[lhs][rule] += count

	def _check_not_normalised(self):
		if self.normalised:
			raise utility.GrammarFrozenException("Grammar has already been normalised; counts can no longer change.")

	def count_tree(self, tree):
		"""
		Add the productions of every nonterminal node of the tree.
		Returns the number of productions added.
		"""
		self._check_not_normalised()
		rules = collect_rules(tree)
		for rule in rules:
			self._add(rule, 1)
		return len(rules)

	def count_trees(self, trees):
		n = 0
		for tree in trees:
			self.count_tree(tree)
			n += 1
		return n

	def count_treebank(self, filename, length=0, n=-1):
		"""
		Count all the trees in a file with one tree per line.

		Raises CorpusNotFoundException if the file can't be read, and
		ParseFailureException if a line is not a tree; in both cases the
		grammar is left unchanged.
		"""
		self._check_not_normalised()
		try:
			inf = open(filename, encoding="utf-8")
		except OSError as e:
			raise utility.CorpusNotFoundException("Cannot read treebank %s: %s" % (filename, e)) from e
		try:
			with inf:
				trees = list(utility.read_treebank(inf, length, n))
		except UnicodeDecodeError as e:
			raise utility.CorpusNotFoundException("Cannot decode treebank %s: %s" % (filename, e)) from e
		ntrees = self.count_trees(trees)
		logging.info("Read %d trees from %s: %d nonterminals, %d rules", ntrees, filename, len(self.symbol_counts), len(self))
		return ntrees

	def merge(self, other):
		"""
		Add the counts of another grammar, e.g. one counted on a different part of the corpus.
		Neither grammar may have been normalised.
		"""
		self._check_not_normalised()
		if other.normalised:
			raise utility.GrammarFrozenException("Can't merge a normalised grammar.")
		other.check_counts()
		for rules in other.rules_by_symbol.values():
			for rule, count in rules.items():
				self._add(Rule(rule.lhs, rule.rhs, rule.lexical), count)

	def check_counts(self):
		"""
		Raise InconsistentGrammarException unless the count of each nonterminal
		is the sum of the counts of its rules.
		"""
		for lhs in set(self.symbol_counts) | set(self.rules_by_symbol):
			total = sum(self.rules_by_symbol.get(lhs, {}).values())
			if self.symbol_counts.get(lhs, 0) != total:
				raise utility.InconsistentGrammarException("Count of %s is %s but its rules sum to %s" % (lhs, self.symbol_counts.get(lhs, 0), total))

	def estimate_weights(self):
		"""
		Set the weight of each rule to its count divided by the count of its lhs.
		Running it again on the same counts gives the same weights.
		"""
		self.check_counts()
		for lhs, rules in self.rules_by_symbol.items():
			total = self.symbol_counts[lhs]
			if total <= 0:
				raise utility.InconsistentGrammarException("Nonterminal %s has rules but count %s" % (lhs, total))
			for rule, count in rules.items():
				rule.weight = count / total
		self.normalised = True
		logging.debug("Estimated weights of %d rules for %d nonterminals", len(self), len(self.rules_by_symbol))

	def is_normalised(self, epsilon=1e-9):
		for rules in self.rules_by_symbol.values():
			total = np.sum([rule.weight for rule in rules])
			if abs(total - 1.0) > epsilon:
				return False
		return True

	def productions(self):
		for rules in self.rules_by_symbol.values():
			yield from rules

	def weight(self, lhs, rhs, lexical=None):
		"""
		Weight of the rule lhs -> rhs, or 0 if it was never seen.
		If lexical is None either flag matches.
		"""
		for rule in self.rules_by_symbol.get(lhs, {}):
			if rule.rhs == tuple(rhs) and (lexical is None or rule.lexical == lexical):
				return rule.weight
		return 0.0

	@property
	def nonterminals(self):
		return set(self.rules_by_symbol)

	@property
	def terminals(self):
		return { a for rule in self.productions() for a in rule.rhs if a not in self.rules_by_symbol }

	def symbols(self):
		return self.nonterminals | { a for rule in self.productions() for a in rule.rhs }

	def __len__(self):
		return sum(len(rules) for rules in self.rules_by_symbol.values())

	def store(self, filename, header=None):
		store_rules(self.productions(), filename, header)


def load_pcfg_from_treebank(filename, length=0, n=-1, normalise=True):
	"""
	Count the trees in the file and, unless normalise is False, estimate the weights.
	"""
	grammar = Grammar()
	grammar.count_treebank(filename, length, n)
	if normalise:
		grammar.estimate_weights()
	return grammar


def store_rules(rules, filename, header=None):
	"""
	Write one rule per line as: weight lhs -> rhs
	Header lines are written first, each prefixed with #.
	"""
	with open(filename, 'w', encoding="utf-8") as outf:
		if header:
			for line in header:
				outf.write("#" + line + "\n")
		for rule in rules:
			outf.write(str(rule) + "\n")


def load_rules(filename):
	"""
	Read rules written by store_rules.

	A rule with a single symbol on the right that is never a lhs in the file is marked lexical.
	The file does not record the flag, so a word that is also used as a
	nonterminal label, as in (NN S), reads back as a non-lexical rule.
	"""
	entries = []
	with open(filename, encoding="utf-8") as inf:
		for lineno, line in enumerate(inf, 1):
			line = line.strip()
			if not line or line[0] == '#':
				continue
			parts = line.split()
			if len(parts) < 4 or parts[2] != "->":
				raise utility.ParseFailureException("Line %d of %s is not a rule: %s" % (lineno, filename, line))
			try:
				weight = float(parts[0])
			except ValueError as e:
				raise utility.ParseFailureException("Line %d of %s has a bad weight: %s" % (lineno, filename, parts[0])) from e
			entries.append((parts[1], tuple(parts[3:]), weight))
	lhss = { lhs for lhs, _, _ in entries }
	return [ Rule(lhs, rhs, len(rhs) == 1 and rhs[0] not in lhss, weight) for lhs, rhs, weight in entries ]
