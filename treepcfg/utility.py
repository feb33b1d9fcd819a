#utility.py

# Trees, the bracketed tree format and the exceptions shared by the other modules.

import logging


class ParseFailureException(Exception):
	pass


class MalformedTreeException(ValueError):
	pass


class CorpusNotFoundException(IOError):
	pass


class InconsistentGrammarException(Exception):
	pass


class GrammarFrozenException(Exception):
	pass


class Tree:
	"""
	A node of a constituency tree.

	A node without children is a terminal (a word); every other node is labelled
	with a nonterminal.
	"""

	def __init__(self, label, children=()):
		self.label = label
		self.children = tuple(children)

	def is_terminal(self):
		return len(self.children) == 0

	def child_labels(self):
		return tuple(child.label for child in self.children)

	def __eq__(self, other):
		if not isinstance(other, Tree):
			return NotImplemented
		return tree_to_string(self) == tree_to_string(other)

	def __hash__(self):
		return hash(tree_to_string(self))

	def __repr__(self):
		return "Tree(%s)" % tree_to_string(self)


def _tokenize(s):
	return s.replace("(", " ( ").replace(")", " ) ").split()


def string_to_tree(s):
	"""
	Read a tree from a string like (S (NP (DT the) (NN dog)) (VP (VBD barked))).

	An outer bracket with no label, as in the Penn treebank, is removed.
	Raises ParseFailureException if the string is not a single well formed tree.
	"""
	tokens = _tokenize(s)
	if len(tokens) == 0:
		raise ParseFailureException("Empty tree string")
	if tokens[0] != "(":
		raise ParseFailureException("Tree must start with a bracket: %s" % s.strip())
	## each frame is (label, list of children)
	stack = []
	root = None
	i = 0
	while i < len(tokens):
		tok = tokens[i]
		if root is not None:
			raise ParseFailureException("Trailing material after tree: %s" % " ".join(tokens[i:]))
		if tok == "(":
			if i + 1 >= len(tokens):
				raise ParseFailureException("Unbalanced brackets")
			nxt = tokens[i + 1]
			if nxt == ")":
				raise ParseFailureException("Empty bracket")
			if nxt == "(":
				## unlabelled bracket
				stack.append((None, []))
				i += 1
			else:
				stack.append((nxt, []))
				i += 2
		elif tok == ")":
			if not stack:
				raise ParseFailureException("Unbalanced brackets")
			label, children = stack.pop()
			if label is None:
				if len(children) != 1 or stack:
					raise ParseFailureException("Unlabelled bracket must wrap exactly one tree at the top")
				node = children[0]
			else:
				if len(children) == 0:
					raise ParseFailureException("Nonterminal %s has no children" % label)
				node = Tree(label, children)
			if stack:
				stack[-1][1].append(node)
			else:
				root = node
			i += 1
		else:
			if not stack:
				raise ParseFailureException("Word outside brackets: %s" % tok)
			stack[-1][1].append(Tree(tok))
			i += 1
	if stack or root is None:
		raise ParseFailureException("Unbalanced brackets")
	return root


def tree_to_string(tree):
	if tree.is_terminal():
		return tree.label
	## stack of (node, index of next child); output is built up in parts
	parts = []
	stack = [(tree, 0)]
	while stack:
		node, i = stack.pop()
		if i == 0:
			parts.append("(" + node.label)
		if i < len(node.children):
			stack.append((node, i + 1))
			child = node.children[i]
			if child.is_terminal():
				parts.append(" " + child.label)
			else:
				parts.append(" ")
				stack.append((child, 0))
		else:
			parts.append(")")
	return "".join(parts)


def collect_yield(tree):
	"""
	Return the list of words at the leaves, left to right.
	"""
	result = []
	stack = [tree]
	while stack:
		node = stack.pop()
		if node.is_terminal():
			result.append(node.label)
		else:
			stack.extend(reversed(node.children))
	return result


def tree_depth(tree):
	"""
	Number of nonterminal levels; a lexical tree (A word) has depth 1 and a
	bare word has depth 0.
	"""
	depth = 0
	stack = [(tree, 0)]
	while stack:
		node, d = stack.pop()
		if node.is_terminal():
			depth = max(depth, d)
		else:
			for child in node.children:
				stack.append((child, d + 1))
	return depth


def read_treebank(lines, length=0, n=-1):
	"""
	Generate trees from an iterable of lines, one bracketed tree per line.

	Blank lines and lines starting with # are skipped.
	If n >= 0 only the first n trees are considered; if length > 0 trees with
	more than length words are discarded.
	"""
	read = 0
	for lineno, line in enumerate(lines, 1):
		if n >= 0 and read >= n:
			break
		line = line.strip()
		if not line or line[0] == '#':
			continue
		try:
			tree = string_to_tree(line)
		except ParseFailureException as e:
			raise ParseFailureException("Line %d: %s" % (lineno, e)) from e
		read += 1
		if length > 0 and len(collect_yield(tree)) > length:
			logging.debug("Discarding tree of length %d on line %d", len(collect_yield(tree)), lineno)
			continue
		yield tree
