# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Comment attachment and whitespace retention.

Comments never reach the parser, so after the tree is built each comment
token is placed on a node:

1. an end-of-line comment (code before it on the same line, nothing after it
   on that line) trails the node that precedes it;
2. a comment followed by a node, with at most `paragraph_break_threshold`
   blank lines in between, leads that node;
3. otherwise it trails the preceding node, or leads the following one when
   nothing precedes it;
4. a comment with no neighbours at all dangles as a trailing comment of the
   smallest node enclosing it.

Preceding and following nodes are siblings inside the smallest enclosing
node, so a comment lands on the outermost node next to it. Whitespace runs
are kept verbatim in `Program.whitespace`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from gmlfront.core.span import Location, offset_of
from gmlfront.lexer.tokens import BLOCK_COMMENT, CODE, COMMENT, WHITESPACE, Token
from gmlfront.parser import ast as A
from gmlfront.parser.parser import end_position
from gmlfront.traversal.walk import iter_children

logger = logging.getLogger(__name__)

LEADING = "leading"
TRAILING = "trailing"

# Declarations whose leading block comment documents them.
_DOC_OWNERS = (A.FunctionDeclaration, A.ConstructorDeclaration, A.EnumDeclaration, A.MacroDeclaration)


def is_doc_marker(text: str) -> bool:
	"""`///` (but not `////`) line comments and `/** */` blocks are doc comments."""
	if text.startswith("///"):
		return not text.startswith("////")
	return text.startswith("/**") and text != "/**/"


def comment_value(tok: Token) -> str:
	if tok.kind == BLOCK_COMMENT:
		return tok.text[2:-2]
	return tok.text[2:]


def make_comment(tokens: Sequence[Token], i: int) -> A.Comment:
	tok = tokens[i]
	before = tokens[i - 1] if i > 0 else None
	after = tokens[i + 1] if i + 1 < len(tokens) else None
	end_line, end_column = end_position(tok)
	return A.Comment(
		type="CommentBlock" if tok.kind == BLOCK_COMMENT else "CommentLine",
		text=tok.text,
		value=comment_value(tok),
		start=Location(line=tok.line, column=tok.column, index=tok.start),
		end=Location(line=end_line, column=end_column, index=tok.end),
		leading_whitespace=before.text if before is not None and before.channel == WHITESPACE else "",
		trailing_whitespace=after.text if after is not None and after.channel == WHITESPACE else "",
		is_doc=is_doc_marker(tok.text),
	)


def _located_children(node: A.Node, cache: Optional[Dict[int, List[A.Node]]] = None) -> List[A.Node]:
	if cache is not None and id(node) in cache:
		return cache[id(node)]
	children = [c for c in iter_children(node) if offset_of(c.start) is not None and offset_of(c.end) is not None]
	children.sort(key=lambda c: offset_of(c.start))
	if cache is not None:
		cache[id(node)] = children
	return children


def find_neighbours(
	root: A.Node, start: int, end: int, *, cache: Optional[Dict[int, List[A.Node]]] = None
) -> tuple[A.Node, Optional[A.Node], Optional[A.Node]]:
	"""
	Smallest node enclosing [start, end) plus its children just before and after that range.

	`cache` keeps each node's sorted children between calls over the same tree.
	"""
	enclosing = root
	while True:
		preceding: Optional[A.Node] = None
		following: Optional[A.Node] = None
		descend: Optional[A.Node] = None
		for child in _located_children(enclosing, cache):
			child_start = offset_of(child.start)
			child_end = offset_of(child.end)
			if child_start <= start and end <= child_end:
				descend = child
				break
			if child_end <= start:
				preceding = child
			elif child_start >= end and following is None:
				following = child
		if descend is None:
			return enclosing, preceding, following
		enclosing = descend


def _token_context(
	tokens: Sequence[Token],
) -> tuple[List[Optional[Token]], List[Optional[Token]], List[int]]:
	"""
	For every token index: the nearest code token before it, the nearest code
	token after it, and the blank lines between it and that following token.
	"""
	before: List[Optional[Token]] = [None] * len(tokens)
	after: List[Optional[Token]] = [None] * len(tokens)
	blank_after = [0] * len(tokens)
	last: Optional[Token] = None
	for i, tok in enumerate(tokens):
		before[i] = last
		if tok.channel == CODE:
			last = tok
	last = None
	blank = 0
	for i in range(len(tokens) - 1, -1, -1):
		after[i] = last
		blank_after[i] = blank
		tok = tokens[i]
		if tok.channel == CODE:
			last = tok
			blank = 0
		elif tok.channel == WHITESPACE:
			blank += max(0, tok.line_breaks() - 1)
	return before, after, blank_after


def _is_end_of_line(comment: Token, prev_code: Optional[Token], next_code: Optional[Token]) -> bool:
	if prev_code is None:
		return False
	if end_position(prev_code)[0] != comment.line:
		return False
	return next_code is None or next_code.line > comment.line


def _documents(node: A.Node) -> bool:
	if isinstance(node, _DOC_OWNERS):
		return True
	if isinstance(node, A.AssignmentStatement):
		return isinstance(node.right, (A.FunctionDeclaration, A.ConstructorDeclaration))
	if isinstance(node, A.VariableDeclaration) and len(node.declarations) == 1:
		return isinstance(node.declarations[0].init, (A.FunctionDeclaration, A.ConstructorDeclaration))
	return False


def _place(comment: A.Comment, owner: A.Node, placement: str) -> None:
	comment.placement = placement
	comment.attached_to = owner.node_id
	if placement == LEADING:
		owner.leading_comments.append(comment)
	else:
		owner.trailing_comments.append(comment)


def attach_comments(program: A.Program, tokens: Sequence[Token], *, paragraph_break_threshold: int = 0) -> None:
	"""
	Attach every comment token to a node of `program` and record whitespace.

	Node ids must already be assigned (see `NodeIndex.build`), so that
	`Comment.attached_to` is meaningful.
	"""
	prev_code, next_code, blank_after = _token_context(tokens)
	children_cache: Dict[int, List[A.Node]] = {}
	comments: List[A.Comment] = []
	whitespace: List[A.WhitespaceRun] = []

	for i, tok in enumerate(tokens):
		if tok.channel == WHITESPACE:
			whitespace.append(
				A.WhitespaceRun(text=tok.text, start=tok.start, end=tok.end, line=tok.line, line_breaks=tok.line_breaks())
			)
			continue
		if tok.channel != COMMENT:
			continue

		comment = make_comment(tokens, i)
		comments.append(comment)
		enclosing, preceding, following = find_neighbours(program, tok.start, tok.end, cache=children_cache)
		blank = blank_after[i]

		if preceding is not None and _is_end_of_line(tok, prev_code[i], next_code[i]):
			_place(comment, preceding, TRAILING)
		elif following is not None and blank <= paragraph_break_threshold:
			_place(comment, following, LEADING)
			if tok.kind == BLOCK_COMMENT and blank == 0 and _documents(following):
				comment.is_doc = True
		elif preceding is not None:
			_place(comment, preceding, TRAILING)
		elif following is not None:
			_place(comment, following, LEADING)
		else:
			_place(comment, enclosing, TRAILING)

	program.comments = comments
	program.whitespace = whitespace
	logger.debug("attached %d comments, kept %d whitespace runs", len(comments), len(whitespace))


__all__ = ["attach_comments", "find_neighbours", "is_doc_marker", "make_comment", "LEADING", "TRAILING"]
