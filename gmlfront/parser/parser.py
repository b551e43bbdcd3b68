# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark front-end for GML.

Lark never sees source text: the code-channel tokens produced by
`gmlfront.lexer` are converted to lark `Token`s and fed through a pass-through
custom lexer. Punctuation and most keywords map to `_`-prefixed terminals so
they are dropped from the parse tree.

Lark's `UnexpectedInput` never leaves this module; it is converted to
`GMLSyntaxError` with a recoverable/fatal verdict and a resynchronization
offset.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from lark import Lark, Token as LarkToken, Tree
from lark.exceptions import UnexpectedInput
from lark.lexer import Lexer

from gmlfront.core.errors import GMLSyntaxError
from gmlfront.lexer.tokens import ERROR, Token, count_line_breaks

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

# Token kinds whose text never matters once the tree shape is known.
_DROPPED_KINDS = frozenset(
	{
		"LBRACE",
		"RBRACE",
		"LPAREN",
		"RPAREN",
		"RBRACKET",
		"SEMI",
		"COMMA",
		"DOT",
		"COLON",
		"QUESTION",
		"GLOBALVAR",
		"IF",
		"THEN",
		"ELSE",
		"WHILE",
		"DO",
		"UNTIL",
		"FOR",
		"REPEAT",
		"WITH",
		"SWITCH",
		"CASE",
		"DEFAULT",
		"BREAK",
		"CONTINUE",
		"EXIT",
		"RETURN",
		"FUNCTION",
		"CONSTRUCTOR",
		"NEW",
		"DELETE",
		"TRY",
		"CATCH",
		"FINALLY",
		"THROW",
		"ENUM",
	}
)


def terminal_name(kind: str) -> str:
	return f"_{kind}" if kind in _DROPPED_KINDS else kind


def end_position(tok: Token) -> tuple[int, int]:
	"""1-based (line, column) just past the last character of `tok`."""
	breaks = count_line_breaks(tok.text)
	if not breaks:
		return tok.line, tok.column + len(tok.text)
	last = max(tok.text.rfind("\n"), tok.text.rfind("\r"))
	return tok.line + breaks, len(tok.text) - last


def to_lark_token(tok: Token) -> LarkToken:
	end_line, end_column = end_position(tok)
	return LarkToken(
		terminal_name(tok.kind),
		tok.text,
		tok.start,
		tok.line,
		tok.column,
		end_line,
		end_column,
		tok.end,
	)


class _TokenStreamLexer(Lexer):
	"""Hands pre-scanned tokens to the LALR parser unchanged."""

	def __init__(self, lexer_conf: Any) -> None:
		pass

	def lex(self, data: Any) -> Iterator[LarkToken]:
		yield from data


_lark: Optional[Lark] = None
_lark_lock = threading.Lock()


def get_lark() -> Lark:
	"""Build the LALR parser on first use; later calls reuse it."""
	global _lark
	parser = _lark
	if parser is not None:
		return parser
	with _lark_lock:
		if _lark is None:
			logger.debug("building GML LALR parser from %s", _GRAMMAR_PATH.name)
			_lark = Lark(
				_GRAMMAR_PATH.read_text(encoding="utf-8"),
				parser="lalr",
				lexer=_TokenStreamLexer,
				start=["program", "expression"],
				propagate_positions=True,
				maybe_placeholders=False,
			)
		return _lark


def parse_tokens(tokens: Sequence[Token], *, start: str = "program") -> Tree:
	"""
	Parse code-channel tokens into a lark tree rooted at `start`.

	Raises `GMLSyntaxError` for any grammar violation.
	"""
	lark_tokens = [to_lark_token(tok) for tok in tokens]
	try:
		return get_lark().parse(lark_tokens, start=start)
	except UnexpectedInput as err:
		raise _syntax_error(err, tokens) from None


def _syntax_error(err: UnexpectedInput, tokens: Sequence[Token]) -> GMLSyntaxError:
	expected = sorted({name.lstrip("_") for name in (getattr(err, "expected", None) or ())})
	bad = getattr(err, "token", None)

	if bad is None or bad.type == "$END":
		if tokens:
			last = tokens[-1]
			line, column = end_position(last)
			offset = last.end
		else:
			line, column, offset = 1, 1, 0
		return GMLSyntaxError(
			"unexpected end of input",
			offset=offset,
			line=line,
			column=column,
			offending_text="",
			expected=expected,
			recoverable=False,
		)

	offset = bad.start_pos
	kind = bad.type.lstrip("_")
	if kind == ERROR:
		message = f"unrecognized input {bad.value!r}"
	else:
		message = f"unexpected {bad.value!r}"

	if kind == "RBRACE" and _brace_depth_before(tokens, offset) <= 0:
		return GMLSyntaxError(
			"unmatched closing brace at top level",
			offset=offset,
			line=bad.line,
			column=bad.column,
			offending_text=bad.value,
			expected=expected,
			recoverable=False,
		)

	return GMLSyntaxError(
		message,
		offset=offset,
		line=bad.line,
		column=bad.column,
		offending_text=bad.value,
		expected=expected,
		recoverable=True,
		resync_offset=_resync_offset(tokens, offset),
	)


def _brace_depth_before(tokens: Sequence[Token], offset: int) -> int:
	depth = 0
	for tok in tokens:
		if tok.start >= offset:
			break
		if tok.kind == "LBRACE":
			depth += 1
		elif tok.kind == "RBRACE":
			depth -= 1
	return depth


def _resync_offset(tokens: Sequence[Token], offset: int) -> int:
	"""First offset after the statement boundary nearest to `offset`."""
	line = None
	for tok in tokens:
		if tok.start < offset:
			continue
		if line is None:
			line = tok.line
		if tok.kind in ("SEMI", "RBRACE"):
			return tok.end
		if tok.line != line:
			# No terminator on the offending line: resume at the next line.
			return tok.start
	return tokens[-1].end if tokens else 0


__all__ = ["get_lark", "parse_tokens", "to_lark_token", "terminal_name", "end_position"]
