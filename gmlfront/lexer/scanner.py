# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Hand-written GML scanner.

The scanner is lossless: every character of the input belongs to exactly one
token, whitespace and comments included (on their own channels). The parser
only consumes the code channel; the comment attacher uses the rest.

Literal sub-kinds are decided here so later stages never re-scan literal
bodies:

- `0x1F`, `$1F`, `#1F2E3D`          -> HEX
- `0b1010`                           -> BINARY
- `12`, `1_000`                      -> INTEGER
- `1.5`, `.5`, `1.`                  -> DECIMAL
- `"a\\n"`                           -> STRING
- `@"raw"` / `@'raw'`                -> VERBATIM_STRING (may span lines)
- `$"x = {x}"`                       -> TEMPLATE_STRING
"""

from __future__ import annotations

import bisect
import logging
import re
from typing import Optional

from gmlfront.core.errors import LexicalError
from gmlfront.core.metadata import identifier_table
from gmlfront.lexer.tokens import (
	BLOCK_COMMENT,
	CODE,
	COMMENT,
	ERROR,
	LINE_COMMENT,
	WHITESPACE,
	WHITESPACE_KIND,
	Token,
)

logger = logging.getLogger(__name__)

_WHITESPACE_CHARS = " \t\r\n\f\v\ufeff\u00a0"
_IDENT_START = re.compile(r"[A-Za-z_]")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_HEX_BODY = re.compile(r"[0-9A-Fa-f][0-9A-Fa-f_]*")
_BIN_BODY = re.compile(r"[01][01_]*")
_NUMBER = re.compile(r"[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*")
_COLOR = re.compile(r"#[0-9A-Fa-f]{6}(?![A-Za-z0-9_])")
_DIRECTIVE = re.compile(r"#(macro|region|endregion|define)(?![A-Za-z0-9_])")

_DIRECTIVE_KINDS = {
	"macro": "MACRO",
	"region": "REGION",
	"endregion": "ENDREGION",
	"define": "DEFINE",
}

# Longest spellings first so that maximal munch is a plain prefix scan.
_OPERATORS: tuple[tuple[str, str], ...] = (
	("??=", "ASSIGN_OP"),
	("<<=", "ASSIGN_OP"),
	(">>=", "ASSIGN_OP"),
	("[@", "ACCESSOR"),
	("[|", "ACCESSOR"),
	("[?", "ACCESSOR"),
	("[#", "ACCESSOR"),
	("[$", "ACCESSOR"),
	("++", "INCDEC"),
	("--", "INCDEC"),
	("??", "NULLISH"),
	("^^", "XOR"),
	("&&", "AND"),
	("||", "OR"),
	("<<", "SHIFT_OP"),
	(">>", "SHIFT_OP"),
	("==", "EQ_OP"),
	("!=", "EQ_OP"),
	("<>", "EQ_OP"),
	("<=", "REL_OP"),
	(">=", "REL_OP"),
	("+=", "ASSIGN_OP"),
	("-=", "ASSIGN_OP"),
	("*=", "ASSIGN_OP"),
	("/=", "ASSIGN_OP"),
	("%=", "ASSIGN_OP"),
	("&=", "ASSIGN_OP"),
	("|=", "ASSIGN_OP"),
	("^=", "ASSIGN_OP"),
	(":=", "ASSIGN"),
	("{", "LBRACE"),
	("}", "RBRACE"),
	("(", "LPAREN"),
	(")", "RPAREN"),
	("[", "LBRACKET"),
	("]", "RBRACKET"),
	(";", "SEMI"),
	(",", "COMMA"),
	(".", "DOT"),
	(":", "COLON"),
	("?", "QUESTION"),
	("=", "ASSIGN"),
	("<", "REL_OP"),
	(">", "REL_OP"),
	("+", "PLUS"),
	("-", "MINUS"),
	("*", "MUL_OP"),
	("/", "MUL_OP"),
	("%", "MUL_OP"),
	("&", "BIT_AND"),
	("|", "BIT_OR"),
	("^", "BIT_XOR"),
	("~", "BIT_NOT"),
	("!", "NOT"),
)


def tokenize(source: str, *, lenient: bool = False) -> list[Token]:
	"""
	Split `source` into tokens on all three channels.

	In strict mode (the default) an unterminated string, template, verbatim
	string or block comment, or a character that starts no lexeme, raises
	`LexicalError` pointing at the start of the offending lexeme. In lenient
	mode the offending text becomes an `ERROR` token and scanning resumes.
	"""
	return _Scanner(source, lenient=lenient).run()


def code_tokens(tokens: list[Token]) -> list[Token]:
	return [tok for tok in tokens if tok.channel == CODE]


class _Scanner:
	def __init__(self, source: str, *, lenient: bool) -> None:
		self.source = source
		self.lenient = lenient
		self.tokens: list[Token] = []
		self.keywords = identifier_table().keyword_kinds
		self._line_starts = [0]
		for match in re.finditer(r"\r\n|\r|\n", source):
			self._line_starts.append(match.end())

	def run(self) -> list[Token]:
		src = self.source
		n = len(src)
		pos = 0
		while pos < n:
			pos = self._scan_one(pos)
		return self.tokens

	def position(self, offset: int) -> tuple[int, int]:
		"""1-based (line, column) of `offset`."""
		idx = bisect.bisect_right(self._line_starts, offset) - 1
		return idx + 1, offset - self._line_starts[idx] + 1

	def _emit(self, kind: str, start: int, end: int, channel: str = CODE) -> int:
		line, column = self.position(start)
		self.tokens.append(
			Token(kind=kind, text=self.source[start:end], start=start, end=end, line=line, column=column, channel=channel)
		)
		return end

	def _fail(self, message: str, start: int, resume: int) -> int:
		"""Raise in strict mode; otherwise emit an ERROR token for [start, resume)."""
		line, column = self.position(start)
		if not self.lenient:
			raise LexicalError(message, offset=start, line=line, column=column)
		logger.debug("lenient scan: %s at %d:%d", message, line, column)
		return self._emit(ERROR, start, max(resume, start + 1))

	def _end_of_line(self, pos: int) -> int:
		src = self.source
		while pos < len(src) and src[pos] not in "\r\n":
			pos += 1
		return pos

	def _scan_one(self, pos: int) -> int:
		src = self.source
		ch = src[pos]

		if ch in _WHITESPACE_CHARS:
			end = pos
			while end < len(src) and src[end] in _WHITESPACE_CHARS:
				end += 1
			return self._emit(WHITESPACE_KIND, pos, end, WHITESPACE)

		if src.startswith("//", pos):
			return self._emit(LINE_COMMENT, pos, self._end_of_line(pos), COMMENT)
		if src.startswith("/*", pos):
			close = src.find("*/", pos + 2)
			if close < 0:
				return self._fail("unterminated block comment", pos, len(src))
			return self._emit(BLOCK_COMMENT, pos, close + 2, COMMENT)

		if ch == "#":
			return self._scan_hash(pos)
		if ch == '"':
			return self._scan_string(pos)
		if ch == "@" and src.startswith(('@"', "@'"), pos):
			return self._scan_verbatim(pos)
		if ch == "$":
			if src.startswith('$"', pos):
				return self._scan_template(pos)
			match = _HEX_BODY.match(src, pos + 1)
			if match:
				return self._emit("HEX", pos, match.end())
		if ch == "0" and src.startswith(("0x", "0X"), pos):
			match = _HEX_BODY.match(src, pos + 2)
			if match:
				return self._emit("HEX", pos, match.end())
		if ch == "0" and src.startswith(("0b", "0B"), pos):
			match = _BIN_BODY.match(src, pos + 2)
			if match:
				return self._emit("BINARY", pos, match.end())
		if ch.isdigit() or (ch == "." and pos + 1 < len(src) and src[pos + 1].isdigit()):
			match = _NUMBER.match(src, pos)
			if match:
				kind = "DECIMAL" if "." in match.group(0) else "INTEGER"
				return self._emit(kind, pos, match.end())

		if _IDENT_START.match(ch):
			match = _IDENT.match(src, pos)
			assert match is not None
			word = match.group(0)
			kind = self.keywords.get(word, "IDENTIFIER")
			return self._emit(kind, pos, match.end())

		for text, kind in _OPERATORS:
			if src.startswith(text, pos):
				return self._emit(kind, pos, pos + len(text))

		return self._fail(f"unexpected character {ch!r}", pos, pos + 1)

	def _scan_hash(self, pos: int) -> int:
		src = self.source
		directive = _DIRECTIVE.match(src, pos)
		if directive:
			name = directive.group(1)
			if name == "macro":
				end = self._directive_end(pos, continuation=True, stop_at_comment=True)
			else:
				end = self._directive_end(pos, continuation=False, stop_at_comment=False)
			return self._emit(_DIRECTIVE_KINDS[name], pos, end)
		color = _COLOR.match(src, pos)
		if color:
			return self._emit("HEX", pos, color.end())
		return self._fail("unexpected character '#'", pos, pos + 1)

	def _directive_end(self, pos: int, *, continuation: bool, stop_at_comment: bool) -> int:
		"""
		End offset of a directive line.

		Macro bodies continue past a line break when the line ends with a
		backslash. A `//` outside a string literal ends the macro so that the
		comment lands on the comment channel. Trailing blanks are left to the
		following whitespace token.
		"""
		src = self.source
		n = len(src)
		i = pos
		quote: Optional[str] = None
		while i < n:
			ch = src[i]
			if quote is not None:
				if ch in "\r\n":
					quote = None
					continue
				if ch == "\\" and quote == '"':
					i += 2
					continue
				if ch == quote:
					quote = None
				i += 1
				continue
			if ch in "\r\n":
				if continuation and src[pos:i].rstrip(" \t").endswith("\\"):
					i += 2 if src.startswith("\r\n", i) else 1
					continue
				break
			if stop_at_comment and src.startswith("//", i):
				break
			if ch == '"':
				quote = ch
			i += 1
		i = min(i, n)
		while i > pos and src[i - 1] in " \t":
			i -= 1
		return i

	def _scan_string(self, pos: int) -> int:
		src = self.source
		i = pos + 1
		while i < len(src):
			ch = src[i]
			if ch == "\\":
				i += 2
				continue
			if ch in "\r\n":
				break
			if ch == '"':
				return self._emit("STRING", pos, i + 1)
			i += 1
		return self._fail("unterminated string literal", pos, self._end_of_line(pos))

	def _scan_verbatim(self, pos: int) -> int:
		src = self.source
		quote = src[pos + 1]
		close = src.find(quote, pos + 2)
		if close < 0:
			return self._fail("unterminated verbatim string literal", pos, self._end_of_line(pos))
		return self._emit("VERBATIM_STRING", pos, close + 1)

	def _scan_template(self, pos: int) -> int:
		src = self.source
		n = len(src)
		i = pos + 2
		while i < n:
			ch = src[i]
			if ch == "\\":
				i += 2
				continue
			if ch in "\r\n":
				break
			if ch == '"':
				return self._emit("TEMPLATE_STRING", pos, i + 1)
			if ch == "{":
				hole_end = template_hole_end(src, i)
				if hole_end is None:
					break
				i = hole_end
				continue
			i += 1
		return self._fail("unterminated template string", pos, self._end_of_line(pos))


def template_hole_end(src: str, pos: int) -> Optional[int]:
	"""Offset just past the `}` closing the template hole opened at `pos`, or None."""
	depth = 0
	i = pos
	while i < len(src):
		ch = src[i]
		if ch == '"':
			i += 1
			while i < len(src) and src[i] != '"':
				if src[i] in "\r\n":
					return None
				i += 2 if src[i] == "\\" else 1
			i += 1
			continue
		if ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
			if depth == 0:
				return i + 1
		i += 1
	return None


__all__ = ["tokenize", "code_tokens", "template_hole_end"]
