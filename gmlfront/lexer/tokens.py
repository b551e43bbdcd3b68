# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Token record produced by the scanner."""

from __future__ import annotations

from dataclasses import dataclass

CODE = "code"
COMMENT = "comment"
WHITESPACE = "whitespace"

# Kinds that never reach the parser.
WHITESPACE_KIND = "WHITESPACE"
LINE_COMMENT = "LINE_COMMENT"
BLOCK_COMMENT = "BLOCK_COMMENT"
ERROR = "ERROR"

LITERAL_KINDS = frozenset(
	{
		"INTEGER",
		"DECIMAL",
		"HEX",
		"BINARY",
		"STRING",
		"VERBATIM_STRING",
		"TEMPLATE_STRING",
		"BOOLEAN",
		"UNDEFINED",
	}
)

DIRECTIVE_KINDS = frozenset({"MACRO", "REGION", "ENDREGION", "DEFINE"})


@dataclass(frozen=True)
class Token:
	"""
	One lexeme.

	`start`/`end` are character offsets into the source (`end` exclusive);
	`line` and `column` are 1-based and describe `start`.
	"""

	kind: str
	text: str
	start: int
	end: int
	line: int
	column: int
	channel: str = CODE

	@property
	def is_code(self) -> bool:
		return self.channel == CODE

	@property
	def is_comment(self) -> bool:
		return self.channel == COMMENT

	def line_breaks(self) -> int:
		return count_line_breaks(self.text)


def count_line_breaks(text: str) -> int:
	"""Count line breaks, treating CRLF as one."""
	return text.count("\n") + text.count("\r") - text.count("\r\n")


def format_tokens(tokens: list[Token]) -> str:
	"""Render a token list as an aligned table, one token per line."""
	rows = []
	for tok in tokens:
		rows.append(f"{tok.line:>4}:{tok.column:<4} {tok.channel:<10} {tok.kind:<16} {tok.text!r}")
	return "\n".join(rows)


__all__ = [
	"Token",
	"CODE",
	"COMMENT",
	"WHITESPACE",
	"WHITESPACE_KIND",
	"LINE_COMMENT",
	"BLOCK_COMMENT",
	"ERROR",
	"LITERAL_KINDS",
	"DIRECTIVE_KINDS",
	"count_line_breaks",
	"format_tokens",
]
