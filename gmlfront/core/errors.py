# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy for the GML front-end.

Lexical and syntax errors describe defects in the source text and always
reach the caller (unless the caller asked for suppressed mode). Misuse and
invariant errors describe bugs in the calling code or in this package and
are never suppressed.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class GMLError(Exception):
	"""Base class for every error raised by gmlfront."""


class LexicalError(GMLError, ValueError):
	"""
	Unterminated literal/comment or an unrecognized character.

	`offset` is the start offset of the offending lexeme (for an unterminated
	string this is the opening quote, not the end of input).
	"""

	def __init__(self, message: str, *, offset: int, line: int, column: int) -> None:
		super().__init__(message)
		self.message = message
		self.offset = offset
		self.line = line
		self.column = column

	def __str__(self) -> str:
		return f"{self.message} (line {self.line}, column {self.column})"


class GMLSyntaxError(GMLError, ValueError):
	"""
	Grammar violation.

	A recoverable error sits inside a statement; `resync_offset` is the first
	offset after the nearest statement boundary where a caller may resume. A
	fatal error (`recoverable=False`) means the top-level structure of the
	program is broken and there is no meaningful place to resume.
	"""

	def __init__(
		self,
		message: str,
		*,
		offset: Optional[int],
		line: Optional[int],
		column: Optional[int],
		offending_text: Optional[str] = None,
		expected: Sequence[str] = (),
		recoverable: bool = True,
		resync_offset: Optional[int] = None,
	) -> None:
		super().__init__(message)
		self.message = message
		self.offset = offset
		self.line = line
		self.column = column
		self.offending_text = offending_text
		self.expected = tuple(expected)
		self.recoverable = recoverable
		self.resync_offset = resync_offset

	def __str__(self) -> str:
		if self.line is None:
			return self.message
		return f"{self.message} (line {self.line}, column {self.column})"

	def to_dict(self) -> dict[str, Any]:
		return {
			"message": self.message,
			"offset": self.offset,
			"line": self.line,
			"column": self.column,
			"offending_text": self.offending_text,
			"expected": list(self.expected),
			"recoverable": self.recoverable,
			"resync_offset": self.resync_offset,
		}


class ScopeResolutionMisuse(GMLError, ValueError):
	"""The caller passed a scope-override token that names no known scope."""


class InternalInvariantViolation(GMLError, RuntimeError):
	"""A structural invariant broke (depth cap exceeded, scope stack corrupted)."""


__all__ = [
	"GMLError",
	"LexicalError",
	"GMLSyntaxError",
	"ScopeResolutionMisuse",
	"InternalInvariantViolation",
]
