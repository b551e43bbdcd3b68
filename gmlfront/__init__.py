"""
gmlfront: a GameMaker Language front-end.

Scans, parses and annotates GML source into a syntax tree with attached
comments and optional scope metadata.
"""

from gmlfront.api import ParseResult, analyze, parse
from gmlfront.core.errors import (
	GMLError,
	GMLSyntaxError,
	InternalInvariantViolation,
	LexicalError,
	ScopeResolutionMisuse,
)
from gmlfront.core.options import ParserOptions
from gmlfront.lexer import Token, tokenize

__all__ = [
	"parse",
	"analyze",
	"ParseResult",
	"tokenize",
	"Token",
	"ParserOptions",
	"GMLError",
	"LexicalError",
	"GMLSyntaxError",
	"ScopeResolutionMisuse",
	"InternalInvariantViolation",
]
