# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-call parser configuration.

There is no global configuration: every `parse` call receives (or defaults)
its own `ParserOptions`. Tooling that stores options as JSON can use
`ParserOptions.from_mapping`, which also understands the camelCase names
used by the JavaScript tool-chain (`getComments`, `astFormat`, ...).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

AST_FORMATS = ("gml", "estree")

_CAMEL_ALIASES = {
	"getComments": "get_comments",
	"getLocations": "get_locations",
	"simplifyLocations": "simplify_locations",
	"getIdentifierMetadata": "get_identifier_metadata",
	"astFormat": "ast_format",
	"asJSON": "as_json",
	"suppressErrors": "suppress_errors",
	"paragraphBreakThreshold": "paragraph_break_threshold",
	"maxDepth": "max_depth",
}


@dataclass(frozen=True)
class ParserOptions:
	get_comments: bool = True
	get_locations: bool = True
	simplify_locations: bool = True
	get_identifier_metadata: bool = False
	ast_format: str = "gml"
	as_json: bool = False
	suppress_errors: bool = False
	# Blank lines between a comment and the next statement above which the
	# comment belongs to what came before instead.
	paragraph_break_threshold: int = 0
	max_depth: int = 1000

	def __post_init__(self) -> None:
		if self.ast_format not in AST_FORMATS:
			raise ValueError(f"unknown ast_format {self.ast_format!r}; expected one of {', '.join(AST_FORMATS)}")
		if self.paragraph_break_threshold < 0:
			raise ValueError("paragraph_break_threshold must be >= 0")
		if self.max_depth <= 0:
			raise ValueError("max_depth must be positive")

	@classmethod
	def from_mapping(cls, raw: Mapping[str, Any]) -> "ParserOptions":
		"""Build options from a plain mapping, rejecting unknown keys."""
		allowed = {f.name for f in dataclasses.fields(cls)}
		values: dict[str, Any] = {}
		unknown: list[str] = []
		for key, value in raw.items():
			name = _CAMEL_ALIASES.get(key, key)
			if name not in allowed:
				unknown.append(key)
				continue
			values[name] = value
		if unknown:
			raise ValueError(f"unknown parser options: {', '.join(sorted(unknown))}")
		return cls(**values)

	def replace(self, **overrides: Any) -> "ParserOptions":
		if not overrides:
			return self
		return dataclasses.replace(self, **{_CAMEL_ALIASES.get(k, k): v for k, v in overrides.items()})


__all__ = ["ParserOptions", "AST_FORMATS"]
