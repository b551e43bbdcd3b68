# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Source positions attached to tokens, nodes and comments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Location:
	"""A point in the source: 1-based line and column plus a 0-based character index."""

	line: int
	column: int
	index: int

	@classmethod
	def start_of(cls, item: Any) -> Optional["Location"]:
		"""
		Start location of a lark `Tree` (via its meta) or `Token`.

		Returns None for empty rules, which carry no position.
		"""
		meta = getattr(item, "meta", item)
		if getattr(meta, "empty", False):
			return None
		line = getattr(meta, "line", None)
		if line is None:
			return None
		return cls(line=line, column=meta.column, index=meta.start_pos)

	@classmethod
	def end_of(cls, item: Any) -> Optional["Location"]:
		"""End location (exclusive index) of a lark `Tree` or `Token`."""
		meta = getattr(item, "meta", item)
		if getattr(meta, "empty", False):
			return None
		line = getattr(meta, "end_line", None)
		if line is None:
			return None
		return cls(line=line, column=meta.end_column, index=meta.end_pos)


def offset_of(loc: Any) -> Optional[int]:
	"""Character offset of a `Location` or of an already simplified bare offset."""
	if loc is None:
		return None
	if isinstance(loc, Location):
		return loc.index
	return int(loc)


__all__ = ["Location", "offset_of"]
