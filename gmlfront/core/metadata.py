# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Bundled identifier classification tables.

The table is loaded once per process on first use and is immutable
afterwards, so concurrent readers need no locking. First use is guarded by a
lock with a double check so that racing threads still load it exactly once.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from importlib import resources
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

_RESOURCE_NAME = "gml-identifiers.json"

# Descriptor types that name something a program may refer to without
# declaring it.
BUILTIN_TYPES = frozenset({"function", "variable", "constant"})


@dataclass(frozen=True)
class IdentifierInfo:
	name: str
	type: str
	# Token kind for reserved words; None for ordinary builtins.
	token: Optional[str] = None


@dataclass(frozen=True)
class IdentifierTable:
	identifiers: Mapping[str, IdentifierInfo]
	keyword_kinds: Mapping[str, str]

	def keyword_kind(self, text: str) -> Optional[str]:
		return self.keyword_kinds.get(text)

	def is_builtin(self, name: str) -> bool:
		info = self.identifiers.get(name)
		return info is not None and info.type in BUILTIN_TYPES


_table: Optional[IdentifierTable] = None
_lock = threading.Lock()


def _load() -> IdentifierTable:
	raw_text = resources.files("gmlfront.core.resources").joinpath(_RESOURCE_NAME).read_text(encoding="utf-8")
	data = json.loads(raw_text)
	entries = data.get("identifiers")
	if not isinstance(entries, dict):
		raise ValueError(f"{_RESOURCE_NAME}: 'identifiers' must be an object")

	identifiers: dict[str, IdentifierInfo] = {}
	keyword_kinds: dict[str, str] = {}
	for name, descriptor in entries.items():
		if not name or not isinstance(descriptor, dict):
			continue
		kind = str(descriptor.get("type", "")).lower()
		token = descriptor.get("token")
		if kind in ("keyword", "literal"):
			token = token or name.upper()
			keyword_kinds[name] = token
		identifiers[name] = IdentifierInfo(name=name, type=kind, token=token)
	logger.debug("loaded %d identifier entries (%d reserved words)", len(identifiers), len(keyword_kinds))
	return IdentifierTable(
		identifiers=MappingProxyType(identifiers),
		keyword_kinds=MappingProxyType(keyword_kinds),
	)


def identifier_table() -> IdentifierTable:
	"""Return the process-wide identifier table, loading it on first use."""
	global _table
	table = _table
	if table is not None:
		return table
	with _lock:
		if _table is None:
			_table = _load()
		return _table


def clear_identifier_cache() -> None:
	"""Forget the loaded table so the next call reloads it (test helper)."""
	global _table
	with _lock:
		_table = None


__all__ = ["IdentifierInfo", "IdentifierTable", "identifier_table", "clear_identifier_cache", "BUILTIN_TYPES"]
