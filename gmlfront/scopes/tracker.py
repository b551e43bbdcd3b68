# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lexical scope tracking.

A `ScopeTracker` owns a tree of scopes addressed by id (`scope-0` is the
root) and a stack of the scopes currently open. Scopes are stored in a flat
table and refer to their parent by id only.

Lookups never fail: a name that no enclosing scope declares is an implicit
global and resolves as `unresolved`. When the bundled identifier table knows
the name, the occurrence also carries the `builtin` classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gmlfront.core.errors import InternalInvariantViolation, ScopeResolutionMisuse
from gmlfront.core.metadata import identifier_table
from gmlfront.core.span import offset_of

ROOT = "root"
FUNCTION = "function"
STRUCT = "struct"
SCOPE_KINDS = (ROOT, FUNCTION, STRUCT)

# Resolution outcomes.
DECLARED = "declared"
RESOLVED = "resolved"
UNRESOLVED = "unresolved"
MEMBER = "member"

BUILTIN_TAG = "builtin"
GLOBAL_OVERRIDE = "global"


@dataclass(frozen=True)
class Declaration:
	name: str
	kind: str
	scope_id: str
	node_id: Optional[int] = None
	start: Optional[int] = None


@dataclass
class Scope:
	id: str
	kind: str
	parent_id: Optional[str]
	declarations: Dict[str, Declaration] = field(default_factory=dict)


@dataclass(frozen=True)
class IdentifierMetadata:
	name: str
	role: str  # "declaration" | "reference"
	kind: Optional[str]
	scope_id: str
	declaration: Optional[Declaration]
	resolution: str
	classifications: tuple[str, ...] = ()


class ScopeTracker:
	def __init__(self) -> None:
		self._scopes: Dict[str, Scope] = {}
		self._stack: List[Scope] = []
		self._declarations: Dict[str, List[IdentifierMetadata]] = {}
		self._references: Dict[str, List[IdentifierMetadata]] = {}
		self.root = self._new_scope(ROOT, None)
		self._stack.append(self.root)

	def _new_scope(self, kind: str, parent: Optional[Scope]) -> Scope:
		scope = Scope(id=f"scope-{len(self._scopes)}", kind=kind, parent_id=parent.id if parent else None)
		self._scopes[scope.id] = scope
		self._declarations[scope.id] = []
		self._references[scope.id] = []
		return scope

	@property
	def current(self) -> Scope:
		return self._stack[-1]

	@property
	def depth(self) -> int:
		"""Number of open scopes above the root."""
		return len(self._stack) - 1

	@property
	def scopes(self) -> List[Scope]:
		return list(self._scopes.values())

	def get_scope(self, scope_id: str) -> Scope:
		return self._scopes[scope_id]

	def enter_scope(self, kind: str) -> Scope:
		if kind not in (FUNCTION, STRUCT):
			raise ValueError(f"cannot open a scope of kind {kind!r}")
		scope = self._new_scope(kind, self.current)
		self._stack.append(scope)
		return scope

	def exit_scope(self) -> Scope:
		if len(self._stack) <= 1:
			raise InternalInvariantViolation("exit_scope() called with only the root scope open")
		return self._stack.pop()

	def resolve_override(self, token: str) -> Scope:
		"""Scope named by an explicit override: `"global"` or a scope id."""
		if token == GLOBAL_OVERRIDE:
			return self.root
		scope = self._scopes.get(token)
		if scope is None:
			raise ScopeResolutionMisuse(f"unknown scope override {token!r}")
		return scope

	def lookup(self, name: str, *, scope: Optional[Scope] = None) -> Optional[Declaration]:
		"""Nearest declaration of `name` visible from `scope` (default: current)."""
		current: Optional[Scope] = scope or self.current
		while current is not None:
			found = current.declarations.get(name)
			if found is not None:
				return found
			current = self._scopes[current.parent_id] if current.parent_id else None
		return None

	def declare(self, name: str, node: Any, kind: str, *, scope: Optional[Scope] = None) -> IdentifierMetadata:
		"""
		Declare `name` in `scope` (default: current).

		A repeated declaration in the same scope keeps the first one; the new
		occurrence still counts as a declaration pointing at it.
		"""
		target = scope or self.current
		declaration = target.declarations.get(name)
		if declaration is None:
			declaration = Declaration(
				name=name,
				kind=kind,
				scope_id=target.id,
				node_id=getattr(node, "node_id", None),
				start=offset_of(getattr(node, "start", None)),
			)
			target.declarations[name] = declaration
		meta = IdentifierMetadata(
			name=name,
			role="declaration",
			kind=kind,
			scope_id=target.id,
			declaration=declaration,
			resolution=DECLARED,
		)
		self._declarations[target.id].append(meta)
		_store(node, meta)
		return meta

	def reference(self, name: str, node: Any, *, scope: Optional[Scope] = None) -> IdentifierMetadata:
		start = scope or self.current
		declaration = self.lookup(name, scope=start)
		if declaration is not None:
			meta = IdentifierMetadata(
				name=name,
				role="reference",
				kind=declaration.kind,
				scope_id=start.id,
				declaration=declaration,
				resolution=RESOLVED,
			)
		else:
			info = identifier_table().identifiers.get(name)
			builtin = identifier_table().is_builtin(name)
			meta = IdentifierMetadata(
				name=name,
				role="reference",
				kind=info.type if builtin and info is not None else None,
				scope_id=start.id,
				declaration=None,
				resolution=UNRESOLVED,
				classifications=(BUILTIN_TAG,) if builtin else (),
			)
		self._references[start.id].append(meta)
		_store(node, meta)
		return meta

	def member(self, name: str, node: Any) -> IdentifierMetadata:
		"""A dot-accessed property; recorded but not resolved lexically."""
		meta = IdentifierMetadata(
			name=name,
			role="reference",
			kind="property",
			scope_id=self.current.id,
			declaration=None,
			resolution=MEMBER,
		)
		self._references[self.current.id].append(meta)
		_store(node, meta)
		return meta

	def export_occurrences(self) -> Dict[str, Dict[str, Any]]:
		"""Per scope: its kind, parent and the declarations/references recorded in it."""
		out: Dict[str, Dict[str, Any]] = {}
		for scope in self._scopes.values():
			out[scope.id] = {
				"kind": scope.kind,
				"parent": scope.parent_id,
				"declarations": list(self._declarations[scope.id]),
				"references": list(self._references[scope.id]),
			}
		return out


def _store(node: Any, meta: IdentifierMetadata) -> None:
	if node is not None and hasattr(node, "metadata"):
		node.metadata = meta


__all__ = [
	"ScopeTracker",
	"Scope",
	"Declaration",
	"IdentifierMetadata",
	"ROOT",
	"FUNCTION",
	"STRUCT",
	"DECLARED",
	"RESOLVED",
	"UNRESOLVED",
	"MEMBER",
	"BUILTIN_TAG",
]
