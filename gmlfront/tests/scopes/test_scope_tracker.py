# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from gmlfront import InternalInvariantViolation, ScopeResolutionMisuse
from gmlfront.parser import ast as A
from gmlfront.scopes import ScopeTracker
from gmlfront.scopes.tracker import BUILTIN_TAG, DECLARED, RESOLVED, UNRESOLVED


def test_root_scope_exists_from_construction() -> None:
	tracker = ScopeTracker()
	assert tracker.current is tracker.root
	assert tracker.root.id == "scope-0"
	assert tracker.root.parent_id is None
	assert tracker.depth == 0


def test_nested_scopes_chain_to_root() -> None:
	tracker = ScopeTracker()
	fn = tracker.enter_scope("function")
	inner = tracker.enter_scope("struct")
	assert inner.parent_id == fn.id
	assert fn.parent_id == tracker.root.id
	assert tracker.exit_scope() is inner
	assert tracker.exit_scope() is fn
	assert tracker.current is tracker.root


def test_exit_scope_refuses_to_pop_root() -> None:
	tracker = ScopeTracker()
	with pytest.raises(InternalInvariantViolation):
		tracker.exit_scope()


def test_unknown_scope_kind_is_rejected() -> None:
	with pytest.raises(ValueError):
		ScopeTracker().enter_scope("block")


def test_shadowing_resolves_to_nearest_scope() -> None:
	tracker = ScopeTracker()
	tracker.declare("a", A.Identifier(name="a"), "var")
	fn = tracker.enter_scope("function")
	tracker.declare("a", A.Identifier(name="a"), "var")
	inner_ref = tracker.reference("a", A.Identifier(name="a"))
	assert inner_ref.resolution == RESOLVED
	assert inner_ref.declaration.scope_id == fn.id
	tracker.exit_scope()
	outer_ref = tracker.reference("a", A.Identifier(name="a"))
	assert outer_ref.declaration.scope_id == tracker.root.id


def test_unresolved_reference_is_not_an_error() -> None:
	tracker = ScopeTracker()
	node = A.Identifier(name="mystery")
	meta = tracker.reference("mystery", node)
	assert meta.resolution == UNRESOLVED
	assert meta.declaration is None
	assert meta.classifications == ()
	assert node.metadata is meta


def test_builtin_names_are_tagged() -> None:
	meta = ScopeTracker().reference("show_debug_message", None)
	assert meta.resolution == UNRESOLVED
	assert BUILTIN_TAG in meta.classifications
	assert meta.kind == "function"


def test_declaration_metadata() -> None:
	tracker = ScopeTracker()
	node = A.Identifier(name="hp", node_id=7, start=3)
	meta = tracker.declare("hp", node, "var")
	assert meta.role == "declaration"
	assert meta.resolution == DECLARED
	assert meta.declaration.node_id == 7
	assert meta.declaration.start == 3
	assert tracker.lookup("hp") is meta.declaration


def test_redeclaration_keeps_first() -> None:
	tracker = ScopeTracker()
	first = tracker.declare("a", A.Identifier(name="a", node_id=1), "var")
	second = tracker.declare("a", A.Identifier(name="a", node_id=2), "var")
	assert second.declaration is first.declaration


def test_resolve_override() -> None:
	tracker = ScopeTracker()
	fn = tracker.enter_scope("function")
	assert tracker.resolve_override("global") is tracker.root
	assert tracker.resolve_override(fn.id) is fn
	with pytest.raises(ScopeResolutionMisuse):
		tracker.resolve_override("scope-99")
	with pytest.raises(ValueError):
		tracker.resolve_override("local")


def test_declare_into_root_from_nested_scope() -> None:
	tracker = ScopeTracker()
	tracker.enter_scope("function")
	tracker.declare("score", A.Identifier(name="score"), "globalvar", scope=tracker.resolve_override("global"))
	assert "score" in tracker.root.declarations
	assert tracker.reference("score", None).declaration.scope_id == tracker.root.id


def test_export_occurrences() -> None:
	tracker = ScopeTracker()
	tracker.declare("a", None, "var")
	fn = tracker.enter_scope("function")
	tracker.reference("a", None)
	tracker.reference("b", None)
	tracker.exit_scope()
	exported = tracker.export_occurrences()
	assert list(exported) == [tracker.root.id, fn.id]
	assert [m.name for m in exported[tracker.root.id]["declarations"]] == ["a"]
	assert exported[fn.id]["parent"] == tracker.root.id
	assert [m.resolution for m in exported[fn.id]["references"]] == [RESOLVED, UNRESOLVED]
