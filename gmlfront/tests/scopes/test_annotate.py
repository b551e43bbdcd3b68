# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from gmlfront import analyze, parse
from gmlfront.parser import ast as A
from gmlfront.scopes.tracker import BUILTIN_TAG, MEMBER, RESOLVED, UNRESOLVED


def _program(source: str) -> A.Program:
	program = parse(source, get_identifier_metadata=True)
	assert isinstance(program, A.Program)
	return program


def test_metadata_is_off_by_default() -> None:
	program = parse("var a = 1; b = a;")
	assert program.body[1].right.metadata is None


def test_shadowing_through_nested_function() -> None:
	program = _program(
		"""
var a = 1;
function f() {
	var a = 2;
	return a;
}
b = a;
"""
	)
	decl, fn, assign = program.body
	inner = fn.body.body[1].argument
	outer = assign.right
	assert inner.metadata.resolution == RESOLVED
	assert inner.metadata.declaration.scope_id != "scope-0"
	assert inner.metadata.declaration.node_id == fn.body.body[0].declarations[0].id.node_id
	assert outer.metadata.declaration.scope_id == "scope-0"
	assert outer.metadata.declaration.node_id == decl.declarations[0].id.node_id
	assert fn.id.metadata.kind == "function"


def test_global_prefix_resolves_against_root() -> None:
	program = _program(
		"""
globalvar score;
function f() {
	var score = 1;
	global.score = 2;
	return score;
}
"""
	)
	fn = program.body[1]
	member = fn.body.body[1].left
	prop = member.property[0]
	assert prop.metadata.resolution == RESOLVED
	assert prop.metadata.declaration.scope_id == "scope-0"
	assert prop.metadata.kind == "globalvar"
	local = fn.body.body[2].argument
	assert local.metadata.declaration.scope_id != "scope-0"


def test_implicit_global_is_unresolved() -> None:
	program = _program("x = 1;")
	target = program.body[0].left
	assert target.metadata.resolution == UNRESOLVED
	assert target.metadata.declaration is None
	assert BUILTIN_TAG in target.metadata.classifications


def test_unknown_name_has_no_builtin_tag() -> None:
	program = _program("player_hp = 1;")
	meta = program.body[0].left.metadata
	assert meta.resolution == UNRESOLVED
	assert meta.classifications == ()


def test_dot_properties_are_members() -> None:
	program = _program("var o = {}; o.field = 1;")
	member = program.body[1].left
	assert member.property[0].metadata.resolution == MEMBER
	assert member.object.metadata.resolution == RESOLVED


def test_parameters_are_declared_in_function_scope() -> None:
	program = _program("function g(p, q = 2) { return p + q; }")
	fn = program.body[0]
	total = fn.body.body[0].argument
	assert total.left.metadata.kind == "parameter"
	assert total.right.metadata.kind == "parameter"
	assert total.left.metadata.declaration.scope_id == fn.params[0].metadata.scope_id


def test_struct_literal_opens_scope() -> None:
	result = analyze("s = { hp: 1, max: hp };", get_identifier_metadata=True)
	struct = result.program.body[0].right
	key = struct.properties[0].name
	value = struct.properties[1].value
	assert key.metadata.kind == "property"
	assert value.metadata.declaration is key.metadata.declaration
	kinds = [scope.kind for scope in result.scopes.scopes]
	assert kinds == ["root", "struct"]


def test_enums_and_macros_live_in_root() -> None:
	program = _program(
		"""
#macro LIMIT 10
enum Color { RED, GREEN }
function f() {
	return LIMIT + RED;
}
"""
	)
	total = program.body[2].body.body[0].argument
	assert total.left.metadata.kind == "macro"
	assert total.right.metadata.kind == "enum_member"
	assert total.left.metadata.declaration.scope_id == "scope-0"


def test_catch_parameter_is_declared() -> None:
	program = _program("try { a(); } catch (err) { show_debug_message(err); }")
	handler = program.body[0].handler
	call = handler.body.body[0].expression
	assert call.arguments[0].metadata.kind == "catch_parameter"
	assert BUILTIN_TAG in call.callee.metadata.classifications


def test_tracker_is_back_at_root_after_walk() -> None:
	result = analyze("function a() { var s = { f: function() { return 1; } }; }", get_identifier_metadata=True)
	assert result.scopes.depth == 0
	assert [scope.kind for scope in result.scopes.scopes] == ["root", "function", "struct", "function"]
