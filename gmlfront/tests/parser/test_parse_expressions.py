# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from gmlfront import GMLSyntaxError, parse
from gmlfront.parser import ast as A


def _rhs(source: str) -> A.Node:
	"""Right-hand side of the single assignment in `source`."""
	program = parse(source, get_comments=False)
	(stmt,) = program.body
	assert isinstance(stmt, A.AssignmentStatement)
	return stmt.right


def _expr(source: str) -> A.Node:
	program = parse(source, get_comments=False)
	(stmt,) = program.body
	assert isinstance(stmt, A.ExpressionStatement)
	return stmt.expression


def test_multiplicative_binds_tighter_than_additive() -> None:
	node = _rhs("x = 1 + 2 * 3;")
	assert node.operator == "+"
	assert node.right.operator == "*"


def test_additive_is_left_associative() -> None:
	node = _rhs("x = a - b - c;")
	assert node.operator == "-"
	assert isinstance(node.left, A.BinaryExpression)
	assert node.right.name == "c"


def test_logical_precedence() -> None:
	node = _rhs("x = a || b && c;")
	assert node.operator == "||"
	assert node.right.operator == "&&"
	assert _rhs("x = a ^^ b || c;").operator == "^^"


def test_relational_binds_tighter_than_equality() -> None:
	node = _rhs("x = a == b < c;")
	assert node.operator == "=="
	assert node.right.operator == "<"


def test_nullish_is_right_associative() -> None:
	node = _rhs("x = a ?? b ?? c;")
	assert node.operator == "??"
	assert node.left.name == "a"
	assert node.right.operator == "??"


def test_bitwise_and_shift_levels() -> None:
	node = _rhs("x = a | b ^ c & d << 1;")
	assert node.operator == "|"
	assert node.right.operator == "^"
	assert node.right.right.operator == "&"
	assert node.right.right.right.operator == "<<"


def test_word_operators_are_canonical() -> None:
	node = _rhs("x = a and not b or c mod 2 <> d;")
	assert node.operator == "||"
	assert node.left.operator == "&&"
	assert node.left.right.operator == "!"
	assert node.right.operator == "!="
	assert node.right.left.operator == "%"


def test_single_equals_inside_expression_is_comparison() -> None:
	program = parse("if a = b { c = 1; }", get_comments=False)
	test = program.body[0].test
	assert isinstance(test, A.BinaryExpression)
	assert test.operator == "=="


def test_ternary_nests_in_alternate() -> None:
	node = _rhs("x = a ? b : c ? d : e;")
	assert isinstance(node, A.TernaryExpression)
	assert isinstance(node.alternate, A.TernaryExpression)


def test_unary_and_update_expressions() -> None:
	node = _rhs("x = -a.b + ~c + ++d;")
	assert node.operator == "+"
	unary = node.left.left
	assert isinstance(unary, A.UnaryExpression) and unary.operator == "-"
	assert isinstance(unary.argument, A.MemberExpression)
	assert node.left.right.operator == "~"
	assert isinstance(node.right, A.PrefixUpdateExpression)


def test_parentheses_are_kept() -> None:
	node = _rhs("x = (1 + 2) * 3;")
	assert node.operator == "*"
	assert isinstance(node.left, A.ParenthesizedExpression)


def test_literals() -> None:
	node = _rhs('x = [1, 2.5, $FF, 0b11, "s", @"v", true, undefined,];')
	assert isinstance(node, A.ArrayExpression)
	assert [e.literal_kind for e in node.elements] == [
		"integer",
		"decimal",
		"hex",
		"binary",
		"string",
		"verbatim_string",
		"boolean",
		"undefined",
	]
	assert node.has_trailing_comma


def test_struct_literal() -> None:
	node = _rhs('s = { name: "bob", "hp": 10 };')
	assert isinstance(node, A.StructExpression)
	assert isinstance(node.properties[0].name, A.Identifier)
	assert isinstance(node.properties[1].name, A.Literal)
	assert not node.has_trailing_comma
	assert _rhs("s = {};").properties == []


def test_template_string_atoms() -> None:
	node = _rhs('s = $"hp: {hp + 1}!";')
	assert isinstance(node, A.TemplateStringExpression)
	text, hole, tail = node.atoms
	assert isinstance(text, A.TemplateStringText) and text.value == "hp: "
	assert isinstance(hole, A.BinaryExpression)
	assert hole.left.start == 11
	assert tail.value == "!"


def test_accessors() -> None:
	body = parse("a[@ 0] = 1; l[| 1] = 2; m[? \"k\"] = 3; g[# 1, 2] = 4; s[$ \"k\"] = 5; o.p = 6;").body
	kinds = [stmt.left.accessor_kind for stmt in body]
	assert kinds == ["array_direct", "list", "map", "grid", "struct", "dot"]
	assert len(body[3].left.property) == 2


def test_call_arguments() -> None:
	assert _expr("f();").arguments == []
	call = _expr("f(a, b);")
	assert [arg.name for arg in call.arguments] == ["a", "b"]
	assert not call.has_trailing_comma


def test_elided_arguments_are_placeholders() -> None:
	call = _expr("punch(,, x);")
	assert [type(arg) for arg in call.arguments] == [
		A.MissingOptionalArgument,
		A.MissingOptionalArgument,
		A.Identifier,
	]


def test_trailing_comma_adds_placeholder() -> None:
	call = _expr("f(a,);")
	assert [type(arg) for arg in call.arguments] == [A.Identifier, A.MissingOptionalArgument]
	assert call.has_trailing_comma


def test_new_expression() -> None:
	node = _rhs("v = new Vec2(1, 2);")
	assert isinstance(node, A.NewExpression)
	assert node.callee.name == "Vec2"
	assert len(node.arguments) == 2


def test_member_call_chain_is_assignable() -> None:
	program = parse("a[0].b()[1] = 2;", get_comments=False)
	left = program.body[0].left
	assert isinstance(left, A.MemberExpression)
	assert isinstance(left.object, A.CallExpression)


def test_call_then_index_is_assignable() -> None:
	program = parse("a()[1] = 2;", get_comments=False)
	assert isinstance(program.body[0].left.object, A.CallExpression)


@pytest.mark.parametrize("source", ["a[0]() = 2;", "f() = 1;", "a.b()++;"])
def test_call_result_is_not_assignable(source: str) -> None:
	with pytest.raises(GMLSyntaxError) as excinfo:
		parse(source)
	assert "assignment target" in excinfo.value.message
	assert excinfo.value.offset == 0
