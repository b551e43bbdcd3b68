# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from gmlfront import InternalInvariantViolation, parse
from gmlfront.parser import ast as A
from gmlfront.traversal import DEFAULT_VISITOR_DEPTH, Listener, NodeIndex, Visitor, iter_children, walk


class _Recorder(Listener):
	def __init__(self) -> None:
		self.events: list[str] = []

	def enter_node(self, node: A.Node) -> None:
		self.events.append(f"+{node.type}")

	def exit_node(self, node: A.Node) -> None:
		self.events.append(f"-{node.type}")


class _IdentifierCounter(Listener):
	def __init__(self) -> None:
		self.entered: list[str] = []
		self.exited = 0

	def enter_Identifier(self, node: A.Identifier) -> None:
		self.entered.append(node.name)

	def exit_Identifier(self, node: A.Identifier) -> None:
		self.exited += 1


def _nested(depth: int) -> A.Node:
	node: A.Node = A.Literal(value="1", literal_kind="integer")
	for _ in range(depth):
		node = A.ParenthesizedExpression(expression=node)
	return node


def test_enter_and_exit_bracket_descendants() -> None:
	recorder = _Recorder()
	walk(parse("x = 1 + 2;", get_comments=False), recorder)
	assert recorder.events == [
		"+Program",
		"+AssignmentStatement",
		"+Identifier",
		"-Identifier",
		"+BinaryExpression",
		"+Literal",
		"-Literal",
		"+Literal",
		"-Literal",
		"-BinaryExpression",
		"-AssignmentStatement",
		"-Program",
	]


def test_typed_handlers_dispatch_by_kind() -> None:
	counter = _IdentifierCounter()
	walk(parse("a = b(c, 1);", get_comments=False), counter)
	assert counter.entered == ["a", "b", "c"]
	assert counter.exited == 3


def test_dispatch_tables_are_per_subclass() -> None:
	assert "Identifier" in _IdentifierCounter._enter_table
	assert "Identifier" not in _Recorder._enter_table
	assert Listener._enter_table == {}


def test_iter_children_follows_field_order() -> None:
	program = parse("for (i = 0; i < 3; i += 1) { f(i); }", get_comments=False)
	loop = program.body[0]
	children = list(iter_children(loop))
	assert children == [loop.init, loop.test, loop.update, loop.body]


def test_iter_children_skips_missing_optional_children() -> None:
	program = parse("for (;;) {}", get_comments=False)
	assert [child.type for child in iter_children(program.body[0])] == ["BlockStatement"]


def test_walk_depth_cap_raises() -> None:
	walk(_nested(20), Listener(), max_depth=25)
	with pytest.raises(InternalInvariantViolation):
		walk(_nested(30), Listener(), max_depth=25)


class _Evaluator(Visitor):
	def visit_Program(self, node: A.Program) -> int:
		return self.visit(node.body[0].right)

	def visit_Literal(self, node: A.Literal) -> int:
		return int(node.value)

	def visit_ParenthesizedExpression(self, node: A.ParenthesizedExpression) -> int:
		return self.visit(node.expression)

	def visit_BinaryExpression(self, node: A.BinaryExpression) -> int:
		left = self.visit(node.left)
		right = self.visit(node.right)
		return left + right if node.operator == "+" else left * right


class _NameCollector(Visitor):
	def __init__(self) -> None:
		self.names: list[str] = []

	def visit_Identifier(self, node: A.Identifier) -> None:
		self.names.append(node.name)


def test_visitor_controls_recursion() -> None:
	program = parse("x = (1 + 2) * 3 + 4;", get_comments=False)
	assert _Evaluator().visit(program) == 13


def test_generic_visit_recurses_in_declaration_order() -> None:
	collector = _NameCollector()
	collector.visit(parse("if (a) { b = c; } else { d(e); }", get_comments=False))
	assert collector.names == ["a", "b", "c", "d", "e"]


def test_visitor_depth_cap_raises() -> None:
	assert Visitor.max_depth == DEFAULT_VISITOR_DEPTH
	assert _Evaluator().visit(_nested(100)) == 1
	evaluator = _Evaluator()
	evaluator.max_depth = 50
	with pytest.raises(InternalInvariantViolation):
		evaluator.visit(_nested(60))


def test_visitor_depth_resets_after_error() -> None:
	evaluator = _Evaluator()
	evaluator.max_depth = 10
	with pytest.raises(InternalInvariantViolation):
		evaluator.visit(_nested(20))
	assert evaluator.visit(_nested(3)) == 1


def test_node_index_numbers_in_preorder() -> None:
	program = parse("x = f(y);", get_comments=False)
	index = NodeIndex.build(program)
	recorder = _Recorder()
	walk(program, recorder)
	preorder = [index.get(i).type for i in range(len(index))]
	assert preorder == [event[1:] for event in recorder.events if event.startswith("+")]
	assert program.node_id == 0


def test_node_index_parent_and_ancestors() -> None:
	program = parse("x = f(y);", get_comments=False)
	index = NodeIndex.build(program)
	call = program.body[0].right
	arg = call.arguments[0]
	assert index.parent(arg) is call
	assert [node.type for node in index.ancestors(arg)] == ["CallExpression", "AssignmentStatement", "Program"]
	assert index.parent(program) is None
	with pytest.raises(KeyError):
		index.parent(A.Identifier(name="stray"))
