# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Listener and visitor dispatch over the GML AST.

Children are discovered from dataclass fields, in declaration order, so a new
node kind needs no traversal code. Handlers are looked up by node `type`
through a table built once per subclass:

- `Listener` + `walk()`: `enter_<Type>` before the node's descendants and
  `exit_<Type>` after them, plus `enter_node`/`exit_node` for every node.
  The walk uses an explicit stack.
- `Visitor`: one `visit_<Type>` call per node; the handler decides whether
  to recurse (`generic_visit` / `visit_children`).

Both raise `InternalInvariantViolation` when nesting exceeds their depth cap.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Callable, ClassVar, Iterator, List

from gmlfront.core.errors import InternalInvariantViolation
from gmlfront.parser.ast import NODE_BOOKKEEPING_FIELDS, NODE_TYPES, Node

DEFAULT_LISTENER_DEPTH = 1000
DEFAULT_VISITOR_DEPTH = 400

_child_fields: dict[type, tuple[str, ...]] = {}


def _fields_of(cls: type) -> tuple[str, ...]:
	names = _child_fields.get(cls)
	if names is None:
		names = tuple(f.name for f in fields(cls) if f.name not in NODE_BOOKKEEPING_FIELDS)
		_child_fields[cls] = names
	return names


def iter_children(node: Node) -> Iterator[Node]:
	"""Direct child nodes of `node` in field-declaration order."""
	for name in _fields_of(type(node)):
		value = getattr(node, name)
		if isinstance(value, Node):
			yield value
		elif isinstance(value, list):
			for item in value:
				if isinstance(item, Node):
					yield item


def _handler_table(cls: type, prefix: str) -> dict[str, str]:
	table: dict[str, str] = {}
	for kind in NODE_TYPES:
		name = prefix + kind
		if callable(getattr(cls, name, None)):
			table[kind] = name
	return table


class Listener:
	"""Base class for enter/exit passes; override only the handlers you need."""

	_enter_table: ClassVar[dict[str, str]] = {}
	_exit_table: ClassVar[dict[str, str]] = {}

	def __init_subclass__(cls, **kwargs: Any) -> None:
		super().__init_subclass__(**kwargs)
		cls._enter_table = _handler_table(cls, "enter_")
		cls._exit_table = _handler_table(cls, "exit_")

	def enter_node(self, node: Node) -> None:
		pass

	def exit_node(self, node: Node) -> None:
		pass

	def dispatch_enter(self, node: Node) -> None:
		self.enter_node(node)
		name = self._enter_table.get(node.type)
		if name is not None:
			getattr(self, name)(node)

	def dispatch_exit(self, node: Node) -> None:
		name = self._exit_table.get(node.type)
		if name is not None:
			getattr(self, name)(node)
		self.exit_node(node)


def walk(root: Node, listener: Listener, *, max_depth: int = DEFAULT_LISTENER_DEPTH) -> None:
	"""
	Depth-first walk of `root` firing `listener` events.

	Every node gets exactly one enter event before any of its descendants
	and one exit event after all of them.
	"""
	stack: List[tuple[Node, int, bool]] = [(root, 0, False)]
	while stack:
		node, depth, leaving = stack.pop()
		if leaving:
			listener.dispatch_exit(node)
			continue
		if depth > max_depth:
			raise InternalInvariantViolation(f"tree nesting exceeds max_depth={max_depth} at {node.type}")
		listener.dispatch_enter(node)
		stack.append((node, depth, True))
		children = list(iter_children(node))
		for child in reversed(children):
			stack.append((child, depth + 1, False))


class Visitor:
	"""
	Single-call dispatch: `visit(node)` calls `visit_<Type>(node)` when defined
	and `generic_visit(node)` otherwise.
	"""

	max_depth: int = DEFAULT_VISITOR_DEPTH
	_visit_table: ClassVar[dict[str, str]] = {}
	_depth: int = 0

	def __init_subclass__(cls, **kwargs: Any) -> None:
		super().__init_subclass__(**kwargs)
		cls._visit_table = _handler_table(cls, "visit_")

	def visit(self, node: Node) -> Any:
		if self._depth >= self.max_depth:
			raise InternalInvariantViolation(f"visitor recursion exceeds max_depth={self.max_depth} at {node.type}")
		name = self._visit_table.get(node.type)
		handler: Callable[[Node], Any] = getattr(self, name) if name is not None else self.generic_visit
		self._depth += 1
		try:
			return handler(node)
		finally:
			self._depth -= 1

	def visit_children(self, node: Node) -> List[Any]:
		return [self.visit(child) for child in iter_children(node)]

	def generic_visit(self, node: Node) -> Any:
		self.visit_children(node)
		return None


__all__ = [
	"iter_children",
	"Listener",
	"walk",
	"Visitor",
	"DEFAULT_LISTENER_DEPTH",
	"DEFAULT_VISITOR_DEPTH",
]
