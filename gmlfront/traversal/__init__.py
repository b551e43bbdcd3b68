"""Traversal over the GML AST: child iteration, listeners, visitors, node index."""

from gmlfront.traversal.index import NodeIndex
from gmlfront.traversal.walk import (
	DEFAULT_LISTENER_DEPTH,
	DEFAULT_VISITOR_DEPTH,
	Listener,
	Visitor,
	iter_children,
	walk,
)

__all__ = [
	"NodeIndex",
	"Listener",
	"Visitor",
	"iter_children",
	"walk",
	"DEFAULT_LISTENER_DEPTH",
	"DEFAULT_VISITOR_DEPTH",
]
