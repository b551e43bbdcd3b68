# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
NodeId assignment and upward navigation.

Nodes do not point at their parents. `NodeIndex.build` numbers every node in
pre-order (`node.node_id`) and keeps an arena of parent ids, so passes that
need to look upward key side tables by id instead of holding back
references.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from gmlfront.parser.ast import Node
from gmlfront.traversal.walk import iter_children


class NodeIndex:
	def __init__(self) -> None:
		self._nodes: List[Node] = []
		self._parents: List[Optional[int]] = []

	@classmethod
	def build(cls, root: Node) -> "NodeIndex":
		"""Assign pre-order NodeIds to every node reachable from `root` (root is 0)."""
		index = cls()
		stack: List[tuple[Node, Optional[int]]] = [(root, None)]
		while stack:
			node, parent_id = stack.pop()
			node.node_id = len(index._nodes)
			index._nodes.append(node)
			index._parents.append(parent_id)
			children = list(iter_children(node))
			for child in reversed(children):
				stack.append((child, node.node_id))
		return index

	def __len__(self) -> int:
		return len(self._nodes)

	def get(self, node_id: int) -> Node:
		return self._nodes[node_id]

	def parent(self, node: Node) -> Optional[Node]:
		parent_id = self._parents[self._id_of(node)]
		return None if parent_id is None else self._nodes[parent_id]

	def ancestors(self, node: Node) -> Iterator[Node]:
		"""Parent first, root last."""
		parent_id = self._parents[self._id_of(node)]
		while parent_id is not None:
			yield self._nodes[parent_id]
			parent_id = self._parents[parent_id]

	def _id_of(self, node: Node) -> int:
		node_id = node.node_id
		if node_id is None or node_id >= len(self._nodes) or self._nodes[node_id] is not node:
			raise KeyError(f"{node.type} node is not part of this index")
		return node_id


__all__ = ["NodeIndex"]
