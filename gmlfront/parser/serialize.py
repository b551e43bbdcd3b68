# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Output shaping for parsed programs.

- `strip_locations` / `simplify_locations` run in place on nodes and comments;
- `to_dict` gives plain data (internal fields such as `node_id` and
  `Comment.attached_to` are left out);
- `to_estree` reshapes that data to the ESTree vocabulary used by JavaScript
  tooling.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Callable, Dict, List, Optional

from gmlfront.core.span import Location, offset_of
from gmlfront.parser import ast as A
from gmlfront.traversal.walk import DEFAULT_LISTENER_DEPTH, Listener, walk

_INTERNAL_FIELDS = frozenset({"node_id", "attached_to"})
_OPTIONAL_LISTS = frozenset({"leading_comments", "trailing_comments", "comments", "whitespace"})


class _LocationPass(Listener):
	def __init__(self, convert: Callable[[Any], Any]) -> None:
		self.convert = convert

	def enter_node(self, node: A.Node) -> None:
		node.start = self.convert(node.start)
		node.end = self.convert(node.end)

	def enter_Program(self, node: A.Program) -> None:
		# Attached comments are the same objects as the ones listed here.
		for comment in node.comments:
			comment.start = self.convert(comment.start)
			comment.end = self.convert(comment.end)


def strip_locations(program: A.Program, *, max_depth: int = DEFAULT_LISTENER_DEPTH) -> None:
	walk(program, _LocationPass(lambda loc: None), max_depth=max_depth)


def simplify_locations(program: A.Program, *, max_depth: int = DEFAULT_LISTENER_DEPTH) -> None:
	"""Replace every `Location` with its bare character offset."""
	walk(program, _LocationPass(offset_of), max_depth=max_depth)


def _value(value: Any) -> Any:
	if isinstance(value, A.Node):
		return to_dict(value)
	if isinstance(value, Location):
		return {"line": value.line, "column": value.column, "index": value.index}
	if isinstance(value, list):
		return [_value(item) for item in value]
	if isinstance(value, tuple):
		return [_value(item) for item in value]
	if dataclasses.is_dataclass(value) and not isinstance(value, type):
		out = {}
		for f in dataclasses.fields(value):
			if f.name in _INTERNAL_FIELDS:
				continue
			out[f.name] = _value(getattr(value, f.name))
		if isinstance(value, A.Comment):
			out["kind"] = value.kind
		return out
	return value


def to_dict(node: A.Node) -> Dict[str, Any]:
	"""Plain-data form of `node`; `None` locations and empty comment lists are omitted."""
	out: Dict[str, Any] = {"type": node.type}
	for f in dataclasses.fields(node):
		name = f.name
		if name in _INTERNAL_FIELDS:
			continue
		value = getattr(node, name)
		if name in ("start", "end") and value is None:
			continue
		if name in _OPTIONAL_LISTS and not value:
			continue
		if name == "metadata" and value is None:
			continue
		out[name] = _value(value)
	return out


def to_json(node: A.Node, *, estree: bool = False, indent: Optional[int] = None) -> str:
	data = to_estree(node) if estree else to_dict(node)
	return json.dumps(data, indent=indent)


# ------------------------------------------------------------------ ESTree

_LOGICAL = frozenset({"&&", "||", "??"})


def literal_value(raw: str, kind: str) -> Any:
	"""Python value of a literal's raw text (strings keep their escapes)."""
	if kind == "integer":
		return int(raw.replace("_", ""))
	if kind == "decimal":
		text = raw.replace("_", "")
		return float(text + "0" if text.endswith(".") else text)
	if kind == "hex":
		digits = raw[2:] if raw[:2] in ("0x", "0X") else raw[1:]
		return int(digits.replace("_", ""), 16)
	if kind == "binary":
		return int(raw[2:].replace("_", ""), 2)
	if kind == "string":
		return raw[1:-1]
	if kind == "verbatim_string":
		return raw[2:-1]
	if kind == "boolean":
		return raw == "true"
	return None


def _estree_literal(d: Dict[str, Any]) -> Dict[str, Any]:
	out = _carry(d, {"type": "Literal", "value": literal_value(d["value"], d["literalKind"]), "raw": d["value"]})
	return out


def _estree_binary(d: Dict[str, Any]) -> Dict[str, Any]:
	kind = "LogicalExpression" if d["operator"] in _LOGICAL else "BinaryExpression"
	return _carry(d, {"type": kind, "operator": d["operator"], "left": d["left"], "right": d["right"]})


def _estree_unary(d: Dict[str, Any]) -> Dict[str, Any]:
	return _carry(d, {"type": "UnaryExpression", "operator": d["operator"], "prefix": True, "argument": d["argument"]})


def _estree_update(prefix: bool) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
	def convert(d: Dict[str, Any]) -> Dict[str, Any]:
		return _carry(d, {"type": "UpdateExpression", "operator": d["operator"], "prefix": prefix, "argument": d["argument"]})

	return convert


def _estree_ternary(d: Dict[str, Any]) -> Dict[str, Any]:
	return _carry(
		d,
		{"type": "ConditionalExpression", "test": d["test"], "consequent": d["consequent"], "alternate": d["alternate"]},
	)


def _estree_member(d: Dict[str, Any]) -> Dict[str, Any]:
	props: List[Any] = d["property"]
	prop = props[0] if len(props) == 1 else {"type": "SequenceExpression", "expressions": props}
	return _carry(
		d,
		{
			"type": "MemberExpression",
			"object": d["object"],
			"property": prop,
			"computed": d["accessor"] != ".",
			"accessor": d["accessor"],
			"accessorKind": d["accessorKind"],
		},
	)


def _estree_assignment(d: Dict[str, Any]) -> Dict[str, Any]:
	expression = _carry(
		d, {"type": "AssignmentExpression", "operator": d["operator"], "left": d["left"], "right": d["right"]}
	)
	expression.pop("leadingComments", None)
	expression.pop("trailingComments", None)
	return _carry(d, {"type": "ExpressionStatement", "expression": expression})


def _estree_struct(d: Dict[str, Any]) -> Dict[str, Any]:
	properties = [
		_carry(p, {"type": "Property", "key": p["name"], "value": p["value"], "kind": "init"}) for p in d["properties"]
	]
	return _carry(d, {"type": "ObjectExpression", "properties": properties})


def _estree_parenthesized(d: Dict[str, Any]) -> Dict[str, Any]:
	inner = dict(d["expression"])
	inner["extra"] = {"parenthesized": True}
	return inner


_ESTREE: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
	"Literal": _estree_literal,
	"BinaryExpression": _estree_binary,
	"UnaryExpression": _estree_unary,
	"PrefixUpdateExpression": _estree_update(True),
	"PostfixUpdateExpression": _estree_update(False),
	"TernaryExpression": _estree_ternary,
	"MemberExpression": _estree_member,
	"AssignmentStatement": _estree_assignment,
	"StructExpression": _estree_struct,
	"ParenthesizedExpression": _estree_parenthesized,
}

_CAMEL_KEYS = {
	"leading_comments": "leadingComments",
	"trailing_comments": "trailingComments",
	"has_trailing_comma": "hasTrailingComma",
	"literal_kind": "literalKind",
	"accessor_kind": "accessorKind",
	"leading_whitespace": "leadingWhitespace",
	"trailing_whitespace": "trailingWhitespace",
	"is_doc": "isDoc",
	"line_breaks": "lineBreaks",
	"scope_id": "scopeId",
	"node_id": "nodeId",
}


def _carry(source: Dict[str, Any], target: Dict[str, Any]) -> Dict[str, Any]:
	for key in ("start", "end", "leadingComments", "trailingComments"):
		if key in source:
			target[key] = source[key]
	return target


def _estree_value(value: Any) -> Any:
	if isinstance(value, list):
		return [_estree_value(item) for item in value]
	if not isinstance(value, dict):
		return value
	converted = {_CAMEL_KEYS.get(k, k): _estree_value(v) for k, v in value.items()}
	convert = _ESTREE.get(converted.get("type", ""))
	return convert(converted) if convert is not None else converted


def to_estree(node: A.Node) -> Dict[str, Any]:
	"""ESTree-shaped plain data for `node`."""
	return _estree_value(to_dict(node))


__all__ = [
	"strip_locations",
	"simplify_locations",
	"to_dict",
	"to_json",
	"to_estree",
	"literal_value",
]
