# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Scope annotation pass.

Fills `Identifier.metadata` for every identifier in a program:

- function and constructor bodies open a `function` scope holding their
  parameters; a named function is declared in the enclosing scope;
- struct literals open a `struct` scope holding their property names;
- `var`, `static` and catch parameters are declared in the current scope;
- `globalvar` names, enums, enum members and macros live in the root scope;
- `global.x` resolves `x` against the root scope from any depth;
- other dot-accessed properties are `member` occurrences.

Every remaining identifier is a reference. Declarations are registered when
the walk reaches them, so a use that precedes its declaration in the same
scope resolves outward.
"""

from __future__ import annotations

import logging
from typing import Optional

from gmlfront.core.errors import InternalInvariantViolation
from gmlfront.parser import ast as A
from gmlfront.scopes.tracker import FUNCTION, STRUCT, ScopeTracker
from gmlfront.traversal.walk import DEFAULT_LISTENER_DEPTH, Listener, walk

logger = logging.getLogger(__name__)


class ScopeAnnotator(Listener):
	def __init__(self, tracker: Optional[ScopeTracker] = None) -> None:
		self.tracker = tracker or ScopeTracker()

	def enter_Identifier(self, node: A.Identifier) -> None:
		if node.metadata is None:
			self.tracker.reference(node.name, node)

	def _enter_callable(self, node: A.Node, kind: str) -> None:
		ident = getattr(node, "id", None)
		if ident is not None:
			self.tracker.declare(ident.name, ident, kind)
		self.tracker.enter_scope(FUNCTION)
		for param in getattr(node, "params", ()):
			target = param.left if isinstance(param, A.DefaultParameter) else param
			if isinstance(target, A.Identifier):
				self.tracker.declare(target.name, target, "parameter")

	def enter_FunctionDeclaration(self, node: A.FunctionDeclaration) -> None:
		self._enter_callable(node, "function")

	def exit_FunctionDeclaration(self, node: A.FunctionDeclaration) -> None:
		self.tracker.exit_scope()

	def enter_ConstructorDeclaration(self, node: A.ConstructorDeclaration) -> None:
		self._enter_callable(node, "constructor")

	def exit_ConstructorDeclaration(self, node: A.ConstructorDeclaration) -> None:
		self.tracker.exit_scope()

	def enter_StructExpression(self, node: A.StructExpression) -> None:
		self.tracker.enter_scope(STRUCT)
		for prop in node.properties:
			if isinstance(prop.name, A.Identifier):
				self.tracker.declare(prop.name.name, prop.name, "property")

	def exit_StructExpression(self, node: A.StructExpression) -> None:
		self.tracker.exit_scope()

	def enter_VariableDeclaration(self, node: A.VariableDeclaration) -> None:
		for decl in node.declarations:
			self.tracker.declare(decl.id.name, decl.id, node.kind)

	def enter_GlobalVarStatement(self, node: A.GlobalVarStatement) -> None:
		for decl in node.declarations:
			self.tracker.declare(decl.id.name, decl.id, "globalvar", scope=self.tracker.root)

	def enter_CatchClause(self, node: A.CatchClause) -> None:
		if node.param is not None:
			self.tracker.declare(node.param.name, node.param, "catch_parameter")

	def enter_EnumDeclaration(self, node: A.EnumDeclaration) -> None:
		root = self.tracker.root
		self.tracker.declare(node.name.name, node.name, "enum", scope=root)
		for member in node.members:
			self.tracker.declare(member.name.name, member.name, "enum_member", scope=root)

	def enter_MacroDeclaration(self, node: A.MacroDeclaration) -> None:
		self.tracker.declare(node.name.name, node.name, "macro", scope=self.tracker.root)

	def enter_MemberExpression(self, node: A.MemberExpression) -> None:
		if node.accessor != "." or not node.property:
			return
		prop = node.property[0]
		if not isinstance(prop, A.Identifier) or prop.metadata is not None:
			return
		obj = node.object
		if isinstance(obj, A.Identifier) and obj.name == "global":
			self.tracker.reference(prop.name, prop, scope=self.tracker.resolve_override("global"))
		else:
			self.tracker.member(prop.name, prop)


def annotate_scopes(
	program: A.Program,
	*,
	tracker: Optional[ScopeTracker] = None,
	max_depth: int = DEFAULT_LISTENER_DEPTH,
) -> ScopeTracker:
	"""Run the scope pass over `program` and return the populated tracker."""
	annotator = ScopeAnnotator(tracker)
	walk(program, annotator, max_depth=max_depth)
	if annotator.tracker.depth != 0:
		raise InternalInvariantViolation(f"scope stack not balanced after walk (depth {annotator.tracker.depth})")
	logger.debug("scope pass built %d scopes", len(annotator.tracker.scopes))
	return annotator.tracker


__all__ = ["ScopeAnnotator", "annotate_scopes"]
