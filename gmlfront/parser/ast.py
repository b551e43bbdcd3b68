# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
GML syntax tree.

Node kinds form a closed, flat set. Every node class carries its kind name in
the `type` class attribute; dispatch (builder, traversal, serialization) is by
that string, never by inheritance. A node owns its children; the tree has no
parent pointers (see `gmlfront.traversal.NodeIndex` for upward navigation).

`start`/`end` hold `Location` objects while the pipeline runs. The final
location pass may flatten them to bare offsets or drop them. Synthesized
nodes have no location.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional


@dataclass
class Comment:
	type: str  # "CommentLine" | "CommentBlock"
	text: str  # raw text including markers
	value: str  # body without markers
	start: Any = None
	end: Any = None
	leading_whitespace: str = ""
	trailing_whitespace: str = ""
	is_doc: bool = False
	placement: Optional[str] = None  # "leading" | "trailing"
	attached_to: Optional[int] = None  # node_id of the owner

	@property
	def kind(self) -> str:
		return "line" if self.type == "CommentLine" else "block"


@dataclass
class WhitespaceRun:
	text: str
	start: int
	end: int
	line: int
	line_breaks: int


@dataclass
class Node:
	type: ClassVar[str] = "Node"

	start: Any = field(default=None, kw_only=True)
	end: Any = field(default=None, kw_only=True)
	leading_comments: List[Comment] = field(default_factory=list, kw_only=True)
	trailing_comments: List[Comment] = field(default_factory=list, kw_only=True)
	node_id: Optional[int] = field(default=None, kw_only=True)


# Fields every node has that never hold children.
NODE_BOOKKEEPING_FIELDS = frozenset({"start", "end", "leading_comments", "trailing_comments", "node_id"})


@dataclass
class Program(Node):
	type: ClassVar[str] = "Program"
	body: List[Node] = field(default_factory=list)
	comments: List[Comment] = field(default_factory=list)
	whitespace: List[WhitespaceRun] = field(default_factory=list)


# ---------------------------------------------------------------- statements


@dataclass
class BlockStatement(Node):
	type: ClassVar[str] = "BlockStatement"
	body: List[Node] = field(default_factory=list)


@dataclass
class ExpressionStatement(Node):
	type: ClassVar[str] = "ExpressionStatement"
	expression: Node


@dataclass
class AssignmentStatement(Node):
	type: ClassVar[str] = "AssignmentStatement"
	operator: str
	left: Node
	right: Node


@dataclass
class IfStatement(Node):
	type: ClassVar[str] = "IfStatement"
	test: Node
	consequent: Node
	alternate: Optional[Node] = None


@dataclass
class WhileStatement(Node):
	type: ClassVar[str] = "WhileStatement"
	test: Node
	body: Node


@dataclass
class DoUntilStatement(Node):
	type: ClassVar[str] = "DoUntilStatement"
	body: Node
	test: Node


@dataclass
class ForStatement(Node):
	type: ClassVar[str] = "ForStatement"
	init: Optional[Node]
	test: Optional[Node]
	update: Optional[Node]
	body: Node


@dataclass
class RepeatStatement(Node):
	type: ClassVar[str] = "RepeatStatement"
	test: Node
	body: Node


@dataclass
class WithStatement(Node):
	type: ClassVar[str] = "WithStatement"
	test: Node
	body: Node


@dataclass
class SwitchCase(Node):
	type: ClassVar[str] = "SwitchCase"
	test: Optional[Node]  # None for `default:`
	body: List[Node] = field(default_factory=list)


@dataclass
class SwitchStatement(Node):
	type: ClassVar[str] = "SwitchStatement"
	discriminant: Node
	cases: List[SwitchCase] = field(default_factory=list)


@dataclass
class CatchClause(Node):
	type: ClassVar[str] = "CatchClause"
	param: Optional["Identifier"]
	body: BlockStatement


@dataclass
class Finalizer(Node):
	type: ClassVar[str] = "Finalizer"
	body: BlockStatement


@dataclass
class TryStatement(Node):
	type: ClassVar[str] = "TryStatement"
	block: BlockStatement
	handler: Optional[CatchClause] = None
	finalizer: Optional[Finalizer] = None


@dataclass
class BreakStatement(Node):
	type: ClassVar[str] = "BreakStatement"


@dataclass
class ContinueStatement(Node):
	type: ClassVar[str] = "ContinueStatement"


@dataclass
class ExitStatement(Node):
	type: ClassVar[str] = "ExitStatement"


@dataclass
class ReturnStatement(Node):
	type: ClassVar[str] = "ReturnStatement"
	argument: Optional[Node] = None


@dataclass
class ThrowStatement(Node):
	type: ClassVar[str] = "ThrowStatement"
	argument: Node


@dataclass
class DeleteStatement(Node):
	type: ClassVar[str] = "DeleteStatement"
	argument: Node


# -------------------------------------------------------------- declarations


@dataclass
class VariableDeclarator(Node):
	type: ClassVar[str] = "VariableDeclarator"
	id: "Identifier"
	init: Optional[Node] = None


@dataclass
class VariableDeclaration(Node):
	type: ClassVar[str] = "VariableDeclaration"
	kind: str  # "var" | "static"
	declarations: List[VariableDeclarator] = field(default_factory=list)


@dataclass
class GlobalVarStatement(Node):
	type: ClassVar[str] = "GlobalVarStatement"
	declarations: List[VariableDeclarator] = field(default_factory=list)


@dataclass
class DefaultParameter(Node):
	type: ClassVar[str] = "DefaultParameter"
	left: "Identifier"
	right: Node


@dataclass
class FunctionDeclaration(Node):
	type: ClassVar[str] = "FunctionDeclaration"
	id: Optional["Identifier"]
	params: List[Node] = field(default_factory=list)
	body: BlockStatement = field(default_factory=BlockStatement)
	has_trailing_comma: bool = False


@dataclass
class ConstructorParentClause(Node):
	type: ClassVar[str] = "ConstructorParentClause"
	id: "Identifier"
	arguments: List[Node] = field(default_factory=list)
	has_trailing_comma: bool = False


@dataclass
class ConstructorDeclaration(Node):
	type: ClassVar[str] = "ConstructorDeclaration"
	id: Optional["Identifier"]
	params: List[Node] = field(default_factory=list)
	parent: Optional[ConstructorParentClause] = None
	body: BlockStatement = field(default_factory=BlockStatement)
	has_trailing_comma: bool = False


@dataclass
class EnumMember(Node):
	type: ClassVar[str] = "EnumMember"
	name: "Identifier"
	initializer: Optional[Node] = None


@dataclass
class EnumDeclaration(Node):
	type: ClassVar[str] = "EnumDeclaration"
	name: "Identifier"
	members: List[EnumMember] = field(default_factory=list)
	has_trailing_comma: bool = False


@dataclass
class MacroDeclaration(Node):
	type: ClassVar[str] = "MacroDeclaration"
	name: "Identifier"
	body: str  # raw replacement text, line continuations kept
	config: Optional[str] = None  # `#macro CONFIG:NAME ...`


@dataclass
class RegionStatement(Node):
	type: ClassVar[str] = "RegionStatement"
	name: Optional[str] = None


@dataclass
class EndRegionStatement(Node):
	type: ClassVar[str] = "EndRegionStatement"
	name: Optional[str] = None


@dataclass
class DefineStatement(Node):
	type: ClassVar[str] = "DefineStatement"
	name: str = ""


# --------------------------------------------------------------- expressions


@dataclass
class Identifier(Node):
	type: ClassVar[str] = "Identifier"
	name: str
	# Filled by the scope pass (an `IdentifierMetadata`).
	metadata: Optional[Any] = None


@dataclass
class Literal(Node):
	type: ClassVar[str] = "Literal"
	value: str  # raw source text
	literal_kind: str


@dataclass
class TemplateStringText(Node):
	type: ClassVar[str] = "TemplateStringText"
	value: str


@dataclass
class TemplateStringExpression(Node):
	type: ClassVar[str] = "TemplateStringExpression"
	atoms: List[Node] = field(default_factory=list)


@dataclass
class ArrayExpression(Node):
	type: ClassVar[str] = "ArrayExpression"
	elements: List[Node] = field(default_factory=list)
	has_trailing_comma: bool = False


@dataclass
class Property(Node):
	type: ClassVar[str] = "Property"
	name: Node  # Identifier or string Literal
	value: Node


@dataclass
class StructExpression(Node):
	type: ClassVar[str] = "StructExpression"
	properties: List[Property] = field(default_factory=list)
	has_trailing_comma: bool = False


@dataclass
class ParenthesizedExpression(Node):
	type: ClassVar[str] = "ParenthesizedExpression"
	expression: Node


@dataclass
class UnaryExpression(Node):
	type: ClassVar[str] = "UnaryExpression"
	operator: str
	argument: Node


@dataclass
class BinaryExpression(Node):
	type: ClassVar[str] = "BinaryExpression"
	operator: str
	left: Node
	right: Node


@dataclass
class TernaryExpression(Node):
	type: ClassVar[str] = "TernaryExpression"
	test: Node
	consequent: Node
	alternate: Node


@dataclass
class PrefixUpdateExpression(Node):
	type: ClassVar[str] = "PrefixUpdateExpression"
	operator: str  # "++" | "--"
	argument: Node


@dataclass
class PostfixUpdateExpression(Node):
	type: ClassVar[str] = "PostfixUpdateExpression"
	operator: str
	argument: Node


@dataclass
class MissingOptionalArgument(Node):
	type: ClassVar[str] = "MissingOptionalArgument"


@dataclass
class CallExpression(Node):
	type: ClassVar[str] = "CallExpression"
	callee: Node
	arguments: List[Node] = field(default_factory=list)
	has_trailing_comma: bool = False


ACCESSOR_KINDS = {
	".": "dot",
	"[": "array",
	"[@": "array_direct",
	"[|": "list",
	"[?": "map",
	"[#": "grid",
	"[$": "struct",
}


@dataclass
class MemberExpression(Node):
	"""
	Every member access form: `a.b`, `a[i]`, `a[@ i]`, `a[| i]`, `a[? k]`,
	`a[# x, y]`, `a[$ k]`.

	`property` is always a list: one Identifier for dot access, one or more
	index expressions otherwise.
	"""

	type: ClassVar[str] = "MemberExpression"
	object: Node
	accessor: str
	property: List[Node] = field(default_factory=list)
	accessor_kind: str = ""

	def __post_init__(self) -> None:
		if not self.accessor_kind:
			self.accessor_kind = ACCESSOR_KINDS[self.accessor]


@dataclass
class NewExpression(Node):
	type: ClassVar[str] = "NewExpression"
	callee: "Identifier"
	arguments: List[Node] = field(default_factory=list)


NODE_TYPES: dict[str, type[Node]] = {
	cls.type: cls
	for cls in (
		Program,
		BlockStatement,
		ExpressionStatement,
		AssignmentStatement,
		IfStatement,
		WhileStatement,
		DoUntilStatement,
		ForStatement,
		RepeatStatement,
		WithStatement,
		SwitchCase,
		SwitchStatement,
		CatchClause,
		Finalizer,
		TryStatement,
		BreakStatement,
		ContinueStatement,
		ExitStatement,
		ReturnStatement,
		ThrowStatement,
		DeleteStatement,
		VariableDeclarator,
		VariableDeclaration,
		GlobalVarStatement,
		DefaultParameter,
		FunctionDeclaration,
		ConstructorParentClause,
		ConstructorDeclaration,
		EnumMember,
		EnumDeclaration,
		MacroDeclaration,
		RegionStatement,
		EndRegionStatement,
		DefineStatement,
		Identifier,
		Literal,
		TemplateStringText,
		TemplateStringExpression,
		ArrayExpression,
		Property,
		StructExpression,
		ParenthesizedExpression,
		UnaryExpression,
		BinaryExpression,
		TernaryExpression,
		PrefixUpdateExpression,
		PostfixUpdateExpression,
		MissingOptionalArgument,
		CallExpression,
		MemberExpression,
		NewExpression,
	)
}
