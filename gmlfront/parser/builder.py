# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark parse tree -> GML AST.

Builders are plain functions keyed by rule name in two dispatch tables (one
for statements, one for expressions). Shape normalizations happen here:

- every member access (`.`, `[`, `[@`, `[|`, `[?`, `[#`, `[$`) becomes one
  `MemberExpression` carrying its accessor,
- operator spellings are canonicalized (`and` -> `&&`, `<>` -> `!=`,
  comparison `=` -> `==`, assignment `:=` -> `=`),
- elided call arguments become `MissingOptionalArgument` placeholders,
- a named function at statement level is a declaration, not an expression
  statement.
"""

from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Union

from lark import Token as LarkToken, Tree

from gmlfront.core.errors import GMLSyntaxError, InternalInvariantViolation
from gmlfront.core.span import Location
from gmlfront.lexer.scanner import template_hole_end, tokenize
from gmlfront.lexer.tokens import CODE, Token, count_line_breaks
from gmlfront.parser import ast as A
from gmlfront.parser.parser import parse_tokens
from gmlfront.traversal.walk import DEFAULT_LISTENER_DEPTH

_Item = Union[Tree, LarkToken]

_LITERAL_KINDS = {
	"INTEGER": "integer",
	"DECIMAL": "decimal",
	"HEX": "hex",
	"BINARY": "binary",
	"STRING": "string",
	"VERBATIM_STRING": "verbatim_string",
	"BOOLEAN": "boolean",
	"UNDEFINED": "undefined",
}

_OPERATOR_SPELLINGS = {
	"and": "&&",
	"or": "||",
	"xor": "^^",
	"not": "!",
	"mod": "%",
	"<>": "!=",
}

_MACRO = re.compile(r"#macro[ \t]+(?:([A-Za-z_][A-Za-z0-9_]*):)?([A-Za-z_][A-Za-z0-9_]*)[ \t]*", re.S)
_REGION = re.compile(r"#(?:end)?region[ \t]*(.*)", re.S)
_DEFINE = re.compile(r"#define[ \t]+(\S+)")


def build_program(tree: Tree, source: str, *, max_depth: int = DEFAULT_LISTENER_DEPTH) -> A.Program:
	"""
	Build the AST for a `program` parse tree.

	Statement and expression nesting deeper than `max_depth`, or deep enough to
	exhaust the interpreter stack first, raises `InternalInvariantViolation`.
	"""
	end_line = count_line_breaks(source) + 1
	last_break = max(source.rfind("\n"), source.rfind("\r"))
	_nesting.limit = max_depth
	_nesting.depth = 0
	try:
		body = _build_statements(tree.children)
	except RecursionError:
		raise InternalInvariantViolation(
			f"tree nesting too deep to build (interpreter stack exhausted before max_depth={max_depth})"
		) from None
	finally:
		_nesting.limit = DEFAULT_LISTENER_DEPTH
		_nesting.depth = 0
	return A.Program(
		body=body,
		start=Location(line=1, column=1, index=0),
		end=Location(line=end_line, column=len(source) - last_break, index=len(source)),
	)


# ------------------------------------------------------------------- helpers


class _Nesting(threading.local):
	limit = DEFAULT_LISTENER_DEPTH
	depth = 0


_nesting = _Nesting()


@contextmanager
def _nested(kind: str) -> Iterator[None]:
	depth = _nesting.depth + 1
	if depth > _nesting.limit:
		raise InternalInvariantViolation(f"tree nesting exceeds max_depth={_nesting.limit} at '{kind}'")
	_nesting.depth = depth
	try:
		yield
	finally:
		_nesting.depth = depth - 1


def _name(node: _Item) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, LarkToken):
			return data.value
		return data
	return node.type


def _span(item: _Item) -> dict:
	return {"start": Location.start_of(item), "end": Location.end_of(item)}


def _trees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _tokens(tree: Tree) -> List[LarkToken]:
	return [c for c in tree.children if isinstance(c, LarkToken)]


def _has_trailing_comma(tree: Tree) -> bool:
	return any(isinstance(c, Tree) and _name(c) == "trailing_comma" for c in tree.children)


def _items(tree: Tree) -> List[Tree]:
	return [c for c in _trees(tree) if _name(c) != "trailing_comma"]


def _error_at(item: _Item, message: str) -> GMLSyntaxError:
	start = Location.start_of(item)
	end = Location.end_of(item)
	return GMLSyntaxError(
		message,
		offset=start.index if start else None,
		line=start.line if start else None,
		column=start.column if start else None,
		recoverable=True,
		resync_offset=end.index if end else None,
	)


# ---------------------------------------------------------------- statements


def _build_statements(children: list) -> List[A.Node]:
	out: List[A.Node] = []
	for child in children:
		if not isinstance(child, Tree):
			continue
		node = build_statement(child)
		if node is not None:
			out.append(node)
	return out


def build_statement(tree: Tree) -> Optional[A.Node]:
	kind = _name(tree)
	builder = _STATEMENT_BUILDERS.get(kind)
	if builder is None:
		raise InternalInvariantViolation(f"no statement builder for rule '{kind}'")
	with _nested(kind):
		return builder(tree)


def _build_body(tree: Tree) -> A.Node:
	"""Statement in a body position; a lone `;` becomes an empty block."""
	node = build_statement(tree)
	if node is None:
		return A.BlockStatement(body=[], **_span(tree))
	return node


def _build_block(tree: Tree) -> A.BlockStatement:
	return A.BlockStatement(body=_build_statements(tree.children), **_span(tree))


def _build_if(tree: Tree) -> A.IfStatement:
	parts = _trees(tree)
	return A.IfStatement(
		test=build_expression(parts[0]),
		consequent=_build_body(parts[1]),
		alternate=_build_body(parts[2]) if len(parts) > 2 else None,
		**_span(tree),
	)


def _build_while(tree: Tree) -> A.WhileStatement:
	test, body = _trees(tree)
	return A.WhileStatement(test=build_expression(test), body=_build_body(body), **_span(tree))


def _build_do_until(tree: Tree) -> A.DoUntilStatement:
	body, test = _trees(tree)
	return A.DoUntilStatement(body=_build_body(body), test=build_expression(test), **_span(tree))


def _build_repeat(tree: Tree) -> A.RepeatStatement:
	test, body = _trees(tree)
	return A.RepeatStatement(test=build_expression(test), body=_build_body(body), **_span(tree))


def _build_with(tree: Tree) -> A.WithStatement:
	test, body = _trees(tree)
	return A.WithStatement(test=build_expression(test), body=_build_body(body), **_span(tree))


def _build_for(tree: Tree) -> A.ForStatement:
	init, test, update, body = _trees(tree)

	def clause(part: Tree, expression: bool) -> Optional[A.Node]:
		inner = _trees(part)
		if not inner:
			return None
		return build_expression(inner[0]) if expression else build_statement(inner[0])

	return A.ForStatement(
		init=clause(init, False),
		test=clause(test, True),
		update=clause(update, False),
		body=_build_body(body),
		**_span(tree),
	)


def _build_switch(tree: Tree) -> A.SwitchStatement:
	parts = _trees(tree)
	cases: List[A.SwitchCase] = []
	for case in parts[1:]:
		inner = _trees(case)
		if _name(case) == "default_case":
			cases.append(A.SwitchCase(test=None, body=_build_statements(inner), **_span(case)))
		else:
			cases.append(
				A.SwitchCase(test=build_expression(inner[0]), body=_build_statements(inner[1:]), **_span(case))
			)
	return A.SwitchStatement(discriminant=build_expression(parts[0]), cases=cases, **_span(tree))


def _build_try(tree: Tree) -> A.TryStatement:
	parts = _trees(tree)
	handler: Optional[A.CatchClause] = None
	finalizer: Optional[A.Finalizer] = None
	for part in parts[1:]:
		if _name(part) == "catch_clause":
			inner = _trees(part)
			param = _build_identifier(inner[0]) if len(inner) > 1 else None
			handler = A.CatchClause(param=param, body=_build_block(inner[-1]), **_span(part))
		else:
			finalizer = A.Finalizer(body=_build_block(_trees(part)[0]), **_span(part))
	return A.TryStatement(block=_build_block(parts[0]), handler=handler, finalizer=finalizer, **_span(tree))


def _build_return(tree: Tree) -> A.ReturnStatement:
	parts = _trees(tree)
	return A.ReturnStatement(argument=build_expression(parts[0]) if parts else None, **_span(tree))


def _build_throw(tree: Tree) -> A.ThrowStatement:
	return A.ThrowStatement(argument=build_expression(_trees(tree)[0]), **_span(tree))


def _build_delete(tree: Tree) -> A.DeleteStatement:
	return A.DeleteStatement(argument=build_expression(_trees(tree)[0]), **_span(tree))


def _build_variable_declaration(tree: Tree) -> A.VariableDeclaration:
	keyword = _tokens(tree)[0]
	declarations = []
	for decl in _trees(tree):
		parts = _trees(decl)
		declarations.append(
			A.VariableDeclarator(
				id=_build_identifier(parts[0]),
				init=build_expression(parts[1]) if len(parts) > 1 else None,
				**_span(decl),
			)
		)
	return A.VariableDeclaration(
		kind="static" if keyword.type == "STATIC" else "var",
		declarations=declarations,
		**_span(tree),
	)


def _build_global_var(tree: Tree) -> A.GlobalVarStatement:
	declarations = [A.VariableDeclarator(id=_build_identifier(part), **_span(part)) for part in _trees(tree)]
	return A.GlobalVarStatement(declarations=declarations, **_span(tree))


def _build_enum(tree: Tree) -> A.EnumDeclaration:
	parts = _items(tree)
	members = []
	for member in parts[1:]:
		inner = _trees(member)
		members.append(
			A.EnumMember(
				name=_build_identifier(inner[0]),
				initializer=build_expression(inner[1]) if len(inner) > 1 else None,
				**_span(member),
			)
		)
	return A.EnumDeclaration(
		name=_build_identifier(parts[0]),
		members=members,
		has_trailing_comma=_has_trailing_comma(tree),
		**_span(tree),
	)


def _build_macro(tree: Tree) -> A.MacroDeclaration:
	tok = _tokens(tree)[0]
	match = _MACRO.match(tok.value)
	if match is None:
		raise _error_at(tok, "#macro requires a name")
	config, name = match.group(1), match.group(2)
	name_at = match.start(2)
	ident = A.Identifier(
		name=name,
		start=_location_in(tok, name_at),
		end=_location_in(tok, name_at + len(name)),
	)
	return A.MacroDeclaration(name=ident, body=tok.value[match.end():], config=config, **_span(tree))


def _build_region(tree: Tree) -> A.Node:
	tok = _tokens(tree)[0]
	match = _REGION.match(tok.value)
	name = match.group(1).strip() if match else ""
	cls = A.EndRegionStatement if _name(tree) == "endregion_statement" else A.RegionStatement
	return cls(name=name or None, **_span(tree))


def _build_define(tree: Tree) -> A.DefineStatement:
	tok = _tokens(tree)[0]
	match = _DEFINE.match(tok.value)
	if match is None:
		raise _error_at(tok, "#define requires a name")
	return A.DefineStatement(name=match.group(1), **_span(tree))


def _require_assignable(node: A.Node, tree: Tree) -> A.Node:
	"""Assignment and update targets must be a name or end in an index/dot access."""
	if isinstance(node, (A.Identifier, A.MemberExpression)):
		return node
	if isinstance(node, A.CallExpression):
		raise _error_at(tree, "invalid assignment target: a call result cannot be assigned to")
	raise _error_at(tree, f"invalid assignment target: {node.type}")


def _build_assignment(tree: Tree) -> A.AssignmentStatement:
	target, value = _trees(tree)
	operator = _tokens(tree)[0].value
	return A.AssignmentStatement(
		operator="=" if operator == ":=" else operator,
		left=_require_assignable(build_expression(target), target),
		right=build_expression(value),
		**_span(tree),
	)


def _build_prefix_update_statement(tree: Tree) -> A.ExpressionStatement:
	target = _trees(tree)[0]
	update = A.PrefixUpdateExpression(
		operator=_tokens(tree)[0].value,
		argument=_require_assignable(build_expression(target), target),
		**_span(tree),
	)
	return A.ExpressionStatement(expression=update, **_span(tree))


def _build_postfix_update_statement(tree: Tree) -> A.ExpressionStatement:
	target = _trees(tree)[0]
	update = A.PostfixUpdateExpression(
		operator=_tokens(tree)[0].value,
		argument=_require_assignable(build_expression(target), target),
		**_span(tree),
	)
	return A.ExpressionStatement(expression=update, **_span(tree))


def _build_expression_statement(tree: Tree) -> A.Node:
	node = build_expression(_trees(tree)[0])
	if isinstance(node, (A.FunctionDeclaration, A.ConstructorDeclaration)) and node.id is not None:
		return node
	return A.ExpressionStatement(expression=node, **_span(tree))


_STATEMENT_BUILDERS: dict[str, Callable[[Tree], Optional[A.Node]]] = {
	"empty_statement": lambda tree: None,
	"block": _build_block,
	"if_statement": _build_if,
	"while_statement": _build_while,
	"do_until_statement": _build_do_until,
	"repeat_statement": _build_repeat,
	"with_statement": _build_with,
	"for_statement": _build_for,
	"switch_statement": _build_switch,
	"try_statement": _build_try,
	"return_statement": _build_return,
	"exit_statement": lambda tree: A.ExitStatement(**_span(tree)),
	"break_statement": lambda tree: A.BreakStatement(**_span(tree)),
	"continue_statement": lambda tree: A.ContinueStatement(**_span(tree)),
	"throw_statement": _build_throw,
	"delete_statement": _build_delete,
	"variable_declaration": _build_variable_declaration,
	"global_var_statement": _build_global_var,
	"enum_declaration": _build_enum,
	"macro_statement": _build_macro,
	"region_statement": _build_region,
	"endregion_statement": _build_region,
	"define_statement": _build_define,
	"assignment": _build_assignment,
	"prefix_update_statement": _build_prefix_update_statement,
	"postfix_update_statement": _build_postfix_update_statement,
	"expression_statement": _build_expression_statement,
}


# --------------------------------------------------------------- expressions


def build_expression(tree: Tree) -> A.Node:
	kind = _name(tree)
	builder = _EXPRESSION_BUILDERS.get(kind)
	if builder is None:
		raise InternalInvariantViolation(f"no expression builder for rule '{kind}'")
	with _nested(kind):
		return builder(tree)


def _build_identifier(tree: Tree) -> A.Identifier:
	tok = _tokens(tree)[0]
	return A.Identifier(name=tok.value, **_span(tree))


def _build_literal(tree: Tree) -> A.Literal:
	tok = _tokens(tree)[0]
	return A.Literal(value=tok.value, literal_kind=_LITERAL_KINDS[tok.type], **_span(tree))


def _build_arguments(tree: Tree) -> tuple[List[A.Node], bool]:
	"""
	Arguments of a call, keeping elided ones as placeholders.

	`f()` has no arguments. Otherwise every comma-separated slot counts, so
	`f(,, x)` has three arguments and `f(a,)` has two (the trailing empty slot
	is a placeholder and `has_trailing_comma` is set).
	"""
	slots = [c for c in tree.children if isinstance(c, Tree) and _name(c) == "argument_slot"]
	if len(slots) == 1 and not _trees(slots[0]):
		return [], False
	args: List[A.Node] = []
	for slot in slots:
		inner = _trees(slot)
		if inner:
			args.append(build_expression(inner[0]))
		else:
			args.append(A.MissingOptionalArgument(**_span(slot)))
	return args, not _trees(slots[-1])


def _build_call(tree: Tree) -> A.CallExpression:
	callee, arguments = _trees(tree)
	args, trailing = _build_arguments(arguments)
	return A.CallExpression(callee=build_expression(callee), arguments=args, has_trailing_comma=trailing, **_span(tree))


def _build_index(tree: Tree) -> A.MemberExpression:
	target, suffix = _trees(tree)
	accessor = _tokens(suffix)[0].value
	return A.MemberExpression(
		object=build_expression(target),
		accessor=accessor,
		property=[build_expression(part) for part in _trees(suffix)],
		**_span(tree),
	)


def _build_dot(tree: Tree) -> A.MemberExpression:
	target, member = _trees(tree)
	return A.MemberExpression(
		object=build_expression(target),
		accessor=".",
		property=[_build_identifier(member)],
		**_span(tree),
	)


def _build_new(tree: Tree) -> A.NewExpression:
	callee, arguments = _trees(tree)
	args, _trailing = _build_arguments(arguments)
	return A.NewExpression(callee=_build_identifier(callee), arguments=args, **_span(tree))


def _build_binary(tree: Tree) -> A.BinaryExpression:
	left, op, right = tree.children
	operator = op.value
	if op.type == "ASSIGN":
		operator = "=="
	return A.BinaryExpression(
		operator=_OPERATOR_SPELLINGS.get(operator, operator),
		left=build_expression(left),
		right=build_expression(right),
		**_span(tree),
	)


def _build_unary(tree: Tree) -> A.UnaryExpression:
	op, operand = tree.children
	return A.UnaryExpression(
		operator=_OPERATOR_SPELLINGS.get(op.value, op.value),
		argument=build_expression(operand),
		**_span(tree),
	)


def _build_prefix_update(tree: Tree) -> A.PrefixUpdateExpression:
	op, operand = tree.children
	return A.PrefixUpdateExpression(operator=op.value, argument=build_expression(operand), **_span(tree))


def _build_postfix_update(tree: Tree) -> A.PostfixUpdateExpression:
	operand, op = tree.children
	return A.PostfixUpdateExpression(operator=op.value, argument=build_expression(operand), **_span(tree))


def _build_ternary(tree: Tree) -> A.TernaryExpression:
	test, consequent, alternate = _trees(tree)
	return A.TernaryExpression(
		test=build_expression(test),
		consequent=build_expression(consequent),
		alternate=build_expression(alternate),
		**_span(tree),
	)


def _build_parenthesized(tree: Tree) -> A.ParenthesizedExpression:
	return A.ParenthesizedExpression(expression=build_expression(_trees(tree)[0]), **_span(tree))


def _build_array(tree: Tree) -> A.ArrayExpression:
	return A.ArrayExpression(
		elements=[build_expression(part) for part in _items(tree)],
		has_trailing_comma=_has_trailing_comma(tree),
		**_span(tree),
	)


def _build_struct(tree: Tree) -> A.StructExpression:
	properties = []
	for prop in _items(tree):
		key, value = _trees(prop)
		name = _build_identifier(key) if _name(key) == "identifier" else _build_literal(key)
		properties.append(A.Property(name=name, value=build_expression(value), **_span(prop)))
	return A.StructExpression(properties=properties, has_trailing_comma=_has_trailing_comma(tree), **_span(tree))


def _build_function(tree: Tree) -> A.Node:
	ident: Optional[A.Identifier] = None
	params: List[A.Node] = []
	trailing = False
	clause: Optional[Tree] = None
	body: Optional[A.BlockStatement] = None
	for part in _trees(tree):
		kind = _name(part)
		if kind == "identifier":
			ident = _build_identifier(part)
		elif kind == "parameter_list":
			params = [_build_parameter(p) for p in _items(part)]
			trailing = _has_trailing_comma(part)
		elif kind == "constructor_clause":
			clause = part
		elif kind == "block":
			body = _build_block(part)
	assert body is not None

	if clause is None:
		return A.FunctionDeclaration(id=ident, params=params, body=body, has_trailing_comma=trailing, **_span(tree))

	parent: Optional[A.ConstructorParentClause] = None
	inner = _trees(clause)
	if inner:
		args, has_trailing = _build_arguments(inner[1])
		parent = A.ConstructorParentClause(
			id=_build_identifier(inner[0]),
			arguments=args,
			has_trailing_comma=has_trailing,
			**_span(clause),
		)
	return A.ConstructorDeclaration(
		id=ident,
		params=params,
		parent=parent,
		body=body,
		has_trailing_comma=trailing,
		**_span(tree),
	)


def _build_parameter(tree: Tree) -> A.Node:
	parts = _trees(tree)
	ident = _build_identifier(parts[0])
	if len(parts) == 1:
		return ident
	return A.DefaultParameter(left=ident, right=build_expression(parts[1]), **_span(tree))


# ---------------------------------------------------------- template strings


def _location_in(tok: LarkToken, rel: int) -> Location:
	"""Location of the character `rel` places into `tok`'s text."""
	before = tok.value[:rel]
	breaks = count_line_breaks(before)
	if not breaks:
		return Location(line=tok.line, column=tok.column + rel, index=tok.start_pos + rel)
	last = max(before.rfind("\n"), before.rfind("\r"))
	return Location(line=tok.line + breaks, column=rel - last, index=tok.start_pos + rel)


def _build_template(tree: Tree) -> A.TemplateStringExpression:
	tok = _tokens(tree)[0]
	text = tok.value
	body_start, body_end = 2, len(text) - 1  # inside `$"` ... `"`
	atoms: List[A.Node] = []
	seg_start = body_start
	i = body_start

	def flush(upto: int) -> None:
		if upto > seg_start:
			atoms.append(
				A.TemplateStringText(
					value=text[seg_start:upto],
					start=_location_in(tok, seg_start),
					end=_location_in(tok, upto),
				)
			)

	while i < body_end:
		ch = text[i]
		if ch == "\\":
			i += 2
			continue
		if ch != "{":
			i += 1
			continue
		flush(i)
		close = template_hole_end(text, i)
		if close is None:
			raise _error_at(tok, "unterminated template string hole")
		atoms.append(_parse_hole(tok, i + 1, close - 1))
		i = close
		seg_start = i
	flush(body_end)
	return A.TemplateStringExpression(atoms=atoms, **_span(tree))


def _parse_hole(tok: LarkToken, rel_start: int, rel_end: int) -> A.Node:
	"""Parse the expression in `tok.value[rel_start:rel_end]` at its true source position."""
	hole = tok.value[rel_start:rel_end]
	shifted: List[Token] = []
	for inner in tokenize(hole):
		if inner.channel != CODE:
			continue
		loc = _location_in(tok, rel_start + inner.start)
		shifted.append(
			Token(
				kind=inner.kind,
				text=inner.text,
				start=loc.index,
				end=loc.index + len(inner.text),
				line=loc.line,
				column=loc.column,
			)
		)
	if not shifted:
		raise _error_at(tok, "empty template string hole")
	return build_expression(parse_tokens(shifted, start="expression"))


_EXPRESSION_BUILDERS: dict[str, Callable[[Tree], A.Node]] = {
	"identifier": _build_identifier,
	"literal": _build_literal,
	"template_string": _build_template,
	"array_literal": _build_array,
	"struct_literal": _build_struct,
	"function_declaration": _build_function,
	"new_expression": _build_new,
	"parenthesized_expression": _build_parenthesized,
	"call_expression": _build_call,
	"index_expression": _build_index,
	"dot_expression": _build_dot,
	"binary_expression": _build_binary,
	"unary_expression": _build_unary,
	"prefix_update_expression": _build_prefix_update,
	"postfix_update_expression": _build_postfix_update,
	"ternary_expression": _build_ternary,
}


__all__ = ["build_program", "build_statement", "build_expression"]
