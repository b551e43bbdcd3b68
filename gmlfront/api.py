# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parsing pipeline.

text -> tokens -> lark tree -> AST -> node ids -> comments -> scopes ->
location/output shaping. Every call builds its own state; the only shared
objects are the compiled parser and the identifier table, both read-only
after first use.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from gmlfront.comments.attach import attach_comments
from gmlfront.core.errors import GMLSyntaxError, LexicalError
from gmlfront.core.options import ParserOptions
from gmlfront.lexer.scanner import code_tokens, tokenize
from gmlfront.lexer.tokens import Token
from gmlfront.parser import ast as A
from gmlfront.parser.builder import build_program
from gmlfront.parser.parser import parse_tokens
from gmlfront.parser.serialize import simplify_locations, strip_locations, to_dict, to_estree
from gmlfront.scopes.annotate import annotate_scopes
from gmlfront.scopes.tracker import ScopeTracker
from gmlfront.traversal.index import NodeIndex

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
	program: A.Program
	tokens: List[Token]
	index: NodeIndex
	scopes: Optional[ScopeTracker] = None


def analyze(source: str, options: Optional[ParserOptions] = None, **overrides: Any) -> ParseResult:
	"""
	Run the pipeline and keep its intermediate products.

	Output-shaping options (`ast_format`, `as_json`) and `suppress_errors` are
	ignored here; errors always propagate.
	"""
	opts = (options or ParserOptions()).replace(**overrides)
	tokens = tokenize(source)
	tree = parse_tokens(code_tokens(tokens))
	program = build_program(tree, source, max_depth=opts.max_depth)
	index = NodeIndex.build(program)

	if opts.get_comments:
		attach_comments(program, tokens, paragraph_break_threshold=opts.paragraph_break_threshold)
	scopes = None
	if opts.get_identifier_metadata:
		scopes = annotate_scopes(program, max_depth=opts.max_depth)

	if not opts.get_locations:
		strip_locations(program, max_depth=opts.max_depth)
	elif opts.simplify_locations:
		simplify_locations(program, max_depth=opts.max_depth)
	return ParseResult(program=program, tokens=tokens, index=index, scopes=scopes)


def parse(
	source: str, options: Optional[ParserOptions] = None, **overrides: Any
) -> Union[A.Program, dict, str, None]:
	"""
	Parse GML source text.

	Returns a `Program`, an ESTree-shaped dict (`ast_format="estree"`) or a
	JSON string (`as_json=True`). With `suppress_errors=True` lexical and
	syntax errors yield `None` instead of raising.
	"""
	opts = (options or ParserOptions()).replace(**overrides)
	try:
		program = analyze(source, opts).program
	except (LexicalError, GMLSyntaxError) as err:
		if not opts.suppress_errors:
			raise
		logger.debug("suppressed %s: %s", type(err).__name__, err)
		return None

	if opts.ast_format == "estree":
		data = to_estree(program)
		return json.dumps(data) if opts.as_json else data
	if opts.as_json:
		return json.dumps(to_dict(program))
	return program


__all__ = ["parse", "analyze", "ParseResult"]
