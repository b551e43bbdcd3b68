"""Lexical scanning of GML source text."""

from gmlfront.lexer.scanner import code_tokens, template_hole_end, tokenize
from gmlfront.lexer.tokens import Token, format_tokens

__all__ = ["Token", "tokenize", "code_tokens", "format_tokens", "template_hole_end"]
