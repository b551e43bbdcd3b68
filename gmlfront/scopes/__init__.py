"""Lexical scopes and identifier occurrence metadata."""

from gmlfront.scopes.annotate import ScopeAnnotator, annotate_scopes
from gmlfront.scopes.tracker import Declaration, IdentifierMetadata, Scope, ScopeTracker

__all__ = ["ScopeTracker", "Scope", "Declaration", "IdentifierMetadata", "ScopeAnnotator", "annotate_scopes"]
