"""AST analyzers: scope indexing and semantic queries."""

from callmap.infrastructure.analyzers.base import (
    compute_module_name,
    has_decorator,
    is_stub_body,
    make_location,
    resolve_relative_import,
    shallow_walk,
)
from callmap.infrastructure.analyzers.scopes import ScopeIndex, ScopeIndexer
from callmap.infrastructure.analyzers.semantic_query import AstSemanticQuery

__all__ = [
    # Base utilities
    "compute_module_name",
    "has_decorator",
    "is_stub_body",
    "make_location",
    "resolve_relative_import",
    "shallow_walk",
    # Analyzers
    "AstSemanticQuery",
    "ScopeIndex",
    "ScopeIndexer",
]
