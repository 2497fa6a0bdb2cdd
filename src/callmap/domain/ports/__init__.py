"""Domain ports (interfaces implemented by infrastructure)."""

from callmap.domain.ports.semantic_query import SemanticQueryPort

__all__ = ["SemanticQueryPort"]
