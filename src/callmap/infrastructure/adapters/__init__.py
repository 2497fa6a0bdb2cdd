"""Infrastructure adapters for external interfaces."""

from callmap.infrastructure.adapters.ast_parser import ASTSourceParser

__all__ = [
    "ASTSourceParser",
]
