"""Domain exceptions."""

from callmap.domain.exceptions.base import CallMapError
from callmap.domain.exceptions.graph import GraphNotExpandedError, UnknownCallableError
from callmap.domain.exceptions.output import OutputWriteError
from callmap.domain.exceptions.parsing import ASTError, ParsingError

__all__ = [
    "ASTError",
    "CallMapError",
    "GraphNotExpandedError",
    "OutputWriteError",
    "ParsingError",
    "UnknownCallableError",
]
