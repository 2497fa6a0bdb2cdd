"""Errors raised while loading the compilation unit."""

from __future__ import annotations

from typing import TYPE_CHECKING

from callmap.domain.exceptions.base import CallMapError

if TYPE_CHECKING:
    from pathlib import Path


class ParsingError(CallMapError):
    """A module of the unit could not be read, decoded or parsed.

    Fatal: no partial graph is produced.

    Attributes:
        path: Offending file or directory
        reason: What went wrong
    """

    def __init__(self, path: Path, reason: str) -> None:
        # FAIL-FIRST: validate required parameters
        if path is None:
            raise TypeError("path must not be None")
        if not reason:
            raise ValueError("reason must be non-empty string")

        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class ASTError(ParsingError):
    """A node needed for a location carries no line information.

    Attributes:
        node_type: AST class name of the node
    """

    def __init__(self, path: Path, node_type: str) -> None:
        if not node_type:
            raise ValueError("node_type must be non-empty string")

        self.node_type = node_type
        super().__init__(path, f"{node_type} node has no line info")
