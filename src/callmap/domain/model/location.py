"""Position of a call reference in analyzed source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Container
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class Location:
    """Line and column of a node inside one module file.

    Attributes:
        file: Module file the node was parsed from
        line: 1-based line of the node
        column: 0-based column of the node
    """

    file: Path
    line: int
    column: int

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.file is None:
            raise TypeError("file must not be None")
        if self.line <= 0:
            raise ValueError(f"line must be > 0, got {self.line}")
        if self.column < 0:
            raise ValueError(f"column must be >= 0, got {self.column}")

    def is_within(self, files: Container[Path]) -> bool:
        """Check whether the node belongs to one of the given files."""
        return self.file in files

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
