"""Diagnostic record for calls observed outside any callable."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from callmap.domain.model.location import Location


@dataclass(frozen=True, slots=True)
class OrphanCall:
    """Call found while no enclosing callable was active. Dropped from graph.

    Attributes:
        location: Where the call reference appears (None if unknown)
        target_id: Identity the reference resolved to
    """

    location: Location | None
    target_id: int

    def __str__(self) -> str:
        """Format as location -> target id."""
        where = str(self.location) if self.location is not None else "<unknown>"
        return f"{where} -> {self.target_id}"
