"""Base dumper class for textual graph output.

Concrete dumpers inherit from this.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from callmap.domain.model.call_graph import FrozenCallGraph


class BaseDumper(ABC):
    """Base class for dumpers writing a finalized graph.

    Concrete dumpers must implement the dump() method.

    Example:
        class CountDumper(BaseDumper):
            def dump(self, graph: FrozenCallGraph) -> None:
                print(f"Edges: {graph.edge_count}")
    """

    @abstractmethod
    def dump(self, graph: FrozenCallGraph) -> None:
        """Write the graph.

        Implementation decides output format and destination.

        Args:
            graph: Finalized graph (dispatch calls already expanded)
        """


def edge_lines(graph: FrozenCallGraph, pairs: frozenset[tuple[int, int]]) -> list[str]:
    """Render pairs as sorted `caller -> callee` lines."""
    return sorted(f"{graph.name_of(caller)} -> {graph.name_of(callee)}" for caller, callee in pairs)
