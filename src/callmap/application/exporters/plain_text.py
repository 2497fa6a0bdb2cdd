"""Plain text dumper using print().

Lists callables, declarations, then definite and potential calls.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from callmap.application.exporters._base import BaseDumper, edge_lines

if TYPE_CHECKING:
    from callmap.domain.model.call_graph import FrozenCallGraph


class PlainTextDumper(BaseDumper):
    """Plain text dumper using print().

    Outputs to stdout by default, can be configured for any TextIO.
    Entries are sorted so identical graphs give identical text.
    """

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize dumper.

        Args:
            output: Output stream (default: sys.stdout)
        """
        self._output = output if output is not None else sys.stdout

    def dump(self, graph: FrozenCallGraph) -> None:
        """Dump graph as plain text.

        Args:
            graph: Finalized graph
        """
        self._write("Found fns:")
        for node_id, name in sorted(graph.functions.items()):
            self._write(f"{node_id}: {name}")

        self._write()
        self._write("Found method decls:")
        for node_id, name in sorted(graph.method_decls.items()):
            self._write(f"{node_id}: {name}")

        self._write()
        self._write("Found calls:")
        for line in edge_lines(graph, graph.definite_calls):
            self._write(line)

        self._write()
        self._write("Found potential calls:")
        for line in edge_lines(graph, graph.potential_calls):
            self._write(line)

        if graph.orphan_calls:
            self._write()
            self._write(f"Dropped calls outside any function: {len(graph.orphan_calls)}")

    def _write(self, text: str = "") -> None:
        """Write line to output."""
        print(text, file=self._output)
