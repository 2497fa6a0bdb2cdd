"""Console dumper: FrozenCallGraph → rich formatted string."""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from callmap.application.exporters._base import edge_lines

if TYPE_CHECKING:
    from collections.abc import Mapping

    from callmap.domain.model.call_graph import FrozenCallGraph


class ConsoleDumper:
    """Console dumper: outputs rich formatted text.

    Output is str, not print(). Caller decides destination.
    """

    def __init__(self, *, width: int = 120, force_terminal: bool = True) -> None:
        """Initialize dumper.

        Args:
            width: Console width in columns
            force_terminal: Emit ANSI styles even when not writing to a tty
        """
        if width < 40:
            raise ValueError(f"width must be >= 40, got {width}")

        self._width = width
        self._force_terminal = force_terminal

    def dump(self, graph: FrozenCallGraph) -> str:
        """Format graph as rich formatted string.

        Args:
            graph: Finalized graph

        Returns:
            Formatted string with tables.
        """
        output = StringIO()
        console = Console(file=output, force_terminal=self._force_terminal, width=self._width)

        console.print()
        console.rule(f"[bold]CALL GRAPH[/bold] {graph.name}")
        console.print()
        console.print(
            f"[bold]Functions:[/bold] {graph.function_count}  "
            f"[bold]Declarations:[/bold] {len(graph.method_decls)}  "
            f"[bold]Calls:[/bold] {len(graph.definite_calls)}  "
            f"[bold]Potential:[/bold] {len(graph.potential_calls)}"
        )
        console.print()

        console.print(self._names_table("Functions", graph.functions))
        if graph.method_decls:
            console.print(self._names_table("Method declarations", graph.method_decls))

        self._render_edges(console, "Calls", edge_lines(graph, graph.definite_calls), "green")
        self._render_edges(
            console, "Potential calls", edge_lines(graph, graph.potential_calls), "yellow"
        )

        if graph.orphan_calls:
            console.print(
                f"[bold red]DROPPED[/bold red] {len(graph.orphan_calls)} call(s) outside any function"
            )
            for orphan in graph.orphan_calls:
                console.print(f"  {orphan}", markup=False, highlight=False)
            console.print()

        return output.getvalue()

    def _names_table(self, title: str, names: Mapping[int, str]) -> Table:
        """Build id → name table."""
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("Id", justify="right")
        table.add_column("Name")
        for node_id, name in sorted(names.items()):
            table.add_row(str(node_id), name)
        return table

    def _render_edges(self, console: Console, title: str, lines: list[str], color: str) -> None:
        """Render one edge section."""
        console.print(f"[bold]{title}[/bold] ({len(lines)})")
        for line in lines:
            console.print(f"  [{color}]{line}[/{color}]", highlight=False)
        console.print()
