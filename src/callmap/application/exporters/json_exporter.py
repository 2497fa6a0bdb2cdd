"""JSON exporter: FrozenCallGraph → JSON string."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from callmap.domain.model.call_graph import FrozenCallGraph


class JsonExporter:
    """JSON exporter: outputs machine-readable JSON.

    Schema:
        name: unit name
        functions: {id: qualified name}
        method_decls: {id: qualified name}
        edges: [{caller, callee, kind}] with qualified names
        summary: counts
    """

    def __init__(self, *, indent: int | None = 2) -> None:
        """Initialize exporter.

        Args:
            indent: JSON indentation. None for compact output.
        """
        self._indent = indent

    def export(self, graph: FrozenCallGraph) -> str:
        """Format graph as JSON string.

        Args:
            graph: Finalized graph

        Returns:
            JSON string
        """
        data = {
            "name": graph.name,
            "functions": {str(k): v for k, v in sorted(graph.functions.items())},
            "method_decls": {str(k): v for k, v in sorted(graph.method_decls.items())},
            "edges": [
                {
                    "caller": graph.name_of(edge.caller_id),
                    "callee": graph.name_of(edge.callee_id),
                    "kind": edge.kind.name.lower(),
                }
                for edge in graph.edges
            ],
            "summary": {
                "functions": graph.function_count,
                "method_decls": len(graph.method_decls),
                "definite_calls": len(graph.definite_calls),
                "potential_calls": len(graph.potential_calls),
                "dropped_calls": len(graph.orphan_calls),
            },
        }
        return json.dumps(data, indent=self._indent)
