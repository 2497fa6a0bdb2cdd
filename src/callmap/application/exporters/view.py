"""Node/edge view of a finalized graph for diagram renderers.

Nodes are callable identities labelled by qualified name.
Edges are definite and potential calls tagged by CallKind.
Every edge endpoint is a node: FrozenCallGraph validates this on creation.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from callmap.domain.model.call_kind import CallKind

if TYPE_CHECKING:
    from callmap.domain.model.call_edge import CallEdge
    from callmap.domain.model.call_graph import FrozenCallGraph

_NON_IDENTIFIER = re.compile(r"\W")

_EDGE_STYLES = {
    CallKind.DEFINITE: "solid",
    CallKind.POTENTIAL: "dashed",
}


class CallGraphView:
    """Read-only adapter: ids, labels and styles for diagram output."""

    def __init__(self, graph: FrozenCallGraph) -> None:
        if graph is None:
            raise TypeError("graph must not be None")

        self._graph = graph

    @property
    def graph_id(self) -> str:
        """Diagram identifier derived from the unit name."""
        return f"Callgraph_for_{_NON_IDENTIFIER.sub('_', self._graph.name)}"

    def nodes(self) -> tuple[int, ...]:
        return tuple(sorted(self._graph.functions))

    def edges(self) -> tuple[CallEdge, ...]:
        return self._graph.edges

    def source(self, edge: CallEdge) -> int:
        return edge.caller_id

    def target(self, edge: CallEdge) -> int:
        return edge.callee_id

    def node_id(self, node: int) -> str:
        return f"n_{node}"

    def node_label(self, node: int) -> str:
        return self._graph.name_of(node)

    def edge_style(self, edge: CallEdge) -> str:
        """Solid for definite calls, dashed for potential ones."""
        return _EDGE_STYLES[edge.kind]
