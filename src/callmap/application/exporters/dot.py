"""Graphviz DOT renderer for finalized call graphs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import graphviz
from loguru import logger

from callmap.application.exporters.view import CallGraphView
from callmap.domain.exceptions.output import OutputWriteError

if TYPE_CHECKING:
    from pathlib import Path

    from callmap.domain.model.call_graph import FrozenCallGraph


class DotRenderer:
    """Builds a graphviz.Digraph from a CallGraphView and writes its source.

    Only the DOT source is written, so no Graphviz binary is needed.
    """

    def render(self, graph: FrozenCallGraph) -> graphviz.Digraph:
        """Build the diagram.

        Args:
            graph: Finalized graph

        Returns:
            Digraph with one node per callable and one edge per call
        """
        view = CallGraphView(graph)
        dot = graphviz.Digraph(name=view.graph_id)

        for node in view.nodes():
            dot.node(view.node_id(node), label=view.node_label(node))

        for edge in view.edges():
            dot.edge(
                view.node_id(view.source(edge)),
                view.node_id(view.target(edge)),
                style=view.edge_style(edge),
            )

        return dot

    def write(self, graph: FrozenCallGraph, path: Path) -> Path:
        """Render and write DOT source to path. No retry.

        Args:
            graph: Finalized graph
            path: Target file (overwritten)

        Returns:
            path

        Raises:
            OutputWriteError: If the file cannot be created or written
        """
        source = self.render(graph).source
        try:
            with path.open("w", encoding="utf-8") as file:
                file.write(source)
        except OSError as e:
            raise OutputWriteError(path, e.strerror or str(e)) from e

        logger.info("wrote diagram to {}", path)
        return path
