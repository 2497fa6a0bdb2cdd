"""Call graph construction."""

from callmap.application.builder.call_graph_builder import CallGraphBuilder
from callmap.application.builder.context import TraversalContext

__all__ = ["CallGraphBuilder", "TraversalContext"]
