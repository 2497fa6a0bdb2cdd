"""Application services for call graph analysis.

CallGraphAnalyzer is the main facade for building a call graph.
"""

from callmap.application.services.analyzer import CallGraphAnalyzer

__all__ = [
    "CallGraphAnalyzer",
]
