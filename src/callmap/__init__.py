"""callmap - whole-program call graphs for Python with dispatch expansion."""

__version__ = "0.1.0"

from callmap.application.services.analyzer import CallGraphAnalyzer
from callmap.domain.model.call_graph import CallGraphModel, FrozenCallGraph
from callmap.domain.model.configuration import AnalysisConfig

__all__ = [
    "AnalysisConfig",
    "CallGraphAnalyzer",
    "CallGraphModel",
    "FrozenCallGraph",
    "__version__",
]
