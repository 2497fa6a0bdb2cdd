"""Analyzer service: orchestrates parsing, building and expansion.

Produces a FrozenCallGraph from a source path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from callmap.application.builder import CallGraphBuilder
from callmap.application.post_processor import expand_dispatch_calls
from callmap.domain.model.configuration import AnalysisConfig
from callmap.infrastructure.adapters.ast_parser import ASTSourceParser
from callmap.infrastructure.analyzers.semantic_query import AstSemanticQuery

if TYPE_CHECKING:
    from pathlib import Path

    from callmap.domain.model.call_graph import CallGraphModel, FrozenCallGraph
    from callmap.domain.model.compilation_unit import CompilationUnit


class CallGraphAnalyzer:
    """Runs the full pipeline for one compilation unit.

    Methods:
        analyze(): Parse path, then analyze_unit()
        analyze_unit(): Build, expand and freeze the graph of a parsed unit
        build_raw(): Build the graph without expanding dispatch calls
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self._config = config if config is not None else AnalysisConfig()

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def analyze(self, path: Path) -> FrozenCallGraph:
        """Analyze a file or package directory.

        Raises:
            ParsingError: If any source file cannot be read or parsed
        """
        unit = ASTSourceParser(self._config).parse(path)
        return self.analyze_unit(unit)

    def analyze_unit(self, unit: CompilationUnit) -> FrozenCallGraph:
        model = self.build_raw(unit)
        expand_dispatch_calls(model)
        graph = model.freeze()
        logger.info(
            "call graph for {}: {} functions, {} calls, {} potential calls",
            graph.name,
            graph.function_count,
            len(graph.definite_calls),
            len(graph.potential_calls),
        )
        return graph

    def build_raw(self, unit: CompilationUnit) -> CallGraphModel:
        query = AstSemanticQuery(unit, self._config)
        return CallGraphBuilder(query).build(unit)
