"""Domain model: value objects and the call graph."""

from callmap.domain.model.call_edge import CallEdge
from callmap.domain.model.call_graph import CallGraphModel, FrozenCallGraph
from callmap.domain.model.call_kind import CallKind
from callmap.domain.model.call_target import CallTarget, DispatchTarget, ResolvedTarget
from callmap.domain.model.compilation_unit import CompilationUnit, SourceModule
from callmap.domain.model.configuration import AnalysisConfig
from callmap.domain.model.location import Location
from callmap.domain.model.node_kind import (
    OTHER,
    FunctionDefinition,
    MethodDeclaration,
    MethodImplementation,
    NodeKind,
    OtherNode,
)
from callmap.domain.model.orphan_call import OrphanCall

__all__ = [
    "OTHER",
    "AnalysisConfig",
    "CallEdge",
    "CallGraphModel",
    "CallKind",
    "CallTarget",
    "CompilationUnit",
    "DispatchTarget",
    "FrozenCallGraph",
    "FunctionDefinition",
    "Location",
    "MethodDeclaration",
    "MethodImplementation",
    "NodeKind",
    "OrphanCall",
    "OtherNode",
    "ResolvedTarget",
    "SourceModule",
]
