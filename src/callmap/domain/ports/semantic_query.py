"""Semantic query port (interface).

The call graph builder never inspects names, scopes or types itself.
It asks this port what a node is and what a reference resolves to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import ast

    from callmap.domain.model.call_target import CallTarget
    from callmap.domain.model.location import Location
    from callmap.domain.model.node_kind import NodeKind


class SemanticQueryPort(ABC):
    """Port for semantic queries over a compilation unit.

    Infrastructure layer must provide implementation.
    """

    @abstractmethod
    def classify(self, node: ast.AST) -> NodeKind:
        """Tell what kind of construct a node is.

        Args:
            node: Syntax node of the unit

        Returns:
            FunctionDefinition, MethodDeclaration, MethodImplementation or OTHER
        """
        ...

    @abstractmethod
    def resolve_call_reference(self, node: ast.AST) -> CallTarget | None:
        """Resolve a reference (name or attribute) to its call target.

        Args:
            node: Reference node in load context

        Returns:
            ResolvedTarget when the callee is known precisely,
            DispatchTarget when only the interface declaration is known,
            None when the reference does not denote a callable
        """
        ...

    @abstractmethod
    def is_generated_code(self, location: Location | None) -> bool:
        """Check whether a source position belongs to generated code.

        Args:
            location: Position of a node, None if the node has none

        Returns:
            True if the position must be ignored by the analysis
        """
        ...

    @abstractmethod
    def location_of(self, node: ast.AST) -> Location | None:
        """Source position of a node.

        None for node kinds that never carry a position (module, operators).

        Raises:
            ASTError: If a positioned node kind has no line info
        """
        ...
