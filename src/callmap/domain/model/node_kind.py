"""Classification of syntax nodes by the semantic query layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class FunctionDefinition:
    """A free function with a body (module level or nested in a function).

    Attributes:
        node_id: Identity of the definition node
        qualified_name: Display name (module.outer.<locals>.inner)
    """

    node_id: int
    qualified_name: str

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.qualified_name:
            raise ValueError("qualified_name must not be empty")


@dataclass(frozen=True, slots=True)
class MethodDeclaration:
    """A method of an interface class (Protocol / ABC).

    Attributes:
        node_id: Identity of the declaration node
        qualified_name: Display name (module.Interface.method)
        has_default_body: True if the body is more than a stub,
            making the declaration also a callable that implements itself
    """

    node_id: int
    qualified_name: str
    has_default_body: bool

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.qualified_name:
            raise ValueError("qualified_name must not be empty")


@dataclass(frozen=True, slots=True)
class MethodImplementation:
    """A concrete method of a non-interface class.

    Attributes:
        node_id: Identity of the method node
        qualified_name: Display name (module.Class.method)
        overridden_declaration_id: Locally defined declaration this method
            implements, None if it implements nothing local
    """

    node_id: int
    qualified_name: str
    overridden_declaration_id: int | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.qualified_name:
            raise ValueError("qualified_name must not be empty")
        if self.overridden_declaration_id == self.node_id:
            raise ValueError("implementation cannot override itself")


@dataclass(frozen=True, slots=True)
class OtherNode:
    """Any node that is not a callable definition."""


OTHER: Final = OtherNode()

type NodeKind = FunctionDefinition | MethodDeclaration | MethodImplementation | OtherNode
