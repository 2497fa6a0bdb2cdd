"""Resolution results for references to call targets."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    """Reference whose callee is known precisely.

    Attributes:
        callee_id: Identity of the callee definition
        is_local: True if the callee is defined inside the analyzed unit
    """

    callee_id: int
    is_local: bool


@dataclass(frozen=True, slots=True)
class DispatchTarget:
    """Reference where only the declared interface method is known.

    Attributes:
        declaration_id: Identity of the method declaration
        is_local: True if the declaration is defined inside the analyzed unit
    """

    declaration_id: int
    is_local: bool


type CallTarget = ResolvedTarget | DispatchTarget
