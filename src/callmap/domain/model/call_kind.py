"""Call kind enum for exported edges."""

from enum import Enum, auto


class CallKind(Enum):
    """Whether a call certainly happens or only might happen.

    DEFINITE:
        Statically resolved call. The callee is known at analysis time.
        Example: `helper()`, `Circle().area()`

    POTENTIAL:
        One of the possible receivers of a dynamically dispatched call.
        Produced by expanding a call to an interface method declaration.
        Example: `shape.area()` where `shape: Shape` and Shape is a Protocol
    """

    DEFINITE = auto()
    POTENTIAL = auto()
