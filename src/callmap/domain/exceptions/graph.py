"""Graph model contract violations.

These signal programming errors inside callmap, not user errors.
They are never caught by the library.
"""

from callmap.domain.exceptions.base import CallMapError


class UnknownCallableError(CallMapError):
    """An edge or implementation link references an unregistered identity.

    Attributes:
        node_id: Identity that was never registered
        role: Where it was referenced (e.g. "callee", "declaration")
    """

    def __init__(self, node_id: int, role: str) -> None:
        if not role:
            raise ValueError("role must not be empty")

        self.node_id = node_id
        self.role = role
        super().__init__(f"{role} {node_id} is not a registered callable")


class GraphNotExpandedError(CallMapError):
    """Graph used for export while raw dispatch edges are still present.

    Attributes:
        pending: Number of unexpanded dispatch edges
    """

    def __init__(self, pending: int) -> None:
        if pending < 1:
            raise ValueError(f"pending must be >= 1, got {pending}")

        self.pending = pending
        super().__init__(
            f"graph has {pending} unexpanded dispatch call(s); run expand_dispatch_calls() first"
        )
