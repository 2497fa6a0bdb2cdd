"""Call edge as seen by exporters."""

from dataclasses import dataclass

from callmap.domain.model.call_kind import CallKind


@dataclass(frozen=True, slots=True)
class CallEdge:
    """Edge between two callables in a finalized graph.

    Attributes:
        caller_id: Identity of the calling callable
        callee_id: Identity of the called callable
        kind: DEFINITE for static calls, POTENTIAL for expanded dispatch
    """

    caller_id: int
    callee_id: int
    kind: CallKind
