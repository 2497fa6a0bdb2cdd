"""Call graph model: mutable collector and frozen snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from callmap.domain.exceptions.graph import GraphNotExpandedError, UnknownCallableError
from callmap.domain.model.call_edge import CallEdge
from callmap.domain.model.call_kind import CallKind
from callmap.domain.model.orphan_call import OrphanCall

type Pair = tuple[int, int]


@dataclass(frozen=True, slots=True)
class FrozenCallGraph:
    """Immutable, finalized call graph shared by all exporters.

    Created by CallGraphModel.freeze() after dispatch expansion.
    Every edge endpoint is a key of `functions`.

    Attributes:
        name: Name of the analyzed compilation unit
        functions: Callable identity → qualified name
        method_decls: Declaration identity → qualified name
        method_impls: Declaration identity → implementing callables
        definite_calls: Statically resolved (caller, callee) pairs
        potential_calls: Expanded dispatch (caller, callee) pairs
        orphan_calls: Calls dropped because no callable was active
    """

    name: str
    functions: Mapping[int, str]
    method_decls: Mapping[int, str]
    method_impls: Mapping[int, frozenset[int]]
    definite_calls: frozenset[Pair]
    potential_calls: frozenset[Pair]
    orphan_calls: tuple[OrphanCall, ...] = ()

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")

        for caller, callee in self.definite_calls | self.potential_calls:
            if caller not in self.functions:
                raise UnknownCallableError(caller, "caller")
            if callee not in self.functions:
                raise UnknownCallableError(callee, "callee")

        for decl, impls in self.method_impls.items():
            if decl not in self.method_decls:
                raise UnknownCallableError(decl, "declaration")
            for impl in impls:
                if impl not in self.functions:
                    raise UnknownCallableError(impl, "implementation")

    @property
    def edges(self) -> tuple[CallEdge, ...]:
        """All edges, definite first, each group sorted by identity."""
        definite = (CallEdge(a, b, CallKind.DEFINITE) for a, b in sorted(self.definite_calls))
        potential = (CallEdge(a, b, CallKind.POTENTIAL) for a, b in sorted(self.potential_calls))
        return (*definite, *potential)

    @property
    def edge_count(self) -> int:
        """Number of exported edges (a pair in both sets counts twice)."""
        return len(self.definite_calls) + len(self.potential_calls)

    @property
    def function_count(self) -> int:
        """Number of callables."""
        return len(self.functions)

    def name_of(self, node_id: int) -> str:
        """Qualified name of a callable.

        Raises:
            UnknownCallableError: If node_id is not a callable
        """
        try:
            return self.functions[node_id]
        except KeyError:
            raise UnknownCallableError(node_id, "callable") from None

    def get_edges_from(self, caller_id: int) -> tuple[CallEdge, ...]:
        """Get all edges leaving a callable."""
        return tuple(edge for edge in self.edges if edge.caller_id == caller_id)

    def get_edges_to(self, callee_id: int) -> tuple[CallEdge, ...]:
        """Get all edges entering a callable."""
        return tuple(edge for edge in self.edges if edge.callee_id == callee_id)

    def find(self, qualified_name: str) -> int | None:
        """Find callable identity by qualified name."""
        for node_id, name in self.functions.items():
            if name == qualified_name:
                return node_id
        return None

    @classmethod
    def empty(cls, name: str) -> FrozenCallGraph:
        """Create empty graph for a unit with no callables."""
        return cls(
            name=name,
            functions=MappingProxyType({}),
            method_decls=MappingProxyType({}),
            method_impls=MappingProxyType({}),
            definite_calls=frozenset(),
            potential_calls=frozenset(),
        )


@dataclass(slots=True)
class CallGraphModel:
    """Mutable call graph filled during traversal.

    Entities are write-once per identity. Edge sets have set semantics.
    `dynamic_calls` holds raw (caller, declaration) pairs until
    expand_dispatch_calls() moves their expansion into `potential_calls`.

    NOT frozen because it's a mutable collector.
    Call freeze() to get the immutable snapshot.
    """

    name: str
    functions: dict[int, str] = field(default_factory=dict)
    method_decls: dict[int, str] = field(default_factory=dict)
    method_impls: dict[int, list[int]] = field(default_factory=dict)
    static_calls: set[Pair] = field(default_factory=set)
    dynamic_calls: set[Pair] = field(default_factory=set)
    potential_calls: set[Pair] = field(default_factory=set)
    orphan_calls: list[OrphanCall] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")

    def add_function(self, node_id: int, qualified_name: str) -> None:
        """Register a callable.

        Raises:
            ValueError: If node_id is already registered under another name
        """
        _write_once(self.functions, node_id, qualified_name, "function")

    def add_method_decl(self, node_id: int, qualified_name: str) -> None:
        """Register a declaration with an (initially empty) implementer list."""
        _write_once(self.method_decls, node_id, qualified_name, "method declaration")
        self.method_impls.setdefault(node_id, [])

    def append_method_impl(self, decl_id: int, impl_id: int) -> None:
        """Record that impl_id implements decl_id. Order is not significant."""
        impls = self.method_impls.setdefault(decl_id, [])
        if impl_id not in impls:
            impls.append(impl_id)

    def record_static_call(self, caller_id: int, callee_id: int) -> None:
        """Record a statically resolved call."""
        self.static_calls.add((caller_id, callee_id))

    def record_dynamic_call(self, caller_id: int, decl_id: int) -> None:
        """Record a call dispatched through an interface declaration."""
        self.dynamic_calls.add((caller_id, decl_id))

    def record_orphan_call(self, orphan: OrphanCall) -> None:
        """Record a dropped call seen outside any callable."""
        self.orphan_calls.append(orphan)

    @property
    def is_expanded(self) -> bool:
        """True when no raw dispatch edges remain."""
        return not self.dynamic_calls

    def freeze(self) -> FrozenCallGraph:
        """Create immutable snapshot.

        Returns:
            FrozenCallGraph with validated endpoint closure

        Raises:
            GraphNotExpandedError: If raw dispatch edges remain
            UnknownCallableError: If an edge references an unregistered callable
        """
        if self.dynamic_calls:
            raise GraphNotExpandedError(len(self.dynamic_calls))

        return FrozenCallGraph(
            name=self.name,
            functions=MappingProxyType(dict(self.functions)),
            method_decls=MappingProxyType(dict(self.method_decls)),
            method_impls=MappingProxyType(
                {decl: frozenset(impls) for decl, impls in self.method_impls.items()}
            ),
            definite_calls=frozenset(self.static_calls),
            potential_calls=frozenset(self.potential_calls),
            orphan_calls=tuple(self.orphan_calls),
        )


def _write_once(table: dict[int, str], node_id: int, name: str, what: str) -> None:
    if not name:
        raise ValueError(f"{what} name must not be empty")
    existing = table.setdefault(node_id, name)
    if existing != name:
        raise ValueError(f"{what} {node_id} already registered as '{existing}', got '{name}'")
