"""Dispatch expansion: calls to a declaration become calls to its implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from callmap.domain.exceptions.graph import UnknownCallableError

if TYPE_CHECKING:
    from callmap.domain.model.call_graph import CallGraphModel


def expand_dispatch_calls(model: CallGraphModel) -> None:
    """Replace raw dispatch calls with one potential call per implementation.

    Runs once, after traversal and before any export. Mutates model in place:
    each (caller, declaration) pair in `dynamic_calls` yields
    (caller, implementation) pairs in `potential_calls`, then
    `dynamic_calls` is cleared. A declaration without implementations
    yields nothing. A second run finds no raw calls and changes nothing.

    Args:
        model: Model produced by CallGraphBuilder

    Raises:
        UnknownCallableError: If a dispatch call targets an unregistered declaration
    """
    if model is None:
        raise TypeError("model must not be None")

    expanded: set[tuple[int, int]] = set()
    for caller_id, decl_id in model.dynamic_calls:
        if decl_id not in model.method_impls:
            raise UnknownCallableError(decl_id, "declaration")
        for impl_id in model.method_impls[decl_id]:
            expanded.add((caller_id, impl_id))

    if model.dynamic_calls:
        logger.debug(
            "expanded {} dispatch calls into {} potential calls",
            len(model.dynamic_calls),
            len(expanded),
        )

    model.potential_calls |= expanded
    model.dynamic_calls.clear()
