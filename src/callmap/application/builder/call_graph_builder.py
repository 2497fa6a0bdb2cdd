"""Call graph builder: one depth-first walk over the compilation unit.

Only definitions and references are interesting:
- FunctionDef / AsyncFunctionDef register callables and declarations
  and switch the traversal context for their body.
- Name / Attribute in load context are resolved and become edges.
Everything else is walked transparently to reach nested nodes.

Note that a call `foo()` is an expression whose callee is a reference to
`foo`, which can be any value. Since `handler = foo; handler()` should
produce an edge to `foo` and not to `handler`, references are tracked
rather than ast.Call nodes. A reference that is never invoked still
produces an edge (e.g. `handler = foo` alone); this over-approximation
is accepted.
"""

from __future__ import annotations

import ast
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from callmap.application.builder.context import TraversalContext
from callmap.domain.model.call_graph import CallGraphModel
from callmap.domain.model.call_target import DispatchTarget, ResolvedTarget
from callmap.domain.model.node_kind import (
    FunctionDefinition,
    MethodDeclaration,
    MethodImplementation,
)
from callmap.domain.model.orphan_call import OrphanCall

if TYPE_CHECKING:
    from callmap.domain.model.compilation_unit import CompilationUnit
    from callmap.domain.ports.semantic_query import SemanticQueryPort

type FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


class CallGraphBuilder:
    """Builds a raw CallGraphModel from a compilation unit.

    The result still holds unexpanded dispatch calls;
    run expand_dispatch_calls() on it before exporting.

    Stateless - no state between build() calls.
    """

    def __init__(self, query: SemanticQueryPort) -> None:
        """Initialize builder.

        Args:
            query: Semantic query facade for the unit being built

        Raises:
            TypeError: If query is None
        """
        if query is None:
            raise TypeError("query must not be None")

        self._query = query

    def build(self, unit: CompilationUnit) -> CallGraphModel:
        """Walk every module of the unit and record callables and calls.

        Args:
            unit: Parsed compilation unit

        Returns:
            Raw model (dispatch calls not yet expanded)

        Raises:
            TypeError: If unit is None (FAIL-FIRST)
        """
        if unit is None:
            raise TypeError("unit must not be None")

        walk = _Walk(self._query, CallGraphModel(name=unit.name))
        for module in unit.modules:
            if module.is_generated:
                logger.debug("skipping generated module {}", module.name)
                continue
            logger.debug("walking module {}", module.name)
            walk.visit(module.tree)

        model = walk.model
        logger.info(
            "built call graph for {}: {} functions, {} declarations, {} static calls, "
            "{} dispatch calls",
            unit.name,
            len(model.functions),
            len(model.method_decls),
            len(model.static_calls),
            len(model.dynamic_calls),
        )
        return model


@dataclass(slots=True)
class _Walk:
    """State of a single build() run."""

    query: SemanticQueryPort
    model: CallGraphModel
    context: TraversalContext = field(default_factory=TraversalContext)

    def visit(self, root: ast.AST) -> None:
        # Explicit stack: expressions may nest deeper than the recursion limit.
        # Only function definitions recurse, once per nesting level.
        stack = [root]
        while stack:
            node = stack.pop()
            if isinstance(node, ast.stmt | ast.expr) and self._is_generated(node):
                continue

            match node:
                case ast.FunctionDef() | ast.AsyncFunctionDef():
                    self._visit_definition(node)
                    continue
                case ast.Name(ctx=ast.Load()) | ast.Attribute(ctx=ast.Load()):
                    self._visit_reference(node)

            stack.extend(reversed(list(ast.iter_child_nodes(node))))

    def _walk_body(self, node: FunctionNode) -> None:
        for stmt in node.body:
            self.visit(stmt)

    def _visit_definition(self, node: FunctionNode) -> None:
        # Decorators, defaults and annotations run in the enclosing scope
        for child in _header_nodes(node):
            self.visit(child)

        match self.query.classify(node):
            case FunctionDefinition(node_id=node_id, qualified_name=name):
                self.model.add_function(node_id, name)
                with self.context.enter(node_id):
                    self._walk_body(node)

            case MethodDeclaration(node_id=node_id, qualified_name=name, has_default_body=False):
                self.model.add_method_decl(node_id, name)

            case MethodDeclaration(node_id=node_id, qualified_name=name, has_default_body=True):
                # Declaration, definition and reflexive implementation
                self.model.add_method_decl(node_id, name)
                self.model.add_function(node_id, name)
                self.model.append_method_impl(node_id, node_id)
                with self.context.enter(node_id):
                    self._walk_body(node)

            case MethodImplementation(
                node_id=node_id,
                qualified_name=name,
                overridden_declaration_id=decl_id,
            ):
                self.model.add_function(node_id, name)
                if decl_id is not None:
                    self.model.append_method_impl(decl_id, node_id)
                with self.context.enter(node_id):
                    self._walk_body(node)

            case _:
                self._walk_body(node)

    def _visit_reference(self, node: ast.Name | ast.Attribute) -> None:
        match self.query.resolve_call_reference(node):
            case ResolvedTarget(callee_id=callee_id, is_local=True):
                caller_id = self._require_context(node, callee_id)
                if caller_id is not None:
                    logger.debug("static call {} -> {}", caller_id, callee_id)
                    self.model.record_static_call(caller_id, callee_id)

            case DispatchTarget(declaration_id=decl_id, is_local=True):
                caller_id = self._require_context(node, decl_id)
                if caller_id is not None:
                    logger.debug("dispatch call {} -> {}", caller_id, decl_id)
                    self.model.record_dynamic_call(caller_id, decl_id)

            case _:
                # External target or not a callable at all
                pass

    def _require_context(self, node: ast.AST, target_id: int) -> int | None:
        """Current callable, or None after reporting a call outside any callable."""
        if self.context.current is None:
            location = self.query.location_of(node)
            logger.warning("call at {} without known current function", location)
            self.model.record_orphan_call(OrphanCall(location=location, target_id=target_id))
        return self.context.current

    def _is_generated(self, node: ast.stmt | ast.expr) -> bool:
        return self.query.is_generated_code(self.query.location_of(node))


def _header_nodes(node: FunctionNode) -> Iterator[ast.AST]:
    """Parts of a definition evaluated outside its body."""
    yield from node.decorator_list
    yield node.args
    if node.returns is not None:
        yield node.returns
    yield from node.type_params
