"""AST semantic query: classification and reference resolution.

Answers the questions the call graph builder asks, from a ScopeIndex
built once per compilation unit. Resolution is deliberately shallow:
only what can be known from names, imports, annotations, constructor
assignments and local class hierarchies is used. Anything else resolves
to nothing rather than to a guess.
"""

from __future__ import annotations

import ast
import builtins
from typing import TYPE_CHECKING

from loguru import logger

from callmap.domain.model.call_target import CallTarget, DispatchTarget, ResolvedTarget
from callmap.domain.model.node_kind import (
    OTHER,
    FunctionDefinition,
    MethodDeclaration,
    MethodImplementation,
    NodeKind,
)
from callmap.domain.ports.semantic_query import SemanticQueryPort
from callmap.infrastructure.analyzers.base import base_expression, make_location
from callmap.infrastructure.analyzers.scopes import (
    UNKNOWN,
    AnnotationRef,
    Binding,
    ClassInfo,
    ClassRef,
    ConstructedRef,
    ExternalRef,
    FunctionInfo,
    FunctionRef,
    ImportRef,
    InstanceRef,
    ModuleRef,
    Scope,
    ScopeIndexer,
)

if TYPE_CHECKING:
    from pathlib import Path

    from callmap.domain.model.compilation_unit import CompilationUnit
    from callmap.domain.model.configuration import AnalysisConfig
    from callmap.domain.model.location import Location

# Marks a lazy binding whose resolution is in progress (import cycles)
_IN_PROGRESS = object()


class AstSemanticQuery(SemanticQueryPort):
    """SemanticQueryPort over Python syntax trees.

    Indexes the whole unit on construction; queries are then read-only
    apart from memoized lazy bindings and external identities.
    """

    def __init__(self, unit: CompilationUnit, config: AnalysisConfig) -> None:
        """Index the unit.

        Args:
            unit: Parsed compilation unit
            config: Analysis configuration (interface markers)

        Raises:
            TypeError: If unit or config is None
        """
        if unit is None:
            raise TypeError("unit must not be None")
        if config is None:
            raise TypeError("config must not be None")

        self._unit = unit
        self._config = config
        self._index = ScopeIndexer().index(unit)
        self._module_names = unit.module_names
        self._generated_paths: frozenset[Path] = frozenset(
            module.path for module in unit.modules if module.is_generated
        )
        self._settled: dict[Binding, object] = {}
        self._prepare_classes()

    # =========================================================================
    # PORT
    # =========================================================================

    def classify(self, node: ast.AST) -> NodeKind:
        info = self._index.functions.get(node)
        if info is None:
            return OTHER

        node_id = self._unit.node_id(info.node)
        owner = info.owner
        if owner is None:
            return FunctionDefinition(node_id=node_id, qualified_name=info.qualified_name)

        if owner.is_interface:
            return MethodDeclaration(
                node_id=node_id,
                qualified_name=info.qualified_name,
                has_default_body=self._is_callable(info),
            )

        return MethodImplementation(
            node_id=node_id,
            qualified_name=info.qualified_name,
            overridden_declaration_id=self._overridden_declaration(info),
        )

    def resolve_call_reference(self, node: ast.AST) -> CallTarget | None:
        scope = self._index.reference_scopes.get(node)
        if scope is None:
            return None
        if node in self._index.member_bases:
            # Reading `g.__name__` or `g.cache_clear` does not call g
            return None

        invoked = node in self._index.invoked
        match node:
            case ast.Name():
                return self._target_of(self._value_of(node, scope), invoked)
            case ast.Attribute(value=ast.Call(func=ast.Name(id="super")), attr=attr):
                return self._resolve_super(attr, scope)
            case ast.Attribute(value=value, attr=attr):
                return self._resolve_member(self._value_of(value, scope), attr, invoked)
        return None

    def is_generated_code(self, location: Location | None) -> bool:
        if location is None:
            return False
        return location.is_within(self._generated_paths)

    def location_of(self, node: ast.AST) -> Location | None:
        if "lineno" not in type(node)._attributes:
            return None
        return make_location(node, self._unit.module_of(node).path)

    # =========================================================================
    # CLASSES
    # =========================================================================

    def _prepare_classes(self) -> None:
        """Resolve bases, interface flags and MRO of every class."""
        classes = list(self._index.classes.values())

        for info in classes:
            bases: list[ClassInfo] = []
            for expr in info.node.bases:
                base = base_expression(expr)
                marker = self._marker_of(base, info.outer)
                if marker is not None:
                    info.is_interface = True
                    info.is_protocol = info.is_protocol or marker in self._config.protocol_markers
                    continue
                match self._value_of(base, info.outer):
                    case ClassRef(info=base_info) if base_info is not info:
                        bases.append(base_info)
                    case _:
                        # Unresolvable base: ignored for MRO purposes
                        pass

            for keyword in info.node.keywords:
                if keyword.arg == "metaclass":
                    marker = self._marker_of(keyword.value, info.outer)
                    if marker in self._config.abc_markers:
                        info.is_interface = True

            info.bases = tuple(bases)

        computing: set[ClassInfo] = set()
        for info in classes:
            self._compute_mro(info, computing)

    def _marker_of(self, expr: ast.expr, scope: Scope) -> str | None:
        """Interface marker named by a base expression, if any."""
        markers = self._config.interface_markers
        dotted = _dotted_name(expr)
        if dotted is not None and dotted in markers:
            return dotted
        match self._value_of(expr, scope):
            case ExternalRef(fqn=fqn) if fqn in markers:
                return fqn
        return None

    def _compute_mro(self, info: ClassInfo, computing: set[ClassInfo]) -> tuple[ClassInfo, ...]:
        if info.mro:
            return info.mro
        if info in computing:
            logger.debug("cyclic class hierarchy at {}", info.qualified_name)
            return (info,)

        computing.add(info)
        base_mros = [list(self._compute_mro(base, computing)) for base in info.bases]
        computing.discard(info)

        merged = _c3_merge([*base_mros, list(info.bases)])
        if merged is None:
            logger.debug("inconsistent MRO for {}, using depth-first order", info.qualified_name)
            merged = []
            for base_mro in base_mros:
                merged.extend(cls for cls in base_mro if cls not in merged)

        info.mro = (info, *merged)
        return info.mro

    # =========================================================================
    # FUNCTIONS
    # =========================================================================

    def _is_callable(self, info: FunctionInfo) -> bool:
        """False for interface methods that only declare a signature."""
        owner = info.owner
        if owner is None or not owner.is_interface:
            return True
        return not (info.is_stub and (info.is_abstract or owner.is_protocol))

    def _overridden_declaration(self, info: FunctionInfo) -> int | None:
        """First local interface method of the same name up the MRO."""
        assert info.owner is not None
        name = info.node.name
        for cls in info.owner.mro[1:]:
            if not cls.is_interface or cls.module.is_generated:
                continue
            match cls.scope.names.get(name):
                case FunctionRef(info=declared):
                    return self._unit.node_id(declared.node)
        return None

    def _find_method(
        self, classes: tuple[ClassInfo, ...], name: str
    ) -> tuple[ClassInfo, FunctionInfo] | None:
        for cls in classes:
            binding = cls.scope.names.get(name)
            match binding:
                case FunctionRef(info=info):
                    return cls, info
                case None:
                    continue
                case _:
                    # Shadowed by a class attribute
                    return None
        return None

    def _function_target(self, info: FunctionInfo) -> ResolvedTarget | None:
        if not self._is_callable(info):
            return None
        return ResolvedTarget(self._unit.node_id(info.node), not info.module.is_generated)

    # =========================================================================
    # REFERENCES
    # =========================================================================

    def _target_of(self, binding: Binding | None, invoked: bool) -> CallTarget | None:
        match binding:
            case FunctionRef(info=info):
                return self._function_target(info)
            case ClassRef(info=info) if invoked:
                found = self._find_method(info.mro, "__init__")
                if found is None:
                    return None
                return self._function_target(found[1])
            case ExternalRef(fqn=fqn) if invoked:
                return ResolvedTarget(self._unit.external_id(fqn), False)
        return None

    def _resolve_member(self, base: Binding | None, attr: str, invoked: bool) -> CallTarget | None:
        match base:
            case InstanceRef(info=cls, exact=exact):
                found = self._find_method(cls.mro, attr)
                if found is None:
                    return None
                owner, info = found
                if owner.is_interface and not exact:
                    return DispatchTarget(
                        self._unit.node_id(info.node), not owner.module.is_generated
                    )
                return self._function_target(info)
            case ClassRef() | ModuleRef() | ExternalRef():
                return self._target_of(self._member_of(base, attr), invoked)
        return None

    def _resolve_super(self, attr: str, scope: Scope) -> CallTarget | None:
        cls = scope.enclosing_class
        if cls is None:
            return None
        found = self._find_method(cls.mro[1:], attr)
        if found is None:
            return None
        return self._function_target(found[1])

    # =========================================================================
    # VALUES
    # =========================================================================

    def _value_of(self, expr: ast.expr, scope: Scope) -> Binding | None:
        """Evaluate an expression to a binding, None if unknown."""
        match expr:
            case ast.Name(id=name):
                return self._lookup(name, scope)
            case ast.Attribute(value=value, attr=attr):
                base = self._value_of(value, scope)
                if isinstance(base, InstanceRef):
                    return None
                return self._member_of(base, attr)
            case ast.Call(func=func):
                match self._value_of(func, scope):
                    case ClassRef(info=info):
                        return InstanceRef(info, exact=True)
        return None

    def _lookup(self, name: str, scope: Scope) -> Binding | None:
        binding = scope.lookup(name)
        if binding is not None:
            return self._settle(binding)

        for module_name in scope.module_scope.star_imports:
            member = self._module_member(module_name, name, set())
            if member is not None:
                return member

        if hasattr(builtins, name):
            return ExternalRef(f"builtins.{name}")
        return None

    def _member_of(self, base: Binding | None, attr: str) -> Binding | None:
        match base:
            case ModuleRef(name=module_name):
                return self._module_member(module_name, attr, set())
            case ClassRef(info=info):
                # MRO is still empty while bases are being resolved
                for cls in info.mro or (info,):
                    if attr in cls.scope.names:
                        return self._settle(cls.scope.names[attr])
                return None
            case ExternalRef(fqn=fqn):
                return ExternalRef(f"{fqn}.{attr}")
        return None

    def _module_member(self, module_name: str, attr: str, seen: set[str]) -> Binding | None:
        if module_name in seen:
            return None
        seen.add(module_name)

        scope = self._index.module_scopes.get(module_name)
        if scope is not None:
            if attr in scope.names:
                return self._settle(scope.names[attr])
            for star in scope.star_imports:
                member = self._module_member(star, attr, seen)
                if member is not None:
                    return member

        submodule = f"{module_name}.{attr}"
        if self._is_local_module(submodule):
            return ModuleRef(submodule)
        return None

    def _is_local_module(self, name: str) -> bool:
        """Module of the unit, or namespace package containing one."""
        if name in self._module_names:
            return True
        prefix = f"{name}."
        return any(module.startswith(prefix) for module in self._module_names)

    def _settle(self, binding: Binding) -> Binding:
        """Resolve lazy bindings (imports, annotations, constructions)."""
        if not isinstance(binding, ImportRef | AnnotationRef | ConstructedRef):
            return binding

        cached = self._settled.get(binding)
        if cached is _IN_PROGRESS:
            return UNKNOWN
        if cached is not None:
            return cached  # type: ignore[return-value]

        self._settled[binding] = _IN_PROGRESS
        match binding:
            case ImportRef(fqn=fqn):
                result = self._settle_import(fqn)
            case AnnotationRef(annotation=annotation, scope=scope):
                cls = self._annotation_class(annotation, scope)
                result = UNKNOWN if cls is None else InstanceRef(cls, exact=False)
            case ConstructedRef(callee=callee, scope=scope):
                match self._value_of(callee, scope):
                    case ClassRef(info=cls):
                        result = InstanceRef(cls, exact=True)
                    case _:
                        result = UNKNOWN
        self._settled[binding] = result
        return result

    def _settle_import(self, fqn: str) -> Binding:
        if self._is_local_module(fqn):
            return ModuleRef(fqn)

        module_name, _, attr = fqn.rpartition(".")
        if module_name and self._is_local_module(module_name):
            member = self._module_member(module_name, attr, set())
            return UNKNOWN if member is None else member

        return ExternalRef(fqn)

    def _annotation_class(self, expr: ast.expr, scope: Scope) -> ClassInfo | None:
        """Local class named by a type annotation, None if not exactly one."""
        match expr:
            case ast.Constant(value=str() as text):
                try:
                    parsed = ast.parse(text, mode="eval").body
                except SyntaxError:
                    return None
                return self._annotation_class(parsed, scope)

            case ast.BinOp(op=ast.BitOr(), left=left, right=right):
                candidates = [side for side in (left, right) if not _is_none(side)]
                if len(candidates) != 1:
                    return None
                return self._annotation_class(candidates[0], scope)

            case ast.Subscript(value=value, slice=inner):
                match self._value_of(value, scope):
                    case ClassRef(info=info):
                        return info
                    case ExternalRef(fqn=fqn) if fqn.rpartition(".")[2] == "Optional":
                        return self._annotation_class(inner, scope)
                return None

            case ast.Name() | ast.Attribute():
                match self._value_of(expr, scope):
                    case ClassRef(info=info):
                        return info
        return None


def _dotted_name(expr: ast.expr) -> str | None:
    match expr:
        case ast.Name(id=name):
            return name
        case ast.Attribute(value=value, attr=attr):
            prefix = _dotted_name(value)
            return None if prefix is None else f"{prefix}.{attr}"
    return None


def _is_none(expr: ast.expr) -> bool:
    return isinstance(expr, ast.Constant) and expr.value is None


def _c3_merge(sequences: list[list[ClassInfo]]) -> list[ClassInfo] | None:
    """C3 linearization merge, None if no consistent order exists."""
    sequences = [list(seq) for seq in sequences if seq]
    result: list[ClassInfo] = []

    while sequences:
        for seq in sequences:
            head = seq[0]
            if not any(head in other[1:] for other in sequences):
                break
        else:
            return None

        result.append(head)
        for seq in sequences:
            if seq and seq[0] is head:
                del seq[0]
        sequences = [seq for seq in sequences if seq]

    return result
