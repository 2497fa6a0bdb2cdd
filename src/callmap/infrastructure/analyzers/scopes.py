"""Scope index: lexical scopes, bindings, functions and classes of a unit.

Built in one pass over every module before the call graph walk.
Bindings that depend on other modules (imports, annotations, constructor
assignments) are stored unresolved and resolved lazily by the semantic
query layer once the whole unit is indexed.

Python scoping rules followed:
- a name assigned anywhere in a function body is local to that function
  unless declared `global` / `nonlocal`
- class bodies are a scope, but invisible from functions nested in them
- comprehensions are treated as part of the enclosing scope
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Final

from loguru import logger

from callmap.domain.model.compilation_unit import CompilationUnit, SourceModule
from callmap.infrastructure.analyzers.base import (
    has_decorator,
    is_stub_body,
    resolve_relative_import,
    shallow_walk,
)

type FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


class ScopeKind(Enum):
    """Lexical scope kinds."""

    MODULE = auto()
    CLASS = auto()
    FUNCTION = auto()
    LAMBDA = auto()


# =============================================================================
# BINDINGS - what a name is bound to
# =============================================================================


@dataclass(frozen=True, slots=True)
class FunctionRef:
    """Name bound to a function or method definition."""

    info: FunctionInfo


@dataclass(frozen=True, slots=True)
class ClassRef:
    """Name bound to a class defined in the unit."""

    info: ClassInfo


@dataclass(frozen=True, slots=True)
class InstanceRef:
    """Name bound to an instance of a class defined in the unit.

    exact=True when the concrete type is known (x = Circle()),
    False when only the declared type is known (self, annotations).
    """

    info: ClassInfo
    exact: bool


@dataclass(frozen=True, slots=True)
class ModuleRef:
    """Name bound to a module of the unit."""

    name: str


@dataclass(frozen=True, slots=True)
class ExternalRef:
    """Name bound to something defined outside the unit."""

    fqn: str


@dataclass(frozen=True, slots=True)
class ImportRef:
    """Imported name, resolved lazily to module, member or external."""

    fqn: str


@dataclass(frozen=True, slots=True)
class AnnotationRef:
    """Variable whose declared type is an annotation expression."""

    annotation: ast.expr
    scope: Scope


@dataclass(frozen=True, slots=True)
class ConstructedRef:
    """Variable assigned from a call, typed if the callee is a class."""

    callee: ast.expr
    scope: Scope


@dataclass(frozen=True, slots=True)
class UnknownRef:
    """Local name with unknown value (shadows outer bindings)."""


UNKNOWN: Final = UnknownRef()

type Binding = (
    FunctionRef
    | ClassRef
    | InstanceRef
    | ModuleRef
    | ExternalRef
    | ImportRef
    | AnnotationRef
    | ConstructedRef
    | UnknownRef
)


# =============================================================================
# SCOPES AND DEFINITIONS
# =============================================================================


@dataclass(eq=False, slots=True)
class Scope:
    """One lexical scope.

    Attributes:
        kind: Scope kind
        module: Module the scope belongs to
        parent: Enclosing scope, None for module scopes
        names: Local name → binding
        declared: Names whose binding comes from an annotation
        global_names: Names declared `global`
        star_imports: Modules imported with `from m import *`
        function: Function owning a FUNCTION scope
        class_info: Class owning a CLASS scope
    """

    kind: ScopeKind
    module: SourceModule
    parent: Scope | None = None
    names: dict[str, Binding] = field(default_factory=dict)
    declared: set[str] = field(default_factory=set)
    global_names: set[str] = field(default_factory=set)
    star_imports: list[str] = field(default_factory=list)
    function: FunctionInfo | None = None
    class_info: ClassInfo | None = None

    def lookup(self, name: str) -> Binding | None:
        """Find binding of a name as Python would at runtime.

        Class scopes are only visible to code directly in the class body.
        Builtins are not consulted.
        """
        if name in self.global_names:
            return self.module_scope.names.get(name)

        scope: Scope | None = self
        while scope is not None:
            if scope is self or scope.kind is not ScopeKind.CLASS:
                if name in scope.names:
                    return scope.names[name]
            scope = scope.parent
        return None

    @property
    def module_scope(self) -> Scope:
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    @property
    def enclosing_class(self) -> ClassInfo | None:
        """Class whose method (possibly through nested functions) contains this scope."""
        scope: Scope | None = self
        while scope is not None:
            if scope.function is not None and scope.function.owner is not None:
                return scope.function.owner
            scope = scope.parent
        return None


@dataclass(eq=False, slots=True)
class FunctionInfo:
    """Function or method definition.

    Attributes:
        node: Definition node
        qualified_name: module.Class.method or module.outer.<locals>.inner
        module: Defining module
        owner: Class whose body directly contains the definition
        is_stub: Body is a signature only
        is_abstract: Decorated with @abstractmethod
        is_static: Decorated with @staticmethod
    """

    node: FunctionNode
    qualified_name: str
    module: SourceModule
    owner: ClassInfo | None = None
    is_stub: bool = False
    is_abstract: bool = False
    is_static: bool = False


@dataclass(eq=False, slots=True)
class ClassInfo:
    """Class definition.

    Attributes:
        node: Definition node
        qualified_name: Fully qualified name
        module: Defining module
        scope: Class body scope
        outer: Scope the class statement appears in (bases resolve there)
        is_interface: Protocol / ABC (set by the semantic query layer)
        is_protocol: Protocol interface (set by the semantic query layer)
        bases: Local base classes (set by the semantic query layer)
        mro: Local method resolution order, starting with the class itself
    """

    node: ast.ClassDef
    qualified_name: str
    module: SourceModule
    scope: Scope
    outer: Scope
    is_interface: bool = False
    is_protocol: bool = False
    bases: tuple[ClassInfo, ...] = ()
    mro: tuple[ClassInfo, ...] = ()


@dataclass(slots=True)
class ScopeIndex:
    """Result of indexing a compilation unit.

    Attributes:
        module_scopes: Module name → module scope
        functions: Definition node → function info
        classes: Class node → class info
        function_scopes: Definition node → scope of its body
        reference_scopes: Name/Attribute node → scope it appears in
        invoked: Expressions used as the callee of an ast.Call
        member_bases: Expressions whose attribute is read (`g` in `g.__name__`)
    """

    module_scopes: dict[str, Scope] = field(default_factory=dict)
    functions: dict[ast.AST, FunctionInfo] = field(default_factory=dict)
    classes: dict[ast.AST, ClassInfo] = field(default_factory=dict)
    function_scopes: dict[ast.AST, Scope] = field(default_factory=dict)
    reference_scopes: dict[ast.AST, Scope] = field(default_factory=dict)
    invoked: set[ast.AST] = field(default_factory=set)
    member_bases: set[ast.AST] = field(default_factory=set)


# =============================================================================
# INDEXER
# =============================================================================


class ScopeIndexer:
    """Builds a ScopeIndex for a compilation unit.

    Stateless - no state between index() calls.
    """

    def index(self, unit: CompilationUnit) -> ScopeIndex:
        """Index every module of the unit.

        Args:
            unit: Parsed compilation unit

        Returns:
            ScopeIndex with unresolved lazy bindings
        """
        if unit is None:
            raise TypeError("unit must not be None")

        result = ScopeIndex()
        for module in unit.modules:
            scope = Scope(kind=ScopeKind.MODULE, module=module)
            result.module_scopes[module.name] = scope
            _ModuleIndexer(result, module).index_body(module.tree.body, scope)

        logger.debug(
            "indexed {} modules: {} functions, {} classes",
            len(unit.modules),
            len(result.functions),
            len(result.classes),
        )
        return result


@dataclass(slots=True)
class _ModuleIndexer:
    result: ScopeIndex
    module: SourceModule

    def index_body(self, body: list[ast.stmt], scope: Scope) -> None:
        self._collect_bindings(body, scope)
        for stmt in body:
            self._visit(stmt, scope)

    def _visit(self, root: ast.AST, root_scope: Scope) -> None:
        # Explicit stack: expressions may nest deeper than the recursion limit
        stack: list[tuple[ast.AST, Scope]] = [(root, root_scope)]
        while stack:
            node, scope = stack.pop()
            match node:
                case ast.FunctionDef() | ast.AsyncFunctionDef():
                    self._visit_function(node, scope)
                case ast.ClassDef():
                    self._visit_class(node, scope)
                case ast.Lambda(args=args, body=body):
                    inner = Scope(kind=ScopeKind.LAMBDA, module=self.module, parent=scope)
                    for name in _parameter_names(args):
                        inner.names[name] = UNKNOWN
                    stack.append((body, inner))
                    stack.append((args, scope))
                case _:
                    if isinstance(node, ast.Name | ast.Attribute):
                        self.result.reference_scopes[node] = scope
                    if isinstance(node, ast.Attribute):
                        self.result.member_bases.add(node.value)
                    if isinstance(node, ast.Call):
                        self.result.invoked.add(node.func)
                    children = list(ast.iter_child_nodes(node))
                    stack.extend((child, scope) for child in reversed(children))

    def _visit_function(self, node: FunctionNode, scope: Scope) -> None:
        for child in (*node.decorator_list, node.args, node.returns, *node.type_params):
            if child is not None:
                self._visit(child, scope)

        owner = scope.class_info if scope.kind is ScopeKind.CLASS else None
        info = FunctionInfo(
            node=node,
            qualified_name=_qualify(scope, node.name),
            module=self.module,
            owner=owner,
            is_stub=is_stub_body(node.body),
            is_abstract=has_decorator(node.decorator_list, "abstractmethod"),
            is_static=has_decorator(node.decorator_list, "staticmethod"),
        )
        self.result.functions[node] = info
        _bind(scope, node.name, FunctionRef(info))

        inner = Scope(kind=ScopeKind.FUNCTION, module=self.module, parent=scope, function=info)
        self.result.function_scopes[node] = inner
        self._bind_parameters(node, info, inner, scope)
        self.index_body(node.body, inner)

    def _bind_parameters(
        self,
        node: FunctionNode,
        info: FunctionInfo,
        inner: Scope,
        outer: Scope,
    ) -> None:
        args = node.args
        positional = [*args.posonlyargs, *args.args]
        receiver = positional[0].arg if info.owner is not None and positional else None
        if info.is_static:
            receiver = None

        for arg in (*positional, args.vararg, *args.kwonlyargs, args.kwarg):
            if arg is None:
                continue
            if arg.arg == receiver and info.owner is not None:
                # self / cls: declared type is the owner, subclasses possible
                inner.names[arg.arg] = InstanceRef(info.owner, exact=False)
                inner.declared.add(arg.arg)
            elif arg.annotation is not None and arg is not args.vararg and arg is not args.kwarg:
                inner.names[arg.arg] = AnnotationRef(arg.annotation, outer)
                inner.declared.add(arg.arg)
            else:
                inner.names[arg.arg] = UNKNOWN

    def _visit_class(self, node: ast.ClassDef, scope: Scope) -> None:
        for child in (*node.decorator_list, *node.bases, *node.keywords, *node.type_params):
            self._visit(child, scope)

        inner = Scope(kind=ScopeKind.CLASS, module=self.module, parent=scope)
        info = ClassInfo(
            node=node,
            qualified_name=_qualify(scope, node.name),
            module=self.module,
            scope=inner,
            outer=scope,
        )
        inner.class_info = info
        self.result.classes[node] = info
        _bind(scope, node.name, ClassRef(info))

        self.index_body(node.body, inner)

    def _collect_bindings(self, body: list[ast.stmt], scope: Scope) -> None:
        """Bind every name assigned in this scope (nested scopes excluded)."""
        handled: set[ast.AST] = set()
        nonlocal_names: set[str] = set()

        for node in shallow_walk(body):
            match node:
                case ast.Global(names=names):
                    scope.global_names.update(names)

                case ast.Nonlocal(names=names):
                    nonlocal_names.update(names)

                case ast.Assign(targets=targets, value=value):
                    for target in targets:
                        if isinstance(target, ast.Name):
                            if len(targets) == 1 and isinstance(value, ast.Call):
                                _bind(scope, target.id, ConstructedRef(value.func, scope))
                            else:
                                _bind(scope, target.id, UNKNOWN)
                            handled.add(target)

                case ast.AnnAssign(target=ast.Name() as target, annotation=annotation):
                    _bind(scope, target.id, AnnotationRef(annotation, scope), declared=True)
                    handled.add(target)

                case ast.Name(id=name, ctx=ast.Store()) if node not in handled:
                    _bind(scope, name, UNKNOWN)

                case ast.Import(names=aliases):
                    for alias in aliases:
                        if alias.asname is not None:
                            _bind(scope, alias.asname, ImportRef(alias.name))
                        else:
                            root = alias.name.partition(".")[0]
                            _bind(scope, root, ImportRef(root))

                case ast.ImportFrom():
                    self._bind_import_from(node, scope)

                case ast.ExceptHandler(name=str() as name):
                    _bind(scope, name, UNKNOWN)

                case ast.MatchAs(name=str() as name) | ast.MatchStar(name=str() as name):
                    _bind(scope, name, UNKNOWN)

                case ast.MatchMapping(rest=str() as name):
                    _bind(scope, name, UNKNOWN)

        # Names declared nonlocal/global are resolved in the outer scopes
        for name in scope.global_names | nonlocal_names:
            scope.names.pop(name, None)
            scope.declared.discard(name)

    def _bind_import_from(self, node: ast.ImportFrom, scope: Scope) -> None:
        try:
            base = resolve_relative_import(node.module, node.level, self.module.package)
        except ValueError as e:
            logger.debug("{}:{}: {}", self.module.path, node.lineno, e)
            for alias in node.names:
                if alias.name != "*":
                    _bind(scope, alias.asname or alias.name, UNKNOWN)
            return

        for alias in node.names:
            if alias.name == "*":
                scope.star_imports.append(base)
                continue
            fqn = f"{base}.{alias.name}" if base else alias.name
            _bind(scope, alias.asname or alias.name, ImportRef(fqn))


def _bind(scope: Scope, name: str, binding: Binding, *, declared: bool = False) -> None:
    """Bind name flow-insensitively.

    An annotation wins over assignments. A later definition replaces an
    earlier one. Any other conflicting rebinding makes the name unknown.
    """
    existing = scope.names.get(name)
    if existing is None:
        scope.names[name] = binding
    elif name in scope.declared:
        return
    elif declared:
        scope.names[name] = binding
    elif isinstance(existing, FunctionRef | ClassRef) and isinstance(binding, FunctionRef | ClassRef):
        scope.names[name] = binding
    elif existing != binding:
        scope.names[name] = UNKNOWN

    if declared:
        scope.declared.add(name)


def _qualify(scope: Scope, name: str) -> str:
    match scope.kind:
        case ScopeKind.MODULE:
            return f"{scope.module.name}.{name}"
        case ScopeKind.CLASS:
            assert scope.class_info is not None
            return f"{scope.class_info.qualified_name}.{name}"
        case ScopeKind.FUNCTION:
            assert scope.function is not None
            return f"{scope.function.qualified_name}.<locals>.{name}"
        case ScopeKind.LAMBDA:
            assert scope.parent is not None
            return _qualify(scope.parent, f"<lambda>.<locals>.{name}")


def _parameter_names(args: ast.arguments) -> list[str]:
    params = [*args.posonlyargs, *args.args, *args.kwonlyargs]
    for extra in (args.vararg, args.kwarg):
        if extra is not None:
            params.append(extra)
    return [param.arg for param in params]
