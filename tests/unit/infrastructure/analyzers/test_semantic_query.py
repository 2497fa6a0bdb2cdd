"""Tests for infrastructure/analyzers/semantic_query.py."""

import ast
from pathlib import Path

import pytest

from callmap.domain.exceptions.parsing import ASTError
from callmap.domain.model.call_target import DispatchTarget, ResolvedTarget
from callmap.domain.model.compilation_unit import CompilationUnit
from callmap.domain.model.configuration import AnalysisConfig
from callmap.domain.model.location import Location
from callmap.domain.model.node_kind import (
    OTHER,
    FunctionDefinition,
    MethodDeclaration,
    MethodImplementation,
)
from callmap.infrastructure.analyzers.semantic_query import AstSemanticQuery
from tests.factories import make_module, make_unit


def _query(sources: dict[str, str], config: AnalysisConfig | None = None):
    unit = make_unit(sources)
    return AstSemanticQuery(unit, config or AnalysisConfig()), unit


def _definitions(unit: CompilationUnit) -> dict[str, ast.AST]:
    """Definition nodes by dotted path inside their module (C.m, f)."""
    found: dict[str, ast.AST] = {}
    for module in unit.modules:
        for node in module.tree.body:
            if isinstance(node, ast.FunctionDef):
                found[node.name] = node
            if isinstance(node, ast.ClassDef):
                for item in node.body:
                    if isinstance(item, ast.FunctionDef):
                        found[f"{node.name}.{item.name}"] = item
    return found


def _call_refs(function: ast.AST) -> list[ast.expr]:
    """Callee expressions of every call in a function, in source order."""
    calls = [node for node in ast.walk(function) if isinstance(node, ast.Call)]
    calls.sort(key=lambda call: (call.lineno, call.col_offset))
    return [call.func for call in calls]


class TestInit:
    """Tests for AstSemanticQuery construction."""

    def test_none_unit_raises(self) -> None:
        with pytest.raises(TypeError, match="unit must not be None"):
            AstSemanticQuery(None, AnalysisConfig())  # type: ignore[arg-type]

    def test_none_config_raises(self) -> None:
        unit = make_unit({"pkg": ""})

        with pytest.raises(TypeError, match="config must not be None"):
            AstSemanticQuery(unit, None)  # type: ignore[arg-type]


class TestClassify:
    """Tests for classify()."""

    SOURCE = """
        import abc
        from typing import Protocol

        class Port(Protocol):
            def stub(self) -> int: ...

            def default(self) -> int:
                return 1

        class Base(metaclass=abc.ABCMeta):
            @abc.abstractmethod
            def run(self): ...

            def plain_stub(self):
                pass

        class Impl(Port, Base):
            def stub(self) -> int:
                return 2

            def run(self):
                pass

            def extra(self):
                pass

        def free():
            pass
    """

    def test_function(self) -> None:
        query, unit = _query({"pkg": self.SOURCE})
        node = _definitions(unit)["free"]

        assert query.classify(node) == FunctionDefinition(unit.node_id(node), "pkg.free")

    def test_protocol_stub_is_bodiless_declaration(self) -> None:
        query, unit = _query({"pkg": self.SOURCE})

        kind = query.classify(_definitions(unit)["Port.stub"])

        assert isinstance(kind, MethodDeclaration)
        assert not kind.has_default_body

    def test_protocol_method_with_body_is_default(self) -> None:
        query, unit = _query({"pkg": self.SOURCE})

        kind = query.classify(_definitions(unit)["Port.default"])

        assert isinstance(kind, MethodDeclaration)
        assert kind.has_default_body

    def test_metaclass_abc(self) -> None:
        query, unit = _query({"pkg": self.SOURCE})
        defs = _definitions(unit)

        run = query.classify(defs["Base.run"])
        plain = query.classify(defs["Base.plain_stub"])

        assert isinstance(run, MethodDeclaration) and not run.has_default_body
        # Not abstract: callable even though it does nothing
        assert isinstance(plain, MethodDeclaration) and plain.has_default_body

    def test_implementations_link_to_declarations(self) -> None:
        query, unit = _query({"pkg": self.SOURCE})
        defs = _definitions(unit)

        stub = query.classify(defs["Impl.stub"])
        run = query.classify(defs["Impl.run"])
        extra = query.classify(defs["Impl.extra"])

        assert stub == MethodImplementation(
            unit.node_id(defs["Impl.stub"]), "pkg.Impl.stub", unit.node_id(defs["Port.stub"])
        )
        assert isinstance(run, MethodImplementation)
        assert run.overridden_declaration_id == unit.node_id(defs["Base.run"])
        assert isinstance(extra, MethodImplementation)
        assert extra.overridden_declaration_id is None

    def test_override_found_past_concrete_class(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    from abc import ABC, abstractmethod

                    class Iface(ABC):
                        @abstractmethod
                        def m(self): ...

                    class Middle(Iface):
                        def m(self):
                            pass

                    class Leaf(Middle):
                        def m(self):
                            pass
                """
            }
        )
        defs = _definitions(unit)

        leaf = query.classify(defs["Leaf.m"])

        assert isinstance(leaf, MethodImplementation)
        assert leaf.overridden_declaration_id == unit.node_id(defs["Iface.m"])

    def test_non_definition_is_other(self) -> None:
        query, unit = _query({"pkg": "x = 1"})

        assert query.classify(unit.modules[0].tree.body[0]) is OTHER

    def test_custom_interface_markers(self) -> None:
        config = AnalysisConfig(protocol_markers=frozenset({"Interface"}))
        query, unit = _query(
            {
                "pkg": """
                    class Interface: pass

                    class Port(Interface):
                        def m(self): ...
                """
            },
            config,
        )

        kind = query.classify(_definitions(unit)["Port.m"])

        assert isinstance(kind, MethodDeclaration)


class TestResolveCallReference:
    """Tests for resolve_call_reference()."""

    def test_local_function(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    def g(): pass

                    def f():
                        g()
                """
            }
        )
        defs = _definitions(unit)
        (ref,) = _call_refs(defs["f"])

        assert query.resolve_call_reference(ref) == ResolvedTarget(unit.node_id(defs["g"]), True)

    def test_external_call_is_not_local(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    import os

                    def f():
                        os.getcwd()
                        len([])
                """
            }
        )
        refs = _call_refs(_definitions(unit)["f"])

        targets = [query.resolve_call_reference(ref) for ref in refs]

        assert all(isinstance(t, ResolvedTarget) and not t.is_local for t in targets)
        assert targets[0] != targets[1]

    def test_external_reference_without_call_is_nothing(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    import os

                    def f():
                        return os.sep
                """
            }
        )
        ret = _definitions(unit)["f"].body[0]  # type: ignore[attr-defined]

        assert query.resolve_call_reference(ret.value) is None

    def test_dispatch_through_annotation(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    from typing import Protocol

                    class Port(Protocol):
                        def send(self) -> None: ...

                    def f(port: Port):
                        port.send()
                """
            }
        )
        defs = _definitions(unit)
        (ref,) = _call_refs(defs["f"])

        assert query.resolve_call_reference(ref) == DispatchTarget(
            unit.node_id(defs["Port.send"]), True
        )

    def test_generic_annotation(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    from typing import Generic, Protocol, TypeVar

                    T = TypeVar("T")

                    class Repo(Protocol[T]):
                        def get(self) -> T: ...

                    def f(repo: Repo[int]):
                        repo.get()
                """
            }
        )
        defs = _definitions(unit)
        (ref,) = _call_refs(defs["f"])

        assert isinstance(query.resolve_call_reference(ref), DispatchTarget)

    def test_ambiguous_union_is_nothing(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    class A:
                        def m(self): pass

                    class B:
                        def m(self): pass

                    def f(x: A | B):
                        x.m()
                """
            }
        )
        (ref,) = _call_refs(_definitions(unit)["f"])

        assert query.resolve_call_reference(ref) is None

    def test_super_skips_own_class(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    class A:
                        def m(self): pass

                    class B(A):
                        pass

                    class C(B):
                        def m(self):
                            super().m()
                """
            }
        )
        defs = _definitions(unit)
        refs = _call_refs(defs["C.m"])

        # refs: super().m, super
        assert query.resolve_call_reference(refs[0]) == ResolvedTarget(
            unit.node_id(defs["A.m"]), True
        )

    def test_super_to_abstract_declaration_is_nothing(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    from abc import ABC, abstractmethod

                    class I(ABC):
                        @abstractmethod
                        def m(self): ...

                    class C(I):
                        def m(self):
                            super().m()
                """
            }
        )
        refs = _call_refs(_definitions(unit)["C.m"])

        assert query.resolve_call_reference(refs[0]) is None

    def test_diamond_mro(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    class Root:
                        def hello(self): pass

                    class Left(Root):
                        pass

                    class Right(Root):
                        def hello(self): pass

                    class Bottom(Left, Right):
                        def go(self):
                            self.hello()
                """
            }
        )
        defs = _definitions(unit)
        (ref,) = _call_refs(defs["Bottom.go"])

        assert query.resolve_call_reference(ref) == ResolvedTarget(
            unit.node_id(defs["Right.hello"]), True
        )

    def test_constructor_inherited(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    class Base:
                        def __init__(self): pass

                    class Child(Base):
                        pass

                    def f():
                        Child()
                """
            }
        )
        defs = _definitions(unit)
        (ref,) = _call_refs(defs["f"])

        assert query.resolve_call_reference(ref) == ResolvedTarget(
            unit.node_id(defs["Base.__init__"]), True
        )

    def test_class_without_init_is_nothing(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    class Plain:
                        pass

                    def f():
                        Plain()
                """
            }
        )
        (ref,) = _call_refs(_definitions(unit)["f"])

        assert query.resolve_call_reference(ref) is None

    def test_import_cycle_terminates(self) -> None:
        query, unit = _query(
            {
                "pkg.__init__": "",
                "pkg.a": """
                    from pkg.b import thing

                    def f():
                        thing()
                """,
                "pkg.b": "from pkg.a import thing",
            }
        )
        (ref,) = _call_refs(_definitions(unit)["f"])

        assert query.resolve_call_reference(ref) is None

    def test_star_import(self) -> None:
        query, unit = _query(
            {
                "pkg.__init__": "",
                "pkg.util": """
                    def helper(): pass
                """,
                "pkg.main": """
                    from pkg.util import *

                    def f():
                        helper()
                """,
            }
        )
        defs = _definitions(unit)
        (ref,) = _call_refs(defs["f"])

        assert query.resolve_call_reference(ref) == ResolvedTarget(
            unit.node_id(defs["helper"]), True
        )

    def test_unindexed_node_is_nothing(self) -> None:
        query, _ = _query({"pkg": "def f(): pass"})

        assert query.resolve_call_reference(ast.Name(id="f", ctx=ast.Load())) is None

    def test_member_read_on_function_is_nothing(self) -> None:
        query, unit = _query(
            {
                "pkg": """
                    def g(): pass

                    def f():
                        g.cache_clear()
                """
            }
        )
        (ref,) = _call_refs(_definitions(unit)["f"])

        assert query.resolve_call_reference(ref.value) is None  # type: ignore[attr-defined]


class TestGeneratedCode:
    """Tests for is_generated_code() and locality of generated definitions."""

    def _unit(self) -> CompilationUnit:
        return CompilationUnit(
            name="pkg",
            modules=(
                make_module("pkg", "", is_package=True),
                make_module("pkg.gen", "def made(): pass", is_generated=True),
                make_module(
                    "pkg.user",
                    """
                    from pkg.gen import made

                    def f():
                        made()
                    """,
                ),
            ),
        )

    def test_generated_location(self) -> None:
        unit = self._unit()
        query = AstSemanticQuery(unit, AnalysisConfig())
        generated = unit.get_module("pkg.gen")
        user = unit.get_module("pkg.user")
        assert generated is not None and user is not None

        assert query.is_generated_code(Location(file=generated.path, line=1, column=0))
        assert not query.is_generated_code(Location(file=user.path, line=1, column=0))
        assert not query.is_generated_code(None)

    def test_generated_definition_is_not_local(self) -> None:
        unit = self._unit()
        query = AstSemanticQuery(unit, AnalysisConfig())
        user = unit.get_module("pkg.user")
        assert user is not None
        (ref,) = _call_refs(user.tree.body[1])

        target = query.resolve_call_reference(ref)

        assert isinstance(target, ResolvedTarget)
        assert not target.is_local


class TestLocationOf:
    """Tests for location_of()."""

    def test_node_location(self) -> None:
        query, unit = _query({"pkg": "\n\ndef f(): pass\n"})
        module = unit.modules[0]

        loc = query.location_of(module.tree.body[0])

        assert loc is not None
        assert loc.file == module.path
        assert loc.line == 3

    def test_node_without_position(self) -> None:
        query, unit = _query({"pkg": "x = 1"})

        assert query.location_of(unit.modules[0].tree) is None

    def test_positioned_node_without_line_raises(self) -> None:
        module = make_module("pkg", "x = 1")
        stmt = module.tree.body[0]
        del stmt.lineno
        query = AstSemanticQuery(CompilationUnit(name="pkg", modules=(module,)), AnalysisConfig())

        with pytest.raises(ASTError, match="Assign node has no line info"):
            query.location_of(stmt)

    def test_synthetic_path(self) -> None:
        query, unit = _query({"pkg": "x = 1"})

        assert query.location_of(unit.modules[0].tree.body[0]).file == Path("/test/pkg.py")  # type: ignore[union-attr]
