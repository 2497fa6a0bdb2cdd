"""Test factories for creating domain objects.

Centralized factory functions to avoid duplication across test modules.
All factories follow the same pattern: accept simplified parameters,
return fully constructed domain objects.
"""

import ast
import textwrap
from pathlib import Path

from callmap.application.post_processor import expand_dispatch_calls
from callmap.application.services.analyzer import CallGraphAnalyzer
from callmap.domain.model.call_graph import CallGraphModel, FrozenCallGraph
from callmap.domain.model.compilation_unit import CompilationUnit, SourceModule
from callmap.domain.model.configuration import AnalysisConfig

# Default test file root - consistent across all tests
DEFAULT_TEST_ROOT = Path("/test")


def make_module(
    name: str,
    source: str,
    *,
    is_package: bool = False,
    is_generated: bool = False,
) -> SourceModule:
    """Create a SourceModule from (indented) source text.

    Args:
        name: Fully qualified module name
        source: Python source, dedented before parsing
        is_package: Module is a package __init__
        is_generated: Module is machine-generated

    Returns:
        SourceModule with a synthetic path under DEFAULT_TEST_ROOT
    """
    filename = "__init__.py" if is_package else f"{name.rpartition('.')[2]}.py"
    package_dir = name.replace(".", "/") if is_package else name.rpartition(".")[0].replace(".", "/")
    path = DEFAULT_TEST_ROOT / package_dir / filename
    return SourceModule(
        name=name,
        path=path,
        tree=ast.parse(textwrap.dedent(source)),
        is_package=is_package,
        is_generated=is_generated,
    )


def make_unit(sources: dict[str, str], name: str = "pkg") -> CompilationUnit:
    """Create a CompilationUnit from module name → source.

    Module names ending in `__init__` become packages:
    {"pkg.__init__": "..."} yields package module "pkg".
    """
    modules = []
    for module_name, source in sources.items():
        if module_name.endswith(".__init__"):
            modules.append(make_module(module_name.removesuffix(".__init__"), source, is_package=True))
        else:
            modules.append(make_module(module_name, source))
    return CompilationUnit(name=name, modules=tuple(modules))


def build_graph(
    sources: dict[str, str],
    name: str = "pkg",
    config: AnalysisConfig | None = None,
) -> FrozenCallGraph:
    """Run the full pipeline on in-memory sources."""
    return CallGraphAnalyzer(config).analyze_unit(make_unit(sources, name))


def build_raw(sources: dict[str, str], name: str = "pkg") -> CallGraphModel:
    """Build the model without expanding dispatch calls."""
    return CallGraphAnalyzer().build_raw(make_unit(sources, name))


def named_pairs(
    graph: FrozenCallGraph,
    pairs: frozenset[tuple[int, int]],
) -> set[tuple[str, str]]:
    """Translate identity pairs into qualified name pairs."""
    return {(graph.name_of(caller), graph.name_of(callee)) for caller, callee in pairs}


def definite_names(graph: FrozenCallGraph) -> set[tuple[str, str]]:
    """Definite calls of a graph as qualified name pairs."""
    return named_pairs(graph, graph.definite_calls)


def potential_names(graph: FrozenCallGraph) -> set[tuple[str, str]]:
    """Potential calls of a graph as qualified name pairs."""
    return named_pairs(graph, graph.potential_calls)


def make_graph(
    functions: dict[int, str],
    *,
    method_decls: dict[int, str] | None = None,
    method_impls: dict[int, list[int]] | None = None,
    definite: set[tuple[int, int]] | None = None,
    potential: set[tuple[int, int]] | None = None,
    name: str = "pkg",
) -> FrozenCallGraph:
    """Create a finalized graph directly from identities.

    Args:
        functions: Callable identity → qualified name
        method_decls: Declaration identity → qualified name
        method_impls: Declaration identity → implementing callables
        definite: Definite (caller, callee) pairs
        potential: Raw (caller, declaration) dispatch pairs, expanded here
        name: Unit name

    Returns:
        FrozenCallGraph
    """
    model = CallGraphModel(name=name)
    for node_id, qualified_name in functions.items():
        model.add_function(node_id, qualified_name)
    for node_id, qualified_name in (method_decls or {}).items():
        model.add_method_decl(node_id, qualified_name)
    for decl_id, impls in (method_impls or {}).items():
        for impl_id in impls:
            model.append_method_impl(decl_id, impl_id)
    for caller, callee in definite or set():
        model.record_static_call(caller, callee)
    for caller, decl in potential or set():
        model.record_dynamic_call(caller, decl)
    expand_dispatch_calls(model)
    return model.freeze()
