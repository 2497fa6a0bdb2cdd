"""Compilation unit: parsed modules plus node identities."""

from __future__ import annotations

import ast
import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class SourceModule:
    """One parsed source file.

    Attributes:
        name: Fully qualified module name
        path: Source file path
        tree: Parsed AST
        is_package: True for __init__.py modules
        is_generated: True if the whole file is machine-generated
    """

    name: str
    path: Path
    tree: ast.Module
    is_package: bool = False
    is_generated: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")
        if self.tree is None:
            raise TypeError("tree must not be None")

    @property
    def package(self) -> str:
        """Package used as base for relative imports."""
        if self.is_package:
            return self.name
        return self.name.rpartition(".")[0]


@dataclass(slots=True)
class CompilationUnit:
    """All modules of one analysis run with process-unique node identities.

    Identities are assigned in module order, then ast.walk order,
    so identical input yields identical identities. External symbols
    get identities lazily from the same counter.

    Attributes:
        name: Unit name (package name or file stem)
        modules: Parsed modules in deterministic order
    """

    name: str
    modules: tuple[SourceModule, ...] = ()
    _node_ids: dict[ast.AST, int] = field(default_factory=dict)
    _node_modules: dict[ast.AST, SourceModule] = field(default_factory=dict)
    _external_ids: dict[str, int] = field(default_factory=dict)
    _counter: Iterator[int] = field(default_factory=lambda: itertools.count(1))

    def __post_init__(self) -> None:
        """Validate and number all nodes. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")

        names = [module.name for module in self.modules]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"duplicate module names: {sorted(duplicates)}")

        for module in self.modules:
            for node in ast.walk(module.tree):
                # Context and operator nodes are shared singletons
                if node in self._node_ids:
                    continue
                self._node_ids[node] = next(self._counter)
                self._node_modules[node] = module

    def node_id(self, node: ast.AST) -> int:
        """Identity of a syntax node.

        Raises:
            KeyError: If node does not belong to this unit
        """
        try:
            return self._node_ids[node]
        except KeyError:
            raise KeyError(f"{type(node).__name__} node is not part of unit '{self.name}'") from None

    def module_of(self, node: ast.AST) -> SourceModule:
        """Module a syntax node belongs to.

        Raises:
            KeyError: If node does not belong to this unit
        """
        try:
            return self._node_modules[node]
        except KeyError:
            raise KeyError(f"{type(node).__name__} node is not part of unit '{self.name}'") from None

    def external_id(self, fqn: str) -> int:
        """Identity of a symbol defined outside the unit. Stable per name."""
        if not fqn:
            raise ValueError("fqn must not be empty")
        if fqn not in self._external_ids:
            self._external_ids[fqn] = next(self._counter)
        return self._external_ids[fqn]

    def get_module(self, name: str) -> SourceModule | None:
        """Find module by fully qualified name."""
        for module in self.modules:
            if module.name == name:
                return module
        return None

    @property
    def module_names(self) -> frozenset[str]:
        """Names of all modules in the unit."""
        return frozenset(module.name for module in self.modules)

    @property
    def node_count(self) -> int:
        """Number of numbered syntax nodes."""
        return len(self._node_ids)
