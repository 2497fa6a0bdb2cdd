"""AST-based source parser adapter.

Turns a file or directory into a CompilationUnit of parsed modules.
"""

from __future__ import annotations

import ast
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from callmap.domain.exceptions.parsing import ParsingError
from callmap.domain.model.compilation_unit import CompilationUnit, SourceModule
from callmap.infrastructure.analyzers.base import compute_module_name

if TYPE_CHECKING:
    from callmap.domain.model.configuration import AnalysisConfig


class ASTSourceParser:
    """Parser using Python AST to build a compilation unit.

    Stateless between parse() calls.

    FAIL-FIRST: raises ParsingError on any parsing issue.
    """

    def __init__(self, config: AnalysisConfig) -> None:
        """Initialize parser.

        Args:
            config: Analysis configuration (exclusions, generated markers)

        Raises:
            TypeError: If config is None
        """
        if config is None:
            raise TypeError("config must not be None")

        self._config = config

    def parse(self, path: Path) -> CompilationUnit:
        """Parse a single file or a directory tree.

        A file becomes a unit with one module named after the file.
        A package directory (with __init__.py) yields module names starting
        with the package name. Any other directory is a source root:
        module names are relative to it.

        Args:
            path: .py file or directory

        Returns:
            CompilationUnit with modules in sorted path order

        Raises:
            ParsingError: If path does not exist or any file cannot be parsed
        """
        path = path.resolve()

        if path.is_file():
            module = self.parse_file(path, path.parent)
            return CompilationUnit(name=module.name, modules=(module,))

        if not path.is_dir():
            raise ParsingError(path, "no such file or directory")

        root = path.parent if (path / "__init__.py").is_file() else path
        modules: list[SourceModule] = []

        for py_file in sorted(path.rglob("*.py")):
            # Skip __pycache__ and directories named like modules
            if "__pycache__" in py_file.parts or not py_file.is_file():
                continue
            if self._is_excluded(py_file, path):
                logger.debug("excluded {}", py_file)
                continue
            modules.append(self.parse_file(py_file, root))

        logger.info("parsed {} modules under {}", len(modules), path)
        return CompilationUnit(name=path.name, modules=tuple(modules))

    def parse_file(self, path: Path, root: Path) -> SourceModule:
        """Parse single Python file.

        FAIL-FIRST: raises ParsingError on file errors, syntax errors.

        Args:
            path: Path to .py file
            root: Directory module names are relative to

        Returns:
            Parsed SourceModule

        Raises:
            ParsingError: If file cannot be read or parsed
        """
        # Read file - FAIL-FIRST on file errors
        try:
            source = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ParsingError(path, "file not found") from e
        except PermissionError as e:
            raise ParsingError(path, "permission denied") from e
        except UnicodeDecodeError as e:
            raise ParsingError(path, f"encoding error: {e}") from e
        except OSError as e:
            raise ParsingError(path, f"cannot read: {e.strerror or e}") from e

        # Parse AST - FAIL-FIRST on syntax errors
        try:
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as e:
            raise ParsingError(path, f"syntax error: {e}") from e

        generated = self._is_generated(path, source)
        if generated:
            logger.debug("{} is generated code", path)

        return SourceModule(
            name=compute_module_name(path, root),
            path=path,
            tree=tree,
            is_package=path.name == "__init__.py",
            is_generated=generated,
        )

    def _is_excluded(self, py_file: Path, base: Path) -> bool:
        relative = py_file.relative_to(base).as_posix()
        return any(
            fnmatch(relative, pattern) or fnmatch(py_file.name, pattern)
            for pattern in self._config.exclude_patterns
        )

    def _is_generated(self, path: Path, source: str) -> bool:
        if any(fnmatch(path.name, pattern) for pattern in self._config.generated_file_patterns):
            return True
        header = source.splitlines()[: self._config.generated_header_lines]
        return any(marker in line for line in header for marker in self._config.generated_markers)
