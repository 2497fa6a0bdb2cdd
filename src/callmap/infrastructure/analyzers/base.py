"""Base utilities for AST analyzers."""

from __future__ import annotations

import ast
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from callmap.domain.model.location import Location


def make_location(node: ast.AST, path: Path) -> Location:
    """Create Location from AST node.

    Args:
        node: AST node with position info
        path: Source file path

    Returns:
        Location pointing to node

    Raises:
        ASTError: If node has no line info (FAIL-FIRST)
    """
    from callmap.domain.exceptions.parsing import ASTError
    from callmap.domain.model.location import Location

    lineno = getattr(node, "lineno", None)
    if lineno is None:
        raise ASTError(path, type(node).__name__)

    return Location(
        file=path,
        line=lineno,
        column=getattr(node, "col_offset", 0),
    )


def compute_module_name(file_path: Path, root_path: Path) -> str:
    """Compute fully qualified module name from file path.

    Args:
        file_path: Path to .py file
        root_path: Directory module names are relative to

    Returns:
        Fully qualified module name

    Raises:
        ParsingError: If path is invalid (FAIL-FIRST)
    """
    from callmap.domain.exceptions.parsing import ParsingError

    try:
        relative = file_path.relative_to(root_path)
    except ValueError as e:
        raise ParsingError(file_path, f"not under {root_path}") from e

    parts = list(relative.with_suffix("").parts)

    if parts and parts[-1] == "__init__":
        parts = parts[:-1]

    for part in parts:
        if not part.isidentifier():
            raise ParsingError(file_path, f"'{part}' is not valid Python identifier")

    if not parts:
        raise ParsingError(file_path, "cannot determine module name (empty)")

    return ".".join(parts)


def resolve_relative_import(
    node_module: str | None,
    node_level: int,
    package: str,
) -> str:
    """Resolve relative import to absolute module path.

    Args:
        node_module: Module part of import (after dots)
        node_level: Number of dots (0=absolute, 1=., 2=..)
        package: Package of the importing module ("" for top-level modules)

    Returns:
        Absolute module path

    Raises:
        ValueError: If relative import escapes package (FAIL-FIRST)
    """
    if node_level == 0:
        if node_module is None:
            raise ValueError("absolute import must have module")
        return node_module

    parts = package.split(".") if package else []

    # One dot is the package itself, each further dot goes one level up
    if node_level - 1 >= len(parts):
        raise ValueError(f"relative import level {node_level} exceeds depth of package '{package}'")

    base_parts = parts[: len(parts) - (node_level - 1)]

    if node_module:
        return ".".join([*base_parts, node_module])

    return ".".join(base_parts)


def shallow_walk(body: Iterable[ast.AST]) -> Iterator[ast.AST]:
    """Yield the nodes of one scope, depth-first.

    Nested functions, lambdas and classes are yielded themselves but their
    bodies belong to their own scope and are not entered.
    """
    stack: list[ast.AST] = list(reversed(list(body)))

    while stack:
        node = stack.pop()
        yield node

        match node:
            case ast.FunctionDef() | ast.AsyncFunctionDef() | ast.ClassDef() | ast.Lambda():
                pass
            case _:
                stack.extend(reversed(list(ast.iter_child_nodes(node))))


def has_decorator(decorators: list[ast.expr], name: str) -> bool:
    """Check whether a decorator named `name` is applied.

    Matches `@name`, `@mod.name` and their called forms (`@name(...)`).
    """
    return any(_decorator_name(dec) == name for dec in decorators)


def _decorator_name(dec: ast.expr) -> str | None:
    match dec:
        case ast.Call(func=func):
            return _decorator_name(func)
        case ast.Name(id=name) | ast.Attribute(attr=name):
            return name
    return None


def is_stub_body(body: list[ast.stmt]) -> bool:
    """Check if a function body declares a signature only.

    Stub statements: docstring, `...`, `pass`, `raise NotImplementedError[(...)]`.

    Args:
        body: Function body statements

    Returns:
        True if every statement is a stub statement
    """
    return all(_is_stub_statement(stmt) for stmt in body)


def _is_stub_statement(stmt: ast.stmt) -> bool:
    match stmt:
        case ast.Pass():
            return True
        case ast.Expr(value=ast.Constant(value=value)) if value is Ellipsis or isinstance(
            value, str
        ):
            return True
        case ast.Raise(exc=ast.Name(id="NotImplementedError")):
            return True
        case ast.Raise(exc=ast.Call(func=ast.Name(id="NotImplementedError"))):
            return True
    return False


def base_expression(expr: ast.expr) -> ast.expr:
    """Strip subscription from a base class: `Protocol[T]` → `Protocol`."""
    match expr:
        case ast.Subscript(value=value):
            return value
    return expr
