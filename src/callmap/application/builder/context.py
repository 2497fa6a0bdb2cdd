"""Traversal context: the callable whose body is being walked."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


@dataclass(slots=True)
class TraversalContext:
    """Current enclosing callable during AST traversal.

    Single optional value with save/restore discipline.
    Nesting depth follows the walk's own recursion, so no explicit stack.

    Attributes:
        current: Identity of the enclosing callable, None at module level
    """

    current: int | None = None

    @contextmanager
    def enter(self, callable_id: int) -> Iterator[int]:
        """Make callable_id current for the duration of the block.

        The previous value is restored on exit, also when the block raises.

        Args:
            callable_id: Identity of the callable whose body is entered

        Yields:
            callable_id
        """
        if callable_id is None:
            raise TypeError("callable_id must not be None")

        previous = self.current
        self.current = callable_id
        try:
            yield callable_id
        finally:
            self.current = previous

    @property
    def is_active(self) -> bool:
        """True while inside a callable body."""
        return self.current is not None
