"""Output exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from callmap.domain.exceptions.base import CallMapError

if TYPE_CHECKING:
    from pathlib import Path


class OutputWriteError(CallMapError):
    """Output artifact cannot be created or written. Fatal, no retry.

    Attributes:
        path: Target file
        reason: Underlying OS error text
    """

    def __init__(self, path: Path, reason: str) -> None:
        if path is None:
            raise TypeError("path must not be None")
        if not reason:
            raise ValueError("reason must be non-empty string")

        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")
