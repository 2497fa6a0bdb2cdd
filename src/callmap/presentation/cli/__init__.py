"""Command line interface."""

from callmap.presentation.cli.main import main

__all__ = ["main"]
