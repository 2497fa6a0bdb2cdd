"""Exporters for finalized call graphs."""

from callmap.application.exporters._base import BaseDumper
from callmap.application.exporters.console import ConsoleDumper
from callmap.application.exporters.dot import DotRenderer
from callmap.application.exporters.json_exporter import JsonExporter
from callmap.application.exporters.plain_text import PlainTextDumper
from callmap.application.exporters.view import CallGraphView

__all__ = [
    "BaseDumper",
    "CallGraphView",
    "ConsoleDumper",
    "DotRenderer",
    "JsonExporter",
    "PlainTextDumper",
]
