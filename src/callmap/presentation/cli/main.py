"""callmap command: analyze a package, write a DOT diagram, print a dump."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from loguru import logger

from callmap import __version__
from callmap.application.exporters import ConsoleDumper, DotRenderer, JsonExporter, PlainTextDumper
from callmap.application.services import CallGraphAnalyzer
from callmap.domain.exceptions import OutputWriteError, ParsingError
from callmap.domain.model.configuration import AnalysisConfig

FORMATS = ("text", "rich", "json")


def configure_logging(verbose: bool) -> None:
    """Replace loguru's default sink with one on stderr."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@click.command(name="callmap")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("out.dot"),
    show_default=True,
    help="Where to write the DOT diagram.",
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default="text",
    show_default=True,
    help="Format of the dump printed to stdout.",
)
@click.option(
    "--exclude",
    multiple=True,
    metavar="PATTERN",
    help="Glob pattern of source files to skip (repeatable).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
@click.version_option(__version__, prog_name="callmap")
def main(
    path: Path,
    output: Path,
    output_format: str,
    exclude: tuple[str, ...],
    verbose: bool,
) -> None:
    """Build the call graph of PATH (a .py file or a package directory)."""
    configure_logging(verbose)
    config = AnalysisConfig(output_path=output, exclude_patterns=exclude)

    try:
        graph = CallGraphAnalyzer(config).analyze(path)
        DotRenderer().write(graph, config.output_path)
    except (ParsingError, OutputWriteError) as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    match output_format:
        case "rich":
            click.echo(ConsoleDumper(force_terminal=sys.stdout.isatty()).dump(graph), nl=False)
        case "json":
            click.echo(JsonExporter().export(graph))
        case _:
            PlainTextDumper().dump(graph)
