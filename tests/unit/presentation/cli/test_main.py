"""Tests for the callmap command line interface."""

import json
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner
from loguru import logger

from callmap.presentation.cli.main import main

SOURCE = """
from typing import Protocol


class Greeter(Protocol):
    def greet(self) -> str: ...


class English(Greeter):
    def greet(self) -> str:
        return helper()


def helper() -> str:
    return "hello"


def run(greeter: Greeter) -> None:
    greeter.greet()
"""


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """The command replaces loguru sinks; put the default one back."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "greet.py"
    path.write_text(SOURCE, encoding="utf-8")
    return path


class TestMain:
    """Tests for the callmap command."""

    def test_text_dump_and_diagram(self, source_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "graph.dot"

        result = CliRunner().invoke(main, [str(source_file), "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert "Found fns:" in result.output
        assert "greet.English.greet -> greet.helper" in result.output
        assert "greet.run -> greet.English.greet" in result.output
        dot = output.read_text(encoding="utf-8")
        assert dot.startswith("digraph Callgraph_for_greet {")
        assert "[style=dashed]" in dot

    def test_default_output_path(self, source_file: Path) -> None:
        runner = CliRunner()

        with runner.isolated_filesystem():
            result = runner.invoke(main, [str(source_file)])

            assert result.exit_code == 0, result.output
            assert Path("out.dot").is_file()

    def test_json_format(self, source_file: Path, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, [str(source_file), "-o", str(tmp_path / "g.dot"), "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "greet"
        assert {"caller": "greet.run", "callee": "greet.English.greet", "kind": "potential"} in data[
            "edges"
        ]

    def test_rich_format(self, source_file: Path, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, [str(source_file), "-o", str(tmp_path / "g.dot"), "-f", "rich"]
        )

        assert result.exit_code == 0, result.output
        assert "CALL GRAPH" in result.output

    def test_unwritable_output_exits_1(self, source_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "missing" / "graph.dot"

        result = CliRunner().invoke(main, [str(source_file), "--output", str(output)])

        assert result.exit_code == 1
        assert "Cannot write" in result.output

    def test_syntax_error_exits_1(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.py"
        bad.write_text("def broken(:\n", encoding="utf-8")

        result = CliRunner().invoke(main, [str(bad), "-o", str(tmp_path / "g.dot")])

        assert result.exit_code == 1
        assert "syntax error" in result.output

    def test_missing_path_is_usage_error(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, [str(tmp_path / "nope.py")])

        assert result.exit_code == 2

    def test_exclude_option(self, tmp_path: Path) -> None:
        package = tmp_path / "app"
        package.mkdir()
        (package / "__init__.py").write_text("", encoding="utf-8")
        (package / "keep.py").write_text("def kept(): pass\n", encoding="utf-8")
        (package / "skip.py").write_text("def skipped(): pass\n", encoding="utf-8")

        result = CliRunner().invoke(
            main, [str(package), "-o", str(tmp_path / "g.dot"), "--exclude", "skip.py"]
        )

        assert result.exit_code == 0, result.output
        assert "app.keep.kept" in result.output
        assert "skipped" not in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "callmap" in result.output
