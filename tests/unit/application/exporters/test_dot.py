"""Tests for application/exporters/dot.py."""

from pathlib import Path

import pytest

from callmap.application.exporters.dot import DotRenderer
from callmap.domain.exceptions import OutputWriteError
from tests.factories import make_graph


@pytest.fixture
def graph():
    return make_graph(
        {1: "pkg.f", 2: "pkg.g", 3: "pkg.A.m"},
        method_decls={4: "pkg.I.m"},
        method_impls={4: [3]},
        definite={(1, 2)},
        potential={(1, 4)},
    )


class TestDotRenderer:
    """Tests for DotRenderer."""

    def test_render_nodes_and_edges(self, graph) -> None:
        source = DotRenderer().render(graph).source

        assert source.startswith("digraph Callgraph_for_pkg {")
        assert 'n_1 [label="pkg.f"]' in source
        assert 'n_3 [label="pkg.A.m"]' in source
        assert "n_1 -> n_2 [style=solid]" in source
        assert "n_1 -> n_3 [style=dashed]" in source

    def test_declaration_without_body_is_not_a_node(self, graph) -> None:
        source = DotRenderer().render(graph).source

        assert "pkg.I.m" not in source

    def test_write_creates_file(self, graph, tmp_path: Path) -> None:
        target = tmp_path / "out.dot"

        written = DotRenderer().write(graph, target)

        assert written == target
        assert target.read_text(encoding="utf-8") == DotRenderer().render(graph).source

    def test_write_overwrites(self, graph, tmp_path: Path) -> None:
        target = tmp_path / "out.dot"
        target.write_text("stale", encoding="utf-8")

        DotRenderer().write(graph, target)

        assert "stale" not in target.read_text(encoding="utf-8")

    def test_unwritable_path_raises(self, graph, tmp_path: Path) -> None:
        target = tmp_path / "missing" / "out.dot"

        with pytest.raises(OutputWriteError, match="Cannot write"):
            DotRenderer().write(graph, target)
