"""Tests for domain/model/configuration.py."""

from pathlib import Path

import pytest

from callmap.domain.model.configuration import AnalysisConfig


class TestAnalysisConfigDefaults:
    """Tests for default configuration."""

    def test_defaults(self) -> None:
        config = AnalysisConfig()

        assert config.output_path == Path("out.dot")
        assert config.exclude_patterns == ()
        assert "@generated" in config.generated_markers
        assert "Protocol" in config.interface_markers
        assert "ABC" in config.interface_markers

    def test_is_frozen(self) -> None:
        config = AnalysisConfig()

        with pytest.raises(AttributeError):
            config.output_path = Path("x.dot")  # type: ignore[misc]


class TestAnalysisConfigFailFirst:
    """Tests for FAIL-FIRST validation."""

    def test_none_output_raises(self) -> None:
        with pytest.raises(TypeError, match="output_path must not be None"):
            AnalysisConfig(output_path=None)  # type: ignore[arg-type]

    def test_header_lines_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="generated_header_lines must be >= 1"):
            AnalysisConfig(generated_header_lines=0)

    def test_empty_marker_raises(self) -> None:
        with pytest.raises(ValueError, match="generated_markers"):
            AnalysisConfig(generated_markers=("",))

    def test_empty_pattern_raises(self) -> None:
        with pytest.raises(ValueError, match="patterns must not be empty"):
            AnalysisConfig(exclude_patterns=("",))

    def test_no_interface_markers_raises(self) -> None:
        with pytest.raises(ValueError, match="interface marker"):
            AnalysisConfig(protocol_markers=frozenset(), abc_markers=frozenset())
