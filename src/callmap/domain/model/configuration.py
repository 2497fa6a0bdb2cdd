"""Analysis configuration.

User-provided settings for one analysis run.
Defaults reproduce the behavior of a plain `callmap PATH` invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Base names that make a class an interface
DEFAULT_PROTOCOL_MARKERS = frozenset(
    {
        "Protocol",
        "typing.Protocol",
        "typing_extensions.Protocol",
    }
)

DEFAULT_ABC_MARKERS = frozenset(
    {
        "ABC",
        "abc.ABC",
        "ABCMeta",
        "abc.ABCMeta",
    }
)


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Configuration DTO for one analysis run.

    Immutable configuration object with FAIL-FIRST validation.

    Attributes:
        output_path: Where the DOT diagram is written
        exclude_patterns: Glob patterns for source files to skip
        generated_markers: Header markers that flag a file as generated
        generated_header_lines: How many leading lines are searched for markers
        generated_file_patterns: Glob patterns for generated file names
        protocol_markers: Base names that make a class a Protocol interface
        abc_markers: Base / metaclass names that make a class an ABC interface
    """

    output_path: Path = Path("out.dot")
    exclude_patterns: tuple[str, ...] = ()
    generated_markers: tuple[str, ...] = ("@generated", "DO NOT EDIT")
    generated_header_lines: int = 5
    generated_file_patterns: tuple[str, ...] = ("*_pb2.py", "*_pb2_grpc.py")
    protocol_markers: frozenset[str] = field(default=DEFAULT_PROTOCOL_MARKERS)
    abc_markers: frozenset[str] = field(default=DEFAULT_ABC_MARKERS)

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.output_path is None:
            raise TypeError("output_path must not be None")
        if str(self.output_path) == "":
            raise ValueError("output_path must not be empty")

        if self.generated_header_lines < 1:
            raise ValueError(
                f"generated_header_lines must be >= 1, got {self.generated_header_lines}"
            )

        for marker in self.generated_markers:
            if not marker:
                raise ValueError("generated_markers must not contain empty strings")

        for pattern in (*self.exclude_patterns, *self.generated_file_patterns):
            if not pattern:
                raise ValueError("patterns must not be empty strings")

        if not self.protocol_markers and not self.abc_markers:
            raise ValueError("at least one interface marker is required")

    @property
    def interface_markers(self) -> frozenset[str]:
        """All base names that make a class an interface."""
        return self.protocol_markers | self.abc_markers
