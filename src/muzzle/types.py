"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

# Values produced by the bracket grammar: [flag], [n=3], [x=1.5], [type=slur]
ParameterValue = Union[str, int, float, bool]


@dataclass(frozen=True, slots=True)
class ParameterizedWord:
    """A banned term plus its metadata (always carries a ``type``)."""
    term: str
    parameters: Mapping[str, ParameterValue] = field(
        default_factory=lambda: {"type": "unknown"}
    )

    def __post_init__(self) -> None:
        params = dict(self.parameters)
        params.setdefault("type", "unknown")
        object.__setattr__(self, "term", self.term.strip())
        object.__setattr__(self, "parameters", MappingProxyType(params))

    def __hash__(self) -> int:
        return hash((self.term, tuple(self.parameters.items())))

    @property
    def type(self) -> str:
        return str(self.parameters["type"])


@dataclass(frozen=True, slots=True)
class MatchPosition:
    """Half-open [start, end) span into the scanned text."""
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class TextMatch:
    """A single occurrence of a banned term."""
    term: str
    position: MatchPosition
    line: int
    column: int
    context: str                   # window of text around the match
    severity: float
    parameters: Mapping[str, ParameterValue] | None = None
    replacement: str | None = None  # set only after a replacement pass

    @property
    def start(self) -> int:
        return self.position.start

    @property
    def end(self) -> int:
        return self.position.end


@dataclass(slots=True)
class TextMatchResult:
    """Result of filtering a piece of text."""
    matched: bool
    matches: list[TextMatch] = field(default_factory=list)
    severity: float = 0.0          # aggregate, not an average of matches
    error: str | None = None
    filtered_text: str | None = None
    replacement_count: int = 0


@dataclass(slots=True)
class ReplacementResult:
    """Result of rewriting matched spans."""
    original_text: str
    modified_text: str
    replaced_matches: list[TextMatch] = field(default_factory=list)
    replacement_count: int = 0
    replacements_made: bool = False


@dataclass(slots=True)
class ValidationResult:
    """Errors block use of a config, warnings are only logged."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def extend(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
