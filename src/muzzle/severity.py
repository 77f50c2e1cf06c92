"""Severity resolution.

A match's severity (0-10) comes from three layers:

  1. the configured default (1 when unset)
  2. an explicit ``severity`` parameter on the word, numeric or named
  3. the word's ``type``, looked up in the configured by-type table and
     then in BUILTIN_TYPE_SEVERITY

The type can only raise the result: ``max(explicit, type_severity)``.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping

from .types import ParameterValue

NAMED_SEVERITIES: dict[str, int] = {
    "low": 1,
    "medium": 3,
    "high": 5,
    "critical": 10,
}

BUILTIN_TYPE_SEVERITY: dict[str, int] = {
    "slur": 8,
    "profanity": 5,
    "hate": 9,
    "harassment": 7,
    "violence": 6,
    "adult": 4,
    "unknown": 1,
}

MIN_SEVERITY = 0
MAX_SEVERITY = 10
FALLBACK_SEVERITY = 1


@dataclass
class SeverityConfig:
    """One configuration layer (global or per word-list source)."""
    default_severity: float | None = None
    by_type: dict[str, float] = field(default_factory=dict)

    def overlay(self, other: SeverityConfig | None) -> SeverityConfig:
        """Merge ``other`` on top of this layer; other's entries win."""
        if other is None:
            return self
        by_type = {k.lower(): v for k, v in self.by_type.items()}
        by_type.update((k.lower(), v) for k, v in other.by_type.items())
        default = other.default_severity
        if default is None:
            default = self.default_severity
        return SeverityConfig(default_severity=default, by_type=by_type)


def resolve_severity(
    parameters: Mapping[str, ParameterValue],
    config: SeverityConfig | None = None,
) -> float:
    config = config or SeverityConfig()
    severity = config.default_severity
    if severity is None:
        severity = FALLBACK_SEVERITY

    explicit = parameters.get("severity")
    if isinstance(explicit, bool):
        pass  # [severity] flag carries no level
    elif isinstance(explicit, (int, float)):
        severity = max(MIN_SEVERITY, min(MAX_SEVERITY, explicit))
    elif isinstance(explicit, str):
        severity = NAMED_SEVERITIES.get(explicit.lower(), severity)

    word_type = parameters.get("type")
    if word_type is not None:
        severity = max(severity, type_severity(str(word_type), config))

    return severity


def type_severity(word_type: str, config: SeverityConfig | None = None) -> float:
    """Configured severity for a type, else the built-in one, else 1."""
    key = word_type.lower()
    if config is not None:
        configured = config.by_type.get(key)
        if configured is None:
            configured = _lookup_ci(config.by_type, key)
        if configured is not None:
            return configured
    return BUILTIN_TYPE_SEVERITY.get(key, FALLBACK_SEVERITY)


def _lookup_ci(table: Mapping[str, float], key: str) -> float | None:
    for k, v in table.items():
        if k.lower() == key:
            return v
    return None
