"""YAML/dict/environment config loader for muzzle.

Supports loading from a YAML file, a plain dict (for embedding in a larger
config), or MUZZLE_* environment variables.

Example YAML:

    muzzle:
      case_sensitive: false
      whole_word: true
      preprocess_text: false
      source:
        type: file               # string | array | file | url | default
        file_path: ~/.muzzle/words.txt
        format: text             # text | csv | json
        refresh_interval: 3600   # seconds
      parameter_handling:
        include_parameters_in_results: true
        default_parameters:
          type: profanity
        severity:
          default_severity: 1
          by_type:
            slur: 9
      replacement:
        enabled: true
        strategy: asterisks      # asterisks | custom | remove | none
        asterisk_char: "*"
"""

from __future__ import annotations
import copy
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError
from .filter import FilterConfig, ParameterHandling, TextFilter
from .providers import FORMATS, SOURCE_TYPES, WordListSource
from .replacement import ReplacementConfig, ReplacementStrategy
from .severity import SeverityConfig
from .types import ValidationResult

logger = logging.getLogger(__name__)

MIN_REFRESH_INTERVAL = 60   # seconds

_TRUE = {"1", "true", "yes", "on"}


def load_config(data: Mapping[str, Any] | None) -> FilterConfig:
    """Build a FilterConfig from a dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "muzzle" key or flat
    if "muzzle" in data:
        data = data["muzzle"] or {}

    return FilterConfig(
        case_sensitive=bool(data.get("case_sensitive", False)),
        whole_word=bool(data.get("whole_word", True)),
        use_regex=bool(data.get("use_regex", False)),
        preprocess_text=bool(data.get("preprocess_text", False)),
        context_radius=int(data.get("context_radius", 20)),
        source=_load_source(data.get("source")),
        parameter_handling=_load_handling(data.get("parameter_handling")) or ParameterHandling(),
        replacement=_load_replacement(data.get("replacement")),
    )


def _load_source(data: Mapping[str, Any] | None) -> WordListSource | None:
    if not data:
        return None
    interval = data.get("refresh_interval")
    return WordListSource(
        type=str(data.get("type", "string")),
        string=data.get("string"),
        array=data.get("array"),
        file_path=data.get("file_path"),
        url=data.get("url"),
        format=str(data.get("format", "text")),
        refresh_interval=float(interval) if interval is not None else None,
        timeout=float(data.get("timeout", 10.0)),
        case_sensitive=data.get("case_sensitive"),
        whole_word=data.get("whole_word"),
        use_regex=data.get("use_regex"),
        parameter_handling=_load_handling(data.get("parameter_handling")),
    )


def _load_handling(data: Mapping[str, Any] | None) -> ParameterHandling | None:
    if data is None:
        return None
    severity = data.get("severity") or {}
    return ParameterHandling(
        default_parameters=data.get("default_parameters"),
        include_parameters_in_results=data.get("include_parameters_in_results", True),
        auto_convert_non_parameterized=data.get("auto_convert_non_parameterized", True),
        severity=SeverityConfig(
            default_severity=severity.get("default_severity"),
            by_type=dict(severity.get("by_type") or {}),
        ),
    )


def _load_replacement(data: Mapping[str, Any] | None) -> ReplacementConfig:
    data = data or {}
    defaults = ReplacementConfig()
    return ReplacementConfig(
        enabled=bool(data.get("enabled", defaults.enabled)),
        strategy=data.get("strategy", defaults.strategy),
        custom_string=data.get("custom_string", defaults.custom_string),
        asterisk_char=data.get("asterisk_char", defaults.asterisk_char),
        asterisk_count=data.get("asterisk_count", defaults.asterisk_count),
        preserve_case=bool(data.get("preserve_case", defaults.preserve_case)),
        preserve_boundaries=bool(data.get("preserve_boundaries", defaults.preserve_boundaries)),
        whole_word_only=bool(data.get("whole_word_only", defaults.whole_word_only)),
    )


def load_from_yaml(path: str | Path) -> FilterConfig:
    """Load config from a YAML file."""
    with open(Path(path).expanduser(), encoding="utf-8") as f:
        return load_config(yaml.safe_load(f))


def load_from_env(
    prefix: str = "MUZZLE_",
    base: FilterConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> FilterConfig:
    """Overlay environment variables onto base (or the defaults).

    Recognized (after the prefix): CASE_SENSITIVE, WHOLE_WORD, USE_REGEX,
    PREPROCESS, WORDS, WORDS_FILE, WORDS_URL, REPLACEMENT, CUSTOM_STRING,
    DEFAULT_SEVERITY.
    """
    env = os.environ if environ is None else environ
    cfg = copy.deepcopy(base) if base is not None else FilterConfig()

    def get(name: str) -> str | None:
        value = env.get(prefix + name)
        return value if value not in (None, "") else None

    for name, attr in (
        ("CASE_SENSITIVE", "case_sensitive"),
        ("WHOLE_WORD", "whole_word"),
        ("USE_REGEX", "use_regex"),
        ("PREPROCESS", "preprocess_text"),
    ):
        value = get(name)
        if value is not None:
            setattr(cfg, attr, value.lower() in _TRUE)

    if get("WORDS") is not None:
        cfg.source = WordListSource(type="string", string=get("WORDS"))
    elif get("WORDS_FILE") is not None:
        cfg.source = WordListSource(type="file", file_path=get("WORDS_FILE"))
    elif get("WORDS_URL") is not None:
        cfg.source = WordListSource(type="url", url=get("WORDS_URL"))

    strategy = get("REPLACEMENT")
    if strategy is not None:
        try:
            cfg.replacement.strategy = ReplacementStrategy(strategy.lower())
        except ValueError as e:
            raise ConfigError([f"Invalid replacement strategy: {strategy!r}"]) from e
        cfg.replacement.enabled = cfg.replacement.strategy is not ReplacementStrategy.NONE
    if get("CUSTOM_STRING") is not None:
        cfg.replacement.custom_string = get("CUSTOM_STRING")

    default_severity = get("DEFAULT_SEVERITY")
    if default_severity is not None:
        try:
            cfg.parameter_handling.severity.default_severity = float(default_severity)
        except ValueError as e:
            raise ConfigError([f"{prefix}DEFAULT_SEVERITY must be a number"]) from e
    return cfg


def validate_config(config: FilterConfig) -> ValidationResult:
    """Check a config; errors make it unusable, warnings are advisory."""
    result = ValidationResult()

    if config.context_radius < 0:
        result.errors.append("Context radius must not be negative")

    source = config.source
    if source is not None:
        kind = (source.type or "").lower()
        if kind not in SOURCE_TYPES:
            result.errors.append(f"Unknown word list source type: {source.type!r}")
        if kind == "string" and source.string is None:
            result.errors.append("String word list source requires a string value")
        if kind == "array" and (source.array is None or isinstance(source.array, (str, bytes))):
            result.errors.append("Array word list source requires a list value")
        if kind == "file" and not source.file_path:
            result.errors.append("File word list source requires a file path")
        if kind == "url" and not source.url:
            result.errors.append("URL word list source requires a URL")
        if (source.format or "").lower() not in FORMATS:
            result.errors.append(f"Unknown word list format: {source.format!r}")
        if (
            kind in ("file", "url", "default")
            and source.refresh_interval
            and source.refresh_interval < MIN_REFRESH_INTERVAL
        ):
            result.warnings.append("Refresh interval less than 1 minute may cause excessive requests")

    result.extend(config.replacement.validate())
    return result


def create_filter(config: Mapping[str, Any] | FilterConfig) -> TextFilter:
    """Create a TextFilter from a config dict or FilterConfig.

    Raises ConfigError listing every validation error.
    """
    cfg = config if isinstance(config, FilterConfig) else load_config(config)
    validation = validate_config(cfg)
    if not validation.ok:
        raise ConfigError(validation.errors)
    for warning in validation.warnings:
        logger.warning("Configuration warning: %s", warning)
    return TextFilter(cfg)
