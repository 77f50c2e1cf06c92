"""muzzle — flag and rewrite banned terms, with bracket-syntax word metadata."""

from .filter import TextFilter, FilterConfig, FilterState, ParameterHandling
from .matching import MatchOptions, match_term
from .parser import (
    create_simple,
    parse_word_definitions,
    serialize_all,
    serialize_word_definition,
)
from .providers import WordListSource, create_provider
from .replacement import ReplacementConfig, ReplacementStrategy, apply_replacements
from .severity import SeverityConfig, resolve_severity
from .config import create_filter, load_config, load_from_env, load_from_yaml, validate_config
from .errors import ConfigError, FilterDisposedError, MuzzleError, WordListError
from .types import (
    MatchPosition,
    ParameterizedWord,
    ReplacementResult,
    TextMatch,
    TextMatchResult,
)

__all__ = [
    "TextFilter", "FilterConfig", "FilterState", "ParameterHandling",
    "MatchOptions", "match_term",
    "create_simple", "parse_word_definitions", "serialize_all", "serialize_word_definition",
    "WordListSource", "create_provider",
    "ReplacementConfig", "ReplacementStrategy", "apply_replacements",
    "SeverityConfig", "resolve_severity",
    "create_filter", "load_config", "load_from_env", "load_from_yaml", "validate_config",
    "ConfigError", "FilterDisposedError", "MuzzleError", "WordListError",
    "MatchPosition", "ParameterizedWord", "ReplacementResult", "TextMatch", "TextMatchResult",
]
__version__ = "0.1.0"
