"""TextFilter — the main API.

Usage:
    from muzzle import TextFilter, FilterConfig, WordListSource

    f = TextFilter(FilterConfig(
        source=WordListSource(type="string", string="bad[type=slur],worse[severity=high]"),
    ))
    result = f.filter("This is bad and worse text")
    result.matched            # True
    result.matches[0].line    # 1
    result.severity           # 0.4 (two matches)

Each call runs: optional whitespace normalization -> word snapshot from the
provider (deduplicated by term) -> matching per word -> location, context
and severity per match -> optional replacement pass.
"""

from __future__ import annotations
import logging
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Sequence

from .errors import FilterDisposedError, WordListError
from .matching import MatchOptions, match_term
from .parser import DEFAULT_TYPE, create_simple, parse_word_definitions
from .providers import WordListProvider, WordListSource, create_provider
from .replacement import ReplacementConfig, apply_replacements
from .severity import SeverityConfig, resolve_severity
from .types import (
    MatchPosition,
    ParameterizedWord,
    ParameterValue,
    ReplacementResult,
    TextMatch,
    TextMatchResult,
)

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


class FilterState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISPOSED = "disposed"


@dataclass
class ParameterHandling:
    """How word parameters are defaulted, reported and scored."""
    # Parameters given to plain words from a provider without parameter support
    default_parameters: dict[str, ParameterValue] | None = None
    include_parameters_in_results: bool = True
    auto_convert_non_parameterized: bool = True
    severity: SeverityConfig = field(default_factory=SeverityConfig)


@dataclass
class FilterConfig:
    """Configuration for the TextFilter."""
    case_sensitive: bool = False
    whole_word: bool = True
    use_regex: bool = False
    preprocess_text: bool = False      # collapse whitespace runs before scanning
    context_radius: int = 20           # chars of context on each side of a match
    source: WordListSource | None = None   # None = the default remote list
    parameter_handling: ParameterHandling = field(default_factory=ParameterHandling)
    replacement: ReplacementConfig = field(default_factory=ReplacementConfig)


class TextFilter:
    """Flags (and optionally rewrites) banned terms in text.

    The word list comes from an injected provider, or from one built out of
    ``config.source`` on first use.  Lifecycle:
    UNINITIALIZED -> READY -> DISPOSED (terminal).
    """

    def __init__(
        self,
        config: FilterConfig | None = None,
        provider: WordListProvider | None = None,
    ) -> None:
        self.config = config or FilterConfig()
        self._provider = provider
        self._state = FilterState.UNINITIALIZED
        self._lock = threading.Lock()

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def provider(self) -> WordListProvider | None:
        return self._provider

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load the word list.  Safe to call repeatedly and concurrently.

        Raises WordListError if the word list cannot be loaded.
        """
        if self._state is FilterState.READY:
            return
        with self._lock:
            if self._state is FilterState.DISPOSED:
                raise FilterDisposedError("TextFilter has been disposed")
            if self._state is FilterState.READY:
                return
            provider = self._provider or create_provider(self.config.source)
            if not provider.is_ready():
                try:
                    provider.initialize()
                except WordListError:
                    raise
                except Exception as e:
                    raise WordListError(f"Failed to initialize word list: {e}") from e
            self._provider = provider
            self._state = FilterState.READY
        logger.debug("TextFilter ready (%s source)", self._source_type())

    def refresh(self) -> None:
        """Reload the word list from its source."""
        self._check_not_disposed()
        if self._state is not FilterState.READY:
            self.initialize()
            return
        refresh = getattr(self._provider, "refresh", None)
        if callable(refresh):
            refresh()

    def dispose(self) -> None:
        with self._lock:
            if self._state is FilterState.DISPOSED:
                return
            dispose = getattr(self._provider, "dispose", None)
            if callable(dispose):
                dispose()
            self._provider = None
            self._state = FilterState.DISPOSED

    def __enter__(self) -> TextFilter:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    def filter(
        self,
        text: str,
        *,
        case_sensitive: bool | None = None,
        whole_word: bool | None = None,
        use_regex: bool | None = None,
        replacement: ReplacementConfig | None = None,
    ) -> TextMatchResult:
        """Scan text for banned terms.

        Keyword options override the source-level and global settings for
        this call only.  Failures while scanning are reported in
        ``result.error`` rather than raised.
        """
        self._check_not_disposed()
        if self._state is not FilterState.READY:
            self.initialize()

        options = self.match_options(
            case_sensitive=case_sensitive,
            whole_word=whole_word,
            use_regex=use_regex,
        )
        try:
            return self._scan(text, options, replacement or self.config.replacement)
        except Exception as e:
            logger.warning("Filtering failed: %s", e, exc_info=True)
            return TextMatchResult(matched=False, matches=[], severity=0, error=str(e))

    def apply_replacements(
        self,
        text: str,
        matches: Sequence[TextMatch],
        config: ReplacementConfig | None = None,
    ) -> ReplacementResult:
        """Rewrite matches in text (the filter's replacement config by default)."""
        return apply_replacements(text, matches, config or self.config.replacement)

    def match_options(self, **overrides: bool | None) -> MatchOptions:
        """Effective options: global, then source, then per-call overrides."""
        cfg = self.config
        options = MatchOptions(
            case_sensitive=cfg.case_sensitive,
            whole_word=cfg.whole_word,
            use_regex=cfg.use_regex,
        )
        if cfg.source is not None:
            options = options.merged(
                case_sensitive=cfg.source.case_sensitive,
                whole_word=cfg.source.whole_word,
                use_regex=cfg.source.use_regex,
            )
        return options.merged(**overrides)

    def stats(self) -> dict[str, Any]:
        provider = self._provider
        ready = provider is not None and provider.is_ready()
        return {
            "word_count": len(provider.get_words()) if ready else 0,
            "ready": ready,
            "source_type": self._source_type(),
            "state": self._state.value,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _scan(
        self,
        text: str,
        options: MatchOptions,
        replacement: ReplacementConfig,
    ) -> TextMatchResult:
        processed = normalize_whitespace(text) if self.config.preprocess_text else text
        handling = self._parameter_handling()
        severity_config = self._severity_config()
        include_params = handling.include_parameters_in_results

        matches: list[TextMatch] = []
        for word in self._parameterized_words():
            severity = resolve_severity(word.parameters, severity_config)
            for pos in match_term(processed, word.term, options):
                matches.append(self._build_match(processed, word, pos, severity, include_params))

        result = TextMatchResult(
            matched=bool(matches),
            matches=matches,
            severity=aggregate_severity(len(matches)),
        )

        if replacement.enabled:
            rewritten = apply_replacements(processed, matches, replacement)
            by_span: dict[tuple[int, int], TextMatch] = {}
            for m in rewritten.replaced_matches:
                by_span.setdefault((m.start, m.end), m)
            result.matches = [by_span.get((m.start, m.end), m) for m in matches]
            result.filtered_text = rewritten.modified_text
            result.replacement_count = rewritten.replacement_count

        logger.debug("Scanned %d chars: %d matches", len(processed), len(matches))
        return result

    def _build_match(
        self,
        text: str,
        word: ParameterizedWord,
        pos: MatchPosition,
        severity: float,
        include_params: bool,
    ) -> TextMatch:
        radius = self.config.context_radius
        line, column = locate(text, pos.start)
        return TextMatch(
            term=word.term,
            position=pos,
            line=line,
            column=column,
            context=text[max(0, pos.start - radius):min(len(text), pos.end + radius)],
            severity=severity,
            parameters=word.parameters if include_params else None,
        )

    def _parameterized_words(self) -> list[ParameterizedWord]:
        provider = self._provider
        if provider is None or not provider.is_ready():
            return []

        getter = getattr(provider, "get_parameterized_words", None)
        if callable(getter):
            words: Iterable[ParameterizedWord] = getter()
        else:
            words = self._synthesize(provider.get_words())

        # first occurrence of a term wins
        unique: dict[str, ParameterizedWord] = {}
        for word in words:
            unique.setdefault(word.term, word)
        return list(unique.values())

    def _synthesize(self, words: Iterable[str]) -> list[ParameterizedWord]:
        handling = self._parameter_handling()
        out: list[ParameterizedWord] = []
        if not handling.auto_convert_non_parameterized:
            return [create_simple(w) for w in words if w and w.strip()]

        defaults = dict(handling.default_parameters or {})
        defaults.setdefault("type", DEFAULT_TYPE)
        for w in words:
            if not w or not w.strip():
                continue
            if "[" in w:
                out.extend(parse_word_definitions(w))
            else:
                out.append(ParameterizedWord(w, defaults))
        return out

    def _parameter_handling(self) -> ParameterHandling:
        source = self.config.source
        if source is not None and source.parameter_handling is not None:
            return source.parameter_handling
        return self.config.parameter_handling

    def _severity_config(self) -> SeverityConfig:
        base = self.config.parameter_handling.severity
        source = self.config.source
        if source is not None and source.parameter_handling is not None:
            return base.overlay(source.parameter_handling.severity)
        return base

    def _source_type(self) -> str:
        return self.config.source.type if self.config.source else "default"

    def _check_not_disposed(self) -> None:
        if self._state is FilterState.DISPOSED:
            raise FilterDisposedError("TextFilter has been disposed")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to one space and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def locate(text: str, index: int) -> tuple[int, int]:
    """1-based (line, column) of index in text."""
    line = text.count("\n", 0, index) + 1
    column = index - (text.rfind("\n", 0, index) + 1) + 1
    return line, column


def aggregate_severity(match_count: int) -> float:
    """Saturating density score: 0.2 per match, capped at 1.0."""
    return min(1.0, match_count * 0.2)
