"""Word-list providers.

A provider turns some source (a string, a list, a file, a URL) into an
immutable snapshot of ParameterizedWords.  Refreshing swaps the snapshot in
one assignment, so a filter call that already holds the old tuple keeps
reading a consistent list.

    provider = create_provider(WordListSource(type="string", string="bad[type=slur],worse"))
    provider.initialize()
    provider.get_parameterized_words()
"""

from __future__ import annotations
import json
import logging
import re
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Protocol, Sequence, runtime_checkable

import requests

from .errors import WordListError
from .parser import create_simple, parse_word_definitions
from .types import ParameterizedWord

if TYPE_CHECKING:
    from .filter import ParameterHandling

logger = logging.getLogger(__name__)

DEFAULT_WORDLIST_URL = (
    "https://raw.githubusercontent.com/coffee-and-fun/"
    "google-profanity-words/main/data/en.txt"
)
DEFAULT_REFRESH_INTERVAL = 24 * 60 * 60   # seconds
FORMATS = ("text", "csv", "json")
SOURCE_TYPES = ("string", "array", "file", "url", "default")

_SPLIT_RE = re.compile(r"[,\s]+")


@dataclass
class WordListSource:
    """Where a word list comes from, plus source-level overrides."""
    type: str = "string"               # string | array | file | url | default
    string: str | None = None
    array: Sequence[Any] | None = None
    file_path: str | None = None
    url: str | None = None
    format: str = "text"               # text | csv | json
    refresh_interval: float | None = None   # seconds; None = never
    timeout: float = 10.0              # HTTP timeout, seconds
    # Matching overrides (None = inherit the filter-level setting)
    case_sensitive: bool | None = None
    whole_word: bool | None = None
    use_regex: bool | None = None
    parameter_handling: ParameterHandling | None = None


@runtime_checkable
class WordListProvider(Protocol):
    """What the filter needs from a word list.

    ``get_parameterized_words()`` is optional; without it the filter builds
    words from ``get_words()``.
    """

    def initialize(self) -> None: ...
    def get_words(self) -> list[str]: ...
    def is_ready(self) -> bool: ...
    def refresh(self) -> None: ...
    def dispose(self) -> None: ...


class _SnapshotProvider:
    """Shared snapshot handling for the concrete providers."""

    def __init__(self, source: WordListSource) -> None:
        self.source = source
        self._words: tuple[ParameterizedWord, ...] = ()
        self._ready = False

    def _publish(self, words: Iterable[ParameterizedWord]) -> None:
        self._words = tuple(words)
        self._ready = True

    def get_words(self) -> list[str]:
        return [w.term for w in self.get_parameterized_words()]

    def get_parameterized_words(self) -> list[ParameterizedWord]:
        return list(self._words)

    def is_ready(self) -> bool:
        return self._ready

    def refresh(self) -> None:
        self.initialize()

    def initialize(self) -> None:
        raise NotImplementedError

    def dispose(self) -> None:
        self._words = ()
        self._ready = False

    @property
    def size(self) -> int:
        return len(self._words)


class StringWordListProvider(_SnapshotProvider):
    """Comma-joined definitions in the bracket grammar."""

    def initialize(self) -> None:
        if self.source.string is None:
            raise WordListError("String word list source requires a string value")
        self._publish(parse_word_definitions(self.source.string))


class ArrayWordListProvider(_SnapshotProvider):
    """A list of plain strings, bracketed definitions, words or dicts."""

    def initialize(self) -> None:
        if self.source.array is None or isinstance(self.source.array, (str, bytes)):
            raise WordListError("Array word list source requires a list value")
        self._publish(coerce_words(self.source.array))


class FileWordListProvider(_SnapshotProvider):
    """A word list file in text, csv or json format."""

    def __init__(self, source: WordListSource) -> None:
        super().__init__(source)
        self._loaded_at = 0.0
        self._lock = threading.Lock()

    def initialize(self) -> None:
        with self._lock:
            self._publish(self._load())
            self._loaded_at = time.monotonic()
        logger.info("Loaded %d words from %s", self.size, self._describe())

    def get_parameterized_words(self) -> list[ParameterizedWord]:
        if not self._ready:
            self.initialize()
        elif self._stale():
            try:
                self.initialize()
            except WordListError as e:
                logger.warning("Failed to refresh word list from %s: %s", self._describe(), e)
        return list(self._words)

    def dispose(self) -> None:
        super().dispose()
        self._loaded_at = 0.0

    def _stale(self) -> bool:
        interval = self.source.refresh_interval
        return bool(interval) and time.monotonic() - self._loaded_at > interval

    def _describe(self) -> str:
        return str(self.source.file_path)

    def _fetch(self) -> str:
        if not self.source.file_path:
            raise WordListError("File word list source requires a file path")
        path = Path(self.source.file_path).expanduser()
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise WordListError(f"Failed to read word list file {path}: {e}") from e

    def _load(self) -> list[ParameterizedWord]:
        return parse_content(self._fetch(), self.source.format)


class UrlWordListProvider(FileWordListProvider):
    """A word list fetched over HTTP(S)."""

    default_type = "unknown"

    def _describe(self) -> str:
        return str(self.source.url)

    def _fetch(self) -> str:
        if not self.source.url:
            raise WordListError("URL word list source requires a URL")
        try:
            resp = requests.get(
                self.source.url,
                headers={"Accept": "text/plain, application/json"},
                timeout=self.source.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise WordListError(f"Failed to fetch word list from {self.source.url}: {e}") from e
        return resp.text

    def _load(self) -> list[ParameterizedWord]:
        return parse_content(self._fetch(), self.source.format, default_type=self.default_type)


class DefaultWordListProvider(UrlWordListProvider):
    """The public google-profanity-words list; every entry is typed profanity."""

    default_type = "profanity"

    def __init__(self, source: WordListSource | None = None) -> None:
        source = source or WordListSource(type="default")
        # the caller's source is left untouched
        source = replace(
            source,
            url=source.url or DEFAULT_WORDLIST_URL,
            refresh_interval=(
                DEFAULT_REFRESH_INTERVAL
                if source.refresh_interval is None
                else source.refresh_interval
            ),
        )
        super().__init__(source)


# ---------------------------------------------------------------------------
# Content parsing
# ---------------------------------------------------------------------------

def parse_content(
    content: str,
    format: str = "text",
    *,
    default_type: str = "unknown",
) -> list[ParameterizedWord]:
    """Parse raw word-list content.

    text: bracket grammar when brackets are present, else words split on
          commas and whitespace.
    csv:  one entry per line (an entry may carry brackets).
    json: a list of strings or {"term": ..., "parameters": {...}} objects.
    """
    fmt = (format or "text").lower()
    if fmt == "json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise WordListError(f"Invalid JSON word list: {e}") from e
        if not isinstance(data, list):
            raise WordListError("JSON word list must be an array")
        return coerce_words(data, default_type=default_type)

    if fmt == "csv":
        entries: Iterable[str] = (line.strip() for line in content.splitlines())
        return coerce_words([e for e in entries if e], default_type=default_type)

    if "[" in content and "]" in content:
        return parse_word_definitions(content.replace("\r", "").replace("\n", ","))
    return [
        create_simple(w, default_type)
        for w in _SPLIT_RE.split(content)
        if w.strip()
    ]


def coerce_words(
    items: Iterable[Any],
    *,
    default_type: str = "unknown",
) -> list[ParameterizedWord]:
    """Normalize mixed list items into ParameterizedWords, skipping junk."""
    words: list[ParameterizedWord] = []
    for item in items:
        if isinstance(item, ParameterizedWord):
            words.append(item)
        elif isinstance(item, str):
            if "[" in item and "]" in item:
                words.extend(parse_word_definitions(item))
            elif item.strip():
                words.append(create_simple(item.strip(), default_type))
        elif isinstance(item, dict):
            term = item.get("term", item.get("word"))
            if isinstance(term, str) and term.strip():
                params = item.get("parameters") or {}
                if not isinstance(params, dict):
                    logger.warning("Ignoring non-mapping parameters for %r", term)
                    params = {}
                params = {"type": default_type, **params}
                words.append(ParameterizedWord(term, params))
            else:
                logger.warning("Skipping word-list entry without a term: %r", item)
        elif item is not None:
            words.append(create_simple(str(item), default_type))
    return words


def create_provider(source: WordListSource | None) -> WordListProvider:
    """Build the provider for a source (the default list when None)."""
    if source is None:
        return DefaultWordListProvider()
    kind = (source.type or "").lower()
    if kind == "string":
        return StringWordListProvider(source)
    if kind == "array":
        return ArrayWordListProvider(source)
    if kind == "file":
        return FileWordListProvider(source)
    if kind == "url":
        return UrlWordListProvider(source)
    if kind == "default":
        return DefaultWordListProvider(source)
    raise WordListError(f"Unknown word list source type: {source.type!r}")
