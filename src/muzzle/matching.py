"""Term matching: literal or regex, case-sensitive or not, whole-word or not.

Offsets are always reported against the text as given, never against a
case-folded copy.
"""

from __future__ import annotations
import logging
import re
import string
from dataclasses import dataclass, replace
from typing import Callable

from .types import MatchPosition

logger = logging.getLogger(__name__)

_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")


@dataclass(frozen=True, slots=True)
class MatchOptions:
    """How a single term is matched."""
    case_sensitive: bool = False
    whole_word: bool = False
    use_regex: bool = False

    def merged(self, **overrides: bool | None) -> MatchOptions:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def is_word_char(ch: str) -> bool:
    return ch in _WORD_CHARS


def is_whole_word(text: str, start: int, end: int) -> bool:
    """True if text[start:end] is bounded by non-word chars or the string edges."""
    if start > 0 and is_word_char(text[start - 1]):
        return False
    if end < len(text) and is_word_char(text[end]):
        return False
    return True


def match_term(
    text: str,
    term: str,
    options: MatchOptions | None = None,
) -> list[MatchPosition]:
    """Find all non-overlapping occurrences of term in text, left to right.

    In regex mode a pattern that fails to compile is matched literally
    instead (logged at WARNING); the call itself never fails on a bad term.
    """
    options = options or MatchOptions()
    if not text or not term:
        return []

    if options.use_regex:
        flags = 0 if options.case_sensitive else re.IGNORECASE
        try:
            pattern = re.compile(term, flags)
        except re.error as e:
            logger.warning(
                "Invalid regex %r (%s), falling back to literal matching", term, e
            )
        else:
            return _regex_match(text, pattern, options.whole_word)

    return _literal_match(text, term, options)


def _regex_match(text: str, pattern: re.Pattern, whole_word: bool) -> list[MatchPosition]:
    positions: list[MatchPosition] = []
    for m in pattern.finditer(text):
        start, end = m.span()
        if start == end:
            continue
        if whole_word and not is_whole_word(text, start, end):
            continue
        positions.append(MatchPosition(start, end))
    return positions


def _literal_match(text: str, term: str, options: MatchOptions) -> list[MatchPosition]:
    find: Callable[[int], tuple[int, int] | None]
    if options.case_sensitive:
        def find(pos: int) -> tuple[int, int] | None:
            idx = text.find(term, pos)
            return None if idx == -1 else (idx, idx + len(term))
    else:
        # not lower(): "İ".lower() is two code points
        pattern = re.compile(re.escape(term), re.IGNORECASE)

        def find(pos: int) -> tuple[int, int] | None:
            m = pattern.search(text, pos)
            return None if m is None else m.span()

    positions: list[MatchPosition] = []
    pos = 0
    while pos < len(text):
        span = find(pos)
        if span is None:
            break
        start, end = span
        if options.whole_word and not is_whole_word(text, start, end):
            pos = start + 1
            continue
        positions.append(MatchPosition(start, end))
        pos = end
    return positions
