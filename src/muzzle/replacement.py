"""Replacement engine: rewrite matched spans of text.

Usage:
    from muzzle.replacement import ReplacementConfig, apply_replacements

    result = apply_replacements(
        "This is bad and worse text",
        matches,
        ReplacementConfig(enabled=True),
    )
    print(result.modified_text)   # "This is *** and ***** text"

Matches are applied left to right against a running buffer.  Each
replacement can change the buffer's length, so every later span is shifted
by the accumulated length delta before it is applied.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Sequence, Union

from .matching import is_whole_word
from .types import ReplacementResult, TextMatch, ValidationResult

MAX_CUSTOM_STRING = 1000


class ReplacementStrategy(str, Enum):
    ASTERISKS = "asterisks"
    CUSTOM = "custom"
    REMOVE = "remove"
    NONE = "none"


@dataclass
class ReplacementConfig:
    """How matched spans are rewritten."""
    enabled: bool = False
    strategy: ReplacementStrategy = ReplacementStrategy.ASTERISKS
    custom_string: str = "[REDACTED]"
    asterisk_char: str = "*"
    asterisk_count: Union[str, int] = "full"   # "full" = one per matched char
    preserve_case: bool = True
    # False: removal collapses the whitespace left on both sides into one char
    preserve_boundaries: bool = True
    # True: leave matches that sit inside a larger word untouched
    whole_word_only: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.strategy, str) and not isinstance(self.strategy, ReplacementStrategy):
            try:
                self.strategy = ReplacementStrategy(self.strategy.lower())
            except ValueError:
                pass  # reported by validate()

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        if not isinstance(self.strategy, ReplacementStrategy):
            result.errors.append(f"Invalid replacement strategy: {self.strategy!r}")
        if self.strategy is ReplacementStrategy.CUSTOM and not self.custom_string:
            result.errors.append("Custom replacement strategy requires a custom string")
        if self.custom_string and len(self.custom_string) > MAX_CUSTOM_STRING:
            result.warnings.append("Very long custom replacement string may impact performance")
        if self.asterisk_count != "full" and (
            isinstance(self.asterisk_count, bool)
            or not isinstance(self.asterisk_count, int)
            or self.asterisk_count < 1
        ):
            result.errors.append('Asterisk count must be a positive number or "full"')
        if not isinstance(self.asterisk_char, str) or len(self.asterisk_char) != 1:
            result.errors.append("Asterisk character must be a single character")
        return result


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _asterisks(word: str, config: ReplacementConfig) -> str:
    """Mask sized to the matched text, which differs from the term for regex terms."""
    char = config.asterisk_char or "*"
    if config.asterisk_count == "full" or not config.asterisk_count:
        count = len(word)
    else:
        count = max(1, int(config.asterisk_count))
    return char * count


def _custom(word: str, config: ReplacementConfig) -> str:
    return config.custom_string


def _remove(word: str, config: ReplacementConfig) -> str:
    return ""


def strategy_for(config: ReplacementConfig) -> Callable[[str, ReplacementConfig], str] | None:
    """The strategy that handles this config, or None."""
    if config.strategy is ReplacementStrategy.ASTERISKS:
        return _asterisks
    if config.strategy is ReplacementStrategy.CUSTOM:
        return _custom if config.custom_string else None
    if config.strategy is ReplacementStrategy.REMOVE:
        return _remove
    return None


def preserve_case(word: str, replacement: str) -> str:
    """Give the replacement the matched word's casing pattern."""
    if not word or not replacement:
        return replacement
    if word == word.upper():
        return replacement.upper()
    if word == word.lower():
        return replacement.lower()
    if word[0] == word[0].upper():
        return replacement[0].upper() + replacement[1:].lower()
    return replacement


def generate_replacement(word: str, config: ReplacementConfig) -> str:
    """Replacement text for one matched word.

    A config no strategy can handle yields the word unchanged.
    """
    strategy = strategy_for(config)
    if strategy is None:
        return word
    text = strategy(word, config)
    if config.preserve_case:
        text = preserve_case(word, text)
    return text


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def apply_replacements(
    original_text: str,
    matches: Sequence[TextMatch],
    config: ReplacementConfig | None,
) -> ReplacementResult:
    """Rewrite every match in original_text according to config.

    Match positions refer to original_text.  Returns the rewritten text and
    a copy of each replaced match with ``replacement`` set.
    """
    if config is None or not config.enabled or not matches or strategy_for(config) is None:
        return ReplacementResult(original_text=original_text, modified_text=original_text)

    buf = original_text
    shift = 0        # len(buf) - len(original_text) so far
    cursor = 0       # end of the last rewritten region, in buf coordinates
    replaced: list[TextMatch] = []

    # sorted() is stable: equal starts keep their input order
    for match in sorted(matches, key=lambda m: m.position.start):
        start, end = match.position.start, match.position.end
        if config.whole_word_only and not is_whole_word(original_text, start, end):
            continue

        word = _matched_word(original_text, match)
        repl = generate_replacement(word, config)

        s = max(start + shift, cursor)
        e = end + shift
        if e <= s:
            continue   # fully inside an earlier replacement

        buf = buf[:s] + repl + buf[e:]
        shift += len(repl) - (e - s)
        cursor = s + len(repl)

        if config.strategy is ReplacementStrategy.REMOVE and not config.preserve_boundaries:
            if 0 < cursor < len(buf) and buf[cursor - 1].isspace() and buf[cursor].isspace():
                buf = buf[:cursor] + buf[cursor + 1:]
                shift -= 1

        replaced.append(replace(match, replacement=repl))

    return ReplacementResult(
        original_text=original_text,
        modified_text=buf,
        replaced_matches=replaced,
        replacement_count=len(replaced),
        replacements_made=len(replaced) > 0,
    )


def _matched_word(text: str, match: TextMatch) -> str:
    start, end = match.position.start, match.position.end
    if 0 <= start < end <= len(text):
        return text[start:end]
    return match.term
