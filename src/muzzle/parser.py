"""Word-definition grammar.

A word list is a comma-joined sequence of definitions:

    badword[type=slur][severity=8],ahh[type=profanity][blocked],plainword

Everything before the first ``[`` is the term.  Each ``[...]`` block is a
parameter: ``key=value`` or a bare ``key`` (boolean flag).  Values are
typed on the way in:

    [n=3]        -> 3            [x=1.5]       -> 1.5
    [on=TRUE]    -> True         [name="a b"]  -> "a b"
    [flag]       -> True         [type=slur]   -> "slur"

Bad definitions never fail the whole list; they are logged and skipped.
"""

from __future__ import annotations
import logging
import re
from decimal import Decimal
from typing import Any, Iterable, Mapping

from .types import ParameterizedWord, ParameterValue

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "unknown"

_BLOCK_RE = re.compile(r"\[([^\]]+)\]")
_INT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(r"[0-9]+\.[0-9]+")


def parse_word_definitions(text: str) -> list[ParameterizedWord]:
    """Parse a comma-joined word list into ParameterizedWords.

    Blank segments are dropped, as are segments whose term is empty.
    Raises TypeError for non-string input; never raises for bad content.
    """
    if not isinstance(text, str):
        raise TypeError(f"word definitions must be a string, not {type(text).__name__}")

    words: list[ParameterizedWord] = []
    for segment in text.split(","):
        segment = segment.strip()
        if not segment:
            continue
        try:
            word = _parse_definition(segment)
        except Exception as e:
            logger.warning("Skipping word definition %r: %s", segment, e)
            continue
        if word is not None:
            words.append(word)
    return words


def _parse_definition(definition: str) -> ParameterizedWord | None:
    bracket = definition.find("[")
    if bracket == -1:
        return ParameterizedWord(definition, {"type": DEFAULT_TYPE})

    term = definition[:bracket].strip()
    if not term:
        logger.debug("Dropping definition with empty term: %r", definition)
        return None
    return ParameterizedWord(term, parse_parameters(definition[bracket:]))


def parse_parameters(blocks: str) -> dict[str, ParameterValue]:
    """Parse ``[k=v][flag]...`` into an ordered dict (``type`` first)."""
    params: dict[str, ParameterValue] = {"type": DEFAULT_TYPE}
    for m in _BLOCK_RE.finditer(blocks):
        content = m.group(1)
        key, sep, raw = content.partition("=")
        key = key.strip()
        if not key:
            continue
        params[key] = _convert_value(raw.strip()) if sep else True
    return params


def _convert_value(value: str) -> ParameterValue:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.fullmatch(value):
        return int(value)
    if _FLOAT_RE.fullmatch(value):
        return float(value)
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def create_simple(
    term: str,
    type: str = DEFAULT_TYPE,
    extra: Mapping[str, Any] | None = None,
) -> ParameterizedWord:
    """Build a ParameterizedWord without going through the grammar."""
    return ParameterizedWord(term, {"type": type, **(extra or {})})


def serialize_word_definition(word: ParameterizedWord) -> str:
    """Render a word back into bracket syntax.

    Strings are double-quoted, numbers and booleans are bare (floats in
    fixed notation), blocks follow the parameter mapping's order.
    """
    blocks: list[str] = []
    for key, value in word.parameters.items():
        if isinstance(value, bool):
            blocks.append(f"{key}={'true' if value else 'false'}")
        elif isinstance(value, float):
            blocks.append(f"{key}={_format_float(value)}")
        elif isinstance(value, int):
            blocks.append(f"{key}={value}")
        elif isinstance(value, str):
            blocks.append(f'{key}="{value}"')
        # anything else has no representation in the grammar
    if not blocks:
        return word.term
    return word.term + "[" + "][".join(blocks) + "]"


def serialize_all(words: Iterable[ParameterizedWord]) -> str:
    """Comma-join serialized definitions."""
    return ",".join(serialize_word_definition(w) for w in words)


def _format_float(value: float) -> str:
    # fixed notation with a fractional part, or it reads back as str/int
    text = format(Decimal(repr(value)), "f")
    return text if "." in text else text + ".0"
