"""Tests for the matching engine."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import logging

from muzzle.matching import MatchOptions, is_whole_word, match_term
from muzzle.types import MatchPosition


def spans(positions):
    return [(p.start, p.end) for p in positions]


WHOLE = MatchOptions(whole_word=True)


# ── Whole word ───────────────────────────────────────────────────────

def test_whole_word_rejects_embedded_term():
    assert match_term("badminton", "bad", WHOLE) == []


def test_whole_word_accepts_bounded_term():
    assert match_term("bad idea", "bad", WHOLE) == [MatchPosition(0, 3)]


def test_whole_word_boundaries():
    assert is_whole_word("bad", 0, 3)
    assert is_whole_word("(bad)", 1, 4)
    assert not is_whole_word("_bad", 1, 4)
    assert not is_whole_word("bad9", 0, 3)
    # only ASCII letters/digits/_ count as word characters
    assert is_whole_word("ébadé", 1, 4)


def test_whole_word_retries_inside_rejected_match():
    # "a a" at 1 is preceded by "x"; the next candidate starts inside it
    assert spans(match_term("xa a a", "a a", WHOLE)) == [(3, 6)]


def test_partial_matching_finds_substrings():
    assert spans(match_term("badminton is bad", "bad")) == [(0, 3), (13, 16)]


# ── Literal mode ─────────────────────────────────────────────────────

def test_literal_matches_do_not_overlap():
    assert spans(match_term("aaaa", "aa")) == [(0, 2), (2, 4)]


def test_case_insensitive_reports_original_offsets():
    text = "Bad BAD bad"
    assert spans(match_term(text, "bad", WHOLE)) == [(0, 3), (4, 7), (8, 11)]
    assert text[4:7] == "BAD"


def test_case_sensitive():
    opts = MatchOptions(case_sensitive=True)
    assert spans(match_term("Bad BAD bad", "bad", opts)) == [(8, 11)]


def test_case_insensitive_offsets_survive_length_changing_lowercase():
    # "İ".lower() is two code points; offsets must still index the original
    text = "İİ bad"
    assert spans(match_term(text, "bad", WHOLE)) == [(3, 6)]


def test_literal_mode_escapes_regex_characters():
    assert spans(match_term("what a f*ck", "f*ck")) == [(7, 11)]


def test_empty_inputs():
    assert match_term("", "bad") == []
    assert match_term("bad", "") == []


# ── Regex mode ───────────────────────────────────────────────────────

def test_regex_mode():
    opts = MatchOptions(use_regex=True, whole_word=True)
    assert spans(match_term("bad bid bud bxd", r"b[aiu]d", opts)) == [(0, 3), (4, 7), (8, 11)]


def test_regex_mode_case_insensitive_by_default():
    opts = MatchOptions(use_regex=True)
    assert spans(match_term("BAD", r"b\w+", opts)) == [(0, 3)]
    # \W must keep its meaning when matching case-insensitively
    assert spans(match_term("a-b", r"a\Wb", opts)) == [(0, 3)]


def test_regex_mode_respects_whole_word():
    opts = MatchOptions(use_regex=True, whole_word=True)
    assert match_term("badminton", "bad", opts) == []


def test_regex_mode_skips_empty_matches():
    opts = MatchOptions(use_regex=True)
    assert spans(match_term("abc", "x*", opts)) == []


def test_invalid_regex_falls_back_to_literal(caplog):
    opts = MatchOptions(use_regex=True)
    with caplog.at_level(logging.WARNING, logger="muzzle.matching"):
        result = match_term("call bad( now", "bad(", opts)
    assert spans(result) == [(5, 9)]
    assert "Invalid regex" in caplog.text


# ── Options ──────────────────────────────────────────────────────────

def test_merged_ignores_unset_overrides():
    base = MatchOptions(case_sensitive=True, whole_word=True)
    merged = base.merged(case_sensitive=None, use_regex=True)
    assert merged == MatchOptions(case_sensitive=True, whole_word=True, use_regex=True)
    assert base.merged() is base
