"""Tests for word-list providers."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import json
import logging

import pytest
import requests

from muzzle import ParameterizedWord, WordListError, WordListSource, create_provider
from muzzle import providers
from muzzle.providers import (
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_WORDLIST_URL,
    ArrayWordListProvider,
    DefaultWordListProvider,
    FileWordListProvider,
    StringWordListProvider,
    UrlWordListProvider,
    WordListProvider,
    coerce_words,
    parse_content,
)


def terms(provider):
    return [(w.term, w.type) for w in provider.get_parameterized_words()]


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


# ── Factory ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("kind,cls", [
    ("string", StringWordListProvider),
    ("array", ArrayWordListProvider),
    ("file", FileWordListProvider),
    ("URL", UrlWordListProvider),
    ("default", DefaultWordListProvider),
])
def test_create_provider(kind, cls):
    provider = create_provider(WordListSource(type=kind))
    assert type(provider) is cls
    assert isinstance(provider, WordListProvider)


def test_create_provider_defaults_to_remote_list():
    provider = create_provider(None)
    assert isinstance(provider, DefaultWordListProvider)
    assert provider.source.url == DEFAULT_WORDLIST_URL
    assert provider.source.refresh_interval == DEFAULT_REFRESH_INTERVAL


def test_default_provider_leaves_caller_source_untouched():
    source = WordListSource(type="default")
    provider = create_provider(source)
    assert provider.source.url == DEFAULT_WORDLIST_URL
    assert provider.source.refresh_interval == DEFAULT_REFRESH_INTERVAL
    assert source.url is None
    assert source.refresh_interval is None

    custom = WordListSource(type="default", url="https://example.com/w.txt", refresh_interval=120)
    provider = create_provider(custom)
    assert provider.source.url == "https://example.com/w.txt"
    assert provider.source.refresh_interval == 120


def test_create_provider_rejects_unknown_type():
    with pytest.raises(WordListError, match="carrier-pigeon"):
        create_provider(WordListSource(type="carrier-pigeon"))


# ── String / array ───────────────────────────────────────────────────

def test_string_provider():
    provider = create_provider(WordListSource(type="string", string="bad[type=slur],worse"))
    assert not provider.is_ready()
    provider.initialize()
    assert provider.is_ready()
    assert terms(provider) == [("bad", "slur"), ("worse", "unknown")]
    assert provider.get_words() == ["bad", "worse"]
    assert provider.size == 2


def test_string_provider_requires_string():
    with pytest.raises(WordListError):
        create_provider(WordListSource(type="string")).initialize()


def test_array_provider_accepts_mixed_items():
    provider = create_provider(WordListSource(type="array", array=[
        "plain",
        "typed[type=hate]",
        {"term": "dicted", "parameters": {"type": "adult", "severity": 2}},
        ParameterizedWord("ready", {"type": "slur"}),
        "",
        None,
    ]))
    provider.initialize()
    assert terms(provider) == [
        ("plain", "unknown"), ("typed", "hate"), ("dicted", "adult"), ("ready", "slur"),
    ]


def test_array_provider_rejects_a_string():
    with pytest.raises(WordListError):
        create_provider(WordListSource(type="array", array="bad,worse")).initialize()


def test_dispose_clears_snapshot():
    provider = create_provider(WordListSource(type="string", string="bad"))
    provider.initialize()
    snapshot = provider.get_parameterized_words()
    provider.dispose()
    assert not provider.is_ready()
    assert provider.size == 0
    # a reader holding the old list is unaffected
    assert [w.term for w in snapshot] == ["bad"]


# ── Content parsing ──────────────────────────────────────────────────

def test_parse_plain_text_splits_on_commas_and_whitespace():
    words = parse_content("bad, worse\nworst\tugly", "text", default_type="profanity")
    assert [(w.term, w.type) for w in words] == [
        ("bad", "profanity"), ("worse", "profanity"), ("worst", "profanity"), ("ugly", "profanity"),
    ]


def test_parse_bracketed_text_uses_grammar_per_line():
    words = parse_content("bad[type=slur]\r\nworse[type=hate][severity=3]\n")
    assert [(w.term, dict(w.parameters)) for w in words] == [
        ("bad", {"type": "slur"}),
        ("worse", {"type": "hate", "severity": 3}),
    ]


def test_parse_csv_keeps_multiword_entries():
    words = parse_content("bad word\nworse[type=hate]\n\n", "csv")
    assert [(w.term, w.type) for w in words] == [("bad word", "unknown"), ("worse", "hate")]


def test_parse_json():
    content = json.dumps(["bad", {"word": "worse", "parameters": {"severity": "high"}}, {"nope": 1}])
    words = parse_content(content, "json")
    assert [(w.term, dict(w.parameters)) for w in words] == [
        ("bad", {"type": "unknown"}),
        ("worse", {"type": "unknown", "severity": "high"}),
    ]


@pytest.mark.parametrize("content", ["{not json", '{"words": []}'])
def test_parse_json_errors(content):
    with pytest.raises(WordListError):
        parse_content(content, "json")


def test_coerce_words_ignores_non_mapping_parameters(caplog):
    with caplog.at_level(logging.WARNING, logger="muzzle.providers"):
        words = coerce_words([{"term": "bad", "parameters": ["x"]}])
    assert words[0].parameters == {"type": "unknown"}
    assert "non-mapping" in caplog.text


# ── File ─────────────────────────────────────────────────────────────

def test_file_provider_formats(tmp_path):
    text_file = tmp_path / "words.txt"
    text_file.write_text("bad[type=slur]\nworse[type=profanity]\n")
    provider = create_provider(WordListSource(type="file", file_path=str(text_file)))
    assert terms(provider) == [("bad", "slur"), ("worse", "profanity")]

    json_file = tmp_path / "words.json"
    json_file.write_text(json.dumps([{"term": "ugly", "parameters": {"type": "adult"}}]))
    provider = create_provider(WordListSource(type="file", file_path=str(json_file), format="json"))
    provider.initialize()
    assert terms(provider) == [("ugly", "adult")]


def test_file_provider_missing_file(tmp_path):
    provider = create_provider(WordListSource(type="file", file_path=str(tmp_path / "nope.txt")))
    with pytest.raises(WordListError, match="nope.txt"):
        provider.initialize()


def test_file_provider_reloads_when_stale(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("bad")
    provider = FileWordListProvider(
        WordListSource(type="file", file_path=str(path), refresh_interval=60)
    )
    provider.initialize()
    path.write_text("worse")
    assert provider.get_words() == ["bad"]
    provider._loaded_at -= 3600
    assert provider.get_words() == ["worse"]


def test_failed_refresh_keeps_previous_snapshot(tmp_path, caplog):
    path = tmp_path / "words.txt"
    path.write_text("bad")
    provider = FileWordListProvider(
        WordListSource(type="file", file_path=str(path), refresh_interval=60)
    )
    provider.initialize()
    path.unlink()
    provider._loaded_at -= 3600
    with caplog.at_level(logging.WARNING, logger="muzzle.providers"):
        assert provider.get_words() == ["bad"]
    assert "Failed to refresh" in caplog.text


def test_explicit_refresh_propagates_errors(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("bad")
    provider = create_provider(WordListSource(type="file", file_path=str(path)))
    provider.initialize()
    path.unlink()
    with pytest.raises(WordListError):
        provider.refresh()
    assert provider.get_words() == ["bad"]


# ── URL ──────────────────────────────────────────────────────────────

def test_url_provider(monkeypatch):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append((url, timeout))
        return FakeResponse('["bad", "worse"]')

    monkeypatch.setattr(providers.requests, "get", fake_get)
    provider = create_provider(
        WordListSource(type="url", url="https://example.com/w.json", format="json", timeout=3)
    )
    provider.initialize()
    assert provider.get_words() == ["bad", "worse"]
    assert calls == [("https://example.com/w.json", 3)]


def test_url_provider_http_error(monkeypatch):
    monkeypatch.setattr(providers.requests, "get", lambda *a, **kw: FakeResponse("", status=503))
    provider = create_provider(WordListSource(type="url", url="https://example.com/w.txt"))
    with pytest.raises(WordListError, match="503"):
        provider.initialize()


def test_url_provider_connection_error(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(providers.requests, "get", refuse)
    provider = create_provider(WordListSource(type="url", url="https://example.com/w.txt"))
    with pytest.raises(WordListError, match="refused"):
        provider.initialize()


def test_default_provider_types_words_as_profanity(monkeypatch):
    seen = []

    def fake_get(url, headers=None, timeout=None):
        seen.append(url)
        return FakeResponse("bad\nworse\n")

    monkeypatch.setattr(providers.requests, "get", fake_get)
    provider = create_provider(None)
    provider.initialize()
    assert terms(provider) == [("bad", "profanity"), ("worse", "profanity")]
    assert seen == [DEFAULT_WORDLIST_URL]
