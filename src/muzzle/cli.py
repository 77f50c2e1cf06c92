"""CLI interface for muzzle.

Usage:
    # Flag banned terms (stdin: text, stdout: JSON matches)
    echo 'This is bad and worse text' | \
        python -m muzzle.cli --words 'bad[type=slur],worse' scan

    # Rewrite them (stdout: JSON with the masked text)
    echo 'This is bad text' | \
        python -m muzzle.cli --words-file words.txt mask --strategy custom --custom-string '[x]'

    # Parse a word list (stdin: definitions, stdout: JSON)
    echo 'bad[type=slur][severity=8],worse' | python -m muzzle.cli parse

Settings come from --config (YAML), then MUZZLE_* environment variables,
then the flags below.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Any

from .config import create_filter, load_config, load_from_env, load_from_yaml
from .errors import ConfigError, WordListError
from .filter import FilterConfig, TextFilter
from .parser import parse_word_definitions
from .providers import WordListSource
from .replacement import ReplacementConfig, ReplacementStrategy
from .types import TextMatch


def _build_config(args: argparse.Namespace) -> FilterConfig:
    config = load_from_yaml(args.config) if args.config else load_config({})
    config = load_from_env(base=config)
    if args.words is not None:
        config.source = WordListSource(type="string", string=args.words)
    elif args.words_file:
        config.source = WordListSource(type="file", file_path=args.words_file, format=args.format)
    if args.case_sensitive:
        config.case_sensitive = True
    if args.partial:
        config.whole_word = False
    if args.regex:
        config.use_regex = True
    return config


def _build_filter(args: argparse.Namespace) -> TextFilter:
    return create_filter(_build_config(args))


def _match_to_dict(m: TextMatch) -> dict[str, Any]:
    out: dict[str, Any] = {
        "term": m.term,
        "start": m.start,
        "end": m.end,
        "line": m.line,
        "column": m.column,
        "context": m.context,
        "severity": m.severity,
    }
    if m.parameters is not None:
        out["parameters"] = dict(m.parameters)
    if m.replacement is not None:
        out["replacement"] = m.replacement
    return out


def cmd_scan(args: argparse.Namespace) -> None:
    """Flag banned terms in text on stdin."""
    with _build_filter(args) as text_filter:
        result = text_filter.filter(sys.stdin.read())

    output = {
        "matched": result.matched,
        "severity": result.severity,
        "matches": [_match_to_dict(m) for m in result.matches],
    }
    if result.error:
        output["error"] = result.error
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_mask(args: argparse.Namespace) -> None:
    """Rewrite banned terms in text on stdin."""
    with _build_filter(args) as text_filter:
        base = text_filter.config.replacement
        replacement = ReplacementConfig(
            enabled=True,
            strategy=ReplacementStrategy(args.strategy) if args.strategy else base.strategy,
            custom_string=args.custom_string or base.custom_string,
            asterisk_char=args.char or base.asterisk_char,
            asterisk_count=base.asterisk_count,
            preserve_case=not args.no_preserve_case and base.preserve_case,
            preserve_boundaries=base.preserve_boundaries,
            whole_word_only=base.whole_word_only,
        )
        validation = replacement.validate()
        if not validation.ok:
            raise ConfigError(validation.errors)
        result = text_filter.filter(sys.stdin.read(), replacement=replacement)

    output = {
        "text": result.filtered_text,
        "replacement_count": result.replacement_count,
        "matches": [_match_to_dict(m) for m in result.matches],
    }
    if result.error:
        output["error"] = result.error
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse word definitions on stdin."""
    text = sys.stdin.read().replace("\n", ",")
    words = parse_word_definitions(text)
    json.dump(
        [{"term": w.term, "parameters": dict(w.parameters)} for w in words],
        sys.stdout,
        indent=2,
        ensure_ascii=False,
    )
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="muzzle",
        description="Flag and rewrite banned terms in text",
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--words", help="Comma-separated word definitions")
    parser.add_argument("--words-file", help="Word list file")
    parser.add_argument("--format", default="text", choices=["text", "csv", "json"],
                        help="Word list file format")
    parser.add_argument("--case-sensitive", action="store_true", help="Match case exactly")
    parser.add_argument("--partial", action="store_true", help="Allow matches inside words")
    parser.add_argument("--regex", action="store_true", help="Treat terms as regular expressions")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("scan", help="Flag banned terms (text on stdin)")
    mask = sub.add_parser("mask", help="Rewrite banned terms (text on stdin)")
    mask.add_argument("--strategy", choices=[s.value for s in ReplacementStrategy])
    mask.add_argument("--custom-string", help="Replacement for the custom strategy")
    mask.add_argument("--char", help="Masking character for the asterisks strategy")
    mask.add_argument("--no-preserve-case", action="store_true")
    sub.add_parser("parse", help="Parse word definitions (stdin) to JSON")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "scan": cmd_scan,
        "mask": cmd_mask,
        "parse": cmd_parse,
    }
    try:
        cmds[args.command](args)
    except (ConfigError, WordListError) as e:
        sys.stderr.write(f"muzzle: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
