#!/usr/bin/env python
"""
Compare an actual document against an expected template from the shell.

Usage:
    docmatch-diff expected.json actual.json
    docmatch-diff page.expected.html page.html --ignore-comments
    docmatch-diff expected.json actual.json --config docmatch.yaml -v

Exit codes:
    0  documents match
    1  differences found
    2  parse, matcher or configuration error
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from docmatch.core.compare import compare_json
from docmatch.core.config import HTMLConfig, JSONConfig, load_config
from docmatch.core.html_compare import compare_html
from docmatch.core.report import (
    ColorConfig,
    format_diff,
    format_html_diff_inline,
    format_json_diff_inline,
)
from docmatch.core.template import (
    is_html_file,
    parse_actual_html,
    parse_actual_json,
    parse_expected_html,
    parse_expected_json,
)
from docmatch.domain.errors import DocmatchError

logger = logging.getLogger(__name__)

EXIT_MATCH = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmatch-diff",
        description="Structurally compare a JSON/HTML document with an expected template",
    )
    parser.add_argument("expected", type=Path, help="Expected file (may contain {{...}} matchers)")
    parser.add_argument("actual", type=Path, help="Actual document")
    parser.add_argument(
        "--format",
        choices=("json", "html"),
        default=None,
        help="Document format (default: from the expected file suffix)",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument(
        "--ignore-array-order",
        action="store_true",
        help="Compare JSON arrays order-insensitively",
    )
    parser.add_argument(
        "--ignore-field",
        action="append",
        default=[],
        metavar="FIELD",
        help="JSON field name or path to skip (repeatable)",
    )
    parser.add_argument(
        "--ignore-comments",
        action="store_true",
        help="Skip HTML comments",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable coloured output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _configs(args: argparse.Namespace) -> tuple[JSONConfig, HTMLConfig]:
    json_cfg, html_cfg = JSONConfig(), HTMLConfig()
    if args.config is not None:
        json_cfg, html_cfg = load_config(args.config)

    if args.ignore_array_order:
        json_cfg = replace(json_cfg, ignore_array_order=True)
    if args.ignore_field:
        json_cfg = replace(json_cfg, ignored_fields=(*json_cfg.ignored_fields, *args.ignore_field))
    if args.ignore_comments:
        html_cfg = replace(html_cfg, ignore_comments=True)

    return json_cfg, html_cfg


def run(args: argparse.Namespace) -> int:
    json_cfg, html_cfg = _configs(args)
    colors = ColorConfig(False) if args.no_color else ColorConfig.from_environment()

    use_html = args.format == "html" or (args.format is None and is_html_file(args.expected))
    expected_raw = args.expected.read_bytes()
    actual_raw = args.actual.read_bytes()

    if use_html:
        expected = parse_expected_html(expected_raw)
        actual_root = parse_actual_html(actual_raw)
        diffs = compare_html(expected.root, actual_root, html_cfg)
        if diffs:
            print(format_diff(diffs, "HTML"))
            print(format_html_diff_inline(expected.root, actual_root, colors), end="")
    else:
        expected = parse_expected_json(expected_raw)
        actual_data = parse_actual_json(actual_raw)
        diffs = compare_json(expected.data, actual_data, json_cfg)
        if diffs:
            print(format_diff(diffs, "JSON"))
            print(format_json_diff_inline(expected.data, actual_data, colors), end="")

    logger.info(f"{len(diffs)} difference(s) between {args.expected} and {args.actual}")
    return EXIT_DIFFERENT if diffs else EXIT_MATCH


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(args)
    except DocmatchError as e:
        print(f"docmatch-diff: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as e:
        print(f"docmatch-diff: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
