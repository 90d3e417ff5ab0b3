"""
Core layer: template parsing, normalization, comparison and reporting.

Pure functions over in-memory documents; no file I/O besides
parse_expected_file and load_config.
"""

from .compare import compare, compare_json, sort_diffs
from .config import HTMLConfig, JSONConfig, html_config, json_config, load_config
from .diff import DiffLine, LineOp, apply_diff, diff_lines
from .html_compare import compare_html, compare_nodes
from .matchers import (
    AnyBool,
    AnyFloat,
    AnyInt,
    AnyString,
    AnyValue,
    Ignore,
    Matcher,
    OneOf,
    Regex,
    TemplateString,
    is_ignore,
    parse_matcher,
)
from .report import (
    ColorConfig,
    format_diff,
    format_html_diff_inline,
    format_json_diff_inline,
    render_pretty_html,
)
from .template import (
    ExpectedHTML,
    ExpectedJSON,
    extract_placeholders,
    parse_actual_html,
    parse_actual_json,
    parse_expected_file,
    parse_expected_html,
    parse_expected_json,
)

__all__ = [
    # matchers
    "Matcher",
    "AnyString",
    "AnyInt",
    "AnyFloat",
    "AnyBool",
    "AnyValue",
    "Ignore",
    "Regex",
    "OneOf",
    "TemplateString",
    "is_ignore",
    "parse_matcher",
    # template
    "ExpectedJSON",
    "ExpectedHTML",
    "extract_placeholders",
    "parse_expected_json",
    "parse_expected_html",
    "parse_expected_file",
    "parse_actual_json",
    "parse_actual_html",
    # config
    "JSONConfig",
    "HTMLConfig",
    "json_config",
    "html_config",
    "load_config",
    # compare
    "compare",
    "compare_json",
    "compare_html",
    "compare_nodes",
    "sort_diffs",
    # diff
    "LineOp",
    "DiffLine",
    "diff_lines",
    "apply_diff",
    # report
    "ColorConfig",
    "format_diff",
    "format_json_diff_inline",
    "format_html_diff_inline",
    "render_pretty_html",
]
