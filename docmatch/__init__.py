"""
docmatch: structural comparison of JSON and HTML documents against
expected templates with {{...}} matchers.

    from docmatch import assert_json

    assert_json("tests/data/user.expected.json", response.content)
"""

from docmatch.core import (
    HTMLConfig,
    JSONConfig,
    compare_html,
    compare_json,
    diff_lines,
    parse_expected_html,
    parse_expected_json,
    parse_matcher,
)
from docmatch.domain import DiffKind, Difference, DocmatchError
from docmatch.golden import assert_html, assert_json, match_html, match_json

__version__ = "0.1.0"

__all__ = [
    "assert_json",
    "assert_html",
    "match_json",
    "match_html",
    "compare_json",
    "compare_html",
    "parse_expected_json",
    "parse_expected_html",
    "parse_matcher",
    "diff_lines",
    "JSONConfig",
    "HTMLConfig",
    "Difference",
    "DiffKind",
    "DocmatchError",
]
