"""
Template parser for expected documents.

Expected files are ordinary JSON or HTML in which any value may be written
as a {{ expression }}. Before the native parser runs, every expression is
swapped for a sentinel (__MATCHER_0__, __MATCHER_1__, ...) so the text stays
valid JSON/HTML; the tree walk afterwards turns sentinels into Matchers.

    {"id": "{{anyString}}", "count": {{anyInt}}}
    -> {"id": "__MATCHER_0__", "count": "__MATCHER_1__"}
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docmatch.domain.constants import HTML_SUFFIXES
from docmatch.domain.errors import DocumentParseError, ExpectedFileNotFoundError
from docmatch.domain.schemas import HtmlNode

from .html_parse import html_matcher_positions, parse_html_tree
from .normalize import PlaceholderTable, json_matcher_positions, normalize_json

logger = logging.getLogger(__name__)

# {{ ... }} with backtick-delimited segments allowed to contain braces:
#   {{regex `^\d{3}$`}}
_EXPR = r"\{\{((?:`[^`\n]*`|[^`\n])+?)\}\}"

EXPRESSION_RE = re.compile(_EXPR)


def extract_placeholders(raw: str, target: str = "json") -> tuple[str, PlaceholderTable]:
    """
    Replace every {{expr}} in raw text with a sentinel.

    Args:
        raw: expected document text
        target: "json" or "html"

    Returns:
        (substituted text, placeholder table)

    Raises:
        MatcherError: an expression is unknown or malformed
    """
    placeholders = PlaceholderTable()

    if target == "html":
        text = EXPRESSION_RE.sub(lambda m: placeholders.add(m.group(1).strip()), raw)
        return text, placeholders

    # Inside a JSON string the sentinel is spliced as plain text; anywhere
    # else it becomes a whole JSON string.
    pieces: list[str] = []
    pos = 0
    in_string = False
    for m in EXPRESSION_RE.finditer(raw):
        in_string = _json_string_state(raw, pos, m.start(), in_string)
        sentinel = placeholders.add(m.group(1).strip())
        pieces.append(raw[pos:m.start()])
        pieces.append(sentinel if in_string else f'"{sentinel}"')
        pos = m.end()
    pieces.append(raw[pos:])
    return "".join(pieces), placeholders


def _json_string_state(text: str, start: int, end: int, in_string: bool) -> bool:
    """Whether text[end] lies inside a JSON string literal, given the state at start."""
    i = start
    while i < end:
        ch = text[i]
        if in_string and ch == "\\":
            i += 2
            continue
        if ch == '"':
            in_string = not in_string
        i += 1
    return in_string


# =============================================================================
# Expected documents
# =============================================================================

@dataclass
class ExpectedJSON:
    """Parsed expected JSON: value tree with Matchers, plus its source."""
    data: Any
    matchers: dict[str, str] = field(default_factory=dict)
    raw: str = ""

    def matcher_positions(self) -> dict[str, str]:
        """JSON path -> template text of the matcher at that path."""
        return json_matcher_positions(self.data)


@dataclass
class ExpectedHTML:
    """Parsed expected HTML: node tree with Matchers, plus its source."""
    root: HtmlNode
    matchers: dict[str, str] = field(default_factory=dict)
    raw: str = ""

    def matcher_positions(self) -> dict[str, str]:
        """`path` / `path@attr` -> template text of the matcher there."""
        return html_matcher_positions(self.root)


def _decode(data: str | bytes, source: str) -> str:
    if isinstance(data, str):
        return data
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise DocumentParseError(f"{source} document is not UTF-8", source=source, cause=e) from e


def parse_expected_json(raw: str | bytes) -> ExpectedJSON:
    """
    Parse expected JSON text containing {{...}} placeholders.

    Raises:
        DocumentParseError: the substituted text is not valid JSON
        MatcherError: an expression is unknown or malformed
    """
    raw = _decode(raw, "expected")
    text, placeholders = extract_placeholders(raw, "json")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentParseError(
            "expected JSON is invalid",
            source="expected",
            line=e.lineno,
            column=e.colno,
            cause=e.msg,
        ) from e

    logger.debug(f"expected JSON parsed with {len(placeholders)} placeholder(s)")
    return ExpectedJSON(
        data=normalize_json(parsed, placeholders),
        matchers=placeholders.expressions,
        raw=raw,
    )


def parse_expected_html(raw: str | bytes) -> ExpectedHTML:
    """
    Parse expected HTML text containing {{...}} placeholders.

    Raises:
        DocumentParseError: the parser rejected the markup
        MatcherError: an expression is unknown or malformed
    """
    raw = _decode(raw, "expected")
    text, placeholders = extract_placeholders(raw, "html")
    root = parse_html_tree(text, placeholders, source="expected")

    logger.debug(f"expected HTML parsed with {len(placeholders)} placeholder(s)")
    return ExpectedHTML(root=root, matchers=placeholders.expressions, raw=raw)


def is_html_file(path: Path) -> bool:
    return Path(path).suffix.lower() in HTML_SUFFIXES


def parse_expected_file(path: Path) -> ExpectedJSON | ExpectedHTML:
    """
    Read and parse an expected file; .html/.htm files are HTML, all else JSON.

    Raises:
        ExpectedFileNotFoundError: file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise ExpectedFileNotFoundError("expected file not found", path=str(path))

    raw = path.read_bytes()
    if is_html_file(path):
        return parse_expected_html(raw)
    return parse_expected_json(raw)


# =============================================================================
# Actual documents
# =============================================================================

def parse_actual_json(data: str | bytes) -> Any:
    """Parse actual JSON. No placeholder handling."""
    text = _decode(data, "actual")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentParseError(
            "actual JSON is invalid",
            source="actual",
            line=e.lineno,
            column=e.colno,
            cause=e.msg,
        ) from e


def parse_actual_html(data: str | bytes) -> HtmlNode:
    """Parse actual HTML. No placeholder handling."""
    return parse_html_tree(_decode(data, "actual"), None, source="actual")
