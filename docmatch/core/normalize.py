"""
Tree normalization helpers.

- Placeholder table: sentinel -> original {{...}} expression, matchers parsed once
- JSON normalization: sentinel strings -> Matcher objects
- Display cleanup: Matcher objects -> their template text
- Whitespace collapsing and JSON path building
"""

import re
from typing import Any

from docmatch.domain.constants import SENTINEL_PATTERN, SENTINEL_PREFIX, SENTINEL_SUFFIX
from docmatch.domain.errors import UnknownPlaceholderError

from .matchers import Matcher, parse_matcher

SENTINEL_RE = re.compile(SENTINEL_PATTERN)


class PlaceholderTable:
    """
    Sentinels issued while scanning one expected document.

    Sentinels are numbered in order of appearance: __MATCHER_0__,
    __MATCHER_1__, ... Each expression is parsed when it is added, so an
    unknown or malformed matcher fails the parse before any comparison.
    """

    def __init__(self) -> None:
        self._expressions: dict[str, str] = {}
        self._matchers: dict[str, Matcher] = {}

    def add(self, expr: str) -> str:
        """Register an expression and return its sentinel."""
        sentinel = f"{SENTINEL_PREFIX}{len(self._expressions)}{SENTINEL_SUFFIX}"
        self._matchers[sentinel] = parse_matcher(expr)
        self._expressions[sentinel] = expr
        return sentinel

    @property
    def expressions(self) -> dict[str, str]:
        """sentinel -> original expression text."""
        return dict(self._expressions)

    def matcher(self, sentinel: str) -> Matcher:
        try:
            return self._matchers[sentinel]
        except KeyError:
            raise UnknownPlaceholderError("unknown placeholder", placeholder=sentinel) from None

    def expression(self, sentinel: str) -> str:
        try:
            return self._expressions[sentinel]
        except KeyError:
            raise UnknownPlaceholderError("unknown placeholder", placeholder=sentinel) from None

    def is_sentinel(self, value: str) -> bool:
        return SENTINEL_RE.fullmatch(value) is not None

    def contains_sentinel(self, value: str) -> bool:
        return SENTINEL_RE.search(value) is not None

    def restore(self, text: str) -> str:
        """Put the original {{expr}} text back in place of every sentinel."""
        return SENTINEL_RE.sub(lambda m: "{{" + self.expression(m.group(0)) + "}}", text)

    def split(self, text: str) -> list[str | Matcher]:
        """Split text into literal and matcher segments, dropping empty literals."""
        segments: list[str | Matcher] = []
        pos = 0
        for m in SENTINEL_RE.finditer(text):
            if m.start() > pos:
                segments.append(text[pos:m.start()])
            segments.append(self.matcher(m.group(0)))
            pos = m.end()
        if pos < len(text):
            segments.append(text[pos:])
        return segments

    def __len__(self) -> int:
        return len(self._expressions)

    def __contains__(self, sentinel: object) -> bool:
        return sentinel in self._expressions


# =============================================================================
# JSON
# =============================================================================

def normalize_json(data: Any, placeholders: PlaceholderTable) -> Any:
    """
    Replace sentinel strings in a parsed JSON value.

    A string that is exactly one sentinel becomes its Matcher. A string (or
    object key) that only contains sentinels gets the literal {{expr}} text
    back and is compared as plain text.
    """
    if isinstance(data, dict):
        return {
            placeholders.restore(key): normalize_json(value, placeholders)
            for key, value in data.items()
        }

    if isinstance(data, list):
        return [normalize_json(item, placeholders) for item in data]

    if isinstance(data, str):
        if placeholders.is_sentinel(data):
            return placeholders.matcher(data)
        if placeholders.contains_sentinel(data):
            return placeholders.restore(data)

    return data


def json_matcher_positions(data: Any, path: str = "$") -> dict[str, str]:
    """Map of JSON path -> template text for every Matcher in the tree."""
    positions: dict[str, str] = {}

    if isinstance(data, Matcher):
        positions[path] = data.describe()
    elif isinstance(data, dict):
        for key, value in data.items():
            positions.update(json_matcher_positions(value, child_path(path, key)))
    elif isinstance(data, list):
        for i, value in enumerate(data):
            positions.update(json_matcher_positions(value, index_path(path, i)))

    return positions


def child_path(path: str, key: str) -> str:
    return f"{path}.{key}"


def index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


# =============================================================================
# Display
# =============================================================================

def clean_for_display(data: Any) -> Any:
    """Copy of data with every Matcher replaced by its template text."""
    if isinstance(data, Matcher):
        return data.describe()

    if isinstance(data, dict):
        return {key: clean_for_display(value) for key, value in data.items()}

    if isinstance(data, list):
        return [clean_for_display(item) for item in data]

    return data


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return " ".join(text.split())
