"""
Data schemas for comparison results and normalized HTML trees.

JSON documents need no schema of their own: they stay in Python's JSON
model (dict, list, str, int/float, bool, None) with Matcher objects placed
where the expected file had a {{...}} expression.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Differences
# =============================================================================

class DiffKind(str, Enum):
    """Kind of a single reported difference."""
    CHANGED = "changed"
    ADDED = "added"              # present in actual only
    REMOVED = "removed"          # present in expected only
    TYPE_MISMATCH = "type mismatch"
    MATCHER_FAILED = "matcher failed"


@dataclass(frozen=True)
class Difference:
    """One discrepancy between expected and actual trees."""
    path: str
    expected: Any
    actual: Any
    kind: DiffKind

    def __str__(self) -> str:
        return (
            f"{self.kind.value} at '{self.path}'\n"
            f"  Expected: {self.expected!r}\n"
            f"  Actual:   {self.actual!r}"
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON serialisation."""
        return {
            "path": self.path,
            "kind": self.kind.value,
            "expected": self.expected,
            "actual": self.actual,
        }


# =============================================================================
# HTML tree
# =============================================================================

class HtmlNodeType(str, Enum):
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    DOCTYPE = "doctype"


@dataclass
class HtmlNode:
    """
    Normalized HTML node.

    - ELEMENT: tag, attributes (name -> str | Matcher | TemplateString), children
    - TEXT: text (str | Matcher | TemplateString)
    - COMMENT: text (str)
    - DOCTYPE: tag holds the doctype name
    """
    type: HtmlNodeType
    tag: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list["HtmlNode"] = field(default_factory=list)
    text: Any = None
    path: str = ""

    @property
    def is_element(self) -> bool:
        return self.type is HtmlNodeType.ELEMENT

    @property
    def is_text(self) -> bool:
        return self.type is HtmlNodeType.TEXT
