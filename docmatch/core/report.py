"""
Failure reporting.

Two views of a failed comparison:
- summary: one entry per Difference (path, expected, actual)
- inline: both documents pretty-printed and line-diffed (- expected, + actual)

Colour is decided once (ColorConfig.from_environment) and passed in.
"""

import html
import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Mapping, TextIO

from docmatch.domain.constants import (
    FORCE_COLOR_ENV_VAR,
    HTML_DOCUMENT_TAG,
    HTML_TEXT_SUFFIX,
    MAX_VALUE_DISPLAY_LEN,
    MISSING_DISPLAY,
    NO_COLOR_ENV_VAR,
    VOID_ELEMENTS,
)
from docmatch.domain.schemas import Difference, DiffKind, HtmlNode, HtmlNodeType

from .diff import DiffLine, LineOp, diff_lines
from .matchers import Matcher, is_number
from .normalize import clean_for_display

# ANSI
RED = "\033[31m"
GREEN = "\033[32m"
RESET = "\033[0m"


@dataclass(frozen=True)
class ColorConfig:
    enabled: bool = False

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        stream: TextIO | None = None,
    ) -> "ColorConfig":
        """
        Detect colour support.

        NO_COLOR wins, then FORCE_COLOR, then CI / TERM=dumb turn colour off,
        otherwise colour follows whether the stream (stderr) is a terminal.
        """
        env = os.environ if environ is None else environ
        stream = sys.stderr if stream is None else stream

        if env.get(NO_COLOR_ENV_VAR):
            return cls(False)
        if env.get(FORCE_COLOR_ENV_VAR):
            return cls(True)
        if env.get("CI"):
            return cls(False)
        if env.get("TERM") == "dumb":
            return cls(False)

        isatty = getattr(stream, "isatty", None)
        return cls(bool(isatty and isatty()))

    def red(self, text: str) -> str:
        return f"{RED}{text}{RESET}" if self.enabled else text

    def green(self, text: str) -> str:
        return f"{GREEN}{text}{RESET}" if self.enabled else text


NO_COLOR = ColorConfig(False)


# =============================================================================
# Summary
# =============================================================================

def format_diff(diffs: list[Difference], label: str = "JSON") -> str:
    """
    Human-readable summary of differences.

    Example:
        JSON mismatch at 1 path:

          $.name
            expected: "Alice"
            actual:   "Bob"
    """
    if not diffs:
        return ""

    noun = "path" if len(diffs) == 1 else "paths"
    lines = [f"{label} mismatch at {len(diffs)} {noun}:"]

    for d in diffs:
        lines.append("")
        lines.append(f"  {d.path}")

        if d.kind is DiffKind.ADDED:
            lines.append(f"    expected: {MISSING_DISPLAY}")
            lines.append(f"    actual:   {format_value(d.actual)}")
        elif d.kind is DiffKind.REMOVED:
            lines.append(f"    expected: {format_value(d.expected)}")
            lines.append(f"    actual:   {MISSING_DISPLAY}")
        elif d.kind is DiffKind.TYPE_MISMATCH:
            lines.append(f"    expected: {format_value(d.expected)} ({type_name(d.expected)})")
            lines.append(f"    actual:   {format_value(d.actual)} ({type_name(d.actual)})")
        else:
            lines.append(f"    expected: {format_value(d.expected)}")
            lines.append(f"    actual:   {format_value(d.actual)}")

    return "\n".join(lines) + "\n"


def format_value(value: Any) -> str:
    """Compact display of one value, truncated to MAX_VALUE_DISPLAY_LEN."""
    if value is None:
        return "null"

    if isinstance(value, Matcher):
        return value.describe()

    if isinstance(value, bool):
        return "true" if value else "false"

    if is_number(value):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    if isinstance(value, str):
        if len(value) > MAX_VALUE_DISPLAY_LEN:
            return json.dumps(value[:MAX_VALUE_DISPLAY_LEN - 3], ensure_ascii=False) + "..."
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, (dict, list)):
        s = json.dumps(
            clean_for_display(value),
            ensure_ascii=False,
            separators=(",", ":"),
            default=str,
        )
        if len(s) > MAX_VALUE_DISPLAY_LEN:
            return s[:MAX_VALUE_DISPLAY_LEN - 3] + "..."
        return s

    return str(value)


def type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Matcher):
        return "matcher"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


# =============================================================================
# Inline diff
# =============================================================================

def render_lines(ops: list[DiffLine], colors: ColorConfig = NO_COLOR) -> list[str]:
    rendered = []
    for op in ops:
        if op.op is LineOp.EQUAL:
            rendered.append("  " + op.text)
        elif op.op is LineOp.DELETE:
            rendered.append(colors.red("- " + op.text))
        else:
            rendered.append(colors.green("+ " + op.text))
    return rendered


def _inline(expected_text: str, actual_text: str, colors: ColorConfig) -> str:
    ops = diff_lines(expected_text.split("\n"), actual_text.split("\n"))
    return "".join(line + "\n" for line in render_lines(ops, colors))


def pretty_json(data: Any) -> str:
    """indent=2, sorted keys, matchers shown as their template text."""
    return json.dumps(
        clean_for_display(data),
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    )


def format_json_diff_inline(expected: Any, actual: Any, colors: ColorConfig = NO_COLOR) -> str:
    return _inline(pretty_json(expected), pretty_json(actual), colors)


def format_html_diff_inline(
    expected: HtmlNode | None,
    actual: HtmlNode | None,
    colors: ColorConfig = NO_COLOR,
) -> str:
    return _inline(render_pretty_html(expected), render_pretty_html(actual), colors)


# =============================================================================
# HTML pretty printer
# =============================================================================

def render_pretty_html(
    node: HtmlNode | None,
    overrides: Mapping[str, str] | None = None,
    indent: int = 0,
) -> str:
    """
    Render a node tree as indented HTML, one node per line.

    Attributes are sorted; an element whose only child is text is kept on
    one line. `overrides` replaces the rendered value of a lone text child
    (keyed by its path) and attributes (keyed by `path@name`) verbatim.
    """
    if node is None:
        return ""

    overrides = overrides or {}
    pad = "  " * indent

    if node.type is HtmlNodeType.TEXT:
        if node.path in overrides:
            return pad + overrides[node.path]
        text = _display_text(node.text).strip()
        return pad + text if text else ""

    if node.type is HtmlNodeType.COMMENT:
        return f"{pad}<!-- {(node.text or '').strip()} -->"

    if node.type is HtmlNodeType.DOCTYPE:
        return f"<!DOCTYPE {node.tag}>"

    children = [c for c in node.children if not _is_blank_text(c)]

    if node.tag == HTML_DOCUMENT_TAG:
        return "\n".join(render_pretty_html(c, overrides, indent) for c in children)

    parts = [pad, "<", node.tag]
    for name in sorted(node.attributes):
        key = f"{node.path}@{name}"
        if key in overrides:
            value = overrides[key]
        else:
            value = _display_attr(node.attributes[name])
        parts.append(f' {name}="{value}"')
    parts.append(">")

    if node.tag.lower() in VOID_ELEMENTS:
        return "".join(parts)

    # Text siblings share one path; an override only applies to a lone text child.
    text_key = node.path + HTML_TEXT_SUFFIX
    if text_key in overrides and sum(1 for c in children if c.is_text) > 1:
        overrides = {k: v for k, v in overrides.items() if k != text_key}

    if len(children) == 1 and children[0].is_text:
        inner = render_pretty_html(children[0], overrides, 0)
        parts.append(inner)
    elif children:
        for child in children:
            parts.append("\n" + render_pretty_html(child, overrides, indent + 1))
        parts.append("\n" + pad)

    parts.append(f"</{node.tag}>")
    return "".join(parts)


def _is_blank_text(node: HtmlNode) -> bool:
    return node.is_text and isinstance(node.text, str) and not node.text.strip()


def _display_text(value: Any) -> str:
    if isinstance(value, Matcher):
        return value.describe()
    return html.escape(value or "", quote=False)


def _display_attr(value: Any) -> str:
    if isinstance(value, Matcher):
        return value.describe()
    return html.escape(value or "", quote=True)
