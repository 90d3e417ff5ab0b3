"""
HTML structural comparison.

Compares two HtmlNode trees built by html_parse. Paths in the reported
differences are the nodes' own paths (`html > body > div > span[1]`),
attributes are reported at `<element path> @<name>`.
"""

import json
import logging
from typing import Any

from docmatch.domain.constants import (
    HTML_ATTRIBUTE_SEPARATOR,
    HTML_DOCTYPE_PATH,
    MAX_TEXT_DISPLAY_LEN,
    NIL_DISPLAY,
)
from docmatch.domain.schemas import Difference, DiffKind, HtmlNode, HtmlNodeType

from .compare import sort_diffs
from .config import HTMLConfig
from .matchers import Matcher, TemplateString, is_ignore
from .normalize import normalize_whitespace

logger = logging.getLogger(__name__)


def compare_html(
    expected: HtmlNode | None,
    actual: HtmlNode | None,
    config: HTMLConfig | None = None,
) -> list[Difference]:
    """
    Compare two HTML trees from their roots.

    Returns:
        Differences sorted by path (empty if match)
    """
    config = config or HTMLConfig()

    if expected is None and actual is None:
        return []
    if expected is None:
        return [Difference(actual.path, None, describe_node(actual), DiffKind.ADDED)]
    if actual is None:
        return [Difference(expected.path, describe_node(expected), None, DiffKind.REMOVED)]

    diffs = sort_diffs(compare_nodes(expected, actual, expected.path, config))
    logger.debug(f"HTML comparison found {len(diffs)} difference(s)")
    return diffs


def compare_nodes(
    expected: HtmlNode,
    actual: HtmlNode,
    path: str,
    config: HTMLConfig,
) -> list[Difference]:
    """Recursive node comparison (unsorted)."""
    if expected.is_element and config.is_element_ignored(expected.tag):
        return []

    if expected.is_text and isinstance(expected.text, Matcher):
        return _compare_text_matcher(expected.text, actual, path, config)

    if expected.type is not actual.type:
        return [Difference(path, expected.type.value, actual.type.value, DiffKind.TYPE_MISMATCH)]

    if expected.type is HtmlNodeType.ELEMENT:
        if expected.tag.casefold() != actual.tag.casefold():
            return [Difference(path, f"<{expected.tag}>", f"<{actual.tag}>", DiffKind.CHANGED)]

        diffs = compare_attributes(expected.attributes, actual.attributes, path, config)
        diffs.extend(compare_children(expected.children, actual.children, path, config))
        return diffs

    if expected.type is HtmlNodeType.TEXT:
        exp_text = text_content(expected)
        act_text = text_content(actual)
        if not config.preserve_whitespace:
            exp_text = normalize_whitespace(exp_text)
            act_text = normalize_whitespace(act_text)
        if exp_text != act_text:
            return [Difference(path, exp_text, act_text, DiffKind.CHANGED)]
        return []

    if expected.type is HtmlNodeType.COMMENT:
        if config.ignore_comments:
            return []
        exp_comment = expected.text or ""
        act_comment = actual.text or ""
        if exp_comment != act_comment:
            return [Difference(path, exp_comment, act_comment, DiffKind.CHANGED)]
        return []

    # DOCTYPE
    if expected.tag.casefold() != actual.tag.casefold():
        return [Difference(path, expected.tag, actual.tag, DiffKind.CHANGED)]
    return []


def _compare_text_matcher(
    matcher: Matcher,
    actual: HtmlNode,
    path: str,
    config: HTMLConfig,
) -> list[Difference]:
    if is_ignore(matcher):
        return []

    # Only text can satisfy a text matcher; other nodes count as absent.
    if not actual.is_text:
        if matcher.match(None):
            return []
        return [Difference(path, matcher.describe(), describe_node(actual), DiffKind.MATCHER_FAILED)]

    actual_text = text_content(actual)
    if not config.preserve_whitespace:
        actual_text = normalize_whitespace(actual_text)
        if isinstance(matcher, TemplateString):
            matcher = matcher.collapse_whitespace()

    if matcher.match_text(actual_text):
        return []
    return [Difference(path, matcher.describe(), actual_text, DiffKind.MATCHER_FAILED)]


# =============================================================================
# Attributes
# =============================================================================

def compare_attributes(
    expected: dict[str, Any],
    actual: dict[str, Any],
    path: str,
    config: HTMLConfig,
) -> list[Difference]:
    diffs: list[Difference] = []

    for name in sorted(expected):
        exp_val = expected[name]
        if config.is_attribute_ignored(path, name) or is_ignore(exp_val):
            continue

        attr_path = path + HTML_ATTRIBUTE_SEPARATOR + name
        if name not in actual:
            diffs.append(Difference(attr_path, format_attr_value(exp_val), None, DiffKind.REMOVED))
            continue

        act_str = as_text(actual[name])

        if isinstance(exp_val, Matcher):
            if not exp_val.match_text(act_str):
                diffs.append(Difference(
                    attr_path, exp_val.describe(), act_str, DiffKind.MATCHER_FAILED
                ))
            continue

        exp_str = as_text(exp_val)
        if exp_str != act_str:
            diffs.append(Difference(attr_path, exp_str, act_str, DiffKind.CHANGED))

    for name in sorted(actual):
        if config.is_attribute_ignored(path, name):
            continue
        if name not in expected:
            diffs.append(Difference(
                path + HTML_ATTRIBUTE_SEPARATOR + name,
                None,
                format_attr_value(actual[name]),
                DiffKind.ADDED,
            ))

    return diffs


# =============================================================================
# Children
# =============================================================================

def compare_children(
    expected: list[HtmlNode],
    actual: list[HtmlNode],
    path: str,
    config: HTMLConfig,
) -> list[Difference]:
    exp_filtered = filter_significant_children(expected, config)
    act_filtered = filter_significant_children(actual, config)

    if config.should_ignore_child_order(path):
        return _compare_children_unordered(exp_filtered, act_filtered, path, config)
    return _compare_children_ordered(exp_filtered, act_filtered, config)


def _compare_children_ordered(
    expected: list[HtmlNode],
    actual: list[HtmlNode],
    config: HTMLConfig,
) -> list[Difference]:
    diffs: list[Difference] = []

    for i in range(max(len(expected), len(actual))):
        if i >= len(expected):
            node = actual[i]
            diffs.append(Difference(node.path, None, describe_node(node), DiffKind.ADDED))
        elif i >= len(actual):
            node = expected[i]
            diffs.append(Difference(node.path, describe_node(node), None, DiffKind.REMOVED))
        else:
            diffs.extend(compare_nodes(expected[i], actual[i], expected[i].path, config))

    return diffs


def _compare_children_unordered(
    expected: list[HtmlNode],
    actual: list[HtmlNode],
    path: str,
    config: HTMLConfig,
) -> list[Difference]:
    """Greedy first-fit pairing, same policy as JSON arrays."""
    if len(expected) != len(actual):
        return [Difference(
            path,
            f"{len(expected)} children",
            f"{len(actual)} children",
            DiffKind.CHANGED,
        )]

    used = [False] * len(actual)
    unmatched: list[int] = []

    for i, exp in enumerate(expected):
        for j, act in enumerate(actual):
            if used[j]:
                continue
            if not compare_nodes(exp, act, exp.path, config):
                used[j] = True
                break
        else:
            unmatched.append(i)

    unused_actual = [j for j, u in enumerate(used) if not u]

    diffs: list[Difference] = []
    for n, i in enumerate(unmatched):
        act_desc = describe_node(actual[unused_actual[n]]) if n < len(unused_actual) else None
        diffs.append(Difference(
            expected[i].path, describe_node(expected[i]), act_desc, DiffKind.CHANGED
        ))

    return diffs


def filter_significant_children(nodes: list[HtmlNode], config: HTMLConfig) -> list[HtmlNode]:
    """Drop ignored elements, ignored comments and whitespace-only text."""
    result = []
    for node in nodes:
        if node.is_element and config.is_element_ignored(node.tag):
            continue
        if node.type is HtmlNodeType.COMMENT and config.ignore_comments:
            continue
        if node.is_text and not config.preserve_whitespace:
            if isinstance(node.text, str) and not node.text.strip():
                continue
        result.append(node)
    return result


# =============================================================================
# Display helpers
# =============================================================================

def text_content(node: HtmlNode | None) -> str:
    """Text of a text/comment node; matchers give their template text."""
    if node is None or node.text is None:
        return ""
    return as_text(node.text)


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Matcher):
        return value.describe()
    return str(value)


def format_attr_value(value: Any) -> str:
    if value is None:
        return NIL_DISPLAY
    if isinstance(value, Matcher):
        return value.describe()
    return json.dumps(as_text(value), ensure_ascii=False)


def describe_node(node: HtmlNode | None) -> str:
    """Short description: <div>, "text...", <!-- comment -->, <!DOCTYPE>."""
    if node is None:
        return NIL_DISPLAY

    if node.type is HtmlNodeType.ELEMENT:
        return f"<{node.tag}>"

    if node.type is HtmlNodeType.TEXT:
        text = text_content(node)
        if len(text) > MAX_TEXT_DISPLAY_LEN:
            return json.dumps(text[:MAX_TEXT_DISPLAY_LEN], ensure_ascii=False) + "..."
        return json.dumps(text, ensure_ascii=False)

    if node.type is HtmlNodeType.COMMENT:
        return "<!-- comment -->"

    return HTML_DOCTYPE_PATH
