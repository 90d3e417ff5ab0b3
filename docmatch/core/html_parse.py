"""
HTML tree normalization.

Builds the HtmlNode tree compared by html_compare from BeautifulSoup's
parse (lxml tree builder). Fragments are wrapped by the parser in
<html><body>, identically on the expected and actual side.

Paths:
    html > body > div            first <div> among its siblings
    html > body > div[1]         second <div>
    html > body > p (text)       text node inside <p>
    html > body (comment)        comment inside <body>
"""

import logging
from typing import Any

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from docmatch.domain.constants import (
    HTML_CHILD_SEPARATOR,
    HTML_COMMENT_SUFFIX,
    HTML_DOCTYPE_PATH,
    HTML_DOCUMENT_TAG,
    HTML_TEXT_SUFFIX,
)
from docmatch.domain.errors import DocumentParseError
from docmatch.domain.schemas import HtmlNode, HtmlNodeType

from .matchers import Matcher, TemplateString
from .normalize import PlaceholderTable

logger = logging.getLogger(__name__)

PARSER = "lxml"

# Markup that carries no comparable content.
_SKIPPED_STRINGS = (CData, ProcessingInstruction, Declaration)


def parse_html_tree(
    text: str,
    placeholders: PlaceholderTable | None = None,
    source: str = "document",
) -> HtmlNode:
    """
    Parse HTML text into a normalized HtmlNode tree.

    Args:
        text: HTML document or fragment
        placeholders: sentinel table of an expected document (None for actual)
        source: "expected"/"actual", used in error context

    Returns:
        Root node: the root element, or a #document wrapper when the document
        has a doctype or no element at all

    Raises:
        DocumentParseError: the parser rejected the markup
    """
    try:
        soup = BeautifulSoup(text, PARSER, multi_valued_attributes=None)
    except ParserRejectedMarkup as e:
        raise DocumentParseError(f"failed to parse {source} HTML", cause=e) from e

    top_level = list(soup.contents)
    has_doctype = any(isinstance(node, Doctype) for node in top_level)
    root_element = next((node for node in top_level if isinstance(node, Tag)), None)

    if root_element is not None and not has_doctype:
        return _convert_element(root_element, placeholders, "", 0)

    if root_element is None:
        logger.debug(f"{source} HTML has no root element")

    return HtmlNode(
        type=HtmlNodeType.ELEMENT,
        tag=HTML_DOCUMENT_TAG,
        children=_convert_children(top_level, placeholders, ""),
        path="",
    )


def element_path(parent_path: str, tag: str, index: int) -> str:
    """Path of the index-th <tag> child (index 0 carries no suffix)."""
    name = tag if index == 0 else f"{tag}[{index}]"
    if not parent_path:
        return name
    return parent_path + HTML_CHILD_SEPARATOR + name


def _convert_children(
    contents: list[Any],
    placeholders: PlaceholderTable | None,
    parent_path: str,
) -> list[HtmlNode]:
    children: list[HtmlNode] = []
    tag_counts: dict[str, int] = {}

    for child in contents:
        if isinstance(child, Tag):
            index = tag_counts.get(child.name, 0)
            tag_counts[child.name] = index + 1
            children.append(_convert_element(child, placeholders, parent_path, index))
            continue

        node = _convert_string(child, placeholders, parent_path)
        if node is not None:
            children.append(node)

    return children


def _convert_element(
    tag: Tag,
    placeholders: PlaceholderTable | None,
    parent_path: str,
    index: int,
) -> HtmlNode:
    path = element_path(parent_path, tag.name, index)

    attributes: dict[str, Any] = {}
    for name, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attributes[name] = resolve_value(value, placeholders)

    return HtmlNode(
        type=HtmlNodeType.ELEMENT,
        tag=tag.name,
        attributes=attributes,
        children=_convert_children(list(tag.contents), placeholders, path),
        path=path,
    )


def _convert_string(
    node: Any,
    placeholders: PlaceholderTable | None,
    parent_path: str,
) -> HtmlNode | None:
    # Comment and Doctype subclass NavigableString: check them first.
    if isinstance(node, Comment):
        return HtmlNode(
            type=HtmlNodeType.COMMENT,
            text=str(node),
            path=parent_path + HTML_COMMENT_SUFFIX,
        )

    if isinstance(node, Doctype):
        return HtmlNode(
            type=HtmlNodeType.DOCTYPE,
            tag=str(node),
            path=HTML_DOCTYPE_PATH,
        )

    if isinstance(node, _SKIPPED_STRINGS):
        return None

    if isinstance(node, NavigableString):
        return HtmlNode(
            type=HtmlNodeType.TEXT,
            text=resolve_value(str(node), placeholders),
            path=parent_path + HTML_TEXT_SUFFIX,
        )

    return None


def resolve_value(value: str, placeholders: PlaceholderTable | None) -> Any:
    """
    Resolve sentinels in an attribute or text value.

    - whole value (ignoring surrounding whitespace) is one sentinel -> Matcher
    - sentinels among literal characters -> TemplateString
    - ... unless one of them is a regex: the value then keeps the literal
      {{expr}} text and is compared as plain text
    """
    if placeholders is None:
        return value

    stripped = value.strip()
    if placeholders.is_sentinel(stripped):
        return placeholders.matcher(stripped)

    if not placeholders.contains_sentinel(value):
        return value

    segments = placeholders.split(value)
    embeddable = all(
        s.pattern_fragment() is not None for s in segments if isinstance(s, Matcher)
    )
    if embeddable:
        return TemplateString(segments)

    return placeholders.restore(value)


def html_matcher_positions(node: HtmlNode | None) -> dict[str, str]:
    """Map of `path` (text) and `path@attr` (attribute) -> template text."""
    positions: dict[str, str] = {}
    if node is None:
        return positions

    if isinstance(node.text, Matcher):
        positions[node.path] = node.text.describe()

    for name, value in node.attributes.items():
        if isinstance(value, Matcher):
            positions[f"{node.path}@{name}"] = value.describe()

    for child in node.children:
        positions.update(html_matcher_positions(child))

    return positions
