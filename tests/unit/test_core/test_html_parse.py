"""
test_html_parse.py - HtmlNode tree building and path assignment
"""

import pytest

from docmatch.core.html_parse import element_path, html_matcher_positions, parse_html_tree, resolve_value
from docmatch.core.matchers import AnyInt, AnyString, TemplateString
from docmatch.core.normalize import PlaceholderTable
from docmatch.domain.schemas import HtmlNodeType


class TestTreePaths:

    def test_fragment_is_wrapped(self):
        root = parse_html_tree("<div>x</div>")
        assert root.tag == "html"
        assert root.path == "html"
        body = root.children[0]
        assert body.path == "html > body"

    def test_sibling_indices(self, find):
        root = parse_html_tree("<div><span>A</span><em>E</em><span>B</span></div>")
        div = find(root, "html > body > div")
        assert [c.path for c in div.children] == [
            "html > body > div > span",
            "html > body > div > em",
            "html > body > div > span[1]",
        ]

    def test_text_and_comment_paths(self, find):
        root = parse_html_tree("<p>Hi<!-- note --></p>")
        p = find(root, "html > body > p")
        text, comment = p.children
        assert text.type is HtmlNodeType.TEXT
        assert text.path == "html > body > p (text)"
        assert text.text == "Hi"
        assert comment.type is HtmlNodeType.COMMENT
        assert comment.path == "html > body > p (comment)"
        assert comment.text == " note "

    def test_doctype_document(self):
        root = parse_html_tree("<!DOCTYPE html><html><body><p>x</p></body></html>")
        assert root.tag == "#document"
        doctype = root.children[0]
        assert doctype.type is HtmlNodeType.DOCTYPE
        assert doctype.tag == "html"
        assert doctype.path == "<!DOCTYPE>"
        html_nodes = [c for c in root.children if c.is_element]
        assert html_nodes[0].path == "html"

    def test_empty_document(self):
        root = parse_html_tree("")
        assert root.tag == "#document"
        assert root.children == []

    def test_whitespace_text_is_kept(self, find):
        root = parse_html_tree("<div>\n  <p>x</p>\n</div>")
        div = find(root, "html > body > div")
        assert any(c.is_text and not c.text.strip() for c in div.children)

    def test_multi_valued_attribute_stays_one_string(self, find):
        root = parse_html_tree('<div class="a  b" id="x">y</div>')
        div = find(root, "html > body > div")
        assert div.attributes == {"class": "a  b", "id": "x"}

    def test_element_path_helper(self):
        assert element_path("", "html", 0) == "html"
        assert element_path("html > body", "li", 2) == "html > body > li[2]"


class TestResolveValue:

    @pytest.fixture
    def table(self) -> PlaceholderTable:
        t = PlaceholderTable()
        t.add("anyString")
        t.add("regex `\\d+`")
        t.add("anyInt")
        return t

    def test_actual_side_untouched(self):
        assert resolve_value("__MATCHER_0__", None) == "__MATCHER_0__"

    def test_whole_value(self, table):
        assert resolve_value("  __MATCHER_0__\n", table) == AnyString()

    def test_embedded(self, table):
        value = resolve_value("Total: __MATCHER_2__ items", table)
        assert isinstance(value, TemplateString)
        assert value.describe() == "Total: {{anyInt}} items"

    def test_embedded_regex_restored(self, table):
        assert resolve_value("id-__MATCHER_1__", table) == "id-{{regex `\\d+`}}"

    def test_plain_text(self, table):
        assert resolve_value("hello", table) == "hello"


class TestMatcherPositions:

    def test_collects_text_and_attributes(self):
        table = PlaceholderTable()
        table.add("anyString")
        table.add("anyInt")
        root = parse_html_tree('<p title="__MATCHER_0__">__MATCHER_1__</p>', table)
        assert html_matcher_positions(root) == {
            "html > body > p@title": "{{anyString}}",
            "html > body > p (text)": "{{anyInt}}",
        }
        assert root.children[0].children[0].children[0].text == AnyInt()

    def test_none(self):
        assert html_matcher_positions(None) == {}
