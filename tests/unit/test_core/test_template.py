"""
test_template.py - placeholder extraction and expected/actual parsing

Test cases:
- TC1: sentinel substitution for JSON and HTML text
- TC2: expected JSON parsing (matchers, embedded placeholders, errors)
- TC3: expected HTML parsing
- TC4: expected file dispatch by suffix
"""

import json
from pathlib import Path

import pytest

from docmatch.core.matchers import AnyInt, AnyString, OneOf, Regex, TemplateString
from docmatch.core.template import (
    ExpectedHTML,
    ExpectedJSON,
    extract_placeholders,
    parse_actual_html,
    parse_actual_json,
    parse_expected_file,
    parse_expected_html,
    parse_expected_json,
)
from docmatch.domain.errors import (
    DocumentParseError,
    ExpectedFileNotFoundError,
    UnknownMatcherError,
    UnknownPlaceholderError,
)


# =============================================================================
# TC1: Sentinel substitution
# =============================================================================

class TestExtractPlaceholders:

    def test_json_quoted_and_bare(self):
        text, table = extract_placeholders('{"id": "{{anyString}}", "n": {{anyInt}}}', "json")
        assert text == '{"id": "__MATCHER_0__", "n": "__MATCHER_1__"}'
        assert table.expressions == {"__MATCHER_0__": "anyString", "__MATCHER_1__": "anyInt"}

    def test_json_embedded_keeps_string_quotes(self):
        text, _ = extract_placeholders('{"greeting": "hello {{anyString}}"}', "json")
        assert text == '{"greeting": "hello __MATCHER_0__"}'

    def test_json_embedded_at_start(self):
        text, _ = extract_placeholders('{"v": "{{anyInt}} items"}', "json")
        assert text == '{"v": "__MATCHER_0__ items"}'

    def test_json_embedded_in_middle(self):
        text, _ = extract_placeholders('{"msg": "hello {{anyString}} world"}', "json")
        assert text == '{"msg": "hello __MATCHER_0__ world"}'

    def test_json_string_state_survives_escapes_and_expressions(self):
        raw = r'{"a": "say \"{{anyInt}}\"", "b": {{oneOf "x" "y"}}, "c": "{{anyString}} end"}'
        text, _ = extract_placeholders(raw, "json")
        assert text == (
            r'{"a": "say \"__MATCHER_0__\"", "b": "__MATCHER_1__", "c": "__MATCHER_2__ end"}'
        )

    def test_expression_is_trimmed(self):
        _, table = extract_placeholders('{"a": "{{  anyString  }}"}', "json")
        assert table.expression("__MATCHER_0__") == "anyString"

    def test_braces_inside_backticks(self):
        text, table = extract_placeholders(r'{"code": "{{regex `^\d{3}$`}}"}', "json")
        assert text == '{"code": "__MATCHER_0__"}'
        assert table.expression("__MATCHER_0__") == r"regex `^\d{3}$`"

    def test_html_plain_substitution(self):
        text, table = extract_placeholders('<p class="x-{{anyInt}}">{{anyString}}</p>', "html")
        assert text == '<p class="x-__MATCHER_0__">__MATCHER_1__</p>'
        assert len(table) == 2

    def test_numbering_is_left_to_right(self):
        _, table = extract_placeholders('["{{anyInt}}", "{{anyBool}}", "{{anyInt}}"]', "json")
        assert list(table.expressions.values()) == ["anyInt", "anyBool", "anyInt"]

    def test_unknown_expression_fails_early(self):
        with pytest.raises(UnknownMatcherError):
            extract_placeholders('{"a": "{{nope}}"}', "json")


# =============================================================================
# TC2: Expected JSON
# =============================================================================

class TestParseExpectedJSON:

    def test_matchers_replace_sentinels(self):
        expected = parse_expected_json('{"id": "{{anyString}}", "name": "Alice", "age": {{anyInt}}}')
        assert isinstance(expected, ExpectedJSON)
        assert expected.data["id"] == AnyString()
        assert expected.data["name"] == "Alice"
        assert expected.data["age"] == AnyInt()

    def test_regex_pattern_kept_verbatim(self):
        expected = parse_expected_json(r'{"email": "{{regex `^[a-z]+@example\.com$`}}"}')
        matcher = expected.data["email"]
        assert isinstance(matcher, Regex)
        assert matcher.pattern == r"^[a-z]+@example\.com$"

    def test_one_of_escaped_and_plain(self):
        escaped = parse_expected_json(r'{"s": "{{oneOf \"a\" \"b\"}}"}')
        plain = parse_expected_json('{"s": "{{oneOf "a" "b"}}"}')
        assert escaped.data["s"] == OneOf("a", "b")
        assert plain.data["s"] == OneOf("a", "b")

    def test_embedded_placeholder_restored_as_text(self):
        expected = parse_expected_json('{"greeting": "hello {{anyString}}"}')
        assert expected.data["greeting"] == "hello {{anyString}}"

    def test_placeholder_in_middle_restored_as_text(self):
        expected = parse_expected_json('{"msg": "hello {{anyString}} world"}')
        assert expected.data == {"msg": "hello {{anyString}} world"}

    def test_placeholder_as_key_restored(self):
        expected = parse_expected_json('{"{{anyString}}": 1}')
        assert expected.data == {"{{anyString}}": 1}

    def test_nested_positions(self):
        expected = parse_expected_json('{"items": [{"n": "{{anyInt}}"}], "id": "{{anyString}}"}')
        assert expected.matcher_positions() == {
            "$.items[0].n": "{{anyInt}}",
            "$.id": "{{anyString}}",
        }

    def test_matcher_table_and_raw(self):
        raw = '{"id": "{{anyString}}"}'
        expected = parse_expected_json(raw)
        assert expected.matchers == {"__MATCHER_0__": "anyString"}
        assert expected.raw == raw

    def test_bytes_input(self):
        expected = parse_expected_json(b'{"a": 1}')
        assert expected.data == {"a": 1}

    def test_invalid_json(self):
        with pytest.raises(DocumentParseError) as exc_info:
            parse_expected_json('{"a": }')
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)
        assert exc_info.value.context["source"] == "expected"

    def test_invalid_utf8(self):
        with pytest.raises(DocumentParseError):
            parse_expected_json(b'{"a": "\xff"}')

    def test_stray_sentinel_rejected(self):
        with pytest.raises(UnknownPlaceholderError):
            parse_expected_json('{"a": "__MATCHER_7__"}')


class TestParseActualJSON:

    def test_no_placeholder_handling(self):
        assert parse_actual_json('{"a": "{{anyString}}"}') == {"a": "{{anyString}}"}
        assert parse_actual_json('{"a": "__MATCHER_0__"}') == {"a": "__MATCHER_0__"}

    def test_invalid(self):
        with pytest.raises(DocumentParseError) as exc_info:
            parse_actual_json(b"not json")
        assert exc_info.value.context["source"] == "actual"


# =============================================================================
# TC3: Expected HTML
# =============================================================================

class TestParseExpectedHTML:

    def test_whole_value_matchers(self, find):
        expected = parse_expected_html('<div class="{{anyString}}">{{anyInt}}</div>')
        assert isinstance(expected, ExpectedHTML)
        div = find(expected.root, "html > body > div")
        assert div.attributes["class"] == AnyString()
        assert div.children[0].text == AnyInt()

    def test_embedded_template(self, find):
        expected = parse_expected_html('<div class="btn btn-{{oneOf "primary" "secondary"}}">X</div>')
        value = find(expected.root, "html > body > div").attributes["class"]
        assert isinstance(value, TemplateString)
        assert value.describe() == 'btn btn-{{oneOf "primary" "secondary"}}'

    def test_embedded_regex_stays_literal(self, find):
        expected = parse_expected_html(r'<a title="id-{{regex `\d+`}}">x</a>')
        value = find(expected.root, "html > body > a").attributes["title"]
        assert value == r"id-{{regex `\d+`}}"

    def test_positions(self):
        expected = parse_expected_html('<div class="{{anyString}}"><p>{{anyInt}}</p></div>')
        assert expected.matcher_positions() == {
            "html > body > div@class": "{{anyString}}",
            "html > body > div > p (text)": "{{anyInt}}",
        }

    def test_unknown_matcher(self):
        with pytest.raises(UnknownMatcherError):
            parse_expected_html("<p>{{whatever}}</p>")

    def test_actual_html_keeps_braces(self, find):
        root = parse_actual_html("<p>{{anyString}}</p>")
        assert find(root, "html > body > p").children[0].text == "{{anyString}}"


# =============================================================================
# TC4: Expected file dispatch
# =============================================================================

class TestParseExpectedFile:

    def test_json_by_default(self, write_file):
        path = write_file("user.expected.json", '{"id": "{{anyString}}"}')
        assert isinstance(parse_expected_file(path), ExpectedJSON)

    @pytest.mark.parametrize("name", ["page.html", "page.HTM"])
    def test_html_suffix(self, write_file, name):
        path = write_file(name, "<p>x</p>")
        assert isinstance(parse_expected_file(path), ExpectedHTML)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ExpectedFileNotFoundError):
            parse_expected_file(tmp_path / "missing.json")
