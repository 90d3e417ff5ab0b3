"""
test_config.py - comparison options and YAML loading
"""

from dataclasses import FrozenInstanceError

import pytest

from docmatch.core.config import HTMLConfig, JSONConfig, html_config, json_config, load_config
from docmatch.domain.errors import ConfigurationError


class TestJSONConfig:

    def test_defaults(self):
        cfg = JSONConfig()
        assert not cfg.should_ignore_array_order("$.tags")
        assert not cfg.is_field_ignored("$.id")

    def test_global_array_order(self):
        assert JSONConfig(ignore_array_order=True).should_ignore_array_order("$.anything")

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("$.tags", True),
            ("$.tags[0]", True),
            ("$.tags.inner", True),
            ("$.tagsx", False),
            ("$.other", False),
        ],
    )
    def test_array_order_path_prefix(self, path, expected):
        cfg = JSONConfig(ignore_array_order_paths=["$.tags"])
        assert cfg.should_ignore_array_order(path) is expected

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("$.id", True),
            ("$.user.id", True),
            ("$.user.identity", False),
            ("$.meta.created_at", True),
            ("$.created_at", False),
        ],
    )
    def test_ignored_fields(self, path, expected):
        cfg = JSONConfig(ignored_fields=["id", "$.meta.created_at"])
        assert cfg.is_field_ignored(path) is expected

    def test_sequences_frozen(self):
        cfg = JSONConfig(ignored_fields=["a", "b"], ignore_array_order_paths="$.x")
        assert cfg.ignored_fields == ("a", "b")
        assert cfg.ignore_array_order_paths == ("$.x",)

    def test_immutable(self):
        with pytest.raises(FrozenInstanceError):
            JSONConfig().ignore_array_order = True


class TestHTMLConfig:

    def test_child_order_prefix(self):
        cfg = HTMLConfig(ignore_child_order_paths=["html > body > ul"])
        assert cfg.should_ignore_child_order("html > body > ul")
        assert cfg.should_ignore_child_order("html > body > ul > li")
        assert not cfg.should_ignore_child_order("html > body > ul[1]")

    def test_elements_case_insensitive(self):
        cfg = HTMLConfig(ignored_elements=["SCRIPT"])
        assert cfg.is_element_ignored("script")
        assert not cfg.is_element_ignored("style")

    def test_attributes(self):
        cfg = HTMLConfig(
            ignored_attributes=["data-testid"],
            ignored_attribute_paths=["html > body > div@id"],
        )
        assert cfg.is_attribute_ignored("html > body > p", "DATA-TESTID")
        assert cfg.is_attribute_ignored("html > body > div", "id")
        assert not cfg.is_attribute_ignored("html > body > span", "id")


class TestBuilders:

    def test_json_config(self):
        assert json_config(ignore_array_order=True).ignore_array_order

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError) as exc_info:
            json_config(ignore_order=True)
        assert exc_info.value.context["options"] == ["ignore_order"]

    def test_html_unknown_option(self):
        with pytest.raises(ConfigurationError):
            html_config(ignored_fields=["x"])


class TestLoadConfig:

    def test_both_sections(self, write_file):
        path = write_file(
            "docmatch.yaml",
            "json:\n"
            "  ignore_array_order_paths: ['$.tags']\n"
            "  ignored_fields: [id]\n"
            "html:\n"
            "  ignore_comments: true\n"
            "  ignored_elements: [script]\n",
        )
        json_cfg, html_cfg = load_config(path)
        assert json_cfg.ignore_array_order_paths == ("$.tags",)
        assert json_cfg.ignored_fields == ("id",)
        assert html_cfg.ignore_comments
        assert html_cfg.ignored_elements == ("script",)

    def test_empty_file_gives_defaults(self, write_file):
        json_cfg, html_cfg = load_config(write_file("empty.yaml", ""))
        assert json_cfg == JSONConfig()
        assert html_cfg == HTMLConfig()

    def test_unknown_section(self, write_file):
        with pytest.raises(ConfigurationError):
            load_config(write_file("bad.yaml", "xml:\n  a: 1\n"))

    def test_unknown_key(self, write_file):
        with pytest.raises(ConfigurationError):
            load_config(write_file("bad.yaml", "json:\n  ignore_everything: true\n"))

    def test_not_a_mapping(self, write_file):
        with pytest.raises(ConfigurationError):
            load_config(write_file("bad.yaml", "- a\n- b\n"))

    def test_invalid_yaml(self, write_file):
        with pytest.raises(ConfigurationError):
            load_config(write_file("bad.yaml", "json: [unclosed\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.yaml")
