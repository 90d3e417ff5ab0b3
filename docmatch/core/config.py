"""
Comparison configuration.

Config objects are built once per assertion and never mutated; the
comparators only read them. Options may come from keyword arguments or
from a YAML file:

    json:
      ignore_array_order: false
      ignore_array_order_paths: ["$.tags"]
      ignored_fields: ["id", "$.meta.created_at"]
    html:
      ignore_comments: true
      ignored_elements: ["script"]
      ignored_attributes: ["data-testid"]
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from docmatch.domain.constants import HTML_CHILD_SEPARATOR
from docmatch.domain.errors import ConfigurationError


def _freeze(obj: Any, *names: str) -> None:
    """Turn list-valued options into tuples on a frozen dataclass."""
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, str):
            value = (value,)
        object.__setattr__(obj, name, tuple(value))


@dataclass(frozen=True)
class JSONConfig:
    ignore_array_order: bool = False
    ignore_array_order_paths: tuple[str, ...] = ()
    ignored_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "ignore_array_order_paths", "ignored_fields")

    def should_ignore_array_order(self, path: str) -> bool:
        """Array at path is compared order-insensitively (globally or by path prefix)."""
        if self.ignore_array_order:
            return True
        return any(
            p == path or path.startswith(p + ".") or path.startswith(p + "[")
            for p in self.ignore_array_order_paths
        )

    def is_field_ignored(self, path: str) -> bool:
        """Exact path match, or match on the last dotted segment (field name)."""
        last_segment = path.split(".")[-1]
        return any(f == path or f == last_segment for f in self.ignored_fields)


@dataclass(frozen=True)
class HTMLConfig:
    ignore_comments: bool = False
    preserve_whitespace: bool = False
    ignore_child_order: bool = False
    ignore_child_order_paths: tuple[str, ...] = ()
    ignored_elements: tuple[str, ...] = ()
    ignored_attributes: tuple[str, ...] = ()
    # "html > body > div@class"
    ignored_attribute_paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(
            self,
            "ignore_child_order_paths",
            "ignored_elements",
            "ignored_attributes",
            "ignored_attribute_paths",
        )

    def should_ignore_child_order(self, path: str) -> bool:
        if self.ignore_child_order:
            return True
        return any(
            p == path or path.startswith(p + HTML_CHILD_SEPARATOR)
            for p in self.ignore_child_order_paths
        )

    def is_element_ignored(self, tag: str) -> bool:
        tag = tag.casefold()
        return any(t.casefold() == tag for t in self.ignored_elements)

    def is_attribute_ignored(self, path: str, attr: str) -> bool:
        name = attr.casefold()
        if any(a.casefold() == name for a in self.ignored_attributes):
            return True
        return f"{path}@{attr}" in self.ignored_attribute_paths


# =============================================================================
# Construction helpers
# =============================================================================

def _build(cls: type, options: dict[str, Any], source: str) -> Any:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise ConfigurationError(
            "unknown option(s)",
            section=source,
            options=unknown,
            allowed=sorted(known),
        )
    return cls(**options)


def json_config(**options: Any) -> JSONConfig:
    """JSONConfig from keyword options; unknown names raise ConfigurationError."""
    return _build(JSONConfig, options, "json")


def html_config(**options: Any) -> HTMLConfig:
    """HTMLConfig from keyword options; unknown names raise ConfigurationError."""
    return _build(HTMLConfig, options, "html")


def load_config(config_path: Path) -> tuple[JSONConfig, HTMLConfig]:
    """
    Load JSON and HTML comparison settings from a YAML file.

    Args:
        config_path: YAML file with optional `json:` and `html:` sections

    Returns:
        (JSONConfig, HTMLConfig); a missing section yields defaults

    Raises:
        ConfigurationError: unreadable YAML, wrong shape, or unknown keys
    """
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError("cannot read config file", path=str(config_path), cause=e) from e

    if not isinstance(data, dict):
        raise ConfigurationError("config root must be a mapping", path=str(config_path))

    unknown = sorted(set(data) - {"json", "html"})
    if unknown:
        raise ConfigurationError("unknown section(s)", path=str(config_path), sections=unknown)

    sections = {}
    for name in ("json", "html"):
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{name}' section must be a mapping", path=str(config_path))
        sections[name] = section

    return json_config(**sections["json"]), html_config(**sections["html"])
