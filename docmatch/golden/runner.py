"""
Assertion entry points and golden scenario runner.

assert_json / assert_html compare actual output with an expected file:

    assert_json("tests/data/user.expected.json", response.content)
    assert_html("tests/data/page.expected.html", html, ignore_comments=True)

On mismatch an AssertionError carries the difference summary and an inline
line diff. In update mode the expected file is created or rewritten instead.
"""

import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from docmatch.core.compare import compare_json
from docmatch.core.config import HTMLConfig, JSONConfig, html_config, json_config, load_config
from docmatch.core.html_compare import compare_html
from docmatch.core.report import (
    ColorConfig,
    format_diff,
    format_html_diff_inline,
    format_json_diff_inline,
)
from docmatch.core.template import (
    is_html_file,
    parse_actual_html,
    parse_actual_json,
    parse_expected_html,
    parse_expected_json,
)
from docmatch.domain.errors import (
    ConfigurationError,
    DocmatchError,
    ExpectedFileNotFoundError,
    UnsupportedInputError,
)
from docmatch.domain.schemas import Difference, DiffKind

from .update import (
    check_ci_environment,
    create_expected_html,
    create_expected_json,
    should_update,
    update_expected_html,
    update_expected_json,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Input conversion
# =============================================================================

def _read_common(actual: Any) -> bytes | None:
    if isinstance(actual, (bytes, bytearray, memoryview)):
        return bytes(actual)
    if isinstance(actual, str):
        return actual.encode("utf-8")
    read = getattr(actual, "read", None)
    if callable(read):
        data = read()
        return data.encode("utf-8") if isinstance(data, str) else bytes(data)
    return None


def to_json_bytes(actual: Any) -> bytes:
    """
    Actual value -> JSON bytes.

    bytes/str/readable objects are taken as JSON text; objects with
    to_dict() and dataclasses are converted first; anything else goes
    through json.dumps.

    Raises:
        UnsupportedInputError: value is not JSON serialisable
    """
    data = _read_common(actual)
    if data is not None:
        return data

    to_dict = getattr(actual, "to_dict", None)
    if callable(to_dict):
        actual = to_dict()
    elif dataclasses.is_dataclass(actual) and not isinstance(actual, type):
        actual = dataclasses.asdict(actual)

    try:
        return json.dumps(actual, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise UnsupportedInputError(
            "cannot serialise actual value to JSON",
            type=type(actual).__name__,
            cause=e,
        ) from e


def to_html_bytes(actual: Any) -> bytes:
    """
    Actual value -> HTML bytes (bytes, str, or readable objects).

    Raises:
        UnsupportedInputError: any other type
    """
    data = _read_common(actual)
    if data is None:
        raise UnsupportedInputError(
            "expected bytes, str or a readable object for HTML",
            type=type(actual).__name__,
        )
    return data


def _resolve_config(cls: type, config: Any, options: dict[str, Any]) -> Any:
    if config is not None and options:
        raise ConfigurationError("pass either a config object or keyword options, not both")
    if config is not None:
        if not isinstance(config, cls):
            raise ConfigurationError(
                "wrong config type", expected=cls.__name__, got=type(config).__name__
            )
        return config
    return json_config(**options) if cls is JSONConfig else html_config(**options)


# =============================================================================
# Assertions
# =============================================================================

def _failure_message(name: str, expected_file: Path, summary: str, inline: str) -> str:
    return (
        f"docmatch: assertion failed\n\n"
        f"  {name} ({expected_file})\n\n"
        f"{summary}\n"
        f"{inline}"
    )


def assert_json(
    expected_file: str | Path,
    actual: Any,
    *,
    config: JSONConfig | None = None,
    update: bool | None = None,
    colors: ColorConfig | None = None,
    **options: Any,
) -> None:
    """
    Assert actual JSON matches the expected file.

    Args:
        expected_file: Path to the expected JSON (may contain {{...}} matchers)
        actual: bytes, str, readable, dict/list, dataclass or object with to_dict()
        config: JSONConfig (or pass its fields as keyword options)
        update: Force update mode on/off (default: DOCMATCH_UPDATE / --update)
        colors: Colour settings for the inline diff (default: detected)

    Raises:
        AssertionError: documents differ (update mode off)
        ExpectedFileNotFoundError: no expected file (update mode off)
        UpdateBlockedError: update mode requested in CI
        DocmatchError: expected/actual cannot be parsed
    """
    expected_file = Path(expected_file)
    actual_bytes = to_json_bytes(actual)
    config = _resolve_config(JSONConfig, config, options)
    update = should_update() if update is None else update

    if not expected_file.exists():
        if not update:
            raise ExpectedFileNotFoundError(
                "expected file does not exist (run with DOCMATCH_UPDATE=1 to create)",
                path=str(expected_file),
            )
        check_ci_environment()
        create_expected_json(expected_file, actual_bytes)
        return

    expected = parse_expected_json(expected_file.read_bytes())
    actual_data = parse_actual_json(actual_bytes)
    diffs = compare_json(expected.data, actual_data, config)

    if not diffs:
        return

    if update:
        check_ci_environment()
        update_expected_json(expected_file, actual_bytes, expected)
        return

    colors = colors or ColorConfig.from_environment()
    raise AssertionError(_failure_message(
        "assert_json",
        expected_file,
        format_diff(diffs, "JSON"),
        format_json_diff_inline(expected.data, actual_data, colors),
    ))


def assert_html(
    expected_file: str | Path,
    actual: Any,
    *,
    config: HTMLConfig | None = None,
    update: bool | None = None,
    colors: ColorConfig | None = None,
    **options: Any,
) -> None:
    """
    Assert actual HTML matches the expected file.

    Args:
        expected_file: Path to the expected HTML (may contain {{...}} matchers)
        actual: bytes, str or readable object
        config: HTMLConfig (or pass its fields as keyword options)
        update: Force update mode on/off (default: DOCMATCH_UPDATE / --update)
        colors: Colour settings for the inline diff (default: detected)

    Raises:
        AssertionError: documents differ (update mode off)
        ExpectedFileNotFoundError: no expected file (update mode off)
        UpdateBlockedError: update mode requested in CI
        DocmatchError: expected/actual cannot be parsed
    """
    expected_file = Path(expected_file)
    actual_bytes = to_html_bytes(actual)
    config = _resolve_config(HTMLConfig, config, options)
    update = should_update() if update is None else update

    if not expected_file.exists():
        if not update:
            raise ExpectedFileNotFoundError(
                "expected file does not exist (run with DOCMATCH_UPDATE=1 to create)",
                path=str(expected_file),
            )
        check_ci_environment()
        create_expected_html(expected_file, actual_bytes)
        return

    expected = parse_expected_html(expected_file.read_bytes())
    actual_root = parse_actual_html(actual_bytes)
    diffs = compare_html(expected.root, actual_root, config)

    if not diffs:
        return

    if update:
        check_ci_environment()
        update_expected_html(expected_file, actual_bytes, expected)
        return

    colors = colors or ColorConfig.from_environment()
    raise AssertionError(_failure_message(
        "assert_html",
        expected_file,
        format_diff(diffs, "HTML"),
        format_html_diff_inline(expected.root, actual_root, colors),
    ))


def match_json(
    expected_file: str | Path,
    actual: Any,
    *,
    config: JSONConfig | None = None,
    **options: Any,
) -> list[Difference]:
    """Differences between the expected file and actual JSON, sorted by path."""
    expected_file = Path(expected_file)
    if not expected_file.exists():
        raise ExpectedFileNotFoundError("expected file does not exist", path=str(expected_file))

    expected = parse_expected_json(expected_file.read_bytes())
    actual_data = parse_actual_json(to_json_bytes(actual))
    return compare_json(expected.data, actual_data, _resolve_config(JSONConfig, config, options))


def match_html(
    expected_file: str | Path,
    actual: Any,
    *,
    config: HTMLConfig | None = None,
    **options: Any,
) -> list[Difference]:
    """Differences between the expected file and actual HTML, sorted by path."""
    expected_file = Path(expected_file)
    if not expected_file.exists():
        raise ExpectedFileNotFoundError("expected file does not exist", path=str(expected_file))

    expected = parse_expected_html(expected_file.read_bytes())
    actual_root = parse_actual_html(to_html_bytes(actual))
    return compare_html(expected.root, actual_root, _resolve_config(HTMLConfig, config, options))


# =============================================================================
# Golden scenarios
# =============================================================================

@dataclass
class GoldenScenario:
    """A directory-based comparison case."""
    name: str
    path: Path
    expected_file: Path
    actual_file: Path
    json_config: JSONConfig
    html_config: HTMLConfig
    # [{"path": ..., "kind": ...}]; empty means the documents must match
    expected_differences: list[dict[str, str]]

    @property
    def is_html(self) -> bool:
        return is_html_file(self.expected_file)

    @classmethod
    def load(cls, scenario_path: Path) -> "GoldenScenario":
        """
        Load a scenario from a directory.

        Expected structure:
            scenario_path/
                expected.json | expected.html
                actual.json   | actual.html
                config.yaml (optional)       json:/html: sections
                differences.yaml (optional)  list of {path, kind}
        """
        expected_file = _find_one(scenario_path, "expected")
        actual_file = _find_one(scenario_path, "actual")

        json_cfg, html_cfg = JSONConfig(), HTMLConfig()
        config_path = scenario_path / "config.yaml"
        if config_path.exists():
            json_cfg, html_cfg = load_config(config_path)

        expected_differences: list[dict[str, str]] = []
        differences_path = scenario_path / "differences.yaml"
        if differences_path.exists():
            with open(differences_path, encoding="utf-8") as f:
                expected_differences = yaml.safe_load(f) or []

        return cls(
            name=scenario_path.name,
            path=scenario_path,
            expected_file=expected_file,
            actual_file=actual_file,
            json_config=json_cfg,
            html_config=html_cfg,
            expected_differences=expected_differences,
        )


def _find_one(scenario_path: Path, stem: str) -> Path:
    for suffix in (".json", ".html", ".htm"):
        candidate = scenario_path / f"{stem}{suffix}"
        if candidate.exists():
            return candidate
    raise ExpectedFileNotFoundError(f"missing {stem} file", scenario=str(scenario_path))


class GoldenRunner:
    """
    Run directory-based scenarios.

    Usage:
        runner = GoldenRunner()
        for scenario in discover_scenarios(golden_dir):
            runner.assert_scenario(scenario)
    """

    def run_scenario(self, scenario: GoldenScenario) -> list[Difference]:
        actual = scenario.actual_file.read_bytes()
        if scenario.is_html:
            return match_html(scenario.expected_file, actual, config=scenario.html_config)
        return match_json(scenario.expected_file, actual, config=scenario.json_config)

    def assert_scenario(self, scenario: GoldenScenario) -> None:
        """Differences must equal the scenario's declared differences (path + kind)."""
        diffs = self.run_scenario(scenario)
        got = [{"path": d.path, "kind": d.kind.value} for d in diffs]
        want = [
            {"path": d["path"], "kind": DiffKind(d["kind"]).value}
            for d in scenario.expected_differences
        ]
        if got != want:
            label = "HTML" if scenario.is_html else "JSON"
            raise AssertionError(
                f"Golden scenario '{scenario.name}' failed:\n"
                f"  declared: {want}\n"
                f"  found:    {got}\n\n"
                f"{format_diff(diffs, label)}"
            )


def discover_scenarios(golden_dir: Path) -> list[GoldenScenario]:
    """
    Discover all scenarios in a directory (subdirectories with an expected file).

    Scenarios that fail to load are logged and skipped.
    """
    scenarios = []

    for scenario_path in sorted(Path(golden_dir).iterdir()):
        if not scenario_path.is_dir():
            continue
        if not any(scenario_path.glob("expected.*")):
            continue
        try:
            scenarios.append(GoldenScenario.load(scenario_path))
        except (DocmatchError, OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load scenario {scenario_path}: {e}")

    return scenarios
