"""
Golden-file assertions for JSON and HTML output.

Philosophy:
- Compare STRUCTURE, not bytes
- Volatile values are written as matchers in the expected file
- Baselines are updated locally and reviewed, never in CI
"""

from .runner import (
    GoldenRunner,
    GoldenScenario,
    assert_html,
    assert_json,
    discover_scenarios,
    match_html,
    match_json,
)
from .update import check_ci_environment, should_update

__all__ = [
    # Assertions
    "assert_json",
    "assert_html",
    "match_json",
    "match_html",
    # Update mode
    "should_update",
    "check_ci_environment",
    # Scenarios
    "GoldenRunner",
    "GoldenScenario",
    "discover_scenarios",
]
