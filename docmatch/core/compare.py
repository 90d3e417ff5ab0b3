"""
JSON structural comparison.

Walks an expected value tree (which may contain Matchers) and an actual
value tree together and collects every difference; nothing stops at the
first mismatch.

Rules, in order:
    1. ignored path -> nothing
    2. Matcher -> Ignore skips, otherwise match() decides
    3. null on one side only -> added / removed
    4. dispatch on the expected shape (object, array, string, number, bool)
"""

import logging
from typing import Any

from docmatch.domain.constants import JSON_ROOT_PATH
from docmatch.domain.schemas import Difference, DiffKind

from .config import JSONConfig
from .matchers import Matcher, is_ignore, is_number
from .normalize import child_path, index_path

logger = logging.getLogger(__name__)


def compare(
    expected: Any,
    actual: Any,
    path: str = JSON_ROOT_PATH,
    config: JSONConfig | None = None,
) -> list[Difference]:
    """
    Compare two JSON value trees and return the differences (unsorted).

    Args:
        expected: Expected value (may contain Matcher objects)
        actual: Actual value
        path: Path of this value ("$" at the root)
        config: Comparison options (defaults when None)

    Returns:
        List of Difference (empty if match)
    """
    config = config or JSONConfig()

    if config.is_field_ignored(path):
        return []

    if isinstance(expected, Matcher):
        if is_ignore(expected) or expected.match(actual):
            return []
        return [Difference(path, expected.describe(), actual, DiffKind.MATCHER_FAILED)]

    if expected is None and actual is None:
        return []
    if expected is None:
        return [Difference(path, None, actual, DiffKind.ADDED)]
    if actual is None:
        return [Difference(path, expected, None, DiffKind.REMOVED)]

    if isinstance(expected, dict):
        return _compare_objects(expected, actual, path, config)

    if isinstance(expected, list):
        return _compare_arrays(expected, actual, path, config)

    # bool before numbers: True is an int in Python.
    if isinstance(expected, bool):
        return _compare_scalars(expected, actual, path, bool)

    if is_number(expected):
        return _compare_numbers(expected, actual, path)

    if isinstance(expected, str):
        return _compare_scalars(expected, actual, path, str)

    if expected != actual:
        return [Difference(path, expected, actual, DiffKind.CHANGED)]
    return []


def compare_json(
    expected: Any,
    actual: Any,
    config: JSONConfig | None = None,
) -> list[Difference]:
    """Compare from the root and return differences sorted by path."""
    diffs = sort_diffs(compare(expected, actual, JSON_ROOT_PATH, config))
    logger.debug(f"JSON comparison found {len(diffs)} difference(s)")
    return diffs


def sort_diffs(diffs: list[Difference]) -> list[Difference]:
    """Stable sort by path for deterministic output."""
    return sorted(diffs, key=lambda d: d.path)


# =============================================================================
# Objects
# =============================================================================

def _compare_objects(
    expected: dict[str, Any],
    actual: Any,
    path: str,
    config: JSONConfig,
) -> list[Difference]:
    if not isinstance(actual, dict):
        return [Difference(path, expected, actual, DiffKind.TYPE_MISMATCH)]

    diffs: list[Difference] = []

    for key, exp_val in expected.items():
        new_path = child_path(path, key)
        if config.is_field_ignored(new_path) or is_ignore(exp_val):
            continue

        if key not in actual:
            diffs.append(Difference(new_path, exp_val, None, DiffKind.REMOVED))
        else:
            diffs.extend(compare(exp_val, actual[key], new_path, config))

    for key, act_val in actual.items():
        new_path = child_path(path, key)
        if config.is_field_ignored(new_path):
            continue
        if key not in expected:
            diffs.append(Difference(new_path, None, act_val, DiffKind.ADDED))

    return diffs


# =============================================================================
# Arrays
# =============================================================================

def _compare_arrays(
    expected: list[Any],
    actual: Any,
    path: str,
    config: JSONConfig,
) -> list[Difference]:
    if not isinstance(actual, list):
        return [Difference(path, expected, actual, DiffKind.TYPE_MISMATCH)]

    if config.should_ignore_array_order(path):
        return _compare_arrays_unordered(expected, actual, path, config)
    return _compare_arrays_ordered(expected, actual, path, config)


def _compare_arrays_ordered(
    expected: list[Any],
    actual: list[Any],
    path: str,
    config: JSONConfig,
) -> list[Difference]:
    diffs: list[Difference] = []

    for i in range(max(len(expected), len(actual))):
        new_path = index_path(path, i)
        if i >= len(expected):
            diffs.append(Difference(new_path, None, actual[i], DiffKind.ADDED))
        elif i >= len(actual):
            diffs.append(Difference(new_path, expected[i], None, DiffKind.REMOVED))
        else:
            diffs.extend(compare(expected[i], actual[i], new_path, config))

    return diffs


def _compare_arrays_unordered(
    expected: list[Any],
    actual: list[Any],
    path: str,
    config: JSONConfig,
) -> list[Difference]:
    """
    Greedy first-fit pairing.

    Each expected element, in order, takes the first unused actual element
    that compares clean. Leftover expected elements are reported against the
    leftover actual elements in order. This is not an optimal assignment:
    an early expected element can take an actual element a later one needed.
    """
    if len(expected) != len(actual):
        return [Difference(
            path,
            f"array of length {len(expected)}",
            f"array of length {len(actual)}",
            DiffKind.CHANGED,
        )]

    used = [False] * len(actual)
    unmatched: list[int] = []

    for i, exp in enumerate(expected):
        trial_path = index_path(path, i)
        for j, act in enumerate(actual):
            if used[j]:
                continue
            if not compare(exp, act, trial_path, config):
                used[j] = True
                break
        else:
            unmatched.append(i)

    unused_actual = [j for j, u in enumerate(used) if not u]

    diffs: list[Difference] = []
    for n, i in enumerate(unmatched):
        act_val = actual[unused_actual[n]] if n < len(unused_actual) else None
        diffs.append(Difference(index_path(path, i), expected[i], act_val, DiffKind.CHANGED))

    return diffs


# =============================================================================
# Leaves
# =============================================================================

def _compare_scalars(expected: Any, actual: Any, path: str, kind: type) -> list[Difference]:
    if not isinstance(actual, kind):
        return [Difference(path, expected, actual, DiffKind.TYPE_MISMATCH)]
    if expected != actual:
        return [Difference(path, expected, actual, DiffKind.CHANGED)]
    return []


def _compare_numbers(expected: Any, actual: Any, path: str) -> list[Difference]:
    if not is_number(actual):
        return [Difference(path, expected, actual, DiffKind.TYPE_MISMATCH)]
    if float(expected) != float(actual):
        return [Difference(path, expected, actual, DiffKind.CHANGED)]
    return []
