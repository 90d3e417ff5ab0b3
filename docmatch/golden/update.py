"""
Create or refresh expected files from actual output.

WARNING: updated files must be reviewed before committing. Update mode is
refused inside CI so a failing run can never rewrite its own baseline.

Enable with:
    DOCMATCH_UPDATE=1 pytest ...
    pytest --docmatch-update ...
"""

import json
import logging
import os
import sys
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from docmatch.core.normalize import child_path, index_path
from docmatch.core.report import render_pretty_html
from docmatch.core.template import (
    ExpectedHTML,
    ExpectedJSON,
    parse_actual_html,
    parse_actual_json,
)
from docmatch.domain.constants import (
    CI_INDICATORS,
    SENTINEL_PREFIX,
    SENTINEL_SUFFIX,
    UPDATE_ENV_VAR,
    UPDATE_FLAGS,
)
from docmatch.domain.errors import UpdateBlockedError

logger = logging.getLogger(__name__)


def should_update(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """
    Update mode requested?

    DOCMATCH_UPDATE, when set, decides alone ("1"/"true" turn it on).
    Otherwise --update / --docmatch-update on the command line.
    """
    env = os.environ if environ is None else environ
    argv = sys.argv[1:] if argv is None else argv

    value = env.get(UPDATE_ENV_VAR)
    if value:
        return value.lower() in ("1", "true")

    return any(arg in UPDATE_FLAGS for arg in argv)


def check_ci_environment(environ: Mapping[str, str] | None = None) -> None:
    """
    Block update mode in CI.

    Raises:
        UpdateBlockedError: a CI indicator variable is set
    """
    env = os.environ if environ is None else environ

    for indicator in CI_INDICATORS:
        if env.get(indicator):
            raise UpdateBlockedError(
                "expected files cannot be updated in CI; "
                "update locally and review the changes",
                indicator=indicator,
                value=env.get(indicator),
            )


# =============================================================================
# Atomic write
# =============================================================================

def write_text_atomic(path: Path, text: str) -> None:
    """
    Write text via temp file + rename; no half-written expected files.

    Parent directories are created. On failure the temp file is removed
    and an existing file is left untouched.
    """
    path = Path(path)
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="\n",
        ) as f:
            temp_path = Path(f.name)
            f.write(text)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(f"File fsync failed for {path}: {e}")

        os.replace(temp_path, path)

    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


# =============================================================================
# JSON
# =============================================================================

def render_expected_json(data: Any, positions: Mapping[str, str] | None = None) -> str:
    """
    Pretty JSON (indent=2) with template text placed at matcher positions.

    Each position gets a token first; after json.dumps the quoted token is
    swapped for the raw "{{...}}" text, so regex backslashes and oneOf
    quotes are written exactly as the template had them.
    """
    positions = positions or {}
    tokens: dict[str, str] = {}

    def _place(value: Any, path: str) -> Any:
        if path in positions:
            token = f"{SENTINEL_PREFIX}{len(tokens)}{SENTINEL_SUFFIX}"
            tokens[token] = positions[path]
            return token
        if isinstance(value, dict):
            return {k: _place(v, child_path(path, k)) for k, v in value.items()}
        if isinstance(value, list):
            return [_place(v, index_path(path, i)) for i, v in enumerate(value)]
        return value

    text = json.dumps(_place(data, "$"), indent=2, ensure_ascii=False)
    for token, template in tokens.items():
        text = text.replace(f'"{token}"', f'"{template}"')
    return text + "\n"


def create_expected_json(path: Path, actual: bytes | str) -> None:
    """Write a new expected JSON file from actual output."""
    write_text_atomic(path, render_expected_json(parse_actual_json(actual)))
    logger.info(f"created expected file {path}")


def update_expected_json(path: Path, actual: bytes | str, expected: ExpectedJSON) -> None:
    """Rewrite an expected JSON file, keeping matchers where paths still exist."""
    positions = expected.matcher_positions()
    text = render_expected_json(parse_actual_json(actual), positions)
    write_text_atomic(path, text)
    logger.info(f"updated expected file {path} ({len(positions)} matcher(s) kept)")


# =============================================================================
# HTML
# =============================================================================

def create_expected_html(path: Path, actual: bytes | str) -> None:
    """Write a new expected HTML file (pretty-printed actual)."""
    root = parse_actual_html(actual)
    write_text_atomic(path, render_pretty_html(root) + "\n")
    logger.info(f"created expected file {path}")


def update_expected_html(path: Path, actual: bytes | str, expected: ExpectedHTML) -> None:
    """Rewrite an expected HTML file, keeping matchers at text and attribute paths."""
    positions = expected.matcher_positions()
    root = parse_actual_html(actual)
    write_text_atomic(path, render_pretty_html(root, overrides=positions) + "\n")
    logger.info(f"updated expected file {path} ({len(positions)} matcher(s) kept)")
