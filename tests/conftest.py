"""
Pytest fixtures for docmatch tests.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from docmatch.domain.constants import CI_INDICATORS, UPDATE_ENV_VAR
from docmatch.domain.schemas import HtmlNode

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def golden_dir() -> Path:
    """Directory holding golden scenarios."""
    return Path(__file__).parent / "golden"


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory: write text to tmp_path/name and return the path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def no_ci(monkeypatch: pytest.MonkeyPatch) -> None:
    """Local-run environment: no CI indicators, no update variable."""
    for name in CI_INDICATORS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv(UPDATE_ENV_VAR, raising=False)


# =============================================================================
# HTML helpers
# =============================================================================

def find_node(root: HtmlNode, path: str) -> HtmlNode:
    """First node in the tree with the given path."""
    if root.path == path:
        return root
    for child in root.children:
        try:
            return find_node(child, path)
        except LookupError:
            continue
    raise LookupError(path)


@pytest.fixture
def find() -> Callable[[HtmlNode, str], HtmlNode]:
    return find_node
