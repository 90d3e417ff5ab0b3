"""pytest plugin for docmatch.

Registered through the pytest11 entry point, so installing the package is
enough. Adds:

    --docmatch-update     create/rewrite expected files instead of failing

and the fixtures `assert_json` / `assert_html`:

    def test_user(assert_json, client):
        assert_json("tests/data/user.expected.json", client.get("/user").content)
"""

from collections.abc import Callable
from functools import partial

import pytest

from docmatch.core.report import ColorConfig

from . import runner
from .update import should_update


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("docmatch")
    group.addoption(
        "--docmatch-update",
        action="store_true",
        default=False,
        dest="docmatch_update",
        help="Create or update expected files from actual output (never in CI)",
    )


@pytest.fixture(scope="session")
def docmatch_update(request: pytest.FixtureRequest) -> bool:
    """Update mode for this session: the flag, else DOCMATCH_UPDATE."""
    if request.config.getoption("docmatch_update"):
        return True
    return should_update(argv=[])


@pytest.fixture(scope="session")
def docmatch_colors() -> ColorConfig:
    """Colour detection, done once per session."""
    return ColorConfig.from_environment()


@pytest.fixture
def assert_json(docmatch_update: bool, docmatch_colors: ColorConfig) -> Callable[..., None]:
    """runner.assert_json bound to the session's update mode and colours."""
    return partial(runner.assert_json, update=docmatch_update, colors=docmatch_colors)


@pytest.fixture
def assert_html(docmatch_update: bool, docmatch_colors: ColorConfig) -> Callable[..., None]:
    """runner.assert_html bound to the session's update mode and colours."""
    return partial(runner.assert_html, update=docmatch_update, colors=docmatch_colors)


def pytest_report_header(config: pytest.Config) -> list[str] | None:
    if config.getoption("docmatch_update"):
        return ["docmatch: update mode ON (expected files will be rewritten)"]
    return None
