"""savepage test configuration — shared fixtures for unit tests."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import pytest


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at an empty config dir and clear the LRU cache between tests."""
    from savepage.settings.config import get_settings

    monkeypatch.setenv("SAVEPAGE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("SAVEPAGE_ENV", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo the root handlers installed by ``configure_logging`` during a test."""
    handlers = logging.root.handlers[:]
    level = logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


# ---------------------------------------------------------------------------
# Fake xdotool
# ---------------------------------------------------------------------------

BROWSER_WID = "4194305"
DIALOG_WID = "6291457"


class FakeRunner:
    """Stand-in for ``subprocess.run`` that records every xdotool argv.

    ``responses`` maps the xdotool subcommand (``argv[1]``) to the stdout to
    return, a callable taking the argv, or an exception to raise.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.kwargs: list[dict] = []
        self.responses: dict[str, object] = {
            "search": lambda argv: f"{BROWSER_WID}\n4194400\n" if "--class" in argv else f"{DIALOG_WID}\n",
        }

    def __call__(self, argv, **kwargs):
        self.calls.append(list(argv))
        self.kwargs.append(kwargs)
        response = self.responses.get(argv[1] if len(argv) > 1 else "", "")
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response(argv)
        return subprocess.CompletedProcess(argv, 0, stdout=response, stderr="")


@pytest.fixture()
def fake_runner() -> FakeRunner:
    """A recording ``subprocess.run`` replacement with window ids for both searches."""
    return FakeRunner()


@pytest.fixture()
def xdotool(fake_runner: FakeRunner):
    """An ``Xdotool`` wired to :func:`fake_runner`."""
    from savepage.xdotool import Xdotool

    return Xdotool(runner=fake_runner)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that need a live X11 session")
