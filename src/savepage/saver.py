"""Drive a browser through "Save Page As" with synthetic keystrokes.

The sequence is entirely timing based: the browser is launched, given a fixed
time to load, sent ``ctrl+s``, and the save dialog that should have appeared
is then filled in by typing. Nothing here can observe whether the page really
loaded or the file was really written.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from savepage.settings.config import Settings
from savepage.validation import SaveRequest
from savepage.xdotool import Xdotool

logger = logging.getLogger(__name__)

_KDE_SESSION_RE = re.compile(r"^kde-?")

Launcher = Callable[[Sequence[str]], object]


def is_kde_session(environ: Mapping[str, str]) -> bool:
    """Return True when ``DESKTOP_SESSION`` names a KDE session."""
    return bool(_KDE_SESSION_RE.match(environ.get("DESKTOP_SESSION", "")))


def launch_browser(argv: Sequence[str]) -> subprocess.Popen:
    """Start the browser detached from this process, discarding its output."""
    return subprocess.Popen(
        list(argv),
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


@dataclass
class SaveResult:
    """Outcome of a :meth:`PageSaver.run` call."""

    browser_window_id: str
    dialog_window_id: str
    destination: Path
    kde_session: bool
    elapsed_seconds: float


class PageSaver:
    """Run the load / save / close keystroke sequence for one :class:`SaveRequest`.

    Args:
        request: Validated inputs.
        settings: Resolved settings (timing and keystroke tuning).
        xdotool: Command wrapper; defaults to one built from ``settings.keys``.
        sleep: Blocking sleep, replaced in tests.
        launcher: Starts the browser from an argv list.
        environ: Environment consulted for ``DESKTOP_SESSION``.
    """

    def __init__(
        self,
        request: SaveRequest,
        settings: Settings,
        *,
        xdotool: Xdotool | None = None,
        sleep: Callable[[float], None] = time.sleep,
        launcher: Launcher = launch_browser,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.request = request
        self.settings = settings
        self.xdotool = xdotool or Xdotool(binary=settings.keys.xdotool_binary)
        self._sleep = sleep
        self._launcher = launcher
        self._environ = os.environ if environ is None else environ

    def run(self) -> SaveResult:
        """Open the page, save it, and close the tab.

        Raises:
            XdotoolNotFoundError: If xdotool is not installed.
            WindowNotFoundError: If the browser window or save dialog never appears.
            XdotoolCommandError: If any keystroke command fails.
        """
        started = time.monotonic()
        self.xdotool.ensure_installed()
        kde = is_kde_session(self._environ)

        browser_wid = self._open_page()
        self._sleep(self.settings.timing.dialog_wait_time)
        dialog_wid = self._find_save_dialog()
        self._fill_dialog(dialog_wid, kde)

        logger.info("Saving web page ...")
        self._sleep(self.request.save_wait_time)
        self._close_tab(browser_wid)
        logger.info("Done!")

        return SaveResult(
            browser_window_id=browser_wid,
            dialog_window_id=dialog_wid,
            destination=self.request.destination,
            kde_session=kde,
            elapsed_seconds=time.monotonic() - started,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _open_page(self) -> str:
        """Launch the browser on the URL, wait, and press ctrl+s in its window."""
        browser = self.request.browser.value
        logger.debug("Launching %s %s", browser, self.request.url)
        self._launcher([browser, self.request.url])
        self._sleep(self.request.load_wait_time)

        browser_wid = self.xdotool.find_window(
            "browser",
            window_class=browser,
            sync=True,
            only_visible=True,
            timeout=self.settings.timing.window_search_timeout,
        )
        self.xdotool.activate(browser_wid)
        self.xdotool.key("ctrl+s", window=browser_wid)
        return browser_wid

    def _find_save_dialog(self) -> str:
        title = self.request.browser.save_dialog_title
        return self.xdotool.find_window(
            f"'{title}' dialog",
            name=title,
            timeout=self.settings.timing.window_search_timeout,
        )

    def _fill_dialog(self, dialog_wid: str, kde: bool) -> None:
        """Type the suffix and destination into the name field and confirm."""
        keys = self.settings.keys

        # Focus the name field explicitly; works on both GNOME and KDE
        self.xdotool.key("alt+n", activate=dialog_wid, delay_ms=keys.key_delay_ms)

        if self.request.suffix:
            if kde:
                # KDE highlights the whole name including the extension
                logger.info(
                    "Desktop session is %r, so the full file name will be highlighted; "
                    "moving %d characters left from the end before adding the suffix.",
                    self._environ.get("DESKTOP_SESSION", ""),
                    keys.kde_extension_length,
                )
                self.xdotool.key(
                    "End",
                    *["Left"] * keys.kde_extension_length,
                    activate=dialog_wid,
                    delay_ms=keys.kde_key_delay_ms,
                )
            else:
                self.xdotool.key("Right", activate=dialog_wid, delay_ms=keys.key_delay_ms)
            self.xdotool.type_text(self.request.suffix, delay_ms=keys.type_delay_ms)

        destination = str(self.request.destination)
        if self.request.destination_is_dir:
            self.xdotool.key("Home", activate=dialog_wid, delay_ms=keys.key_delay_ms)
            self.xdotool.type_text(destination.rstrip("/") + "/", delay_ms=keys.type_delay_ms)
        else:
            self.xdotool.key("ctrl+a", "BackSpace", activate=dialog_wid, delay_ms=keys.key_delay_ms)
            self.xdotool.type_text(destination, delay_ms=keys.type_delay_ms)

        self.xdotool.key("Return", activate=dialog_wid, delay_ms=keys.key_delay_ms)

    def _close_tab(self, browser_wid: str) -> None:
        self.xdotool.key(self.settings.keys.close_tab_key, activate=browser_wid)
