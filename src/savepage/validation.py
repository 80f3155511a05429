"""Argument validation for a single save run.

Everything the browser will be asked to do is checked here first, so that a
bad flag is reported before any window is opened.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from savepage.exceptions import (
    BrowserNotFoundError,
    DestinationError,
    InvalidWaitTimeError,
    MissingURLError,
    NonAsciiInputError,
    UnsupportedBrowserError,
)

logger = logging.getLogger(__name__)

# Decimal notation only: ".5", "5", "5.25"
_NUMBER_RE = re.compile(r"\.[0-9]+|[0-9]+|[0-9]+\.[0-9]+")

# Anything outside printable ASCII (space through tilde)
_NON_PRINTABLE_ASCII_RE = re.compile(r"[^ -~]")


class Browser(str, Enum):
    """Browsers whose "Save Page As" dialog savepage knows how to drive."""

    GOOGLE_CHROME = "google-chrome"
    CHROMIUM = "chromium-browser"
    FIREFOX = "firefox"

    @property
    def save_dialog_title(self) -> str:
        """Window title of the browser's save dialog."""
        if self is Browser.FIREFOX:
            return "Save as"
        return "Save file"


SUPPORTED_BROWSERS: tuple[str, ...] = tuple(b.value for b in Browser)


class SaveRequest(BaseModel):
    """Validated inputs for one save run."""

    model_config = ConfigDict(frozen=True)

    url: str
    destination: Path
    destination_is_dir: bool
    suffix: str = ""
    browser: Browser = Browser.GOOGLE_CHROME
    load_wait_time: float = 4.0
    save_wait_time: float = 8.0


def is_valid_number(text: str) -> bool:
    """Return True if *text* is a non-negative number in plain decimal notation."""
    return bool(_NUMBER_RE.fullmatch(text))


def parse_wait_time(option: str, text: str | float) -> float:
    """Convert a wait-time flag value to seconds.

    Strings come from the command line and must be plain decimals. Numbers
    come from settings, which already enforce a non-negative range.

    Raises:
        InvalidWaitTimeError: If *text* is not in plain decimal notation, or is a negative number.
    """
    if not isinstance(text, str):
        seconds = float(text)
        if not seconds >= 0 or seconds == float("inf"):
            raise InvalidWaitTimeError(option, str(text))
        return seconds
    if not is_valid_number(text):
        raise InvalidWaitTimeError(option, text)
    return float(text)


def has_non_printable_or_non_ascii(text: str) -> bool:
    """Return True if *text* has any character xdotool cannot type reliably."""
    return bool(_NON_PRINTABLE_ASCII_RE.search(text))


def resolve_browser(name: str) -> Browser:
    """Map a browser executable name onto the allow-list.

    Raises:
        UnsupportedBrowserError: If *name* is not one of :data:`SUPPORTED_BROWSERS`.
    """
    try:
        return Browser(name)
    except ValueError:
        raise UnsupportedBrowserError(name, SUPPORTED_BROWSERS) from None


def resolve_destination(destination: str | Path) -> tuple[Path, bool]:
    """Resolve *destination* to an absolute path.

    A directory means "save inside it with the browser's default file name";
    anything else is taken as the full path of the target file, whose parent
    directory must already exist.

    Returns:
        ``(absolute_path, is_directory)``

    Raises:
        DestinationError: If *destination* is empty or the target file's parent directory does not exist.
    """
    if not str(destination).strip():
        raise DestinationError("")
    path = Path(destination).expanduser()
    if path.is_dir():
        logger.info(
            "The specified destination (%r) is a directory path, will save file inside it with the default name.",
            str(destination),
        )
        return path.resolve(), True

    parent = path.parent
    if not parent.is_dir():
        raise DestinationError(str(parent))
    return path.resolve(), False


def build_request(
    url: str | None,
    *,
    destination: str | Path = ".",
    suffix: str = "",
    browser: str = Browser.GOOGLE_CHROME.value,
    load_wait_time: str | float = "4",
    save_wait_time: str | float = "8",
    which: Callable[[str], str | None] | None = None,
) -> SaveRequest:
    """Validate raw CLI values and bundle them into a :class:`SaveRequest`.

    Checks run in this order: URL present, destination resolvable, browser
    allowed and installed, wait times numeric, destination and suffix
    typeable.

    Raises:
        ValidationError: One of its subclasses, for the first check that fails.
    """
    if not url:
        raise MissingURLError()
    which = which or shutil.which

    dest_path, is_dir = resolve_destination(destination)

    resolved_browser = resolve_browser(browser)
    if which(resolved_browser.value) is None:
        raise BrowserNotFoundError(resolved_browser.value)

    load_seconds = parse_wait_time("--load-wait-time", load_wait_time)
    save_seconds = parse_wait_time("--save-wait-time", save_wait_time)

    if has_non_printable_or_non_ascii(str(dest_path)):
        raise NonAsciiInputError("--destination", str(dest_path))
    if has_non_printable_or_non_ascii(suffix):
        raise NonAsciiInputError("--suffix", suffix)

    return SaveRequest(
        url=url,
        destination=dest_path,
        destination_is_dir=is_dir,
        suffix=suffix,
        browser=resolved_browser,
        load_wait_time=load_seconds,
        save_wait_time=save_seconds,
    )
