"""savepage exception hierarchy."""

from __future__ import annotations

from collections.abc import Sequence


class SavePageError(Exception):
    """Base exception for all savepage errors."""


class ValidationError(SavePageError):
    """Raised when user input cannot be used to drive the browser."""


class MissingURLError(ValidationError):
    """Raised when no URL was given."""

    def __init__(self) -> None:
        super().__init__("URL must be specified.")


class UnsupportedBrowserError(ValidationError):
    """Raised when the requested browser is not on the allow-list.

    Attributes:
        browser: The rejected browser name.
        supported: Names that would have been accepted.
    """

    def __init__(self, browser: str, supported: Sequence[str]) -> None:
        self.browser = browser
        self.supported = tuple(supported)
        names = ", ".join(f"'{name}'" for name in self.supported)
        super().__init__(f"Browser ({browser}) is not supported, must be one of {names}.")


class BrowserNotFoundError(ValidationError):
    """Raised when the browser executable is not on ``PATH``."""

    def __init__(self, browser: str) -> None:
        self.browser = browser
        super().__init__(f"Command '{browser}' not found. Make sure it is installed, and in path.")


class InvalidWaitTimeError(ValidationError):
    """Raised when a wait time is not a plain decimal number."""

    def __init__(self, option: str, value: str) -> None:
        self.option = option
        self.value = value
        super().__init__(f"{option} (='{value}') must be a valid number.")


class NonAsciiInputError(ValidationError):
    """Raised when text that xdotool must type contains non-printable or non-ASCII characters."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"{field} ('{value}') contains non-ascii or non-printable ascii character(s). "
            "xdotool cannot type them reliably; will NOT proceed."
        )


class DestinationError(ValidationError):
    """Raised when the destination is empty or its parent directory does not exist."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        if not directory:
            super().__init__("Destination must not be empty - will NOT continue.")
            return
        super().__init__(f"Directory '{directory}' does not exist - will NOT continue.")


class XdotoolNotFoundError(SavePageError):
    """Raised when the xdotool binary cannot be executed."""

    def __init__(self, binary: str) -> None:
        self.binary = binary
        super().__init__(
            f"'{binary}' is not present (or not in the PATH). "
            "See https://github.com/jordansissel/xdotool to install it for your platform."
        )


class XdotoolCommandError(SavePageError):
    """Raised when an xdotool invocation exits non-zero.

    Attributes:
        argv: The full command line that failed.
        returncode: Exit status reported by xdotool.
    """

    def __init__(self, argv: Sequence[str], returncode: int) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        super().__init__(f"Command {' '.join(self.argv)!r} failed with exit status {returncode}")


class WindowNotFoundError(SavePageError):
    """Raised when no X window id could be found for a search."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(f"Unable to find X-server window id for {description}.")
