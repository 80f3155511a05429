"""Thin wrapper around the ``xdotool`` binary.

Every method maps onto one blocking ``xdotool`` invocation. The subprocess
runner is injectable so the argv can be checked without an X server.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Callable
from typing import Any

from savepage.exceptions import WindowNotFoundError, XdotoolCommandError, XdotoolNotFoundError

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]

_WINDOW_ID_RE = re.compile(r"^[0-9]+$")


def is_window_id(value: str | None) -> bool:
    """Return True if *value* looks like an X window id."""
    return bool(value) and bool(_WINDOW_ID_RE.match(value))


class Xdotool:
    """Issue xdotool commands for window search, focus, and synthetic keystrokes.

    Args:
        binary: Name or path of the xdotool executable.
        runner: Callable with the ``subprocess.run`` signature.
    """

    def __init__(self, binary: str = "xdotool", runner: Runner = subprocess.run) -> None:
        self.binary = binary
        self._runner = runner

    # ------------------------------------------------------------------
    # Low-level invocation
    # ------------------------------------------------------------------

    def run(self, *args: str, timeout: float | None = None) -> str:
        """Run ``xdotool <args>`` and return its stripped stdout.

        Raises:
            XdotoolNotFoundError: If the binary cannot be executed.
            XdotoolCommandError: If xdotool exits non-zero.
            subprocess.TimeoutExpired: If *timeout* elapses first.
        """
        argv = [self.binary, *args]
        logger.debug("exec %s", " ".join(argv))
        kwargs: dict[str, Any] = {"capture_output": True, "text": True, "check": True}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            result = self._runner(argv, **kwargs)
        except FileNotFoundError:
            raise XdotoolNotFoundError(self.binary) from None
        except subprocess.CalledProcessError as exc:
            raise XdotoolCommandError(argv, exc.returncode) from exc
        return (result.stdout or "").strip()

    def ensure_installed(self) -> None:
        """Check that ``xdotool --help`` runs.

        Raises:
            XdotoolNotFoundError: If xdotool is missing or broken.
        """
        try:
            self.run("--help")
        except (XdotoolNotFoundError, XdotoolCommandError, OSError):
            raise XdotoolNotFoundError(self.binary) from None

    # ------------------------------------------------------------------
    # Window search
    # ------------------------------------------------------------------

    def search(
        self,
        *,
        window_class: str | None = None,
        name: str | None = None,
        sync: bool = False,
        only_visible: bool = False,
        timeout: float | None = None,
    ) -> str | None:
        """Return the first window id matching *window_class* or *name*, if any.

        xdotool exits 1 when nothing matches; that is reported as ``None``.
        """
        if (window_class is None) == (name is None):
            raise ValueError("search needs exactly one of window_class or name")

        args = ["search"]
        if sync:
            args.append("--sync")
        if only_visible:
            args.append("--onlyvisible")
        if window_class is not None:
            args += ["--class", window_class]
        else:
            args += ["--name", name]

        try:
            output = self.run(*args, timeout=timeout)
        except XdotoolCommandError as exc:
            if exc.returncode == 1:
                return None
            raise
        lines = output.splitlines()
        return lines[0].strip() if lines else None

    def find_window(self, description: str, **search_kwargs: Any) -> str:
        """Like :meth:`search`, but the result must be a valid window id.

        Args:
            description: Human-readable target used in the error message.
            **search_kwargs: Forwarded to :meth:`search`.

        Raises:
            WindowNotFoundError: If nothing matched or the search timed out.
        """
        try:
            window_id = self.search(**search_kwargs)
        except subprocess.TimeoutExpired:
            logger.warning("xdotool search for %s timed out", description)
            raise WindowNotFoundError(description) from None
        if not is_window_id(window_id):
            raise WindowNotFoundError(description)
        logger.debug("found %s window %s", description, window_id)
        return window_id

    # ------------------------------------------------------------------
    # Focus and keystrokes
    # ------------------------------------------------------------------

    def activate(self, window_id: str) -> None:
        """Raise and focus *window_id*."""
        self.run("windowactivate", window_id)

    def key(
        self,
        *keys: str,
        window: str | None = None,
        activate: str | None = None,
        delay_ms: int | None = None,
        clear_modifiers: bool = True,
    ) -> None:
        """Send key sequences such as ``"ctrl+s"`` or ``"Return"``.

        Args:
            *keys: One or more xdotool keysym sequences, pressed in order.
            window: Send the events to this window id (``key --window``).
            activate: Chain ``windowactivate <id>`` in front of the key command.
            delay_ms: Delay between keystrokes.
            clear_modifiers: Release held modifier keys while typing.
        """
        if not keys:
            raise ValueError("key needs at least one keysym")
        args: list[str] = []
        if activate is not None:
            args += ["windowactivate", activate]
        args.append("key")
        if window is not None:
            args += ["--window", window]
        if delay_ms is not None:
            args += ["--delay", str(delay_ms)]
        if clear_modifiers:
            args.append("--clearmodifiers")
        args += list(keys)
        self.run(*args)

    def type_text(self, text: str, *, delay_ms: int | None = 10, clear_modifiers: bool = True) -> None:
        """Type *text* into the focused window."""
        args: list[str] = ["type"]
        if delay_ms is not None:
            args += ["--delay", str(delay_ms)]
        if clear_modifiers:
            args.append("--clearmodifiers")
        if text.startswith("-"):
            args.append("--")
        args.append(text)
        self.run(*args)

