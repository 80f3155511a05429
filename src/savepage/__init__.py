"""savepage — save a web page through the browser's own "Save Page As" dialog."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("savepage")
except Exception:
    __version__ = "0.0.0"
