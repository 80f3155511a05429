"""Configuration loader for savepage using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags
  2. Environment variables (SAVEPAGE_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml

The TOML files are read from ``$SAVEPAGE_CONFIG_DIR`` (default: ``config/``
under the project root).
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _THIS_DIR.parents[2]

ENV_VAR_NAME = "SAVEPAGE_ENV"
CONFIG_DIR_VAR_NAME = "SAVEPAGE_CONFIG_DIR"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def config_dir() -> Path:
    """Return the directory holding the ``settings.*.toml`` files."""
    return Path(os.getenv(CONFIG_DIR_VAR_NAME) or PROJECT_ROOT / "config")


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class BrowserSettings(BaseSettings):
    """Browser used when ``--browser`` is not given."""

    model_config = SettingsConfigDict(env_prefix="SAVEPAGE_BROWSER__")

    name: str = "google-chrome"


class TimingSettings(BaseSettings):
    """Fixed sleeps standing in for synchronisation with the GUI (seconds)."""

    model_config = SettingsConfigDict(env_prefix="SAVEPAGE_TIMING__")

    load_wait_time: float = Field(default=4.0, ge=0)
    save_wait_time: float = Field(default=8.0, ge=0)
    dialog_wait_time: float = Field(default=1.0, ge=0)
    window_search_timeout: float = Field(default=30.0, gt=0)


class KeySettings(BaseSettings):
    """xdotool keystroke tuning."""

    model_config = SettingsConfigDict(env_prefix="SAVEPAGE_KEYS__")

    xdotool_binary: str = "xdotool"
    key_delay_ms: int = Field(default=20, ge=0)
    type_delay_ms: int = Field(default=10, ge=0)
    kde_key_delay_ms: int = Field(default=40, ge=0)
    # Left presses needed to land before ".html" when KDE highlights the whole name
    kde_extension_length: int = Field(default=5, ge=0)
    close_tab_key: str = "ctrl+w"


class OutputSettings(BaseSettings):
    """Defaults for where the page is written."""

    model_config = SettingsConfigDict(env_prefix="SAVEPAGE_OUTPUT__")

    destination: str = "."
    suffix: str = ""


class LoggingSettings(BaseSettings):
    """Root logger configuration."""

    model_config = SettingsConfigDict(env_prefix="SAVEPAGE_LOGGING__")

    level: str = "INFO"
    format: Literal["plain", "json"] = "plain"

    @field_validator("level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root savepage settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="SAVEPAGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    debug: bool = False

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    timing: TimingSettings = Field(default_factory=TimingSettings)
    keys: KeySettings = Field(default_factory=KeySettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        directory = config_dir()
        defaults = _load_toml(directory / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(directory / f"settings.{env_name}.toml")
        local_overrides = _load_toml(directory / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
