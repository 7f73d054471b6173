"""Launcher settings loaded from environment variables and an optional YAML file.

These are process-wide knobs for the shell itself (where the profile lives,
which wallet backend the engine process hosts, price feed endpoint). The
user's wallet preferences live in ``config.json`` and are owned by
:class:`proton_wallet.config.store.ConfigStore`.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``PROTON_``, nested via ``__``)
2. YAML config file (``PROTON_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from proton_wallet.config.defaults import LOG_DIR

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class LogLevel(enum.StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class PriceConfig(BaseSettings):
    """Fiat price feed settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROTON_PRICE__",
        case_sensitive=False,
    )

    enabled: bool = True
    api_url: str = "https://api.coingecko.com/api/v3"
    coin_id: str = "turtlecoin"
    refresh_interval: float = Field(default=300.0, gt=0)
    timeout: float = 30.0


class EngineConfig(BaseSettings):
    """Engine process settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROTON_ENGINE__",
        case_sensitive=False,
    )

    backend: str = Field(
        default="proton_wallet.engine.backend:NullWalletBackend",
        description="Dotted 'module:attribute' path of the WalletBackend factory",
    )


class UIConfig(BaseSettings):
    """UI process settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROTON_UI__",
        case_sensitive=False,
    )

    renderer: str = Field(
        default="proton_wallet.ui.render:LogRenderer",
        description="Dotted 'module:attribute' path of the view renderer factory",
    )


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML settings file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def _default_profile_dir() -> Path:
    return Path.home() / ".protonwallet"


class AppSettings(BaseSettings):
    """Top-level launcher settings.

    Loads settings from environment variables (``PROTON_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROTON_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    log_level: LogLevel = LogLevel.INFO
    profile_dir: Path = Field(default_factory=_default_profile_dir)
    config_path: str = ""

    price: PriceConfig = Field(default_factory=PriceConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppSettings`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

    @property
    def log_dir(self) -> Path:
        """Directory holding the per-process log files."""
        return self.profile_dir / LOG_DIR

    def ensure_directories(self) -> list[Path]:
        """Create the profile and log directories if missing.

        Returns the directories that had to be created.
        """
        created = []
        for directory in (self.profile_dir, self.log_dir):
            if not directory.exists():
                directory.mkdir(parents=True)
                created.append(directory)
        return created
