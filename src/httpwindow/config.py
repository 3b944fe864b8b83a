# src/httpwindow/config.py
"""
Configuration schema and loading for httpwindow.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from httpwindow.options import TransportOptions
from httpwindow.request import HeaderPairs, normalize_headers

ENVVAR_PREFIX = "HTTPWINDOW"


class LoggingSettings(BaseModel):
    """Logging output configuration (applied by the CLI)."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class DispatcherSettings(BaseModel):
    """Dispatcher configuration.

    Example YAML:
        window_size: 8
        poll_timeout: 5
        default_headers:
          Accept: application/json
        default_options:
          timeout: 15
          follow_redirects: false

    Attributes:
        window_size: Maximum requests in flight at once
        poll_timeout: Seconds to block waiting for a completion before re-polling
        default_headers: Headers sent with every request (request headers win)
        default_options: Transport settings for every request (request options win)
        logging: Logging output configuration
    """

    model_config = {"frozen": True, "extra": "forbid"}

    window_size: int = Field(
        default=5,
        ge=2,
        description="Maximum number of simultaneous requests",
    )
    poll_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for any completion before re-polling",
    )
    default_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers applied to every request",
    )
    default_options: TransportOptions = Field(
        default_factory=TransportOptions,
        description="Transport settings applied to every request",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def header_pairs(self) -> HeaderPairs:
        return normalize_headers(self.default_headers)


def load_settings(config_path: Path) -> DispatcherSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (HTTPWINDOW_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Nested keys use a double underscore, e.g. HTTPWINDOW_DEFAULT_OPTIONS__TIMEOUT.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If the config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    for section in ("default_options", "logging"):
        if isinstance(raw_config.get(section), dict):
            raw_config[section] = {k.lower(): v for k, v in raw_config[section].items()}

    return DispatcherSettings(**raw_config)
