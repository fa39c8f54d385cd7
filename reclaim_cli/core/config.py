"""
Configuration Management.

Loads defaults from the packaged reclaim_cli/settings/*.yaml files and
runtime values from the environment. No hardcoded API values in code.

Environment (RECLAIM_ prefix):
    RECLAIM_API_KEY, RECLAIM_BASE_URL, RECLAIM_TIMEOUT_SECS

Settings (YAML):
    application.yaml   - App identity, API base URL, timeout, error limits
    logging.yaml       - Logging configuration

Precedence: CLI option > environment > application.yaml.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from reclaim_cli.core.config_schema import ApplicationSchema, LoggingSchema
from reclaim_cli.core.exceptions import ConfigurationError

SETTINGS_DIR = Path(__file__).resolve().parent.parent / "settings"


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from reclaim_cli/settings/."""
    config_path = SETTINGS_DIR / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from the packaged YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


class Settings(BaseSettings):
    """Runtime values read from RECLAIM_* environment variables."""

    api_key: str | None = None
    base_url: str | None = None
    timeout_secs: int | None = None

    model_config = SettingsConfigDict(
        env_prefix="RECLAIM_",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def load_settings(
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_secs: int | None = None,
) -> Settings:
    """
    Resolve runtime settings.

    Explicit arguments (from CLI options) win over the environment, and
    missing values fall back to application.yaml. The API key is left as
    found; the client decides whether it is usable.

    Raises:
        ConfigurationError: If an environment value has the wrong type
    """
    explicit = {
        key: value
        for key, value in {
            "api_key": api_key,
            "base_url": base_url,
            "timeout_secs": timeout_secs,
        }.items()
        if value is not None
    }

    try:
        settings = Settings(**explicit)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid RECLAIM_* environment setting:\n{e}",
            hint="Check RECLAIM_BASE_URL and RECLAIM_TIMEOUT_SECS, e.g. RECLAIM_TIMEOUT_SECS=15.",
        ) from e

    api = get_app_config().application.api
    timeout = settings.timeout_secs if settings.timeout_secs is not None else api.timeout_secs
    return settings.model_copy(
        update={
            "base_url": settings.base_url or api.base_url,
            "timeout_secs": max(timeout, 1),
        }
    )
