"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Every test runs with the RECLAIM_* environment cleared and a fresh
configuration cache, so results never depend on the developer's shell.
"""

from collections.abc import Generator

import pytest

from reclaim_cli.core.config import get_app_config
from reclaim_cli.core.logging import setup_logging

RECLAIM_ENV_VARS = ("RECLAIM_API_KEY", "RECLAIM_BASE_URL", "RECLAIM_TIMEOUT_SECS")


@pytest.fixture(autouse=True)
def _configure_logging() -> None:
    """Reset logging to WARNING on the current stderr before each test."""
    setup_logging(level="WARNING", format_type="console", enable_file_logging=False)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear RECLAIM_* variables and the YAML config cache around each test."""
    for name in RECLAIM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_app_config.cache_clear()
    yield
    get_app_config.cache_clear()
