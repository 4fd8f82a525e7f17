"""
Repository-level pytest configuration.

Why this exists:
  - Select the configuration environment (`--app-env` / MODE) before any
    page object reads it
  - Keep live end-to-end scenarios opt-in (`--run-e2e` / E2E_ENABLED)
  - Route loguru output through one setup for the whole session

Important:
  Credentials are never stored here. Provide GOOGLE_EMAIL / GOOGLE_PASSWORD
  (or a saved auth state) through the environment or CI secrets.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from liveshare_autotest.common.config_loader import ConfigLoader, get_config
from liveshare_autotest.common.log_setup import init_logger


# Throwaway pytest sessions for the ordering hooks
pytest_plugins = ["pytester"]


def pytest_addoption(parser):
    group = parser.getgroup("liveshare", "LiveShareNow automation")
    group.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run live end-to-end scenarios against the configured app",
    )
    group.addoption(
        "--app-env",
        action="store",
        default=None,
        choices=["dev", "staging", "production"],
        help="Configuration environment (default: MODE env var, then dev)",
    )


def pytest_configure(config):
    app_env = config.getoption("--app-env")
    if app_env:
        os.environ["MODE"] = app_env
    # Drop any instance created before MODE was known
    ConfigLoader.reset()


def e2e_enabled(config) -> bool:
    if config.getoption("--run-e2e"):
        return True
    return bool(get_config().get("e2e.enabled", False))


def pytest_collection_modifyitems(config, items):
    """Skip live scenarios unless explicitly enabled."""
    if e2e_enabled(config):
        return
    skip_e2e = pytest.mark.skip(reason="live scenario: pass --run-e2e or set E2E_ENABLED=true")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _session_logging() -> Generator[None, None, None]:
    """Configure loguru once per session from the `logging` config section."""
    config = get_config()
    init_logger(
        level=config.get("logging.level", "INFO"),
        log_file=config.get("logging.file", "") or None,
    )
    yield
