"""
Offline unit test configuration: a fresh dev configuration per test, with
screenshots and auth state redirected to the test's tmp directory.
"""

from pathlib import Path

import pytest

from liveshare_autotest.common.config_loader import ConfigLoader
from liveshare_autotest.unit.fakes import FakePage


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("MODE", "dev")
    monkeypatch.setenv("SCREENSHOTS_DIR", str(tmp_path / "screenshots"))
    monkeypatch.setenv("AUTH_STATE_DIR", str(tmp_path / "auth-state"))
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()
