import pytest

from liveshare_autotest.ui_testing.framework.auth_state import AuthStateStore
from liveshare_autotest.ui_testing.framework.browser_manager import BrowserManager


class FakeContext:
    async def storage_state(self, path=None):
        with open(path, "w", encoding="utf-8") as f:
            f.write('{"cookies": [], "origins": []}')


def test_launch_options_from_config(monkeypatch):
    monkeypatch.setenv("BROWSER_HEADLESS", "false")
    manager = BrowserManager()

    options = manager.launch_options()

    assert manager.browser_type == "chromium"
    assert options["headless"] is False
    assert options["slow_mo"] == 100
    assert "--no-sandbox" in options["args"]


def test_unsupported_browser():
    with pytest.raises(ValueError):
        BrowserManager(browser_type="edge")


def test_context_options_without_saved_state(tmp_path):
    manager = BrowserManager(restore_auth=True, auth_store=AuthStateStore(state_dir=tmp_path))

    options = manager.context_options(locale="en-US")

    assert options["viewport"] == {"width": 1280, "height": 720}
    assert options["ignore_https_errors"] is True
    assert options["locale"] == "en-US"
    assert "storage_state" not in options


async def test_saved_login_is_restored(tmp_path):
    store = AuthStateStore(state_dir=tmp_path)
    saving = BrowserManager(auth_store=store)
    state_file = await saving.save_auth_state(FakeContext())
    assert state_file.name == "liveshare-storage-state.json"

    restoring = BrowserManager(restore_auth=True, auth_store=store)
    assert restoring.context_options()["storage_state"] == str(state_file)

    # Not restored unless asked for
    assert "storage_state" not in saving.context_options()


async def test_new_context_requires_started_browser():
    with pytest.raises(RuntimeError):
        await BrowserManager().new_context()
