import json
import os
import time

from liveshare_autotest.ui_testing.framework.auth_state import AuthStateStore


class FakeContext:
    """Writes a storage state file the way BrowserContext.storage_state does."""

    def __init__(self):
        self.saved_paths = []

    async def storage_state(self, path=None):
        state = {"cookies": [{"name": "session", "value": "abc"}], "origins": []}
        with open(path, "w", encoding="utf-8") as f:
            json.dump(state, f)
        self.saved_paths.append(path)
        return state


async def test_save_then_load(tmp_path):
    store = AuthStateStore(state_dir=tmp_path / "state")
    context = FakeContext()

    path = await store.save(context, "liveshare")

    assert path == tmp_path / "state" / "liveshare-storage-state.json"
    assert context.saved_paths == [str(path)]
    assert store.exists("liveshare")
    assert store.load("liveshare") == path
    assert json.loads(path.read_text())["cookies"][0]["name"] == "session"


def test_load_missing_returns_none(tmp_path):
    store = AuthStateStore(state_dir=tmp_path)
    assert store.load("liveshare") is None
    assert store.is_expired("liveshare")


async def test_expired_state_is_not_loaded(tmp_path):
    store = AuthStateStore(state_dir=tmp_path, max_age_hours=1)
    path = await store.save(FakeContext(), "liveshare")

    two_hours_ago = time.time() - 2 * 3600
    os.utime(path, (two_hours_ago, two_hours_ago))

    assert store.is_expired("liveshare")
    assert not store.is_expired("liveshare", max_age_hours=3)
    assert store.load("liveshare") is None
    assert store.info("liveshare").expired


def test_state_dir_comes_from_config(tmp_path):
    # AUTH_STATE_DIR is pointed at tmp_path by the unit conftest
    store = AuthStateStore()
    assert store.state_dir == tmp_path / "auth-state"
    assert store.max_age_hours == 24


async def test_list_delete_and_clear(tmp_path):
    store = AuthStateStore(state_dir=tmp_path)
    for name in ("liveshare", "admin"):
        await store.save(FakeContext(), name)
    (tmp_path / "notes.txt").write_text("not a state file")

    assert store.list_names() == ["admin", "liveshare"]
    assert store.delete("admin")
    assert not store.delete("admin")
    assert store.list_names() == ["liveshare"]

    assert store.clear() == 1
    assert store.list_names() == []
    assert (tmp_path / "notes.txt").exists()


async def test_info(tmp_path):
    store = AuthStateStore(state_dir=tmp_path)

    missing = store.info("liveshare")
    assert not missing.exists
    assert missing.expired
    assert missing.modified_at is None

    await store.save(FakeContext(), "liveshare")
    info = store.info("liveshare")
    assert info.exists
    assert not info.expired
    assert info.size_bytes > 0
    assert info.age_hours is not None and info.age_hours < 1
