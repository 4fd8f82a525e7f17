"""
================================================================================
Authentication State Store
================================================================================

Persists Playwright storage state (cookies + localStorage) so that a login
performed by one scenario can be restored by the next browser context
instead of repeating the Google OAuth popup.

Files are named `<name>-storage-state.json` inside `auth.state_dir` and are
treated as expired after `auth.state_max_age_hours`.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger
from playwright.async_api import BrowserContext

from liveshare_autotest.common.config_loader import get_config


@dataclass
class AuthStateInfo:
    """Metadata about one saved auth state file."""
    name: str
    path: Path
    exists: bool
    size_bytes: int = 0
    modified_at: Optional[datetime] = None
    age_hours: Optional[float] = None
    expired: bool = True


class AuthStateStore:
    """
    File-backed store of browser storage states.

    Usage:
        store = AuthStateStore()
        await store.save(context, "liveshare")
        state_file = store.load("liveshare")  # None when missing or expired
        context = await browser.new_context(storage_state=str(state_file))
    """

    FILE_SUFFIX = "-storage-state.json"

    def __init__(
        self,
        state_dir: Optional[Path] = None,
        max_age_hours: Optional[float] = None,
    ):
        config = get_config()
        self.state_dir = Path(state_dir or config.get("auth.state_dir", "auth-state"))
        self.max_age_hours = float(
            max_age_hours if max_age_hours is not None
            else config.get("auth.state_max_age_hours", 24)
        )

    def path_for(self, name: str) -> Path:
        return self.state_dir / f"{name}{self.FILE_SUFFIX}"

    async def save(self, context: BrowserContext, name: str) -> Path:
        """Write the context's cookies and localStorage to disk."""
        self.state_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        await context.storage_state(path=str(path))
        logger.info(f"Authentication state saved to: {path}")
        return path

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> Optional[Path]:
        """Return the state file path when it exists and has not expired."""
        if not self.exists(name):
            logger.debug(f"No saved authentication state for '{name}'")
            return None
        if self.is_expired(name):
            logger.info(f"Saved authentication state for '{name}' is expired")
            return None
        return self.path_for(name)

    def is_expired(self, name: str, max_age_hours: Optional[float] = None) -> bool:
        """Missing files count as expired."""
        path = self.path_for(name)
        if not path.is_file():
            return True
        limit = self.max_age_hours if max_age_hours is None else max_age_hours
        age_hours = (time.time() - path.stat().st_mtime) / 3600
        return age_hours > limit

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Authentication state deleted: {path}")
        return True

    def list_names(self) -> List[str]:
        if not self.state_dir.is_dir():
            return []
        return sorted(
            path.name[: -len(self.FILE_SUFFIX)]
            for path in self.state_dir.glob(f"*{self.FILE_SUFFIX}")
        )

    def clear(self) -> int:
        """Delete every saved state. Returns the number of files removed."""
        names = self.list_names()
        for name in names:
            self.path_for(name).unlink()
        if names:
            logger.info(f"Cleared {len(names)} authentication state file(s)")
        return len(names)

    def info(self, name: str) -> AuthStateInfo:
        path = self.path_for(name)
        if not path.is_file():
            return AuthStateInfo(name=name, path=path, exists=False)

        stat = path.stat()
        age_hours = (time.time() - stat.st_mtime) / 3600
        return AuthStateInfo(
            name=name,
            path=path,
            exists=True,
            size_bytes=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime),
            age_hours=round(age_hours, 2),
            expired=age_hours > self.max_age_hours,
        )


__all__ = [
    "AuthStateInfo",
    "AuthStateStore",
]
