"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - One browser instance per manager
    - Isolated contexts per scenario
    - Authentication state persistence through AuthStateStore
    - Launch and context presets from the `browser` config section

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)
from playwright.async_api import Error as PlaywrightError

from liveshare_autotest.common.config_loader import get_config

from .auth_state import AuthStateStore


class BrowserManager:
    """
    Manages browser instances and contexts for UI testing.

    Usage:
        async with BrowserManager() as manager:
            page = await manager.new_page()
            await page.goto("https://app.livesharenow.com")

        # Reuse a saved login
        async with BrowserManager(restore_auth=True) as manager:
            page = await manager.new_page()
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "slow_mo": 100,
        "args": [
            "--disable-dev-shm-usage",
            "--no-sandbox",
            "--disable-setuid-sandbox",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1280, "height": 720},
        "ignore_https_errors": True,
    }

    SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

    def __init__(
        self,
        headless: Optional[bool] = None,
        restore_auth: bool = False,
        browser_type: Optional[str] = None,
        auth_store: Optional[AuthStateStore] = None,
        auth_state_name: Optional[str] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode. Defaults to `browser.headless`.
            restore_auth: Restore authentication state saved by a previous login
            browser_type: 'chromium', 'firefox' or 'webkit'. Defaults to `browser.type`.
            auth_store: Store used for saving/restoring login state
            auth_state_name: Name of the saved state. Defaults to `auth.state_name`.
        """
        config = get_config()
        self.headless = config.get("browser.headless", True) if headless is None else headless
        self.browser_type = browser_type or config.get("browser.type", "chromium")
        if self.browser_type not in self.SUPPORTED_BROWSERS:
            raise ValueError(f"Unsupported browser type: {self.browser_type}")
        self.restore_auth = restore_auth
        self.auth_store = auth_store or AuthStateStore()
        self.auth_state_name = auth_state_name or config.get("auth.state_name", "liveshare")

        self.slow_mo = config.get("browser.slow_mo", self.DEFAULT_LAUNCH_OPTIONS["slow_mo"])
        self.launch_args: List[str] = config.get(
            "browser.args", self.DEFAULT_LAUNCH_OPTIONS["args"]
        )
        self.viewport: Dict[str, int] = config.get(
            "browser.viewport", self.DEFAULT_CONTEXT_OPTIONS["viewport"]
        )
        self.navigation_timeout = config.get("browser.navigation_timeout", 30000)
        self.action_timeout = config.get("browser.action_timeout", 15000)

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry - start browser."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close browser."""
        await self.close()

    def launch_options(self) -> Dict[str, Any]:
        return {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
            "slow_mo": self.slow_mo,
            "args": list(self.launch_args),
        }

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)
        self._browser = await browser_launcher.launch(**self.launch_options())
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless}, slow_mo={self.slow_mo})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                # Already closed together with its browser
                logger.debug(f"Context close skipped: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def context_options(self, **options: Any) -> Dict[str, Any]:
        context_options = {
            **self.DEFAULT_CONTEXT_OPTIONS,
            "viewport": dict(self.viewport),
            **options,
        }
        if self.restore_auth and "storage_state" not in context_options:
            state_file = self.auth_store.load(self.auth_state_name)
            if state_file:
                context_options["storage_state"] = str(state_file)
                logger.debug(f"Restored authentication state from: {state_file}")
        return context_options

    async def new_context(
        self,
        **options: Any,
    ) -> BrowserContext:
        """
        Create new browser context.

        Each context is isolated - separate cookies, localStorage, etc.
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self._browser.new_context(**self.context_options(**options))
        context.set_default_timeout(self.action_timeout)
        context.set_default_navigation_timeout(self.navigation_timeout)
        self._contexts.append(context)

        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """Create new page in new or existing context."""
        if context is None:
            context = await self.new_context(**context_options)

        return await context.new_page()

    async def save_auth_state(self, context: BrowserContext) -> Path:
        """Save cookies and localStorage of a logged-in context for reuse."""
        return await self.auth_store.save(context, self.auth_state_name)

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
]
