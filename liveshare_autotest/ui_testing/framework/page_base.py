"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation relative to the configured base URL
    - Smart element location and best-effort interactions
    - Fixed-duration pauses and bounded load waits
    - Screenshot capture that never fails the test
    - API response capture for failure diagnostics

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from liveshare_autotest.common.allure_utils import attach_json, attach_png, attach_text
from liveshare_autotest.common.config_loader import get_config

from .smart_locator import LocatorTarget, LookupResult, SmartLocator


def slugify(name: str) -> str:
    """'Button Link #1' -> 'button-link-1'"""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "screenshot"


class BasePage:
    """
    Base class for all page objects.

    Usage:
        class EventsPage(BasePage):
            URL_PATH = "/events"

            async def open(self):
                await self.navigate()
                await self.wait_for_page_load()
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    # Keep only the most recent API responses
    MAX_CAPTURED_RESPONSES = 20

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        screenshot_dir: Optional[Path] = None,
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Base URL for the application. Defaults to `app.base_url`.
            screenshot_dir: Output directory for screenshots. Defaults to `screenshots.dir`.
        """
        config = get_config()
        self.page = page
        self.config = config
        self.base_url = (base_url or config.get("app.base_url", "")).rstrip("/")
        self.api_base_url = (config.get("app.api_base_url") or "").rstrip("/")
        self.screenshot_dir = Path(
            screenshot_dir or config.get("screenshots.dir", "screenshots")
        )
        self.full_page_screenshots = config.get("screenshots.full_page", False)
        self.smart = SmartLocator(page)

        self._captured_responses: List[Dict[str, Any]] = []
        self._setup_response_capture()

    def _setup_response_capture(self) -> None:
        """Keep the latest API responses for failure reports."""

        async def capture_response(response: Response) -> None:
            if not self._is_api_url(response.url):
                return
            try:
                body = await response.text()
            except PlaywrightError:
                body = "<unable to read>"

            self._captured_responses.append({
                "timestamp": datetime.now().isoformat(),
                "url": response.url,
                "status": response.status,
                "body": body[:1000],
            })
            if len(self._captured_responses) > self.MAX_CAPTURED_RESPONSES:
                self._captured_responses.pop(0)

        self.page.on("response", capture_response)

    def _is_api_url(self, url: str) -> bool:
        if self.api_base_url and url.startswith(self.api_base_url):
            return True
        return "/api/" in url

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    @property
    def captured_responses(self) -> List[Dict[str, Any]]:
        return list(self._captured_responses)

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, wait_for: str = "domcontentloaded") -> None:
        """
        Navigate to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")

    async def navigate_to(
        self,
        path: str,
        wait_for: str = "domcontentloaded",
    ) -> None:
        """Navigate to a path relative to the base URL."""
        full_url = f"{self.base_url}{path}"
        with allure.step(f"Navigate to {path}"):
            await self.page.goto(full_url, wait_until=wait_for)
            logger.debug(f"Navigated to: {full_url}")

    async def reload(self) -> None:
        with allure.step("Reload page"):
            await self.page.reload()
            await self.wait_for_page_load()

    # =========================================================================
    # Waits
    # =========================================================================

    async def wait_for_page_load(
        self,
        state: str = "networkidle",
        timeout: int = 15000,
    ) -> bool:
        """
        Wait for the page to reach a load state.

        The app keeps long-polling connections open, so networkidle may never
        arrive. A timeout is logged and reported as False instead of raised.
        """
        try:
            await self.page.wait_for_load_state(state, timeout=timeout)
            return True
        except PlaywrightTimeoutError:
            logger.debug(f"Load state '{state}' not reached within {timeout}ms")
            return False

    async def pause(self, milliseconds: int) -> None:
        """Fixed-duration wait, used where the UI animates without a signal."""
        await self.page.wait_for_timeout(milliseconds)

    # =========================================================================
    # Smart Element Interactions
    # =========================================================================

    def smart_locator(
        self,
        primary: str,
        fallbacks: Optional[List[str]] = None,
        name: str = "custom_element",
    ) -> SmartLocator:
        """
        Build a SmartLocator in *element mode* with primary + fallback selectors.

        Page objects declare elements as properties returning these and
        resolve them later with `locate()` or `try_act()`.
        """
        locators: Dict[str, str] = {"primary": primary}
        for i, fb in enumerate(fallbacks or [], start=1):
            locators[f"fallback_{i}"] = fb
        return SmartLocator(self.page, element_name=name, locators=locators)

    async def try_click(
        self,
        target: Union[LocatorTarget, SmartLocator],
        timeout: int = 5000,
        name: Optional[str] = None,
        force: bool = False,
    ) -> LookupResult:
        """Click an optional element; see `SmartLocator.try_act`."""
        locator_source, target = self._split_target(target)
        return await locator_source.try_act(
            target,
            lambda el: el.click(force=force),
            timeout=timeout,
            element_name=name,
        )

    async def try_fill(
        self,
        target: Union[LocatorTarget, SmartLocator],
        value: str,
        timeout: int = 5000,
        name: Optional[str] = None,
        clear_first: bool = True,
    ) -> LookupResult:
        """Fill an optional input; the field is cleared first unless told otherwise."""

        async def fill(el):
            if clear_first:
                await el.fill("")
            await el.fill(value)

        locator_source, target = self._split_target(target)
        return await locator_source.try_act(target, fill, timeout=timeout, element_name=name)

    async def try_find(
        self,
        target: Union[LocatorTarget, SmartLocator],
        timeout: int = 5000,
        name: Optional[str] = None,
    ) -> LookupResult:
        locator_source, target = self._split_target(target)
        return await locator_source.try_act(target, timeout=timeout, element_name=name)

    def _split_target(self, target):
        if isinstance(target, SmartLocator):
            return target, None
        return self.smart, target

    async def is_visible(
        self,
        target: Union[LocatorTarget, SmartLocator],
        timeout: int = 2000,
    ) -> bool:
        result = await self.try_find(target, timeout=timeout)
        return result.found

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: Optional[bool] = None,
        attach_to_allure: bool = True,
    ) -> Optional[Path]:
        """
        Take screenshot and optionally attach to Allure.

        Never raises: a closed page or an unwritable directory is logged and
        reported as None so that evidence capture cannot fail a scenario.

        Args:
            name: Screenshot name (slugified, timestamp appended)
            full_page: Capture full scrollable page. Defaults to `screenshots.full_page`.
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot, or None when capture failed
        """
        if full_page is None:
            full_page = self.full_page_screenshots

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.screenshot_dir / f"{slugify(name)}_{timestamp}.png"

        try:
            self.screenshot_dir.mkdir(parents=True, exist_ok=True)
            await self.page.screenshot(path=str(filepath), full_page=full_page)
        except (PlaywrightError, OSError) as e:
            logger.warning(f"Screenshot '{name}' not captured: {e}")
            return None

        if attach_to_allure:
            attach_png(filepath, name=name)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """
        Capture debugging information on test failure.

        Saves:
            - Full-page screenshot
            - Current URL
            - Recent API responses
        """
        with allure.step("Capture failure details"):
            await self.screenshot(f"failure_{test_name}", full_page=True)

            attach_text(self.page.url, name="Current URL")

            if self._captured_responses:
                attach_json(self._captured_responses[-10:], name="Recent API Responses")


__all__ = [
    "BasePage",
    "slugify",
]
