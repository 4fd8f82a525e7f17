"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page objects, and test setup/teardown.

Key Features:
- One browser per scenario, optionally restoring a saved login
- Page Object fixtures for all pages
- Failure capture (screenshot, URL, recent API responses)
- Serial scenarios: a failure skips the rest of the class

================================================================================
"""

from typing import AsyncGenerator

import pytest
from playwright.async_api import BrowserContext, Page

from liveshare_autotest.common.config_loader import ConfigLoader, get_config
from liveshare_autotest.ui_testing.framework.browser_manager import BrowserManager
from liveshare_autotest.ui_testing.framework.data_factory import EventDataFactory
from liveshare_autotest.ui_testing.framework.page_base import BasePage
from liveshare_autotest.ui_testing.pages.event_creation_page import EventCreationPage
from liveshare_autotest.ui_testing.pages.event_page import EventPage
from liveshare_autotest.ui_testing.pages.events_page import EventsPage
from liveshare_autotest.ui_testing.pages.login_page import LoginPage


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager.

    Each scenario gets a fresh browser. A login saved by an earlier scenario
    is restored into new contexts when `auth.reuse_state` is on.
    """
    restore = get_config().get("auth.reuse_state", True)
    async with BrowserManager(restore_auth=restore) as manager:
        yield manager


@pytest.fixture
async def context(browser_manager: BrowserManager) -> BrowserContext:
    """Isolated browser context; closed together with the manager."""
    return await browser_manager.new_context()


@pytest.fixture
async def page(request, context: BrowserContext) -> AsyncGenerator[Page, None]:
    """
    Page for one scenario.

    API responses are recorded for the whole scenario; on failure a
    full-page screenshot, the URL and those responses go to the report.
    """
    page = await context.new_page()
    diagnostics = BasePage(page)
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed and not page.is_closed():
        await diagnostics.capture_failure(request.node.name)


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(page: Page) -> LoginPage:
    return LoginPage(page)


@pytest.fixture
def events_page(page: Page) -> EventsPage:
    return EventsPage(page)


@pytest.fixture
def event_creation_page(page: Page) -> EventCreationPage:
    return EventCreationPage(page)


@pytest.fixture
def event_page(page: Page) -> EventPage:
    return EventPage(page)


# ================================================================================
# Data Fixtures
# ================================================================================

@pytest.fixture
def app_config() -> ConfigLoader:
    return get_config()


@pytest.fixture
def data_factory(app_config: ConfigLoader) -> EventDataFactory:
    return EventDataFactory(app_config)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase's report on the item (`rep_setup`, `rep_call`, ...) for
    fixtures, and remember the first failure of a serial class.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

    if report.failed and report.when in ("setup", "call") and item.get_closest_marker("serial"):
        parent = item.parent
        if getattr(parent, "_serial_failed", None) is None:
            parent._serial_failed = item.name


def pytest_runtest_setup(item):
    if not item.get_closest_marker("serial"):
        return
    failed = getattr(item.parent, "_serial_failed", None)
    if failed is not None:
        pytest.skip(f"previous serial scenario failed: {failed}")
