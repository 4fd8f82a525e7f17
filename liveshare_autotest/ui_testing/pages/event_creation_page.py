"""
================================================================================
Event Creation Page Object (Async / Playwright)
================================================================================

Create-event wizard: event type, name, date (Material calendar), theme and
launch. The app ships two theme step layouts ("Choose Your Theme" cards and
"Select Event Header Image" radios); both are handled.

================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from liveshare_autotest.ui_testing.framework.data_factory import EventData
from liveshare_autotest.ui_testing.framework.page_base import BasePage
from liveshare_autotest.ui_testing.framework.smart_locator import LookupResult


class EventCreationPage(BasePage):
    """Create Event wizard page object (async)."""

    EVENT_TYPE_SELECT = "select.select-bordered"
    EVENT_NAME_INPUT = 'input[placeholder="Event Name"]'
    EVENT_DATE_INPUT = 'input[placeholder="Choose Event Date"]'
    CALENDAR_PERIOD_BUTTON = ".mat-calendar-period-button"
    CALENDAR_CELL = ".mat-calendar-body-cell-content"
    NEXT_BUTTON = 'button.event-btn:text("Next")'
    THEME_HEADER = (
        'div.head:text("Choose Your Theme"), '
        'div.theme-list-title:text("Select Event Header Image")'
    )
    THEME_OPTION = '.theme-card, .container input[type="radio"], .theme-section .theme-card'
    LAUNCH_BUTTON = 'button.launch-button, button.event-btn:text("Launch Event")'

    NEXT_ENABLED_SCRIPT = """() => {
        const btn = document.querySelector('button.event-btn');
        return btn !== null && btn.getAttribute('disabled') === null;
    }"""

    async def _settle(self, result: LookupResult, wait_ms: int, screenshot: Optional[str] = None) -> LookupResult:
        if result.found:
            await self.pause(wait_ms)
            if screenshot:
                await self.screenshot(screenshot)
        return result

    @allure.step("Start event creation")
    async def start_creation(self) -> LookupResult:
        result = await self.try_click("create_event_button", timeout=10000, name="Create Event")
        return await self._settle(result, 2000, "create-event-clicked")

    @allure.step("Select event type '{label}'")
    async def select_event_type(self, label: str) -> LookupResult:
        result = await self.smart.try_act(
            self.EVENT_TYPE_SELECT,
            lambda el: el.select_option(label=label),
            element_name="Event Type",
        )
        return await self._settle(result, 1000, "event-type-selected")

    @allure.step("Enter event name '{name}'")
    async def enter_event_name(self, name: str) -> LookupResult:
        result = await self.try_fill(self.EVENT_NAME_INPUT, name, name="Event Name")
        return await self._settle(result, 1000, "event-name-entered")

    async def _click_calendar(self, selector: str, name: str) -> LookupResult:
        result = await self.try_click(selector, name=name)
        return await self._settle(result, 1000)

    @allure.step("Pick event date")
    async def pick_date(self, data: EventData) -> LookupResult:
        """Walk the Material calendar: period view, year, month, day."""
        steps = [
            (self.EVENT_DATE_INPUT, "Event Date Input"),
            (self.CALENDAR_PERIOD_BUTTON, "Calendar Period"),
            (f'{self.CALENDAR_CELL}:text-is("{data.year_label}")', f"Year {data.year_label}"),
            (f'{self.CALENDAR_CELL}:text("{data.month_label}")', f"Month {data.month_label}"),
            (f'{self.CALENDAR_CELL}:text-is("{data.day_label}")', f"Day {data.day_label}"),
        ]
        results = []
        for selector, name in steps:
            result = await self._click_calendar(selector, name)
            results.append(result)
            if not result.found:
                return LookupResult.combine("Event Date", *results)

        logger.info(f"Event date picked: {data.event_date.isoformat()}")
        await self.screenshot("date-selected")
        return LookupResult.combine("Event Date", *results)

    @allure.step("Click Next")
    async def click_next(self) -> LookupResult:
        """Wait until the wizard enables Next, then click it."""
        try:
            await self.page.wait_for_function(self.NEXT_ENABLED_SCRIPT, timeout=10000)
        except PlaywrightTimeoutError:
            return LookupResult.not_found("Next Button", "still disabled after 10s")
        result = await self.try_click(self.NEXT_BUTTON, name="Next Button")
        return await self._settle(result, 2000, "next-button-clicked")

    @allure.step("Choose theme")
    async def choose_theme(self) -> LookupResult:
        """Pick the first theme. Some event types skip this step."""
        header = await self.try_find(self.THEME_HEADER, timeout=10000, name="Theme Step")
        if header.failed:
            return header
        if header.missing:
            logger.info("Theme step header not shown, looking for theme options anyway")

        result = await self.try_click(self.THEME_OPTION, name="Theme Option")
        return await self._settle(result, 1000, "theme-selected")

    @allure.step("Launch event")
    async def launch_event(self) -> LookupResult:
        """Click Launch; when the wizard still shows Next, advance once and retry."""
        launch = await self.try_click(self.LAUNCH_BUTTON, timeout=10000, name="Launch Event")
        if launch.missing:
            logger.info("Launch button not visible, advancing the wizard once more")
            next_again = await self.try_click(self.NEXT_BUTTON, timeout=1000, name="Next Button")
            if not next_again.found:
                return LookupResult.combine("Launch Event", launch, next_again)
            await self.pause(2000)
            launch = await self.try_click(self.LAUNCH_BUTTON, name="Launch Event")
        return await self._settle(launch, 3000, "launch-event-clicked")

    async def wait_for_creation(self, start_url: str, timeout: int = 30000) -> bool:
        """Wait for the app to leave the wizard URL, then let the event page load."""
        try:
            await self.page.wait_for_url(lambda url: url != start_url, timeout=timeout)
            changed = True
        except PlaywrightTimeoutError:
            logger.warning(f"URL still {start_url} after {timeout}ms")
            changed = False
        await self.pause(5000)
        return changed

    async def create_event(self, data: EventData) -> LookupResult:
        """
        Run the whole wizard.

        Required steps stop the run on the first miss. The theme step is
        optional and only reported.
        """
        with allure.step(f"Create event '{data.name}' ({data.event_type})"):
            required = [
                self.start_creation,
                lambda: self.select_event_type(data.event_type),
                lambda: self.enter_event_name(data.name),
                lambda: self.pick_date(data),
                self.click_next,
            ]
            results = []
            for step in required:
                result = await step()
                results.append(result)
                if not result.found:
                    return LookupResult.combine("Create Event", *results)

            theme = await self.choose_theme()
            if theme.failed:
                return LookupResult.combine("Create Event", *results, theme)

            start_url = self.page.url
            launch = await self.launch_event()
            results.append(launch)
            if launch.found:
                await self.wait_for_creation(start_url)
            return LookupResult.combine("Create Event", *results)


__all__ = [
    "EventCreationPage",
]
