"""
================================================================================
Events Page Object (Async / Playwright)
================================================================================

The signed-in landing page: the "EVENTS" heading, the grid of event cards,
the Create Event button, the main (hamburger) menu and the avatar menu.

Menu flows return LookupResult so scenarios can assert on them and report
exactly which element was missing.

================================================================================
"""

from __future__ import annotations

from typing import List

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from liveshare_autotest.ui_testing.framework.page_base import BasePage
from liveshare_autotest.ui_testing.framework.smart_locator import LookupResult


def button_with_text(label: str) -> str:
    return f'button:has-text("{label}")'


class EventsPage(BasePage):
    """Events list page object (async)."""

    URL_PATH = "/events"
    PAGE_TITLE = "EVENTS"

    HEADING = ".heading.font-bold"
    EVENT_CARD = ".event-card-event"

    # Tried in order; the first selector with any match is used
    EVENT_CARD_SELECTORS = [
        ".event-card-event",
        ".event-card",
        ".flex.pt-8",
        "mat-card",
        ".card",
        ".event-list-item",
    ]
    ALTERNATIVE_CARD_SELECTORS = [
        ".event-image-container",
        ".event-card-container",
        "img.event-thumbnail",
        'div:has-text("Event Name")',
    ]

    # Main menu dialogs
    GIFT_PURCHASE_CLOSE = 'app-gift-event-purchase .btn.btn-circle.btn-ghost mat-icon:has-text("close")'
    GIFT_LIST_CLOSE = 'app-gift-event-list mat-icon[mat-dialog-close][role="img"]:has-text("close")'
    FEEDBACK_TEXTAREA = 'app-feedback-dialog textarea[formcontrolname="comment"]'
    FEEDBACK_SUBMIT = 'app-feedback-dialog button:has-text("Submit")'
    FEEDBACK_BACK = 'app-feedback-complete-dialog button:has-text("Back to event")'
    PAIR_DEVICE_CANCEL = 'app-pair-device-dialog button:has-text("Cancel")'
    MANAGE_DEVICES_CLOSE = 'app-manage-device-dialog button[mat-dialog-close] mat-icon:has-text("close")'

    # Avatar / account menu
    AVATAR_SELECTORS = [
        "div.mat-menu-trigger.avatar",
        "div.profile-image",
        "img.profile-image",
        'div[aria-haspopup="menu"]',
        'div.avatar[aria-haspopup="menu"]',
        ".profile div.avatar",
        "div.w-8.rounded-full",
        "#app-topnav img",
        ".navbar-end .profile .avatar",
        ".navbar-end .profile-image",
    ]
    # Same candidates, for a DOM-level click when nothing is "visible"
    AVATAR_DOM_CANDIDATES = [
        "div.avatar",
        "img.profile-image",
        'div[aria-haspopup="menu"]',
        "#app-topnav img",
        ".navbar-end .profile .avatar",
        ".profile",
    ]

    def __init__(self, page: Page, base_url: str = ""):
        super().__init__(page, base_url)
        self.URL_PATH = self.config.get("pages.events", self.URL_PATH)
        self.profile_path = self.config.get("pages.profile", "/profile")

    # ============================================================
    # Page Elements
    # ============================================================

    @property
    def heading(self) -> Locator:
        return self.page.locator(self.HEADING).first

    @property
    def event_cards(self) -> Locator:
        return self.page.locator(self.EVENT_CARD)

    # ============================================================
    # Page Actions
    # ============================================================

    @allure.step("Navigate to events")
    async def navigate_to_events(self) -> "EventsPage":
        await self.navigate()
        await self.wait_for_page_load()
        await self.screenshot("events-page")
        return self

    async def heading_text(self) -> str:
        result = await self.try_find(self.HEADING, timeout=10000, name="Events Heading")
        if not result.found:
            return ""
        return (await result.locator.text_content() or "").strip()

    async def event_card_count(self) -> int:
        await self.try_find(self.EVENT_CARD, timeout=10000, name="Event Card")
        return await self.event_cards.count()

    async def is_create_button_visible(self) -> bool:
        return await self.is_visible("create_event_button", timeout=10000)

    async def is_menu_button_visible(self) -> bool:
        return await self.is_visible("main_menu_button", timeout=10000)

    @allure.step("Open first event")
    async def click_first_event(self) -> LookupResult:
        """
        Open an event from the list.

        The second card is used when more than one exists; the list starts
        with the most recently touched event, which earlier scenarios may
        still be editing.
        """
        await self.wait_for_page_load(timeout=30000)
        await self.pause(2000)

        for selector in self.EVENT_CARD_SELECTORS:
            try:
                count = await self.page.locator(selector).count()
            except PlaywrightError as e:
                return LookupResult.from_error("First Event", e, selector=selector)
            if count == 0:
                continue

            logger.info(f"Found {count} event card(s) with {selector}")
            index = 1 if count > 1 else 0
            result = await self.smart.try_act_nth(
                selector, index, lambda el: el.click(), element_name="First Event"
            )
            if result.found:
                await self.pause(2000)
            return result

        result = await self.try_click(
            self.ALTERNATIVE_CARD_SELECTORS, timeout=1000, name="First Event"
        )
        if result.found:
            await self.pause(2000)
        return result

    async def find_event_card(self, name: str) -> LookupResult:
        """Locate an event card whose text contains `name`."""
        await self.try_find(self.EVENT_CARD, timeout=10000, name="Event Card")
        return await self.smart.try_act_by_text(
            self.EVENT_CARD, name, element_name=f"Event '{name}'"
        )

    @allure.step("Open event '{name}'")
    async def open_event(self, name: str) -> LookupResult:
        result = await self.find_event_card(name)
        if result.found:
            try:
                await result.locator.click()
            except PlaywrightError as e:
                return LookupResult.from_error(f"Event '{name}'", e, selector=result.selector)
            await self.pause(2000)
        return result

    # ============================================================
    # Main Menu
    # ============================================================

    async def open_main_menu(self) -> LookupResult:
        result = await self.try_click("main_menu_button", timeout=10000, name="Main Menu")
        if result.found:
            await self.pause(1000)
        return result

    async def _click_menu_option(self, label: str, wait_ms: int = 1000) -> LookupResult:
        result = await self.try_click(button_with_text(label), timeout=5000, name=label)
        if result.found:
            await self.pause(wait_ms)
        return result

    async def _click_and_settle(self, selector: str, name: str, wait_ms: int = 500) -> LookupResult:
        result = await self.try_click(selector, timeout=5000, name=name)
        if result.found:
            await self.pause(wait_ms)
        return result

    @allure.step("Open 'Gift an Event' submenu")
    async def open_gift_menu(self) -> LookupResult:
        menu = await self.open_main_menu()
        if not menu.found:
            return menu

        async def hover_then_click(el):
            await el.hover()
            await el.click()

        gift = await self.smart.try_act(
            button_with_text("Gift an Event"),
            hover_then_click,
            element_name="Gift an Event",
        )
        if not gift.found:
            return gift
        await self.pause(500)

        create = await self.try_find(button_with_text("Create Gift Event"), name="Create Gift Event")
        view = await self.try_find(button_with_text("View Gift Events"), name="View Gift Events")
        return LookupResult.combine("Gift an Event", menu, gift, create, view)

    @allure.step("Create gift event, then close")
    async def create_gift_event_and_close(self) -> LookupResult:
        submenu = await self.open_gift_menu()
        if not submenu.found:
            return submenu
        create = await self._click_menu_option("Create Gift Event")
        if not create.found:
            return create
        close = await self._click_and_settle(self.GIFT_PURCHASE_CLOSE, "Close Gift Purchase")
        return LookupResult.combine("Create Gift Event", submenu, create, close)

    @allure.step("View gift events, then close")
    async def view_gift_events_and_close(self) -> LookupResult:
        submenu = await self.open_gift_menu()
        if not submenu.found:
            return submenu
        view = await self._click_menu_option("View Gift Events")
        if not view.found:
            return view
        close = await self._click_and_settle(self.GIFT_LIST_CLOSE, "Close Gift List")
        return LookupResult.combine("View Gift Events", submenu, view, close)

    @allure.step("Share feedback")
    async def share_feedback(self, comment: str) -> LookupResult:
        menu = await self.open_main_menu()
        if not menu.found:
            return menu
        option = await self._click_menu_option("Share Feedback")
        if not option.found:
            return option
        text = await self.try_fill(self.FEEDBACK_TEXTAREA, comment, name="Feedback Comment")
        if not text.found:
            return text
        submit = await self._click_and_settle(self.FEEDBACK_SUBMIT, "Submit Feedback", wait_ms=1000)
        if not submit.found:
            return submit
        back = await self._click_and_settle(self.FEEDBACK_BACK, "Back to event")
        return LookupResult.combine("Share Feedback", menu, option, text, submit, back)

    @allure.step("Pair device, then cancel")
    async def pair_device_and_cancel(self) -> LookupResult:
        menu = await self.open_main_menu()
        if not menu.found:
            return menu
        option = await self._click_menu_option("Pair Device")
        if not option.found:
            return option
        cancel = await self._click_and_settle(self.PAIR_DEVICE_CANCEL, "Cancel Pairing")
        return LookupResult.combine("Pair Device", menu, option, cancel)

    @allure.step("Manage devices, then close")
    async def manage_devices_and_close(self) -> LookupResult:
        menu = await self.open_main_menu()
        if not menu.found:
            return menu
        option = await self._click_menu_option("Manage Devices")
        if not option.found:
            return option
        close = await self._click_and_settle(self.MANAGE_DEVICES_CLOSE, "Close Manage Devices")
        return LookupResult.combine("Manage Devices", menu, option, close)

    @allure.step("Open help")
    async def open_help(self) -> LookupResult:
        menu = await self.open_main_menu()
        if not menu.found:
            return menu
        option = await self._click_menu_option("Help")
        return LookupResult.combine("Help", menu, option)

    # ============================================================
    # Account (Avatar) Menu
    # ============================================================

    @allure.step("Open account menu")
    async def open_account_menu(self) -> LookupResult:
        """
        Open the avatar menu.

        Falls back to a forced click, then a DOM-level click event, then
        direct navigation to the profile page.
        """
        avatar = await self.try_find(self.AVATAR_SELECTORS, timeout=2000, name="Avatar")
        if avatar.failed:
            return avatar

        if avatar.found:
            try:
                await avatar.locator.click(timeout=5000)
            except PlaywrightError as e:
                logger.warning(f"Avatar click failed ({e}), retrying with force")
                try:
                    await avatar.locator.click(force=True)
                except PlaywrightError as force_error:
                    return LookupResult.from_error("Account Menu", force_error, avatar.selector)
            result = LookupResult.found_with("Account Menu", selector=avatar.selector)
        elif await self._dispatch_avatar_click():
            result = LookupResult.found_with("Account Menu", selector="dom-click")
        else:
            logger.warning(f"No avatar found, navigating to {self.profile_path}")
            await self.navigate_to(self.profile_path)
            await self.pause(2000)
            result = LookupResult.found_with("Account Menu", selector=self.profile_path)

        await self.screenshot("after-avatar-click")
        await self.pause(2000)
        await self.screenshot("avatar-menu")
        return result

    async def _dispatch_avatar_click(self) -> bool:
        return await self.page.evaluate(
            """selectors => {
                for (const selector of selectors) {
                    const element = document.querySelector(selector);
                    if (element) {
                        element.dispatchEvent(new MouseEvent('click', {
                            view: window, bubbles: true, cancelable: true
                        }));
                        return true;
                    }
                }
                return false;
            }""",
            self.AVATAR_DOM_CANDIDATES,
        )

    async def visible_account_options(self, options: List[str]) -> List[str]:
        """Return the subset of `options` shown in the open account menu."""
        visible = []
        for option in options:
            result = await self.try_find(
                [button_with_text(option), f'button:has(span:text("{option}"))'],
                timeout=2000,
                name=option,
            )
            if result.found:
                visible.append(option)
                await self.screenshot(f"{option}-option")
        logger.info(f"Visible account menu options: {visible}")
        return visible


__all__ = [
    "EventsPage",
]
