"""
================================================================================
Event Page Object (Async / Playwright)
================================================================================

Event detail page and its "Personalize" settings dialog.

Every personalization option is a `.options` tile; clicking one opens a small
dialog holding a toggle, an input or both, and a Save button. The methods here
drive one option each and return a LookupResult folding the steps they took:

    result = await event_page.update_location("TPHCM tuanhay")
    assert not result.failed, result.describe()

Sub-steps the app does not always render (a toggle that is missing for some
event types, the Done button after an upload) are optional: a miss there is
ignored, an error is not.

================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Union

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from liveshare_autotest.ui_testing.framework.page_base import BasePage, slugify
from liveshare_autotest.ui_testing.framework.smart_locator import (
    LocatorTarget,
    LookupResult,
)


ASSETS_DIR = Path(__file__).parent.parent / "assets"
DEFAULT_HEADER_PHOTO = ASSETS_DIR / "header-photo.jpg"


def optional(result: LookupResult) -> Optional[LookupResult]:
    """Drop a NOT_FOUND result from a combine; keep FOUND and ERROR."""
    return None if result.missing else result


def fill_with(value: str):
    async def fill(el):
        await el.fill("")
        await el.fill(value)
    return fill


class EventPage(BasePage):
    """Event detail / Personalize dialog page object (async)."""

    FEATURES: Dict[str, str] = {
        "event_name": "Event Name",
        "event_date": "Event Date",
        "access_code": "Require Access Passcode",
        "event_managers": "Add Event Managers",
        "header_photo": "Event Header Photo",
        "button_link_1": "Button Link #1",
        "button_link_2": "Button Link #2",
        "location": "Location",
        "contact": "Contact",
        "itinerary": "Itinerary",
        "message_post": "Enable Message Post",
        "welcome_popup": "Welcome Popup",
        "keepsake": "KeepSake",
        "scavenger_hunt": "Scavenger Hunt",
        "facebook_sharing": "Allow sharing via Facebook",
    }

    FEATURE_LOOKUP_TIMEOUT = 1000

    # Inputs
    EVENT_NAME_INPUTS = [
        'input[formcontrolname="name"]',
        'input[placeholder="Name"]',
        'input[placeholder="Event Name"]',
        "input.event-name-input",
        "input#eventName",
        "input.input-bordered",
        'input[type="text"]',
    ]
    EVENT_DATE_INPUT = 'input[placeholder*="Event Date"], input.input-bordered'
    FEATURE_TEXTAREA = 'textarea.textarea-bordered, textarea[placeholder*="Location"]'
    FEATURE_INPUT = 'input.input-bordered, mat-form-field input, input[type="text"]'
    LOCATION_TEXTAREA = 'textarea[placeholder="Location"], textarea.textarea-bordered'
    CONTACT_EMAIL_INPUT = 'input[placeholder="Email"], input[type="email"]'
    CONTACT_PHONE_INPUT = 'input[placeholder="Phone"], input[type="tel"]'
    BORDERED_INPUT = "input.input-bordered"
    ITINERARY_INPUT = (
        'textarea[placeholder*="Itinerary"], textarea.textarea-bordered, '
        'input[placeholder*="Itinerary"], input.input-bordered'
    )
    LINK_NAME_INPUTS = [
        'input[placeholder*="name" i]',
        'input[placeholder*="text" i]',
        'input[placeholder*="label" i]',
        'input[type="text"]:nth-of-type(1)',
        "input.input-bordered:nth-of-type(1)",
        "mat-form-field:nth-of-type(1) input",
    ]
    LINK_URL_INPUTS = [
        'input[placeholder*="url" i]',
        'input[placeholder*="http" i]',
        'input[type="url"]',
        'input[type="text"]:nth-of-type(2)',
        "input.input-bordered:nth-of-type(2)",
        "mat-form-field:nth-of-type(2) input",
    ]
    ANY_TEXT_INPUT = 'input[type="text"], input.input-bordered'

    # Header photo
    ADD_PHOTO_BUTTON = 'label.btn:has-text("Add"), label[for="popupBg"]'
    FILE_INPUT = 'input[type="file"], input#popupBg'
    MINI_WINDOW_SAVE = (
        '.mat-dialog-actions .btn:has-text("Save"), '
        'app-get-values .btn:has-text("Save"), '
        'button.btn:has-text("Save")'
    )

    # Feature dialogs
    EVENT_NAME_SAVE = '.mat-dialog-actions .btn:has-text("Save"), button:has-text("Save")'
    GET_VALUES_SAVE = 'app-get-values .btn:has-text("Save"), div.mat-dialog-actions .btn:has-text("Save")'
    KEEPSAKE_MESSAGE = "app-keepsake-welcome-popup textarea"
    KEEPSAKE_DATE = "app-keepsake-welcome-popup input.mat-datepicker-input"
    KEEPSAKE_ENABLE = 'app-keepsake-welcome-popup button:has-text("Enable")'
    WEDDING_TEMPLATE = 'mat-checkbox:has-text("Wedding Template")'
    SCAVENGER_SAVE = 'app-scavenger-hunt-dialog button:has-text("Save")'
    CONFIRM_YES = 'app-confirmation-dialog button:has-text("Yes")'

    # Personalize dialog
    UNSELECTED_OPTIONS = ".options:not(.selected-option)"
    SETTINGS_PAGE_SAVE = '.mt-auto .btn:has-text("Save")'
    PERSONALIZE_DIALOG = "app-personalize, mat-dialog-container"
    PERSONALIZE_SAVE_SELECTORS = [
        'app-personalize .btn:has-text("Save")',
        'app-personalize div.btn:first-child:has-text("Save")',
        'app-personalize .mt-auto .btn:has-text("Save")',
        'div.mt-auto .btn:has-text("Save")',
    ]
    GENERAL_SAVE_SELECTORS = [
        'button:has-text("Save")',
        "button.save-button",
        'button.btn-primary:has-text("Save")',
        '.mat-dialog-actions .btn:has-text("Save")',
        'button[type="submit"]',
        ".mat-dialog-actions button:first-child",
        '.btn:first-child:has-text("Save")',
    ]
    DIALOG_ACTION_BUTTON = ".mat-dialog-actions .btn, .mat-dialog-actions button"

    EVENT_NAME_SELECTORS = [
        ".event-name-event",
        ".event-name",
        "span.text-lg",
        ".bottom-section-event span",
        "div.event-detail span:not(.date-event)",
        "h1.event-title",
    ]

    # ============================================================
    # Building Blocks
    # ============================================================

    @staticmethod
    def feature_option_selectors(feature: str) -> List[str]:
        return [
            f'.options:has-text("{feature}")',
            f'.options span:text-is("{feature}")',
            f'.options:has(span:text-is("{feature}"))',
            f'.wrap .options:has-text("{feature}")',
        ]

    @staticmethod
    def feature_button_selectors(feature: str) -> List[str]:
        return [
            f'button:has-text("{feature}")',
            f'button:has(span:text("{feature}"))',
            f'button.btn:has-text("{feature}")',
            f'.btn:has(mat-icon):has-text("{feature}")',
            f'button.mat-menu-item:has-text("{feature}")',
            f'div:has-text("{feature}")',
        ]

    async def _click_optional(
        self,
        target: LocatorTarget,
        name: str,
        wait_ms: int = 2000,
        timeout: int = 5000,
        force: bool = True,
        screenshot: Optional[str] = None,
    ) -> LookupResult:
        result = await self.try_click(target, timeout=timeout, name=name, force=force)
        if result.found:
            await self.pause(wait_ms)
            if screenshot:
                await self.screenshot(screenshot)
        return result

    async def set_toggle(self, enable: bool = True, timeout: int = 2000) -> LookupResult:
        """
        Bring the dialog's toggle to the wanted state.

        Clicks only when the state differs. Custom toggles that are not
        checkboxes report no checked state; those are clicked when enabling
        and left alone when disabling.
        """
        toggle = await self.try_find("feature_toggle", timeout=timeout, name="Feature Toggle")
        if not toggle.found:
            return toggle

        try:
            checked = await toggle.locator.is_checked()
        except PlaywrightError as e:
            logger.debug(f"Toggle state unreadable ({e}), assuming unchecked")
            checked = None

        needs_click = (enable and not checked) or (not enable and checked is True)
        if needs_click:
            try:
                await toggle.locator.click(force=True)
            except PlaywrightError as e:
                return LookupResult.from_error("Feature Toggle", e, selector=toggle.selector)
            await self.pause(1000)
        return toggle

    async def click_save(self, screenshot: Optional[str] = None) -> LookupResult:
        """Click the feature dialog's Save button."""
        return await self._click_optional(
            "dialog_save_button", "Save", timeout=2000, screenshot=screenshot
        )

    # ============================================================
    # Settings Dialog
    # ============================================================

    @allure.step("Open event settings")
    async def open_settings(self) -> LookupResult:
        button = await self.try_find("settings_button", timeout=50000, name="Settings Button")
        if not button.found:
            return button
        await self.screenshot("before-settings")
        try:
            await button.locator.click(force=True)
        except PlaywrightError as e:
            return LookupResult.from_error("Settings Button", e, selector=button.selector)
        await self.pause(2000)
        await self.screenshot("after-settings-click")
        return button

    async def click_feature(self, feature: str) -> LookupResult:
        """
        Open a personalization option.

        Tries the `.options` tiles, then generic buttons and divs by text,
        then a case-insensitive text scan over tiles and buttons.
        """
        logger.info(f"Looking for feature '{feature}'")
        lookups = [
            lambda: self.try_click(
                self.feature_option_selectors(feature),
                timeout=self.FEATURE_LOOKUP_TIMEOUT,
                name=feature,
            ),
            lambda: self.try_click(
                self.feature_button_selectors(feature),
                timeout=self.FEATURE_LOOKUP_TIMEOUT,
                name=feature,
            ),
            lambda: self.smart.try_act_by_text(
                ".options", feature, lambda el: el.click(), element_name=feature
            ),
            lambda: self.smart.try_act_by_text(
                "button, .options", feature, lambda el: el.click(), element_name=feature
            ),
        ]
        result = LookupResult.not_found(feature)
        for lookup in lookups:
            result = await lookup()
            if not result.missing:
                break

        if result.found:
            await self.pause(1000)
        else:
            logger.error(f"Feature '{feature}': {result.describe()}")
        return result

    async def _open_feature(self, feature: str, screenshot: Optional[str] = None) -> LookupResult:
        result = await self.click_feature(feature)
        if result.found:
            await self.screenshot(screenshot or f"feature-{slugify(feature)}-dialog")
        return result

    @allure.step("Update event name to '{name}'")
    async def update_event_name(self, name: str) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["event_name"], "event-name-dialog")
        if not feature.found:
            return feature

        async def clear_then_fill(el):
            await el.fill("")
            await self.pause(500)
            await el.fill(name)

        field = await self.smart.try_act(
            self.EVENT_NAME_INPUTS, clear_then_fill, timeout=2000, element_name="Event Name Input"
        )
        if not field.found:
            return LookupResult.combine("Event Name", feature, field)
        await self.pause(1000)

        save = await self._click_optional(self.EVENT_NAME_SAVE, "Event Name Save", force=False)
        return LookupResult.combine("Event Name", feature, field, save)

    @allure.step("Set event date to '{date_text}'")
    async def set_event_date(self, date_text: str) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["event_date"])
        if not feature.found:
            return feature
        field = await self.try_fill(
            self.EVENT_DATE_INPUT, date_text, timeout=2000, name="Event Date Input", clear_first=False
        )
        save = await self.click_save(screenshot="event-date-option")
        return LookupResult.combine("Event Date", feature, field, save)

    async def toggle_feature(self, feature: str, enable: bool = True) -> LookupResult:
        """Open `feature`, set its toggle, save. Nothing is saved without a toggle."""
        with allure.step(f"{'Enable' if enable else 'Disable'} feature '{feature}'"):
            opened = await self.click_feature(feature)
            if not opened.found:
                return opened
            slug = slugify(feature)
            await self.screenshot(f"feature-{slug}-before-toggle")

            toggle = await self.set_toggle(enable)
            if not toggle.found:
                return LookupResult.combine(feature, opened, toggle)

            save = await self.click_save(screenshot=f"feature-{slug}-after-toggle")
            return LookupResult.combine(feature, opened, toggle, save)

    async def enable_feature(self, feature: str) -> LookupResult:
        return await self.toggle_feature(feature, enable=True)

    async def disable_feature(self, feature: str) -> LookupResult:
        return await self.toggle_feature(feature, enable=False)

    async def update_feature(
        self,
        feature: str,
        value: str,
        should_enable: bool = False,
    ) -> LookupResult:
        """Open `feature`, fill its textarea or input, optionally enable it, save."""
        with allure.step(f"Update feature '{feature}'"):
            opened = await self._open_feature(feature)
            if not opened.found:
                return opened

            field = await self.try_fill(
                [self.FEATURE_TEXTAREA, self.FEATURE_INPUT],
                value,
                timeout=2000,
                name=f"{feature} Input",
            )
            if not field.found:
                return LookupResult.combine(feature, opened, field)

            toggle = None
            if should_enable:
                toggle = optional(await self.set_toggle(True))
            save = await self.click_save()
            return LookupResult.combine(feature, opened, field, toggle, save)

    async def update_access_code(self, code: str) -> LookupResult:
        return await self.update_feature(self.FEATURES["access_code"], code, should_enable=True)

    @allure.step("Require access passcode")
    async def handle_access_passcode(self, passcode: str = "") -> LookupResult:
        feature = await self._open_feature(self.FEATURES["access_code"], "access-passcode-dialog")
        if not feature.found:
            return feature
        await self.pause(1000)

        field = None
        if passcode:
            field = await self.try_fill(self.BORDERED_INPUT, passcode, timeout=2000, name="Passcode Input")
            if field.found:
                await self.pause(500)

        toggle = await self.set_toggle(True)
        save = await self.click_save(screenshot="after-access-passcode-save")
        return LookupResult.combine("Access Passcode", feature, field, optional(toggle), save)

    async def update_event_managers(self, email: str) -> LookupResult:
        return await self.update_feature(self.FEATURES["event_managers"], email)

    @allure.step("Update event header photo")
    async def update_header_photo(self, image: Union[str, Path, None] = None) -> LookupResult:
        """Enable the header photo, upload `image` (packaged sample by default), Done, Save."""
        image_path = Path(image) if image else DEFAULT_HEADER_PHOTO
        feature = await self._open_feature(self.FEATURES["header_photo"], "event-header-photo-dialog")
        if not feature.found:
            return feature

        toggle = await self.set_toggle(True)
        if toggle.failed:
            return LookupResult.combine("Header Photo", feature, toggle)

        upload = await self._upload_header_image(image_path)
        if not upload.found:
            await self.screenshot("error-header-photo")
            return LookupResult.combine("Header Photo", feature, upload)
        await self.pause(2000)
        await self.screenshot("after-photo-upload")

        done = await self._click_optional(
            "done_button", "Done", timeout=2000, screenshot="after-done-click"
        )
        save = await self._click_optional(
            self.MINI_WINDOW_SAVE,
            "Header Photo Save",
            wait_ms=3000,
            timeout=2000,
            screenshot="after-mini-window-save",
        )
        await self.screenshot("event-header-photo-completed")
        return LookupResult.combine(
            "Header Photo", feature, optional(toggle), upload, optional(done), save
        )

    async def _upload_header_image(self, image_path: Path) -> LookupResult:
        """Upload through the Add button's file chooser, else set the file input."""
        add = await self.try_find(self.ADD_PHOTO_BUTTON, timeout=2000, name="Add Photo")
        if add.failed:
            return add

        if add.found:
            try:
                async with self.page.expect_file_chooser(timeout=5000) as chooser_info:
                    await add.locator.click(force=True)
                chooser = await chooser_info.value
                await chooser.set_files(str(image_path))
                logger.info(f"Header photo chosen: {image_path.name}")
                return LookupResult.found_with("Header Photo Upload", selector=add.selector)
            except PlaywrightError as e:
                logger.warning(f"File chooser did not open ({e}), setting the file input directly")
                await self.pause(1000)

        return await self.smart.try_act_nth(
            self.FILE_INPUT,
            0,
            lambda el: el.set_input_files(str(image_path)),
            element_name="Header Photo Upload",
        )

    async def update_button_link(self, feature: str, name: str, url: str) -> LookupResult:
        """Enable `Button Link #N` and fill its label and URL."""
        with allure.step(f"Update {feature}"):
            slug = slugify(feature)
            opened = await self._open_feature(feature, f"{slug}-dialog")
            if not opened.found:
                return opened

            toggle = await self.set_toggle(True, timeout=1000)

            name_field = await self.try_fill(
                self.LINK_NAME_INPUTS, name, timeout=1000, name=f"{feature} Name"
            )
            if name_field.missing:
                name_field = await self.smart.try_act_nth(
                    self.ANY_TEXT_INPUT, 0, fill_with(name), element_name=f"{feature} Name"
                )

            url_field = await self.try_fill(
                self.LINK_URL_INPUTS, url, timeout=1000, name=f"{feature} URL"
            )
            if url_field.missing and name_field.found:
                url_field = await self.smart.try_act_nth(
                    self.ANY_TEXT_INPUT, 1, fill_with(url), element_name=f"{feature} URL"
                )

            await self.screenshot(f"{slug}-after-fill")
            save = await self.click_save()
            return LookupResult.combine(
                feature, opened, optional(toggle), name_field, url_field, save
            )

    @allure.step("Update location to '{location}'")
    async def update_location(self, location: str) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["location"], "location-dialog")
        if not feature.found:
            return feature
        field = await self.try_fill(self.LOCATION_TEXTAREA, location, timeout=2000, name="Location Input")
        if not field.found:
            return LookupResult.combine("Location", feature, field)
        await self.pause(500)
        save = await self._click_optional(
            "dialog_save_button", "Save", force=False, timeout=2000, screenshot="after-location-save"
        )
        return LookupResult.combine("Location", feature, field, save)

    @allure.step("Update contact")
    async def update_contact(self, email: str, phone: str) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["contact"], "contact-dialog")
        if not feature.found:
            return feature

        email_field = await self.try_fill(self.CONTACT_EMAIL_INPUT, email, timeout=2000, name="Contact Email")
        if email_field.found:
            await self.pause(500)

        phone_field = await self.try_fill(self.CONTACT_PHONE_INPUT, phone, timeout=2000, name="Contact Phone")
        if phone_field.missing:
            phone_field = await self.smart.try_act_nth(
                self.BORDERED_INPUT, 1, fill_with(phone), element_name="Contact Phone"
            )
        if phone_field.found:
            await self.pause(500)

        save = await self._click_optional(
            "dialog_save_button", "Save", force=False, timeout=2000, screenshot="after-contact-save"
        )
        return LookupResult.combine("Contact", feature, email_field, phone_field, save)

    @allure.step("Update itinerary")
    async def update_itinerary(self, itinerary: str) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["itinerary"], "itinerary-dialog")
        if not feature.found:
            return feature
        field = await self.try_fill(self.ITINERARY_INPUT, itinerary, timeout=2000, name="Itinerary Input")
        if not field.found:
            return LookupResult.combine("Itinerary", feature, field)
        await self.pause(500)
        save = await self._click_optional(
            "dialog_save_button", "Save", force=False, timeout=2000, screenshot="after-itinerary-save"
        )
        return LookupResult.combine("Itinerary", feature, field, save)

    async def _open_and_save(self, feature: str) -> LookupResult:
        slug = slugify(feature)
        opened = await self._open_feature(feature, f"{slug}-dialog")
        if not opened.found:
            return opened
        await self.pause(1000)
        save = await self._click_optional(
            self.GET_VALUES_SAVE, f"{feature} Save", timeout=2000, screenshot=f"after-{slug}-save"
        )
        return LookupResult.combine(feature, opened, save)

    @allure.step("Save message post backgrounds")
    async def handle_post_message_backgrounds(self) -> LookupResult:
        return await self._open_and_save(self.FEATURES["message_post"])

    @allure.step("Save welcome popup")
    async def handle_welcome_popup(self) -> LookupResult:
        return await self._open_and_save(self.FEATURES["welcome_popup"])

    @allure.step("Enable KeepSake")
    async def handle_keepsake(self, message: str, unlock_date: str) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["keepsake"], "keepsake-dialog")
        if not feature.found:
            return feature
        await self.pause(1000)

        message_field = await self.try_fill(self.KEEPSAKE_MESSAGE, message, timeout=2000, name="KeepSake Message")
        date_field = await self.try_fill(self.KEEPSAKE_DATE, unlock_date, timeout=2000, name="KeepSake Unlock Date")
        enable = await self._click_optional(
            self.KEEPSAKE_ENABLE, "KeepSake Enable", timeout=2000, screenshot="after-keepsake-enable"
        )
        return LookupResult.combine("KeepSake", feature, message_field, date_field, enable)

    @allure.step("Enable Scavenger Hunt")
    async def handle_scavenger_hunt(self) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["scavenger_hunt"], "scavenger-hunt-dialog")
        if not feature.found:
            return feature
        await self.pause(1000)

        template = await self._click_optional(
            self.WEDDING_TEMPLATE, "Wedding Template", wait_ms=1000, timeout=2000
        )
        save = await self._click_optional(
            self.SCAVENGER_SAVE, "Scavenger Hunt Save", timeout=2000, screenshot="after-scavenger-hunt-save"
        )
        if not save.found:
            return LookupResult.combine("Scavenger Hunt", feature, optional(template), save)

        confirm = await self._click_optional(
            self.CONFIRM_YES, "Confirm Yes", timeout=3000, screenshot="after-scavenger-hunt-confirm"
        )
        return LookupResult.combine("Scavenger Hunt", feature, optional(template), save, confirm)

    @allure.step("Allow sharing via Facebook")
    async def handle_facebook_sharing(self) -> LookupResult:
        feature = await self._open_feature(self.FEATURES["facebook_sharing"], "facebook-sharing-dialog")
        if not feature.found:
            return feature
        await self.pause(1000)
        toggle = await self.set_toggle(True)
        save = await self.click_save(screenshot="after-facebook-sharing-save")
        return LookupResult.combine("Facebook Sharing", feature, optional(toggle), save)

    # ============================================================
    # Personalize Dialog
    # ============================================================

    @allure.step("Enable every remaining feature")
    async def verify_all_features_enabled(self) -> LookupResult:
        """Open each unselected option, enable its toggle and save it."""
        await self.screenshot("before-verify-features")
        try:
            names = [
                (text or "").strip()
                for text in await self.page.locator(self.UNSELECTED_OPTIONS).all_text_contents()
            ]
        except PlaywrightError as e:
            return LookupResult.from_error("All Features", e, selector=self.UNSELECTED_OPTIONS)

        names = [name for name in names if name]
        if not names:
            logger.info("All features appear to be already enabled")
            return LookupResult.found_with("All Features", selector=self.UNSELECTED_OPTIONS)

        logger.info(f"Found {len(names)} unselected feature(s): {names}")
        results = []
        for name in names:
            # Exact: a shorter name must not reopen an option whose name contains it
            opened = await self.smart.try_act_by_text(
                self.UNSELECTED_OPTIONS, name, lambda el: el.click(), element_name=name, exact=True
            )
            if not opened.found:
                results.append(opened)
                if opened.failed:
                    break
                continue
            await self.pause(1000)

            toggle = await self.set_toggle(True)
            save = await self.click_save()
            step = LookupResult.combine(name, opened, optional(toggle), optional(save))
            results.append(step)
            if step.failed:
                break

        return LookupResult.combine("All Features", *results)

    @allure.step("Save settings page")
    async def save_settings_page(self) -> LookupResult:
        await self.screenshot("before-save-settings")
        return await self._click_optional(
            self.SETTINGS_PAGE_SAVE,
            "Settings Page Save",
            wait_ms=3000,
            timeout=2000,
            screenshot="after-save-settings",
        )

    @allure.step("Final save")
    async def click_final_save(self) -> LookupResult:
        """
        Click the Personalize dialog's Save.

        Falls back to any Save-looking button, then to the first dialog
        action. When the dialog is still open after the Personalize Save,
        the button is clicked again with force.
        """
        result = await self._click_optional(
            self.PERSONALIZE_SAVE_SELECTORS,
            "Final Save",
            wait_ms=3000,
            timeout=self.FEATURE_LOOKUP_TIMEOUT,
            force=False,
            screenshot="after-final-save-click",
        )
        if result.found:
            if await self.is_visible(self.PERSONALIZE_DIALOG, timeout=1000):
                logger.info("Dialog still open after save, clicking again with force")
                try:
                    await result.locator.click(force=True)
                except PlaywrightError as e:
                    return LookupResult.from_error("Final Save", e, selector=result.selector)
                await self.pause(3000)
            return result
        if result.failed:
            return result

        fallbacks = [
            lambda: self._click_optional(
                self.GENERAL_SAVE_SELECTORS,
                "Final Save",
                wait_ms=3000,
                timeout=self.FEATURE_LOOKUP_TIMEOUT,
                force=False,
                screenshot="after-general-save-click",
            ),
            lambda: self.smart.try_act_by_text(
                "button, .btn", "save", lambda el: el.click(), element_name="Final Save"
            ),
            lambda: self._click_optional(
                self.DIALOG_ACTION_BUTTON,
                "Final Save",
                wait_ms=3000,
                timeout=self.FEATURE_LOOKUP_TIMEOUT,
                force=False,
            ),
        ]
        for fallback in fallbacks:
            result = await fallback()
            if not result.missing:
                break
        return result

    # ============================================================
    # Verification
    # ============================================================

    async def verify_event_name(self, expected: str) -> bool:
        """True when `expected` appears in the event name, or anywhere on the page."""
        with allure.step(f"Verify event name contains '{expected}'"):
            for selector in self.EVENT_NAME_SELECTORS + [f"text={expected}"]:
                try:
                    texts = await self.page.locator(selector).all_text_contents()
                except PlaywrightError as e:
                    logger.debug(f"Event name lookup via {selector} failed: {e}")
                    continue
                for text in texts:
                    if expected in (text or "").strip():
                        logger.info(f"Event name '{text.strip()}' matched via {selector}")
                        return True

            if await self.is_visible(f'text="{expected}"', timeout=1000):
                logger.info(f"Event name '{expected}' found by text search")
                return True

            try:
                in_body = await self.page.evaluate(
                    "name => document.body.innerText.includes(name)", expected
                )
            except PlaywrightError as e:
                logger.error(f"Page text check for '{expected}' failed: {e}")
                return False
            if in_body:
                logger.info(f"Event name '{expected}' found in page text")
                return True

            logger.error(f"Event name '{expected}' not found on the page")
            return False


__all__ = [
    "DEFAULT_HEADER_PHOTO",
    "EventPage",
]
