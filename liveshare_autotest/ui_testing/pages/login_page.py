"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Authenticator for LiveShareNow.

The app offers two ways in:
  - Google OAuth in a popup window (the default for the scenarios)
  - "Sign in with Email" with an email + password form

Both are wrapped in the same retry policy: check for an existing session
first, then up to `auth.max_retries` attempts with a linear backoff of
`auth.retry_backoff_ms * attempt` between them. The result is a plain bool
so scenarios make exactly one assertion on it.

Credentials come from configuration (GOOGLE_EMAIL / GOOGLE_PASSWORD and
EMAIL_LOGIN_EMAIL / EMAIL_LOGIN_PASSWORD env vars) and are never logged.

================================================================================
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import allure
from loguru import logger
from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from liveshare_autotest.ui_testing.framework.page_base import BasePage
from liveshare_autotest.ui_testing.framework.smart_locator import (
    ElementNotFoundError,
    SmartLocator,
)


class AuthenticationError(Exception):
    """Raised when a login flow breaks in a way that warrants another attempt."""
    pass


# Errors that end one attempt but not the whole retry loop
RETRYABLE_ERRORS = (AuthenticationError, ElementNotFoundError, PlaywrightError)


class LoginPage(BasePage):
    """LiveShareNow login page object (async)."""

    URL_PATH = "/"
    PAGE_TITLE = "LiveShareNow"

    ACCESS_TOKEN_KEY = "ACCESSTOKEN"
    DASHBOARD_INDICATORS = (
        '.flex.pt-8, div.event-card, div.mat-card, '
        '[data-testid="dashboard"], .event-card-event'
    )
    PROFILE_INDICATORS = [
        "div.mat-menu-trigger.avatar",
        "div.profile-image",
        "img.profile-image",
        ".profile div.avatar",
        "div.navbar-end .avatar",
    ]

    # Google popup
    ACCOUNT_CHOOSER_HEADER = 'h1:has-text("Chọn tài khoản"), h1:has-text("Choose an account")'
    ACCOUNT_ITEMS = 'li[class*="aZvCDf"] div[role="link"]'
    ACCOUNT_EMAIL = 'div[class*="yAlK0b"]'
    GOOGLE_EMAIL_INPUT = 'input[type="email"]'
    GOOGLE_PASSWORD_INPUT = 'input[type="password"]'
    GOOGLE_NEXT_BUTTON = 'button:has-text("Next")'

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        max_retries: Optional[int] = None,
        backoff_ms: Optional[int] = None,
    ):
        super().__init__(page, base_url)
        self.max_retries = int(
            max_retries if max_retries is not None
            else self.config.get("auth.max_retries", 3)
        )
        self.backoff_ms = int(
            backoff_ms if backoff_ms is not None
            else self.config.get("auth.retry_backoff_ms", 3000)
        )

    # ============================================================
    # Page Elements (Smart Locators)
    # ============================================================

    @property
    def email_input(self) -> SmartLocator:
        return self.smart_locator(
            primary='input[placeholder="Enter Email"]',
            fallbacks=['input[type="email"]'],
            name="Email Input",
        )

    @property
    def password_input(self) -> SmartLocator:
        return self.smart_locator(
            primary='input[placeholder="Enter Password"]',
            fallbacks=['input[type="password"]'],
            name="Password Input",
        )

    @property
    def continue_button(self) -> SmartLocator:
        return self.smart_locator(
            primary='button:has-text("Continue")',
            name="Continue Button",
        )

    # ============================================================
    # Session State
    # ============================================================

    @allure.step("Open LiveShareNow")
    async def open(self) -> "LoginPage":
        await self.navigate()
        await self.wait_for_page_load(timeout=10000)
        return self

    async def is_logged_in(self) -> bool:
        """
        Detect an existing session.

        Checked in order: ACCESSTOKEN in localStorage, visible dashboard
        content, and (only when no sign-in button is shown) a profile avatar.
        """
        try:
            has_token = await self.page.evaluate(
                "key => localStorage.getItem(key) !== null",
                self.ACCESS_TOKEN_KEY,
            )
        except PlaywrightError as e:
            # about:blank and error pages deny localStorage access
            logger.debug(f"localStorage not readable: {e}")
            has_token = False

        if has_token:
            logger.debug("Access token found in localStorage")
            return True

        if await self.smart.is_visible(self.DASHBOARD_INDICATORS, timeout=3000):
            logger.debug("Dashboard content visible, already logged in")
            return True

        if await self.smart.is_visible("sign_in_button", timeout=1000):
            return False

        profile = await self.try_find(
            self.PROFILE_INDICATORS, timeout=1000, name="Profile Indicator"
        )
        return profile.found

    @allure.step("Reset page state")
    async def reset_page_state(self) -> bool:
        """
        Return to the landing page and drop onboarding/session leftovers.

        Returns False when the reset itself failed; the next attempt still runs.
        """
        try:
            await self.page.goto(f"{self.base_url}/", wait_until="domcontentloaded")
            await self.wait_for_page_load(timeout=10000)
            await self.pause(1000)
            await self.page.evaluate(
                """() => {
                    localStorage.removeItem('hasCompletedTour');
                    localStorage.removeItem('hasSeenWelcome');
                    sessionStorage.clear();
                }"""
            )
        except PlaywrightError as e:
            logger.warning(f"Page state reset failed: {e}")
            return False
        await self.screenshot("page-state-reset")
        return True

    # ============================================================
    # Google OAuth
    # ============================================================

    async def authenticate_with_retry(
        self,
        context: BrowserContext,
        target_email: str = "",
        max_retries: Optional[int] = None,
    ) -> bool:
        """
        Log in through the Google popup, retrying on failure.

        Args:
            context: Browser context that will own the OAuth popup
            target_email: Account to pick in Google's account chooser.
                Empty picks the first account.
            max_retries: Attempt limit. Defaults to `auth.max_retries` (3).

        Returns:
            True when a session exists after at most `max_retries` attempts
        """
        return await self._authenticate(
            "Google authentication",
            lambda: self.complete_google_auth(context, target_email),
            max_retries,
            failure_screenshot="auth-failure-attempt",
        )

    async def complete_google_auth(
        self,
        context: BrowserContext,
        target_email: str = "",
    ) -> bool:
        """Run one Google OAuth popup flow. Raises on a broken flow."""
        sign_in = await self.try_click("sign_in_button", timeout=5000, name="Sign In")
        if sign_in.failed:
            raise AuthenticationError(sign_in.describe())
        if sign_in.found:
            await self.pause(2000)

        google = await self.try_find("google_button", timeout=10000, name="Google Button")
        if not google.found:
            raise AuthenticationError(f"Google sign-in unavailable: {google.describe()}")
        await self.screenshot("before-google-click")

        async with context.expect_page(timeout=60000) as popup_info:
            await google.locator.click()
        popup = await popup_info.value
        logger.info("Google popup opened")

        try:
            await popup.wait_for_load_state("domcontentloaded")
            await popup.wait_for_timeout(2000)
            popup_smart = SmartLocator(popup)

            if await popup_smart.is_visible(self.ACCOUNT_CHOOSER_HEADER, timeout=5000):
                await self._choose_google_account(popup, popup_smart, target_email)
            else:
                await self._enter_google_credentials(popup_smart)

            await self._wait_for_popup_close(popup)
        except RETRYABLE_ERRORS:
            await self._close_popup(popup)
            raise

        await self.wait_for_page_load(timeout=30000)
        await self.screenshot("after-google-auth")
        return await self.is_logged_in()

    async def _choose_google_account(
        self,
        popup: Page,
        popup_smart: SmartLocator,
        target_email: str,
    ) -> None:
        accounts = popup.locator(self.ACCOUNT_ITEMS)
        count = await accounts.count()
        if count == 0:
            raise AuthenticationError("Google account chooser shown without accounts")

        chosen = None
        if target_email:
            for i in range(count):
                email_element = accounts.nth(i).locator(self.ACCOUNT_EMAIL)
                if not await email_element.is_visible():
                    continue
                email = await email_element.text_content() or ""
                if target_email in email:
                    logger.info(f"Selecting Google account {email.strip()}")
                    chosen = accounts.nth(i)
                    break

        if chosen is None:
            logger.info("Selecting first available Google account")
            chosen = accounts.first
        await chosen.click()

        # Google sometimes re-asks for the password of a remembered account
        password = self.config.get("google.password", "")
        prompt = await popup_smart.try_act(
            self.GOOGLE_PASSWORD_INPUT,
            lambda el: el.fill(password),
            timeout=3000,
            element_name="Google Password",
        )
        if prompt.failed:
            raise AuthenticationError(prompt.describe())
        if prompt.found:
            await popup_smart.click(self.GOOGLE_NEXT_BUTTON)

    async def _enter_google_credentials(self, popup_smart: SmartLocator) -> None:
        email = self.config.get("google.email", "")
        password = self.config.get("google.password", "")
        if not email or not password:
            raise AuthenticationError(
                "Google credentials missing: set GOOGLE_EMAIL and GOOGLE_PASSWORD"
            )

        await popup_smart.fill(self.GOOGLE_EMAIL_INPUT, email, timeout=10000)
        await popup_smart.click(self.GOOGLE_NEXT_BUTTON)
        await popup_smart.page.wait_for_timeout(2000)

        await popup_smart.fill(self.GOOGLE_PASSWORD_INPUT, password, timeout=10000)
        await popup_smart.click(self.GOOGLE_NEXT_BUTTON)

    async def _wait_for_popup_close(self, popup: Page) -> None:
        if popup.is_closed():
            return
        try:
            await popup.wait_for_event("close", timeout=30000)
        except PlaywrightTimeoutError:
            logger.warning("Google popup did not close, continuing")

    async def _close_popup(self, popup: Page) -> None:
        if popup.is_closed():
            return
        try:
            await popup.close()
        except PlaywrightError as e:
            logger.debug(f"Popup already gone: {e}")

    # ============================================================
    # Email Login
    # ============================================================

    async def authenticate_with_email_retry(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> bool:
        """Log in through "Sign in with Email", with the same retry policy."""
        return await self._authenticate(
            "Email authentication",
            lambda: self.complete_email_login(email, password),
            max_retries,
            failure_screenshot="email-auth-failure-attempt",
        )

    async def complete_email_login(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> bool:
        """Run one email + password login. Raises on a broken flow."""
        email = email or self.config.get("email_login.email", "")
        password = password or self.config.get("email_login.password", "")
        if not email:
            raise AuthenticationError("Email login requested without an email address")

        sign_in = await self.try_click("sign_in_button", timeout=5000, name="Sign In")
        if sign_in.failed:
            raise AuthenticationError(sign_in.describe())
        if sign_in.found:
            await self.pause(2000)

        await self.smart.click("email_sign_in_button", timeout=10000)
        await self.pause(2000)

        email_field = await self.email_input.locate(timeout=10000)
        await email_field.fill(email)
        await (await self.continue_button.locate()).click()
        await self.pause(3000)

        password_field = await self.password_input.locate()
        await password_field.fill(password)
        await (await self.continue_button.locate()).click()
        await self.pause(3000)

        dashboard = await self.try_find(
            self.DASHBOARD_INDICATORS, timeout=30000, name="Dashboard"
        )
        if dashboard.found:
            await self.screenshot("email-login-success")
            return True
        if dashboard.failed:
            raise AuthenticationError(dashboard.describe())

        # No dashboard card yet, but a hidden Sign In button still means a session
        signed_out = await self.smart.is_visible("sign_in_button", timeout=2000)
        await self.screenshot("email-login-success" if not signed_out else "email-login-failed")
        return not signed_out

    # ============================================================
    # Retry Policy
    # ============================================================

    async def _authenticate(
        self,
        flow_name: str,
        attempt_login: Callable[[], Awaitable[bool]],
        max_retries: Optional[int],
        failure_screenshot: str,
    ) -> bool:
        retries = self.max_retries if max_retries is None else max_retries
        if retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {retries}")

        if await self.is_logged_in():
            logger.info(f"{flow_name}: already logged in")
            return True

        last_error: Optional[BaseException] = None

        for attempt in range(1, retries + 1):
            with allure.step(f"{flow_name} attempt {attempt}/{retries}"):
                try:
                    if await attempt_login():
                        logger.info(f"{flow_name} succeeded on attempt {attempt}")
                        return True
                    logger.warning(f"{flow_name} attempt {attempt} did not reach a session")
                except RETRYABLE_ERRORS as e:
                    last_error = e
                    logger.warning(f"{flow_name} attempt {attempt} failed: {e}")
                    await self.screenshot(f"{failure_screenshot}-{attempt}")

                if await self.is_logged_in():
                    logger.info(f"{flow_name}: session detected after attempt {attempt}")
                    return True

                await self.reset_page_state()

            if attempt < retries:
                delay_ms = self.backoff_ms * attempt
                logger.info(f"Retrying {flow_name.lower()} in {delay_ms}ms")
                await self.pause(delay_ms)

        if last_error is not None:
            logger.error(
                f"All {retries} {flow_name.lower()} attempts failed. Last error: {last_error}"
            )
        else:
            logger.error(f"All {retries} {flow_name.lower()} attempts failed without errors")
        return False


__all__ = [
    "AuthenticationError",
    "LoginPage",
]
