"""
================================================================================
Smart Locator
================================================================================

Element location system with:
    - Multiple fallback locator strategies
    - Automatic degradation when primary locator fails
    - Usage analytics for locator maintenance
    - Tri-state best-effort interactions (found / not found / error)

LiveShareNow renders Angular Material components without test ids, so most
elements are reached through class names and visible text. Every optional
element goes through `try_act()`, which never hides a failure: a missing
element is reported as NOT_FOUND and a Playwright failure as ERROR.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


# An interaction performed on a resolved element, e.g. `lambda el: el.click()`
LocatorAction = Callable[[Locator], Awaitable[Any]]
LocatorTarget = Union[str, Sequence[str], Dict[str, str]]


class ElementNotFoundError(Exception):
    """Raised when all locator strategies fail to find element."""
    pass


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class LookupResult:
    """
    Outcome of a best-effort element interaction.

    Attributes:
        element_name: Human-readable element or operation name
        status: FOUND when the element was visible and the action (if any)
            completed, NOT_FOUND when nothing became visible in time, ERROR
            when Playwright raised anything other than a timeout
        selector: Selector that resolved the element (or failed)
        locator: Resolved locator when FOUND
        error: Error message when ERROR, missing element name when NOT_FOUND
    """
    element_name: str
    status: LookupStatus
    selector: Optional[str] = None
    locator: Optional[Locator] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def missing(self) -> bool:
        return self.status is LookupStatus.NOT_FOUND

    @property
    def failed(self) -> bool:
        return self.status is LookupStatus.ERROR

    def __bool__(self) -> bool:
        return self.found

    def describe(self) -> str:
        if self.found:
            return f"{self.element_name}: found ({self.selector})"
        if self.missing:
            detail = f" ({self.error})" if self.error else ""
            return f"{self.element_name}: not found{detail}"
        return f"{self.element_name}: error ({self.error})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element": self.element_name,
            "status": self.status.value,
            "selector": self.selector,
            "error": self.error,
        }

    @classmethod
    def found_with(
        cls,
        element_name: str,
        selector: Optional[str] = None,
        locator: Optional[Locator] = None,
    ) -> "LookupResult":
        return cls(element_name, LookupStatus.FOUND, selector=selector, locator=locator)

    @classmethod
    def not_found(cls, element_name: str, detail: Optional[str] = None) -> "LookupResult":
        return cls(element_name, LookupStatus.NOT_FOUND, error=detail)

    @classmethod
    def from_error(
        cls,
        element_name: str,
        error: BaseException,
        selector: Optional[str] = None,
    ) -> "LookupResult":
        return cls(element_name, LookupStatus.ERROR, selector=selector, error=str(error))

    @classmethod
    def combine(cls, element_name: str, *results: Optional["LookupResult"]) -> "LookupResult":
        """
        Fold the results of sequential steps into one result.

        The worst status wins (ERROR, then NOT_FOUND). Skipped steps may be
        passed as None.
        """
        steps = [result for result in results if result is not None]
        for status in (LookupStatus.ERROR, LookupStatus.NOT_FOUND):
            for step in steps:
                if step.status is status:
                    detail = step.error
                    if status is LookupStatus.NOT_FOUND:
                        detail = f"{step.element_name} not found"
                    return cls(element_name, status, selector=step.selector, error=detail)
        last = steps[-1] if steps else None
        return cls.found_with(
            element_name,
            selector=last.selector if last else None,
            locator=last.locator if last else None,
        )


@dataclass
class LocatorHealth:
    """
    Tracks locator health and usage statistics.

    Attributes:
        element_name: Human-readable element name
        primary_selector: The preferred selector
        used_fallback: Whether a fallback was used
        fallback_name: Name of fallback used (if any)
        fallback_selector: The fallback selector used (if any)
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_name: Optional[str] = None
    fallback_selector: Optional[str] = None


class SmartLocator:
    """
    Smart element locator with fallback strategies.

    Usage:
        >>> smart = SmartLocator(page)
        >>> await smart.click("settings_button")
        >>> result = await smart.try_act("dialog_save_button", lambda el: el.click())
        >>> if result.missing: ...

    Targets can be a key of `LOCATORS`, a single selector, a list of
    selectors tried in order, or a {strategy_name: selector} map.
    """

    # Shared LiveShareNow elements.
    # Format: element_name -> {strategy_name: selector}
    LOCATORS: Dict[str, Dict[str, str]] = {
        # Authentication
        "sign_in_button": {
            "primary": 'button:has-text("Sign In")',
            "fallback_1": 'button:has-text("Login")',
            "fallback_2": ".login-button",
        },
        "google_button": {
            "primary": '[aria-label*="Google"]',
            "fallback_1": '[class*="google"]',
            "fallback_2": 'button:has-text("Google")',
        },
        "email_sign_in_button": {
            "primary": 'button:has-text("Sign in with Email")',
            "fallback_1": ".btn-hover-email",
        },

        # Events list
        "create_event_button": {
            "primary": "button.Create-Event",
            "fallback_1": 'button.btn-circle:has(i.material-icons:text("add"))',
        },
        "main_menu_button": {
            "primary": "div.mat-menu-trigger.btn.btn-circle.btn-ghost",
        },

        # Event detail / Personalize dialog
        "settings_button": {
            "primary": 'button.btn.btn-circle.btn-ghost:has(mat-icon:text("settings"))',
        },
        "feature_toggle": {
            # One selector so the first toggle in DOM order wins
            "primary": '.toggle, .switch, input[type="checkbox"], .mat-slide-toggle',
        },
        "dialog_save_button": {
            "primary": '.mat-dialog-actions .btn:has-text("Save")',
        },
        "done_button": {
            "primary": 'button:has-text("Done")',
            "fallback_1": 'div.btn:has-text("Done")',
            "fallback_2": '.mat-dialog-actions .btn:has-text("Done")',
        },
    }

    def __init__(
        self,
        page: Page,
        element_name: Optional[str] = None,
        locators: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize SmartLocator with Playwright page.

        This class supports two usage styles:
        1) **Library mode**: `SmartLocator(page)` then `await smart.click("settings_button")`
           using the class-level `LOCATORS` map.
        2) **Element mode**: `SmartLocator(page, element_name="X", locators={...})`
           then `await element.locate()` or `await element.try_act(...)`.

        Args:
            page: Playwright Page object
            element_name: Optional human-readable element name (element mode)
            locators: Optional locator map (element mode)
        """
        self.page = page
        self._element_name = element_name
        self._element_locators = locators
        self._health_records: List[LocatorHealth] = []
        self._fallback_used: Dict[str, LocatorHealth] = {}

    @property
    def name(self) -> str:
        return self._element_name or "custom_element"

    def _resolve(
        self,
        target: Optional[LocatorTarget],
        element_name: Optional[str] = None,
    ) -> Tuple[Dict[str, str], str]:
        """Turn any supported target into an ordered strategy map plus display name."""
        if target is None:
            locators = dict(self._element_locators or {})
            return locators, element_name or self.name
        if isinstance(target, dict):
            return dict(target), element_name or self.name
        if isinstance(target, str):
            if target in self.LOCATORS:
                return dict(self.LOCATORS[target]), element_name or target
            return {"primary": target}, element_name or target
        selectors = list(target)
        locators = {"primary": selectors[0]} if selectors else {}
        for i, selector in enumerate(selectors[1:], start=1):
            locators[f"fallback_{i}"] = selector
        return locators, element_name or (selectors[0] if selectors else self.name)

    def _record_health(
        self,
        display_name: str,
        locators: Dict[str, str],
        strategy_name: str,
        selector: str,
    ) -> None:
        used_fallback = strategy_name != "primary"
        health = LocatorHealth(
            element_name=display_name,
            primary_selector=locators.get("primary", selector),
            used_fallback=used_fallback,
            fallback_name=strategy_name if used_fallback else None,
            fallback_selector=selector if used_fallback else None,
        )
        self._health_records.append(health)
        if used_fallback:
            logger.warning(
                f"Element '{display_name}' used fallback: {strategy_name} -> {selector}"
            )
            self._fallback_used[display_name] = health
        else:
            logger.debug(f"Element '{display_name}' found: {selector}")

    async def try_act(
        self,
        target: Optional[LocatorTarget] = None,
        action: Optional[LocatorAction] = None,
        timeout: int = 5000,
        element_name: Optional[str] = None,
    ) -> LookupResult:
        """
        Find the first visible match among the target's selectors and act on it.

        Each selector gets `timeout` ms to become visible. A timeout moves on
        to the next selector; other Playwright errors are remembered and also
        move on, since a fallback may still match. Once an element is found,
        a failing action ends the lookup with ERROR.

        Args:
            target: LOCATORS key, selector, selector list or strategy map.
                None uses the element-mode locators.
            action: Coroutine function receiving the resolved Locator
            timeout: Visibility timeout per selector in milliseconds
            element_name: Name used in logs and results

        Returns:
            LookupResult with FOUND, NOT_FOUND or ERROR status
        """
        locators, display_name = self._resolve(target, element_name)
        if not locators:
            return LookupResult.not_found(display_name, "no locators defined")

        errors: List[str] = []
        last_error_selector: Optional[str] = None

        for strategy_name, selector in locators.items():
            locator = self.page.locator(selector).first
            try:
                await locator.wait_for(state="visible", timeout=timeout)
            except PlaywrightTimeoutError:
                logger.debug(f"'{display_name}' not visible via {strategy_name}: {selector}")
                continue
            except PlaywrightError as e:
                errors.append(f"{strategy_name}: {selector} -> {str(e)[:120]}")
                last_error_selector = selector
                continue

            self._record_health(display_name, locators, strategy_name, selector)

            if action is not None:
                try:
                    await action(locator)
                except PlaywrightError as e:
                    logger.error(f"Action on '{display_name}' failed ({selector}): {e}")
                    return LookupResult.from_error(display_name, e, selector=selector)

            return LookupResult.found_with(display_name, selector=selector, locator=locator)

        if errors:
            message = "; ".join(errors)
            logger.error(f"Lookup of '{display_name}' failed: {message}")
            return LookupResult(
                display_name,
                LookupStatus.ERROR,
                selector=last_error_selector,
                error=message,
            )

        logger.info(f"Element '{display_name}' not found ({len(locators)} selector(s) tried)")
        return LookupResult.not_found(display_name)

    async def try_act_nth(
        self,
        selector: str,
        index: int,
        action: Optional[LocatorAction] = None,
        element_name: Optional[str] = None,
    ) -> LookupResult:
        """
        Act on the element at `index` among the current matches of `selector`.

        Does not wait: the matches present right now are counted.
        """
        display_name = element_name or f"{selector} #{index}"
        try:
            count = await self.page.locator(selector).count()
            if count <= index:
                logger.info(f"'{display_name}': only {count} match(es) for {selector}")
                return LookupResult.not_found(display_name)
            locator = self.page.locator(selector).nth(index)
            if action is not None:
                await action(locator)
        except PlaywrightError as e:
            logger.error(f"Action on '{display_name}' failed: {e}")
            return LookupResult.from_error(display_name, e, selector=selector)
        return LookupResult.found_with(display_name, selector=selector, locator=locator)

    async def try_act_by_text(
        self,
        selector: str,
        text: str,
        action: Optional[LocatorAction] = None,
        element_name: Optional[str] = None,
        exact: bool = False,
    ) -> LookupResult:
        """
        Scan matches of `selector` for one whose text contains `text`
        (case-insensitive) and act on the first hit.

        With `exact`, the trimmed text must equal `text`, so "Video" does
        not hit "Video Guestbook".
        """
        display_name = element_name or f"{selector} ~ '{text}'"
        needle = text.strip().lower()
        try:
            candidates = self.page.locator(selector)
            count = await candidates.count()
            for i in range(count):
                candidate = candidates.nth(i)
                content = (await candidate.text_content() or "").strip().lower()
                if (content == needle) if exact else (needle in content):
                    logger.debug(f"'{display_name}' matched by text scan at index {i}")
                    if action is not None:
                        await action(candidate)
                    return LookupResult.found_with(display_name, selector=selector, locator=candidate)
        except PlaywrightError as e:
            logger.error(f"Text scan for '{display_name}' failed: {e}")
            return LookupResult.from_error(display_name, e, selector=selector)
        return LookupResult.not_found(display_name)

    async def locate(
        self,
        target: Optional[LocatorTarget] = None,
        timeout: int = 5000,
        element_name: Optional[str] = None,
    ) -> Locator:
        """
        Locate a required element using the fallback strategy.

        Raises:
            ElementNotFoundError: When all strategies fail
        """
        result = await self.try_act(target, timeout=timeout, element_name=element_name)
        if result.found:
            return result.locator
        raise ElementNotFoundError(f"All locators failed for {result.describe()}")

    async def click(
        self,
        target: LocatorTarget,
        timeout: int = 5000,
        element_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Click a required element (raises ElementNotFoundError)."""
        locator = await self.locate(target, timeout=timeout, element_name=element_name)
        await locator.click(**kwargs)

    async def fill(
        self,
        target: LocatorTarget,
        value: str,
        timeout: int = 5000,
        element_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Fill a required input element (raises ElementNotFoundError)."""
        locator = await self.locate(target, timeout=timeout, element_name=element_name)
        await locator.fill(value, **kwargs)

    async def is_visible(
        self,
        target: Optional[LocatorTarget] = None,
        timeout: int = 2000,
        element_name: Optional[str] = None,
    ) -> bool:
        """
        Check if element is visible.

        Returns:
            True if element is visible, False when it is missing or errored
        """
        result = await self.try_act(target, timeout=timeout, element_name=element_name)
        return result.found

    def get_health_report(self) -> str:
        """
        Generate locator health report.

        Lists the elements that needed a fallback selector (maintenance candidates).
        """
        if not self._fallback_used:
            return "All elements used primary locators. No maintenance needed."

        report_lines = [
            "Locator Health Report - Fallbacks Used:",
            "",
            "The following elements used fallback locators.",
            "Consider updating the primary selectors:",
            "",
        ]

        for element_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{element_name}]",
                f"    Failed primary: {health.primary_selector}",
                f"    Used: {health.fallback_name} -> {health.fallback_selector}",
                "",
            ])

        return "\n".join(report_lines)


__all__ = [
    "SmartLocator",
    "ElementNotFoundError",
    "LocatorHealth",
    "LookupResult",
    "LookupStatus",
    "LocatorAction",
]
