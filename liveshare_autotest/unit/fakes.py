"""
In-memory stand-ins for Playwright's Page and Locator.

Only the calls the page objects make are implemented. A page holds a map of
selector -> elements; a selector with no visible element times out the way
Playwright does, and `page.fail(selector)` makes lookups raise a plain
Playwright error instead.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


@dataclass
class FakeElement:
    text: str = ""
    visible: bool = True
    # None means "not a checkbox": is_checked() raises
    checked: Optional[bool] = None
    value: str = ""
    click_error: Optional[str] = None


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, index: Optional[int] = None):
        self.page = page
        self.selector = selector
        self.index = index

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, 0)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, index)

    def _elements(self) -> List[FakeElement]:
        if self.selector in self.page.lookup_errors:
            raise PlaywrightError(self.page.lookup_errors[self.selector])
        return self.page.elements.get(self.selector, [])

    def _element(self) -> FakeElement:
        elements = self._elements()
        index = self.index or 0
        if index >= len(elements):
            raise PlaywrightTimeoutError(f"no element for {self.selector} #{index}")
        return elements[index]

    def _record(self, action: str, *args: Any) -> None:
        self.page.actions.append((action, self.selector, self.index or 0) + args)

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        elements = self._elements()
        index = self.index or 0
        if index >= len(elements) or not elements[index].visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def count(self) -> int:
        return len(self._elements())

    async def click(self, **kwargs: Any) -> None:
        element = self._element()
        if element.click_error:
            raise PlaywrightError(element.click_error)
        self._record("click", kwargs.get("force", False))
        if element.checked is not None:
            element.checked = not element.checked
        handler = self.page.click_handlers.get(self.selector)
        if handler:
            handler()

    async def hover(self) -> None:
        self._element()
        self._record("hover")

    async def fill(self, value: str) -> None:
        element = self._element()
        element.value = value
        self._record("fill", value)

    async def select_option(self, label: Optional[str] = None, **kwargs: Any) -> List[str]:
        self._element()
        self._record("select", label)
        return [label or ""]

    async def set_input_files(self, files: Any) -> None:
        self._element()
        self._record("files", str(files))

    async def is_checked(self) -> bool:
        element = self._element()
        if element.checked is None:
            raise PlaywrightError("Not a checkbox or radio button")
        return element.checked

    async def text_content(self) -> Optional[str]:
        return self._element().text

    async def all_text_contents(self) -> List[str]:
        return [element.text for element in self._elements()]


class FakePage:
    def __init__(self, url: str = "https://app.livesharenow.com/events"):
        self.url = url
        self.elements: Dict[str, List[FakeElement]] = {}
        self.lookup_errors: Dict[str, str] = {}
        self.click_handlers: Dict[str, Callable[[], None]] = {}
        self.actions: List[tuple] = []
        self.waits: List[int] = []
        self.visited: List[str] = []
        self.screenshots: List[str] = []
        self.evaluate_result: Any = None
        self.evaluate_error: Optional[str] = None
        self.screenshot_error: Optional[str] = None
        self.load_state_timeout = False
        # wait_for_function() times out when False
        self.function_ready = True
        # URL the app navigates to while wait_for_url() is pending
        self.next_url: Optional[str] = None
        self.listeners: Dict[str, List[Callable]] = {}
        self.closed = False

    # Test setup helpers

    def add(self, selector: str, *elements: FakeElement) -> List[FakeElement]:
        items = list(elements) or [FakeElement()]
        self.elements.setdefault(selector, []).extend(items)
        return items

    def fail(self, selector: str, message: str = "Target page, context or browser has been closed") -> None:
        self.lookup_errors[selector] = message

    def clicked(self) -> List[str]:
        return [action[1] for action in self.actions if action[0] == "click"]

    def filled(self) -> Dict[str, str]:
        return {action[1]: action[3] for action in self.actions if action[0] == "fill"}

    # Page API

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def on(self, event: str, handler: Callable) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def is_closed(self) -> bool:
        return self.closed

    async def wait_for_timeout(self, timeout: int) -> None:
        self.waits.append(timeout)

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None:
        if self.load_state_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {state}")

    async def wait_for_function(self, expression: str, timeout: Optional[float] = None) -> None:
        if not self.function_ready:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for function")

    async def wait_for_url(self, url: Any, timeout: Optional[float] = None) -> None:
        if self.next_url is not None:
            self.url = self.next_url
        matches = url(self.url) if callable(url) else url == self.url
        if not matches:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for URL")

    async def goto(self, url: str, wait_until: Optional[str] = None) -> None:
        self.visited.append(url)
        self.url = url

    async def reload(self) -> None:
        self.visited.append(self.url)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        if self.evaluate_error:
            raise PlaywrightError(self.evaluate_error)
        if callable(self.evaluate_result):
            return self.evaluate_result(expression, arg)
        return self.evaluate_result

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        if self.screenshot_error:
            raise PlaywrightError(self.screenshot_error)
        data = b"\x89PNG fake"
        if path:
            Path(path).write_bytes(data)
            self.screenshots.append(Path(path).name)
        return data
