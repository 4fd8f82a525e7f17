"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework for the LiveShareNow web app.

Components:
    - smart_locator: Element location with fallback strategies and
      tri-state best-effort lookups
    - page_base: Base page object for common operations
    - browser_manager: Browser lifecycle management
    - auth_state: Saved login state (cookies + localStorage)
    - data_factory: Scenario data built from configuration

Author: Automation Team
License: MIT
================================================================================
"""

from .smart_locator import (
    ElementNotFoundError,
    LookupResult,
    LookupStatus,
    SmartLocator,
)
from .page_base import BasePage
from .browser_manager import BrowserManager
from .auth_state import AuthStateStore

__all__ = [
    "SmartLocator",
    "ElementNotFoundError",
    "LookupResult",
    "LookupStatus",
    "BasePage",
    "BrowserManager",
    "AuthStateStore",
]
