"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for LiveShareNow pages.

Each page class encapsulates:
    - Element locators
    - Page-specific actions
    - Verification methods

Author: Automation Team
License: MIT
================================================================================
"""

from .login_page import AuthenticationError, LoginPage
from .events_page import EventsPage
from .event_creation_page import EventCreationPage
from .event_page import EventPage

__all__ = [
    "AuthenticationError",
    "LoginPage",
    "EventsPage",
    "EventCreationPage",
    "EventPage",
]
