"""
================================================================================
Scenario Data Factory
================================================================================

Builds the data the UI scenarios type into the app.

The scenario values (event "ttt", 18 May 2025, "tuanhay" settings) depend on
the state of one environment, so they live in the `scenarios` section of the
environment YAML rather than in test bodies. The factory also generates
unique names for runs that must not collide with existing events.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from liveshare_autotest.common.config_loader import ConfigLoader, get_config


def unique_name(base_name: str) -> str:
    """Return `<base>_<6 random chars>_<last 6 digits of epoch ms>`."""
    uid = uuid.uuid4().hex[:6]
    timestamp = str(int(time.time() * 1000))[-6:]
    return f"{base_name}_{uid}_{timestamp}"


@dataclass
class EventData:
    """Input of the create-event wizard."""
    event_type: str
    name: str
    event_date: date

    @property
    def year_label(self) -> str:
        return str(self.event_date.year)

    @property
    def month_label(self) -> str:
        # Material calendar month cells read "JAN", "FEB", ...
        return self.event_date.strftime("%b").upper()

    @property
    def day_label(self) -> str:
        return str(self.event_date.day)


@dataclass
class ButtonLinkData:
    feature: str
    name: str
    url: str


@dataclass
class SettingsData:
    """Values applied by the event customization scenario."""
    event_name: str
    expected_name: str
    event_date: str
    location: str
    contact_email: str
    contact_phone: str
    itinerary: str
    passcode: str
    manager_email: str
    keepsake_message: str
    keepsake_unlock_date: str
    button_links: List[ButtonLinkData] = field(default_factory=list)


class EventDataFactory:
    """
    Factory for scenario data.

    Usage:
        factory = EventDataFactory()
        event = factory.event_setup()   # configured "ttt" event

    With `scenarios.event_setup.unique_name` on, the configured name gets a
    random suffix so repeated runs create distinct events.
    """

    def __init__(self, config: Optional[ConfigLoader] = None):
        self.config = config or get_config()

    def event_setup(self) -> EventData:
        section = self.config.get_section("scenarios.event_setup")
        name = section.get("name", "ttt")
        if section.get("unique_name", False):
            name = unique_name(name)
        return EventData(
            event_type=section.get("event_type", "Anniversary"),
            name=name,
            event_date=self._parse_date(section.get("date", "2025-05-18")),
        )

    def settings(self) -> SettingsData:
        section: Dict[str, Any] = self.config.get_section("scenarios.customization")
        links = [
            ButtonLinkData(
                feature=link["feature"],
                name=link["name"],
                url=link["url"],
            )
            for link in section.get("button_links", [])
        ]
        return SettingsData(
            event_name=section.get("event_name", "tuanhay_test_event"),
            expected_name=section.get("expected_name", "tuanhay"),
            event_date=str(section.get("event_date", "01/01/2024")),
            location=section.get("location", ""),
            contact_email=section.get("contact_email", ""),
            contact_phone=str(section.get("contact_phone", "")),
            itinerary=section.get("itinerary", ""),
            passcode=str(section.get("passcode", "")),
            manager_email=section.get("manager_email", ""),
            keepsake_message=section.get("keepsake_message", ""),
            keepsake_unlock_date=str(section.get("keepsake_unlock_date", "")),
            button_links=links,
        )

    def feedback_comment(self) -> str:
        return self.config.get(
            "scenarios.feedback_comment",
            "This is a sample feedback for automation test.",
        )

    def account_menu_options(self) -> List[str]:
        return list(self.config.get(
            "scenarios.account_menu_options",
            ["My Account", "Delete Account", "Subscription", "Branding", "Logout"],
        ))

    @staticmethod
    def _parse_date(value: Any) -> date:
        # YAML turns unquoted ISO dates into date objects already
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value))


__all__ = [
    "ButtonLinkData",
    "EventData",
    "EventDataFactory",
    "SettingsData",
    "unique_name",
]
