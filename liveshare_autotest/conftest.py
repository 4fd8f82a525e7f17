"""
================================================================================
Suite Pytest Configuration
================================================================================

Registers the project markers, tags tests by location (ui / unit) and adds a
report header naming the target environment.

================================================================================
"""

import pytest

from liveshare_autotest.common.config_loader import get_config


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: Live scenarios against the hosted app (opt-in with --run-e2e)"
    )
    config.addinivalue_line(
        "markers", "serial: Ordered scenarios; a failure skips the rest of the class"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "unit: Offline tests of the framework, no browser"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "events: Tests related to the events list and event creation"
    )
    config.addinivalue_line(
        "markers", "settings: Tests related to event personalization settings"
    )
    config.addinivalue_line(
        "markers", "account: Tests related to the account (avatar) menu"
    )


def pytest_collection_modifyitems(config, items):
    """Add the 'ui' / 'unit' marker from the test's location."""
    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        if "unit" in path.replace("\\", "/").split("/"):
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    app_config = get_config()
    return [
        "",
        "=" * 60,
        "LiveShareNow UI Automation",
        f"Environment: {app_config.environment} ({app_config.get('app.base_url', '')})",
        "=" * 60,
        "",
    ]
