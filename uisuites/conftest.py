"""
================================================================================
Suite Pytest Configuration
================================================================================

Registers the markers shared by the unit and UI suites and tags collected
tests by directory.

================================================================================
"""

import pytest


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

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating user flows"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "unit: Browser-free tests of the harness itself"
    )
    config.addinivalue_line(
        "markers", "ui: Tests driving a real browser"
    )


def pytest_collection_modifyitems(config, items):
    """Tag tests with their suite based on location."""
    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        elif "unit" in path:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "UI Retry Harness",
        "=" * 60,
        "",
    ]
