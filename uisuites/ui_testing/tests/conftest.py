"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, scenario contexts, page objects and failure capture.

Key Features:
- One browser per worker, one context per test
- ScenarioContext per test with scenario-scoped logging
- Page Object fixtures
- Screenshot capture on failure

Browser and headless mode come from the configuration (`ui.browser`,
`ui.headless`), so `UI__BROWSER=firefox UI__HEADLESS=false` switches them.

================================================================================
"""

from typing import Generator

import pytest
from loguru import logger
from playwright.sync_api import BrowserContext, Page
from playwright.sync_api import Error as PlaywrightError

from harness_tools.common.settings import HarnessSettings, load_settings
from harness_tools.report_tools.allure_utils import attach_page_screenshot
from uisuites.ui_testing.framework.browser_manager import BrowserManager
from uisuites.ui_testing.framework.test_context import ScenarioContext
from uisuites.ui_testing.pages.login_page import LoginPage


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def settings() -> HarnessSettings:
    return load_settings()


@pytest.fixture(scope="session")
def browser_manager(settings: HarnessSettings) -> Generator[BrowserManager, None, None]:
    """
    Session-scoped browser manager fixture.

    Skips the UI tests of this worker when no browser can be launched
    (e.g. `playwright install` was never run).
    """
    manager = BrowserManager(headless=settings.headless, browser_type=settings.browser)
    try:
        manager.start()
    except PlaywrightError as e:
        pytest.skip(f"Browser '{settings.browser}' could not be launched: {e}")
    yield manager
    manager.close()


@pytest.fixture(scope="function")
def context(browser_manager: BrowserManager) -> Generator[BrowserContext, None, None]:
    """
    Function-scoped browser context fixture.

    Creates a new browser context for each test, providing isolation.
    """
    context = browser_manager.new_context()
    yield context
    browser_manager.close_context(context)


@pytest.fixture(scope="function")
def page(context: BrowserContext, settings: HarnessSettings) -> Generator[Page, None, None]:
    page = context.new_page()
    page.set_default_timeout(settings.action_timeout_ms)
    page.set_default_navigation_timeout(settings.page_load_timeout_ms)
    yield page
    page.close()


@pytest.fixture(scope="function")
def scenario(request, page: Page, settings: HarnessSettings) -> Generator[ScenarioContext, None, None]:
    """
    Per-test ScenarioContext; log records emitted during the test carry the
    scenario name.
    """
    context = ScenarioContext(request.node.name, page, settings)
    with logger.contextualize(scenario=context.name):
        logger.info(f"Scenario started: {context.name}")
        yield context
        logger.info(f"Scenario finished: {context.name}")


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(scenario: ScenarioContext) -> LoginPage:
    """Provides the scenario's LoginPage instance."""
    return scenario.get_page(LoginPage)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Hook to capture screenshots on test failure.

    Takes a full-page screenshot when a UI test fails and attaches it to
    the Allure report.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        page = getattr(item, "funcargs", {}).get("page")
        if page is not None:
            attach_page_screenshot(page, name="failure_screenshot", full_page=True)
