"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Retried element interactions (ElementActions)
    - Navigation and URL handling
    - Screenshot and failure capture

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import allure
from loguru import logger

from harness_tools.report_tools.allure_utils import attach_png, attach_text

from .element_actions import ElementActions, ScrollActions

if TYPE_CHECKING:
    from .test_context import ScenarioContext


class BasePage:
    """
    Base class for all page objects.

    Page objects are created through ScenarioContext.get_page() so every page
    of a scenario shares the same browser page, settings and actions.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/"

            def login(self, username: str, password: str):
                self.actions.input_text(self.USERNAME_INPUT, username)
                self.actions.input_text(self.PASSWORD_INPUT, password)
                self.actions.click_element(self.LOGIN_BUTTON)
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    def __init__(self, context: "ScenarioContext"):
        self.context = context
        self.page = context.page
        self.settings = context.settings
        self.actions: ElementActions = context.actions
        self.scroll = ScrollActions(self.page, pause=self.settings.lazy_scroll_pause)
        self.base_url = self.settings.app_url.rstrip("/")

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    def navigate(self, wait_for: str = "load") -> None:
        """
        Navigate to this page and wait for it to settle.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            self.page.goto(self.url, wait_until=wait_for, timeout=self.settings.page_load_timeout_ms)
            logger.debug(f"Navigated to: {self.url}")
        self.actions.wait_for_page_to_load(self.PAGE_TITLE or self.URL_PATH)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    def screenshot(self, name: str, full_page: bool = False, attach_to_allure: bool = True) -> Path:
        """
        Take a screenshot and optionally attach it to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        directory = Path(self.settings.screenshots_dir)
        directory.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = directory / f"{self.context.name}_{name}_{timestamp}.png"

        png = self.page.screenshot(path=str(filepath), full_page=full_page)
        if attach_to_allure:
            attach_png(png, name=name)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    def capture_failure(self, test_name: str) -> None:
        """Attach a screenshot and the current URL for a failed scenario."""
        with allure.step("Capture failure details"):
            self.screenshot(f"failure_{test_name}", full_page=True)
            attach_text(self.page.url, name="Current URL")


__all__ = [
    "BasePage",
]
