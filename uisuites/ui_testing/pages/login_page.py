"""
================================================================================
Login Page Object
================================================================================

Login form of the application under test.

NOTE:
  Selectors follow the demo storefront login form (`#user-name`,
  `#password`, `#login-button`). Real projects should prefer stable
  `data-test` attributes.

================================================================================
"""

from __future__ import annotations

import os
from typing import Optional

import allure
from loguru import logger

from uisuites.ui_testing.framework.page_base import BasePage
from uisuites.ui_testing.framework.retry_options import RetryOptions


class LoginPage(BasePage):
    """Login page object."""

    URL_PATH = "/"
    PAGE_TITLE = "Login"

    USERNAME_INPUT = "#user-name"
    PASSWORD_INPUT = "#password"
    LOGIN_BUTTON = "#login-button"
    ERROR_MESSAGE = "[data-test='error']"

    @allure.step("Open login page")
    def open(self) -> "LoginPage":
        self.navigate()
        return self

    @allure.step("Verify login form is displayed")
    def verify_form_displayed(self) -> bool:
        """True when all three form controls are visible."""
        for selector in (self.USERNAME_INPUT, self.PASSWORD_INPUT, self.LOGIN_BUTTON):
            element = self.page.query_selector(selector)
            if element is None or not element.is_visible():
                logger.warning(f"Login form element not visible: {selector}")
                return False
        return True

    @allure.step("Login (username={username})")
    def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        expected_url_part: Optional[str] = None,
    ) -> None:
        """
        Fill the form and submit it.

        Args:
            username: Defaults to `UI_USERNAME` env var (demo-safe)
            password: Defaults to `UI_PASSWORD` env var (demo-safe)
            expected_url_part: When given, the click only counts once the
                URL contains it
        """
        if username is None:
            username = os.getenv("UI_USERNAME", "demo_user")
        if password is None:
            password = os.getenv("UI_PASSWORD", "demo_password")

        self.actions.input_text(self.USERNAME_INPUT, username)
        self.actions.input_text(self.PASSWORD_INPUT, password)

        options = RetryOptions.none()
        if expected_url_part:
            options = (
                RetryOptions.builder()
                .post_validation(lambda page: expected_url_part in page.url)
                .build()
            )
        self.actions.click_element(self.LOGIN_BUTTON, options)

    @allure.step("Get login error message")
    def get_error_message(self) -> str:
        return self.actions.wait_for_text_populated(self.ERROR_MESSAGE)
