"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - One browser per worker process
    - Isolated context per scenario
    - Browser configuration presets

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    sync_playwright,
)
from playwright.sync_api import Error as PlaywrightError


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages the browser instance and its contexts.

    Usage:
        with BrowserManager(browser_type="firefox") as manager:
            page = manager.new_page()
            page.goto("https://example.com")
    """

    # Default browser launch options (chromium only flags are filtered out
    # for the other engines)
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--ignore-certificate-errors",
            "--disable-notifications",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
        """
        if browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser '{browser_type}', expected one of {', '.join(SUPPORTED_BROWSERS)}"
            )
        self.headless = headless
        self.browser_type = browser_type

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    def __enter__(self) -> "BrowserManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def start(self) -> None:
        """Start Playwright and launch the browser."""
        self._playwright = sync_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }
        if self.browser_type != "chromium":
            launch_options.pop("args")

        try:
            self._browser = browser_launcher.launch(**launch_options)
        except PlaywrightError:
            self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(f"Browser started: {self.browser_type} (headless={self.headless})")

    def close(self) -> None:
        """Close all contexts, the browser and Playwright."""
        for context in self._contexts:
            try:
                context.close()
            except PlaywrightError as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def new_context(self, **options: Any) -> BrowserContext:
        """
        Create a new browser context.

        Each context is isolated - separate cookies, localStorage, etc.

        Args:
            **options: Additional context options

        Returns:
            New BrowserContext
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = self._browser.new_context(**{**self.DEFAULT_CONTEXT_OPTIONS, **options})
        self._contexts.append(context)
        return context

    def close_context(self, context: BrowserContext) -> None:
        if context in self._contexts:
            self._contexts.remove(context)
        context.close()

    def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """
        Create a new page in a new or existing context.

        Args:
            context: Existing context to use (creates new if None)
            **context_options: Options for a new context
        """
        if context is None:
            context = self.new_context(**context_options)
        return context.new_page()

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
