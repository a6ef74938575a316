# ================================================================================
# Element Actions Module
# ================================================================================
#
# This module provides the everyday UI element interactions used by page
# objects, each one driven through the RetryEngine so that waiting, retries,
# programmatic fallback and failure reporting behave the same everywhere.
#
# Key Features:
#   - Readiness waits per action kind (clickable, input-ready, present...)
#   - Text / attribute waits with regex:, equals: and icontains: matching
#   - Input value verification after typing
#   - Allure step per action, outcome + screenshot attached on failure
#   - Page load, overlay and element replacement waits
#   - Lazy-loading scroll helpers
#
# ================================================================================

import random
import time
from typing import Callable, List, Optional, Union

import allure
from loguru import logger
from playwright.sync_api import ElementHandle, Page
from playwright.sync_api import Error as PlaywrightError

from harness_tools.common.settings import HarnessSettings
from harness_tools.report_tools.allure_utils import attach_outcome, attach_page_screenshot

from . import scripts
from .conditions import (
    LocatorLike,
    describe_locator,
    find_first,
    read_attribute,
    read_text,
    resolve_elements,
)
from .errors import (
    ConditionTimeoutError,
    ElementActionFailedError,
    ElementNotInteractableError,
    FailureKind,
    classify_failure,
    is_stale,
)
from .retry_engine import ElementAction, Outcome, RetryEngine
from .retry_options import ActionKind, RetryOptions


EMPTY_STRING = ""
JQUERY_IDLE_TIMEOUT = 5.0
OVERLAY_APPEAR_TIMEOUT = 3.0


def _is_secret(description: str) -> bool:
    return "password" in description.lower()


def _masked(text: str, description: str) -> str:
    """Hide secrets in logs and report step titles."""
    return "*" * len(text) if _is_secret(description) else text


class ElementActions:
    """
    Element interaction methods backed by the retry engine.

    Example:
        actions = ElementActions(engine, action_timeout_ms=5000)
        actions.click_element("button#submit")
        actions.input_text("#username", "testuser")
        actions.wait_for_text(".toast", "icontains:saved")
    """

    def __init__(self, engine: RetryEngine, action_timeout_ms: float = 5000, page_load_timeout: float = 30.0):
        """
        Initialize ElementActions.

        Args:
            engine: RetryEngine bound to the page
            action_timeout_ms: Playwright timeout for a single primitive action
            page_load_timeout: Budget for document readiness, in seconds
        """
        self.engine = engine
        self.page: Page = engine.page
        self.action_timeout_ms = action_timeout_ms
        self.page_load_timeout = page_load_timeout

    @classmethod
    def from_settings(cls, page: Page, settings: HarnessSettings) -> "ElementActions":
        return cls(
            RetryEngine.from_settings(page, settings),
            action_timeout_ms=settings.action_timeout_ms,
            page_load_timeout=settings.page_load_timeout,
        )

    # =========================================================================
    # Core
    # =========================================================================

    def perform(
        self,
        locator: LocatorLike,
        action: ElementAction,
        action_kind: ActionKind,
        options: Optional[RetryOptions] = None,
    ) -> Outcome:
        """
        Run an action through the engine, reporting a failure before raising.

        Raises:
            ElementActionFailedError: The engine gave up on the action
        """
        outcome = self.engine.run(locator, action, action_kind, options)
        if not outcome.succeeded:
            attach_outcome(outcome)
            attach_page_screenshot(self.page, name=f"failure_{action_kind.value}")
        return outcome.raise_for_failure()

    def _read(
        self,
        locator: LocatorLike,
        reader: Callable[[ElementHandle], str],
        action_kind: ActionKind,
        options: Optional[RetryOptions] = None,
    ) -> str:
        result: List[str] = []
        self.perform(locator, lambda el: result.append(reader(el)), action_kind, options)
        return result[-1]

    # =========================================================================
    # Interactions
    # =========================================================================

    @allure.step("Click element: {locator}")
    def click_element(self, locator: LocatorLike, options: Optional[RetryOptions] = None) -> Outcome:
        """
        Click an element once it is visible and enabled.

        Args:
            locator: Selector or Locator
            options: Retry options (e.g. a post-validation of the click)
        """
        def click(element: ElementHandle) -> None:
            element.click(timeout=self.action_timeout_ms)
            logger.info(f"Clicked element located by {describe_locator(locator)}")

        return self.perform(locator, click, ActionKind.CLICK, options)

    @allure.step("Click element (script): {locator}")
    def js_click(self, locator: LocatorLike) -> Outcome:
        """Click through script, bypassing hit-testing."""
        def click(element: ElementHandle) -> None:
            element.evaluate(scripts.PROGRAMMATIC_CLICK)
            logger.info(f"Clicked (via script) element located by {describe_locator(locator)}")

        return self.perform(locator, click, ActionKind.PROGRAMMATIC_CLICK)

    def input_text(
        self,
        locator: LocatorLike,
        text: str,
        press_tab: bool = False,
        verify: bool = True,
    ) -> Outcome:
        """
        Clear an input and type text into it.

        Args:
            locator: Input selector or Locator
            text: Text to enter
            press_tab: Send TAB after typing (commits blur handlers)
            verify: Wait for the input's value to equal `text`; this also
                enables the script fallback for inputs that refuse typing
        """
        description = describe_locator(locator)
        shown = _masked(text, description)

        def fill(element: ElementHandle) -> None:
            element.fill("", timeout=self.action_timeout_ms)
            element.fill(text, timeout=self.action_timeout_ms)
            if press_tab:
                element.press("Tab", timeout=self.action_timeout_ms)
            logger.info(f"Input text '{shown}' into element located by {description}")

        options = RetryOptions.none()
        if verify:
            options = (
                RetryOptions.builder()
                .expected_value(text)
                .sensitive(_is_secret(description))
                .build()
            )
        with allure.step(f"Input text '{shown}' into {description}"):
            return self.perform(locator, fill, ActionKind.INPUT, options)

    @allure.step("Press ENTER in: {locator}")
    def press_enter(self, locator: LocatorLike) -> Outcome:
        def press(element: ElementHandle) -> None:
            element.press("Enter", timeout=self.action_timeout_ms)
            logger.info(f"Sent ENTER key to element located by {describe_locator(locator)}")

        return self.perform(locator, press, ActionKind.INPUT)

    @allure.step("Select option '{value}' in: {locator}")
    def select_option(
        self,
        locator: LocatorLike,
        value: Union[str, int],
        by: str = "label",
    ) -> Outcome:
        """
        Select an option from a native <select>.

        Args:
            locator: Select element selector
            value: Option label, value or index
            by: Selection method - "label", "value", or "index"
        """
        if by not in ("label", "value", "index"):
            raise ValueError(f"Unknown selection method: {by}")

        def select(element: ElementHandle) -> None:
            element.select_option(**{by: value}, timeout=self.action_timeout_ms)
            logger.info(f"Selected '{value}' from dropdown located by {describe_locator(locator)}")

        # INPUT without an expected value: no script fallback, a click would not select
        return self.perform(locator, select, ActionKind.INPUT)

    @allure.step("Upload file '{file_path}' to: {locator}")
    def upload_file(self, locator: LocatorLike, file_path: str) -> Outcome:
        """
        Set the file of a file input.

        File inputs are frequently hidden behind styled buttons, so only
        presence is required.
        """
        if file_path is None or not file_path.strip():
            raise ValueError("File path must not be null or empty")

        def upload(element: ElementHandle) -> None:
            element.set_input_files(file_path, timeout=self.action_timeout_ms)
            logger.info(f"Uploaded file '{file_path}' using input located by {describe_locator(locator)}")

        return self.perform(locator, upload, ActionKind.READ)

    @allure.step("Click random element of: {locator}")
    def click_random_element(self, locator: LocatorLike) -> Outcome:
        """Click one visible element chosen at random among the matches."""
        description = describe_locator(locator)

        def click_random(_: ElementHandle) -> None:
            candidates = [el for el in resolve_elements(self.page, locator) if el.is_visible()]
            if not candidates:
                raise ElementNotInteractableError(f"No visible elements for locator: {description}")
            target = random.choice(candidates)
            logger.info(f"Clicking random element ({len(candidates)} candidates) from locator: {description}")
            target.evaluate(scripts.SCROLL_INTO_VIEW)
            try:
                target.click(timeout=self.action_timeout_ms)
            except PlaywrightError as e:
                if classify_failure(e) is not FailureKind.NOT_INTERACTABLE:
                    raise
                logger.warning("Click intercepted, using script click as fallback")
                target.evaluate(scripts.PROGRAMMATIC_CLICK)

        return self.perform(locator, click_random, ActionKind.READ)

    # =========================================================================
    # Reads and waits
    # =========================================================================

    @allure.step("Get text: {locator}")
    def get_text(self, locator: LocatorLike) -> str:
        """Rendered text of the element once present."""
        text = self._read(locator, read_text, ActionKind.READ)
        logger.debug(f"Got text from {describe_locator(locator)}: '{text}'")
        return text

    @allure.step("Get attribute '{attribute}' from: {locator}")
    def get_element_attribute(self, locator: LocatorLike, attribute: str = "value") -> str:
        """
        Read an attribute, returning an empty string if the element never
        shows up.
        """
        attribute = attribute if attribute and attribute.strip() else "value"
        try:
            value = self._read(
                locator, lambda el: read_attribute(el, attribute) or EMPTY_STRING, ActionKind.READ
            )
        except ElementActionFailedError as e:
            logger.warning(
                f"Failed to retrieve attribute '{attribute}' from element "
                f"{describe_locator(locator)}: {e}"
            )
            return EMPTY_STRING
        logger.info(f"Retrieved attribute '{attribute}' = '{value}' from element {describe_locator(locator)}")
        return value

    @allure.step("Wait for text '{expected}' in: {locator}")
    def wait_for_text(self, locator: LocatorLike, expected: str) -> str:
        """Wait until the element text matches `expected` (match prefixes allowed)."""
        return self._read(locator, read_text, ActionKind.TEXT_MATCH, RetryOptions.by_expected_text(expected))

    @allure.step("Wait for attribute '{attribute}' to match '{expected}' in: {locator}")
    def wait_for_attribute(self, locator: LocatorLike, attribute: str, expected: str) -> str:
        return self._read(
            locator,
            lambda el: read_attribute(el, attribute) or EMPTY_STRING,
            ActionKind.ATTRIBUTE_MATCH,
            RetryOptions.by_attribute_match(expected, attribute),
        )

    @allure.step("Wait for text to be populated: {locator}")
    def wait_for_text_populated(self, locator: LocatorLike) -> str:
        text = self._read(locator, read_text, ActionKind.TEXT_NON_EMPTY)
        logger.info(f"Element located by {describe_locator(locator)} is now populated")
        return text

    @allure.step("Wait for attribute '{attribute}' to be populated: {locator}")
    def wait_for_attribute_populated(self, locator: LocatorLike, attribute: str) -> str:
        return self._read(
            locator,
            lambda el: read_attribute(el, attribute) or EMPTY_STRING,
            ActionKind.ATTRIBUTE_NON_EMPTY,
            RetryOptions.by_attribute(attribute),
        )

    @allure.step("Wait for overlay to disappear: {overlay_locator}")
    def wait_for_overlay_to_disappear(
        self,
        overlay_locator: LocatorLike,
        appear_timeout: float = OVERLAY_APPEAR_TIMEOUT,
    ) -> None:
        """
        Wait for a loading overlay to go away.

        Returns straight away if the overlay does not show up within
        `appear_timeout`.

        Raises:
            ConditionTimeoutError: The overlay is still visible after the
                explicit wait
        """
        description = describe_locator(overlay_locator)
        try:
            self.engine.poller(appear_timeout).until(
                self.page, lambda page: find_first(page, overlay_locator), f"overlay {description}"
            )
        except ConditionTimeoutError:
            logger.debug("Overlay not present, proceeding without wait")
            return

        logger.debug("Overlay appeared, now waiting for it to disappear...")

        def overlay_gone(page: Page) -> bool:
            element = find_first(page, overlay_locator)
            return element is None or not element.is_visible()

        try:
            self.engine.poller().until(self.page, overlay_gone, f"overlay {description} hidden")
        except ConditionTimeoutError:
            logger.error(
                f"Overlay {description} did not disappear within {self.engine.explicit_wait} seconds"
            )
            raise
        logger.info(f"Overlay located by {description} has disappeared")

    @allure.step("Wait for {new_locator} to replace {old_locator}")
    def wait_for_element_replacement(self, old_locator: LocatorLike, new_locator: LocatorLike) -> Outcome:
        """Wait for the old element to detach and the new one to be visible."""
        old_element = find_first(self.page, old_locator)
        if old_element is None:
            logger.debug(f"Old element {describe_locator(old_locator)} not present, skipping detach check")

        def replaced(element: ElementHandle) -> None:
            poller = self.engine.poller()
            if old_element is not None:
                poller.until(
                    self.page,
                    lambda page: not self._is_connected(old_element),
                    f"{describe_locator(old_locator)} detached",
                )
                logger.info(f"Old element {describe_locator(old_locator)} became stale")
            poller.until(self.page, lambda page: element.is_visible(), f"{describe_locator(new_locator)} visible")
            logger.info(f"New element {describe_locator(new_locator)} is visible after replacement")

        return self.perform(new_locator, replaced, ActionKind.READ)

    @staticmethod
    def _is_connected(element: ElementHandle) -> bool:
        try:
            return bool(element.evaluate(scripts.IS_CONNECTED))
        except PlaywrightError as e:
            if is_stale(e):
                return False
            raise

    # =========================================================================
    # Page
    # =========================================================================

    def wait_for_page_to_load(self, page_name: str) -> None:
        """
        Wait for the document to be ready, then for jQuery requests (if any)
        to finish.

        Raises:
            ConditionTimeoutError: Document not ready within page_load_timeout
        """
        with allure.step(f"Wait for page to load: {page_name}"):
            logger.debug(f"Waiting for page to load: {page_name}")
            try:
                self.engine.poller(self.page_load_timeout).until(
                    self.page,
                    lambda page: page.evaluate(scripts.DOCUMENT_READY_STATE) == "complete",
                    f"{page_name} ready state",
                )
            except ConditionTimeoutError:
                logger.error(f"Page '{page_name}' failed to load within {self.page_load_timeout} seconds")
                raise

            try:
                self.engine.poller(JQUERY_IDLE_TIMEOUT).until(
                    self.page,
                    lambda page: int(page.evaluate(scripts.JQUERY_ACTIVE_REQUESTS) or 0) == 0,
                    "jQuery idle",
                )
            except ConditionTimeoutError as e:
                logger.debug(f"jQuery still active, continuing: {e}")

            logger.info(f"Page loaded successfully: {page_name}")

    def take_screenshot(self, name: str, full_page: bool = False) -> Optional[bytes]:
        """Capture the page and attach it to the report."""
        with allure.step(f"Take screenshot: {name}"):
            return attach_page_screenshot(self.page, name=name, full_page=full_page)


class ScrollActions:
    """Utility class for scroll-related operations."""

    def __init__(self, page: Page, pause: float = 0.5, sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            page: Playwright page
            pause: Pause after each downward scroll step, in seconds
            sleep: Sleep function (injectable for tests)
        """
        self.page = page
        self.pause = pause
        self._sleep = sleep

    def _scroll_height(self) -> int:
        return int(self.page.evaluate(scripts.SCROLL_HEIGHT) or 0)

    def _viewport_height(self) -> int:
        return int(self.page.evaluate(scripts.VIEWPORT_HEIGHT) or 0)

    def _scroll_to(self, y: int) -> None:
        self.page.evaluate(scripts.SCROLL_TO_Y, y)

    @allure.step("Scroll through page to trigger lazy loading")
    def scroll_through_page_to_trigger_lazy_loading(self) -> None:
        """
        Scroll down half a viewport at a time until the document stops
        growing, touch the bottom, then scroll back to the top.
        """
        logger.debug("Starting to scroll through the page to trigger lazy loading")

        last_height = self._scroll_height()
        viewport_height = self._viewport_height()
        step = max(viewport_height // 2, 1)
        current = 0

        while True:
            current += step
            self._scroll_to(current)
            self._sleep(self.pause)

            new_height = self._scroll_height()
            if new_height == last_height:
                break
            last_height = new_height
            viewport_height = self._viewport_height()
            step = max(viewport_height // 2, 1)

        self._scroll_to(self._scroll_height())
        self._sleep(self.pause)
        logger.debug("Scrolled to the bottom of the page")

        position = last_height
        while position > 0:
            position = max(position - step, 0)
            self._scroll_to(position)
            self._sleep(self.pause / 2)

        logger.debug("Completed lazy loading scroll sequence")

    @allure.step("Scroll to top")
    def scroll_to_top(self) -> None:
        """Scroll to top of page."""
        self._scroll_to(0)

    @allure.step("Scroll to bottom")
    def scroll_to_bottom(self) -> None:
        """Scroll to bottom of page."""
        self._scroll_to(self._scroll_height())
