"""
================================================================================
Fallback Strategy
================================================================================

Programmatic alternative used when the primary interaction is rejected as
"not interactable" (covered, off-screen, mid-animation).

The element is re-resolved, centred in the viewport and then driven through
script instead of simulated pointer/keyboard input:
    - click family: element.click() in page context
    - INPUT: value set through the native setter, followed by bubbling
      `input` and `change` events so listeners and validation update as
      they would for a real keystroke

Other action kinds have no programmatic equivalent; for them the fallback
reports "inapplicable" by returning False.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from loguru import logger
from playwright.sync_api import Page

from . import scripts
from .conditions import LocatorLike, describe_locator, find_first
from .errors import ElementNotInteractableError
from .retry_options import ActionKind, RetryOptions


class FallbackStrategy:
    """Script-level retry of click and input actions."""

    def applies_to(self, action_kind: ActionKind, options: RetryOptions) -> bool:
        if action_kind.is_click_family:
            return True
        if action_kind is ActionKind.INPUT:
            return options.expected_value is not None
        return False

    def execute(
        self,
        page: Page,
        locator: LocatorLike,
        action_kind: ActionKind,
        options: RetryOptions,
    ) -> bool:
        """
        Run the programmatic variant of the action.

        Returns:
            True if the fallback was performed, False if inapplicable

        Raises:
            ElementNotInteractableError: The locator no longer resolves
            playwright.sync_api.Error: The script itself failed
        """
        if not self.applies_to(action_kind, options):
            logger.debug(f"No fallback for {action_kind.name}")
            return False

        description = describe_locator(locator)
        element = find_first(page, locator)
        if element is None:
            raise ElementNotInteractableError(f"Fallback could not resolve element: {description}")

        element.evaluate(scripts.SCROLL_INTO_VIEW_CENTER)

        if action_kind is ActionKind.INPUT:
            element.evaluate(scripts.SET_VALUE_AND_NOTIFY, options.expected_value)
            logger.info(
                f"Script fallback set value '{options.shown_value}' on element {description}"
            )
        else:
            element.evaluate(scripts.PROGRAMMATIC_CLICK)
            logger.info(f"Script fallback clicked element {description}")

        return True


__all__ = ["FallbackStrategy"]
