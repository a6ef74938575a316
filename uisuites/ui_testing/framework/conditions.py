"""
================================================================================
Condition Evaluator
================================================================================

Builds the readiness predicates polled by the retry engine.

A condition is a plain callable `condition(page) -> ElementHandle | None`:
it resolves the locator afresh, inspects the first element and returns it
when the element is ready for the requested ActionKind, or None when it is
not ready yet. A missing element is "not ready", never an error.

Readiness per kind:
    CLICK               present, visible, enabled
    INPUT               present, scrolled into view, rendered visible
                        (non-zero box, visibility/display), visible, enabled
    PROGRAMMATIC_CLICK  present, visible
    READ                present
    TEXT_MATCH          present, text matches expected value
    ATTRIBUTE_MATCH     present, attribute matches expected value
    ATTRIBUTE_NON_EMPTY present, attribute not blank
    TEXT_NON_EMPTY      present, text not blank

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Union

from loguru import logger
from playwright.sync_api import ElementHandle, Locator, Page

from . import scripts
from .errors import is_stale
from .retry_options import ActionKind


LocatorLike = Union[str, Locator]
Condition = Callable[[Page], Optional[ElementHandle]]

REGEX_PREFIX = "regex:"
EQUALS_PREFIX = "equals:"
ICONTAINS_PREFIX = "icontains:"


# =============================================================================
# Locator helpers
# =============================================================================

def describe_locator(locator: LocatorLike) -> str:
    """Human-readable locator description for logs and errors."""
    return locator if isinstance(locator, str) else str(locator)


def resolve_elements(page: Page, locator: LocatorLike) -> List[ElementHandle]:
    """Resolve a locator to the elements currently on the page."""
    if isinstance(locator, str):
        return page.query_selector_all(locator)
    return locator.element_handles()


def find_first(page: Page, locator: LocatorLike) -> Optional[ElementHandle]:
    """First element matching the locator, or None."""
    elements = resolve_elements(page, locator)
    return elements[0] if elements else None


def read_attribute(element: ElementHandle, name: str) -> Optional[str]:
    """Read a live property (falling back to the HTML attribute)."""
    return element.evaluate(scripts.READ_ATTRIBUTE, name)


def read_text(element: ElementHandle) -> str:
    return element.inner_text() or ""


# =============================================================================
# Match modes
# =============================================================================

def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def matches_expected_text(actual: Optional[str], expected: Optional[str]) -> bool:
    """
    Match an actual text/attribute value against an expected value.

    Rules (first matching prefix wins):
        blank expected      -> actual is not blank
        "regex:<p>"         -> trimmed actual fully matches <p>
        "equals:<v>"        -> trimmed actual == trimmed <v>
        "icontains:<v>"     -> case-insensitive containment of trimmed <v>
        anything else       -> actual not blank and contains expected

    Args:
        actual: Value read from the page (None is treated as blank)
        expected: Expected value, optionally prefixed with a match mode

    Returns:
        True when the value matches
    """
    if _is_blank(expected):
        return not _is_blank(actual)

    actual = actual or ""

    if expected.startswith(REGEX_PREFIX):
        pattern = expected[len(REGEX_PREFIX):].strip()
        return re.fullmatch(pattern, actual.strip()) is not None

    if expected.startswith(EQUALS_PREFIX):
        return actual.strip() == expected[len(EQUALS_PREFIX):].strip()

    if expected.startswith(ICONTAINS_PREFIX):
        needle = expected[len(ICONTAINS_PREFIX):].strip().casefold()
        return needle in actual.casefold()

    return not _is_blank(actual) and expected in actual


# =============================================================================
# Evaluator
# =============================================================================

class ConditionEvaluator:
    """
    Maps an ActionKind to the predicate the retry engine polls.

    Usage:
        evaluator = ConditionEvaluator()
        condition = evaluator.condition_for(ActionKind.CLICK, "#submit")
        element = condition(page)   # ElementHandle or None
    """

    def __init__(self) -> None:
        self._builders: Dict[ActionKind, Callable[..., Condition]] = {
            ActionKind.CLICK: self._clickable,
            ActionKind.INPUT: self._input_ready,
            ActionKind.PROGRAMMATIC_CLICK: self._displayed,
            ActionKind.READ: self._present,
            ActionKind.TEXT_MATCH: self._text_matches,
            ActionKind.ATTRIBUTE_MATCH: self._attribute_matches,
            ActionKind.ATTRIBUTE_NON_EMPTY: self._attribute_not_blank,
            ActionKind.TEXT_NON_EMPTY: self._text_not_blank,
        }

    @property
    def supported_kinds(self) -> frozenset:
        return frozenset(self._builders)

    def condition_for(
        self,
        action_kind: ActionKind,
        locator: LocatorLike,
        expected_value: Optional[str] = None,
        attribute_name: Optional[str] = None,
    ) -> Condition:
        """
        Build the readiness predicate for an action.

        Raises:
            ValueError: Unknown action kind, or an attribute kind without
                an attribute name
        """
        builder = self._builders.get(action_kind)
        if builder is None:
            raise ValueError(f"No condition defined for action kind: {action_kind}")
        if action_kind.requires_attribute and not attribute_name:
            raise ValueError(f"{action_kind.name} requires an attribute_name")
        return builder(locator, expected_value, attribute_name)

    # -------------------------------------------------------------------------

    @staticmethod
    def _present(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            return find_first(page, locator)
        return condition

    @staticmethod
    def _displayed(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            return element if element is not None and element.is_visible() else None
        return condition

    @staticmethod
    def _clickable(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                return None
            if element.is_visible() and element.is_enabled():
                return element
            return None
        return condition

    @staticmethod
    def _input_ready(locator, expected_value, attribute_name) -> Condition:
        description = describe_locator(locator)

        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                logger.debug(f"Element not present yet: {description}")
                return None
            try:
                element.evaluate(scripts.SCROLL_INTO_VIEW)
                if not element.evaluate(scripts.IS_RENDERED_VISIBLE):
                    logger.debug(f"Element present but not rendered visible yet: {description}")
                    return None
            except Exception as e:
                if is_stale(e):
                    raise
                logger.warning(f"Visibility script failed for {description}: {e}")
            if not element.is_visible():
                logger.debug(f"Element present but not displayed yet: {description}")
                return None
            if not element.is_enabled():
                logger.debug(f"Element visible but not enabled yet: {description}")
                return None
            return element
        return condition

    @staticmethod
    def _text_matches(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                return None
            return element if matches_expected_text(read_text(element), expected_value) else None
        return condition

    @staticmethod
    def _attribute_matches(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                return None
            value = read_attribute(element, attribute_name)
            return element if matches_expected_text(value, expected_value) else None
        return condition

    @staticmethod
    def _attribute_not_blank(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                return None
            return None if _is_blank(read_attribute(element, attribute_name)) else element
        return condition

    @staticmethod
    def _text_not_blank(locator, expected_value, attribute_name) -> Condition:
        def condition(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                return None
            return None if _is_blank(read_text(element)) else element
        return condition


__all__ = [
    "Condition",
    "ConditionEvaluator",
    "LocatorLike",
    "describe_locator",
    "find_first",
    "matches_expected_text",
    "read_attribute",
    "read_text",
    "resolve_elements",
]
