"""
================================================================================
Failure Taxonomy
================================================================================

Exceptions raised by the harness and the classifier that maps any exception
(harness or Playwright) onto a FailureKind:

    NOT_INTERACTABLE -> retried, programmatic fallback attempted first
    STALE            -> retried after a short fixed delay
    TIMED_OUT        -> retried with full backoff
    UNEXPECTED       -> fatal, never retried

Playwright reports actionability and detachment problems through message
text rather than dedicated exception types, so classification of its errors
is message based.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

if TYPE_CHECKING:
    from .retry_options import ActionKind


class FailureKind(Enum):
    """Why an attempt failed."""

    NOT_INTERACTABLE = "not_interactable"
    STALE = "stale"
    TIMED_OUT = "timed_out"
    UNEXPECTED = "unexpected"

    @property
    def retryable(self) -> bool:
        return self is not FailureKind.UNEXPECTED


class ElementInteractionError(Exception):
    """Base class for retryable element errors raised by the harness."""
    pass


class ElementNotInteractableError(ElementInteractionError):
    """Element resolved but cannot receive the interaction."""
    pass


class StaleElementError(ElementInteractionError):
    """A previously resolved element is no longer attached to the page."""
    pass


class ConditionTimeoutError(ElementInteractionError):
    """A polled condition did not hold within the wait budget."""

    def __init__(
        self,
        message: str,
        timeout: float = 0.0,
        last_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.timeout = timeout
        self.last_error = last_error


class ElementActionFailedError(Exception):
    """
    The single failure surfaced to callers of the retry engine.

    Attributes:
        action_kind: Kind of action that failed
        locator: Description of the target locator
        attempts: Attempts consumed before giving up
        failure_kind: Classification of the last error
        cause: Last underlying error
    """

    def __init__(
        self,
        action_kind: "ActionKind",
        locator: str,
        attempts: int,
        failure_kind: FailureKind,
        cause: Optional[BaseException] = None,
    ):
        if failure_kind is FailureKind.UNEXPECTED:
            message = (
                f"Unexpected error during {action_kind.name} on element: {locator} "
                f"(attempt {attempts})"
            )
        else:
            message = (
                f"Failed to perform {action_kind.name} on element: {locator} "
                f"after {attempts} attempts ({failure_kind.value})"
            )
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
        self.action_kind = action_kind
        self.locator = locator
        self.attempts = attempts
        self.failure_kind = failure_kind
        self.cause = cause


# Playwright message fragments (lower-cased)
STALE_MARKERS = (
    "not attached to the dom",
    "element is not attached",
    "element is detached",
    "node is detached",
    "stale element",
    "jshandle is disposed",
    "elementhandle is disposed",
)

NOT_INTERACTABLE_MARKERS = (
    "element is not visible",
    "element is not enabled",
    "element is disabled",
    "element is not editable",
    "element is not stable",
    "intercepts pointer events",
    "outside of the viewport",
    "not interactable",
)


def classify_failure(error: BaseException) -> FailureKind:
    """
    Map an exception onto the retry taxonomy.

    Args:
        error: Exception raised while polling, acting or validating

    Returns:
        FailureKind for the error
    """
    if isinstance(error, ElementNotInteractableError):
        return FailureKind.NOT_INTERACTABLE
    if isinstance(error, StaleElementError):
        return FailureKind.STALE
    if isinstance(error, ConditionTimeoutError):
        return FailureKind.TIMED_OUT

    if isinstance(error, PlaywrightError):
        message = str(error).lower()
        if any(marker in message for marker in STALE_MARKERS):
            return FailureKind.STALE
        if any(marker in message for marker in NOT_INTERACTABLE_MARKERS):
            return FailureKind.NOT_INTERACTABLE
        if isinstance(error, PlaywrightTimeoutError):
            return FailureKind.TIMED_OUT

    return FailureKind.UNEXPECTED


def is_stale(error: BaseException) -> bool:
    return classify_failure(error) is FailureKind.STALE


__all__ = [
    "FailureKind",
    "ElementInteractionError",
    "ElementNotInteractableError",
    "StaleElementError",
    "ConditionTimeoutError",
    "ElementActionFailedError",
    "classify_failure",
    "is_stale",
]
