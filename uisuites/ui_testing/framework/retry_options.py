"""
================================================================================
Retry Options
================================================================================

Action kinds and the immutable option record passed to the retry engine.

Presets cover the common call sites:
    - RetryOptions.none()
    - RetryOptions.by_expected_text("Welcome")
    - RetryOptions.by_attribute("href")
    - RetryOptions.by_attribute_match("regex:^/orders/\\d+$", "href")

Anything else goes through the builder:

    options = (
        RetryOptions.builder()
        .expected_value("testuser")
        .max_attempts(5)
        .base_delay(0.25)
        .jitter(False)
        .post_validation(lambda page: "/dashboard" in page.url)
        .build()
    )

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from playwright.sync_api import Page


PostValidation = Callable[[Page], bool]


class ActionKind(Enum):
    """Closed set of interactions the retry engine knows how to wait for."""

    CLICK = "click"
    INPUT = "input"
    PROGRAMMATIC_CLICK = "programmatic_click"
    READ = "read"
    TEXT_MATCH = "text_match"
    ATTRIBUTE_MATCH = "attribute_match"
    ATTRIBUTE_NON_EMPTY = "attribute_non_empty"
    TEXT_NON_EMPTY = "text_non_empty"

    @property
    def is_click_family(self) -> bool:
        return self in (ActionKind.CLICK, ActionKind.PROGRAMMATIC_CLICK)

    @property
    def requires_attribute(self) -> bool:
        return self in (ActionKind.ATTRIBUTE_MATCH, ActionKind.ATTRIBUTE_NON_EMPTY)


@dataclass(frozen=True)
class RetryOptions:
    """
    Per-call retry configuration.

    Attributes:
        expected_value: Expected text/attribute value. Supports the
            `regex:`, `equals:` and `icontains:` match prefixes.
        attribute_name: Attribute to read for attribute kinds and INPUT
            validation (INPUT defaults to "value").
        max_attempts: Overrides the configured attempt ceiling.
        base_delay: Overrides the configured base backoff delay (seconds).
        use_exponential_backoff: Double the delay on each attempt
            (None keeps the configured default, on unless disabled).
        use_jitter: Add up to 20% random delay on top (None keeps the
            configured default).
        post_validation: Predicate over the page, run after the element
            action succeeds. Returning False counts as a timeout.
        sensitive: The expected value is a secret; logs, error messages
            and report attachments show asterisks instead.
    """

    expected_value: Optional[str] = None
    attribute_name: Optional[str] = None
    max_attempts: Optional[int] = None
    base_delay: Optional[float] = None
    use_exponential_backoff: Optional[bool] = None
    use_jitter: Optional[bool] = None
    post_validation: Optional[PostValidation] = None
    sensitive: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay is not None and self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    @property
    def shown_value(self) -> Optional[str]:
        """Expected value as it may appear in logs and messages."""
        if self.sensitive and self.expected_value is not None:
            return "*" * len(self.expected_value)
        return self.expected_value

    @classmethod
    def none(cls) -> "RetryOptions":
        return cls()

    @classmethod
    def by_expected_text(cls, expected_value: str) -> "RetryOptions":
        return cls(expected_value=expected_value)

    @classmethod
    def by_attribute(cls, attribute_name: str) -> "RetryOptions":
        return cls(attribute_name=attribute_name)

    @classmethod
    def by_attribute_match(cls, expected_value: str, attribute_name: str) -> "RetryOptions":
        return cls(expected_value=expected_value, attribute_name=attribute_name)

    @classmethod
    def builder(cls) -> "RetryOptionsBuilder":
        return RetryOptionsBuilder()


class RetryOptionsBuilder:
    """Fluent builder producing a frozen RetryOptions."""

    def __init__(self) -> None:
        self._options = RetryOptions()

    def expected_value(self, value: Optional[str]) -> "RetryOptionsBuilder":
        self._options = replace(self._options, expected_value=value)
        return self

    def attribute_name(self, name: Optional[str]) -> "RetryOptionsBuilder":
        self._options = replace(self._options, attribute_name=name)
        return self

    def max_attempts(self, attempts: int) -> "RetryOptionsBuilder":
        self._options = replace(self._options, max_attempts=attempts)
        return self

    def base_delay(self, seconds: float) -> "RetryOptionsBuilder":
        self._options = replace(self._options, base_delay=seconds)
        return self

    def exponential_backoff(self, enabled: bool = True) -> "RetryOptionsBuilder":
        self._options = replace(self._options, use_exponential_backoff=enabled)
        return self

    def jitter(self, enabled: bool = True) -> "RetryOptionsBuilder":
        self._options = replace(self._options, use_jitter=enabled)
        return self

    def post_validation(self, predicate: Optional[PostValidation]) -> "RetryOptionsBuilder":
        self._options = replace(self._options, post_validation=predicate)
        return self

    def sensitive(self, enabled: bool = True) -> "RetryOptionsBuilder":
        self._options = replace(self._options, sensitive=enabled)
        return self

    def build(self) -> RetryOptions:
        return self._options


__all__ = [
    "ActionKind",
    "PostValidation",
    "RetryOptions",
    "RetryOptionsBuilder",
]
