"""
================================================================================
Retry Engine
================================================================================

Drives a single element action to completion against a UI that renders
asynchronously.

Each attempt runs:
    Polling     wait (up to explicit_wait) for the action's readiness condition
    Acting      call the caller's action with the resolved element
    Validating  INPUT with an expected value: wait for the attribute to equal it
    Post-check  optional caller predicate over the whole page

and a failed attempt is classified:
    NOT_INTERACTABLE  try the programmatic fallback once; success ends the call
                      without a backoff sleep, otherwise back off and retry
    STALE             short fixed delay, then retry
    TIMED_OUT         full backoff, then retry
    UNEXPECTED        abort immediately

One structured log event is emitted per attempt. Callers get either a
successful Outcome or exactly one ElementActionFailedError.

Usage:
    engine = RetryEngine(page, explicit_wait=10)
    engine.retry_action(
        "#username",
        lambda el: el.fill("testuser"),
        ActionKind.INPUT,
        RetryOptions.by_expected_text("testuser"),
    )

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from loguru import logger
from playwright.sync_api import ElementHandle, Page

from .backoff import DEFAULT_BASE_DELAY, DEFAULT_MAX_ATTEMPTS, BackoffPolicy
from .conditions import ConditionEvaluator, LocatorLike, describe_locator, find_first, read_attribute
from .errors import (
    ConditionTimeoutError,
    ElementActionFailedError,
    FailureKind,
    classify_failure,
)
from .fallback import FallbackStrategy
from .polling import DEFAULT_POLL_INTERVAL, ConditionPoller
from .retry_options import ActionKind, RetryOptions

if TYPE_CHECKING:
    from harness_tools.common.settings import HarnessSettings


ElementAction = Callable[[ElementHandle], Any]

DEFAULT_EXPLICIT_WAIT = 20.0
DEFAULT_STALE_RETRY_DELAY = 0.2


@dataclass(frozen=True)
class Outcome:
    """
    Terminal result of one retry_action call.

    Attributes:
        action_kind: Kind of action performed
        locator: Description of the target locator
        attempts: Attempts consumed (1..max_attempts)
        succeeded: True on success
        failure_kind: Classification of the last error (failures only)
        last_error: Last underlying error (failures only)
        used_fallback: Success came from the programmatic fallback
        backoff_delays: Delays slept between attempts, in order
    """
    action_kind: ActionKind
    locator: str
    attempts: int
    succeeded: bool
    failure_kind: Optional[FailureKind] = None
    last_error: Optional[BaseException] = None
    used_fallback: bool = False
    backoff_delays: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if self.succeeded == (self.failure_kind is not None):
            raise ValueError("Outcome must be exactly one of success or failure")
        if self.attempts < 1:
            raise ValueError("Outcome requires at least one attempt")

    @classmethod
    def success(
        cls,
        action_kind: ActionKind,
        locator: str,
        attempts: int,
        used_fallback: bool = False,
        backoff_delays: Tuple[float, ...] = (),
    ) -> "Outcome":
        return cls(
            action_kind=action_kind,
            locator=locator,
            attempts=attempts,
            succeeded=True,
            used_fallback=used_fallback,
            backoff_delays=backoff_delays,
        )

    @classmethod
    def failure(
        cls,
        action_kind: ActionKind,
        locator: str,
        attempts: int,
        failure_kind: FailureKind,
        last_error: Optional[BaseException],
        backoff_delays: Tuple[float, ...] = (),
    ) -> "Outcome":
        return cls(
            action_kind=action_kind,
            locator=locator,
            attempts=attempts,
            succeeded=False,
            failure_kind=failure_kind,
            last_error=last_error,
            backoff_delays=backoff_delays,
        )

    def raise_for_failure(self) -> "Outcome":
        """Return self on success, raise ElementActionFailedError otherwise."""
        if self.succeeded:
            return self
        raise ElementActionFailedError(
            action_kind=self.action_kind,
            locator=self.locator,
            attempts=self.attempts,
            failure_kind=self.failure_kind,
            cause=self.last_error,
        ) from self.last_error

    def to_dict(self) -> dict:
        return {
            "action_kind": self.action_kind.value,
            "locator": self.locator,
            "attempts": self.attempts,
            "succeeded": self.succeeded,
            "failure_kind": self.failure_kind.value if self.failure_kind else None,
            "last_error": repr(self.last_error) if self.last_error else None,
            "used_fallback": self.used_fallback,
            "backoff_delays": list(self.backoff_delays),
        }


class RetryEngine:
    """
    Retry/condition-polling engine bound to one page.

    One engine belongs to one scenario; it holds no state between calls
    besides its configuration.
    """

    def __init__(
        self,
        page: Page,
        explicit_wait: float = DEFAULT_EXPLICIT_WAIT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        stale_retry_delay: float = DEFAULT_STALE_RETRY_DELAY,
        use_exponential_backoff: bool = True,
        use_jitter: bool = True,
        evaluator: Optional[ConditionEvaluator] = None,
        fallback: Optional[FallbackStrategy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        random_fn: Callable[[], float] = random.random,
    ):
        """
        Initialize the engine.

        Args:
            page: Playwright page the locators resolve against
            explicit_wait: Per-attempt polling budget in seconds
            poll_interval: Delay between condition evaluations in seconds
            max_attempts: Default attempt ceiling
            base_delay: Default base backoff delay in seconds
            stale_retry_delay: Fixed delay after a stale-element failure
            use_exponential_backoff: Default for calls that do not choose
            use_jitter: Default for calls that do not choose
            evaluator: Condition factory
            fallback: Programmatic fallback strategy
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
            random_fn: Uniform [0, 1) source for jitter
        """
        self.page = page
        self.explicit_wait = explicit_wait
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.stale_retry_delay = stale_retry_delay
        self.use_exponential_backoff = use_exponential_backoff
        self.use_jitter = use_jitter
        self.evaluator = evaluator or ConditionEvaluator()
        self.fallback = fallback or FallbackStrategy()
        self._sleep = sleep
        self._clock = clock
        self._random_fn = random_fn

    @classmethod
    def from_settings(cls, page: Page, settings: "HarnessSettings", **overrides: Any) -> "RetryEngine":
        """Build an engine from loaded harness settings."""
        params = {
            "explicit_wait": settings.explicit_wait,
            "poll_interval": settings.poll_interval,
            "max_attempts": settings.max_attempts,
            "base_delay": settings.base_delay,
            "stale_retry_delay": settings.stale_retry_delay,
            "use_exponential_backoff": settings.use_exponential_backoff,
            "use_jitter": settings.use_jitter,
        }
        params.update(overrides)
        return cls(page, **params)

    def poller(self, timeout: Optional[float] = None) -> ConditionPoller:
        """Condition poller sharing this engine's interval, clock and sleep."""
        return ConditionPoller(
            timeout=self.explicit_wait if timeout is None else timeout,
            interval=self.poll_interval,
            sleep=self._sleep,
            clock=self._clock,
        )

    def sleep(self, seconds: float) -> None:
        self._sleep(seconds)

    # =========================================================================
    # Entry points
    # =========================================================================

    def retry_action(
        self,
        locator: LocatorLike,
        action: ElementAction,
        action_kind: ActionKind,
        options: Optional[RetryOptions] = None,
    ) -> Outcome:
        """
        Perform an action with retries, raising on final failure.

        Returns:
            Successful Outcome

        Raises:
            ElementActionFailedError: Attempts exhausted or unexpected error
            ValueError: Invalid action kind / option combination
        """
        return self.run(locator, action, action_kind, options).raise_for_failure()

    def run(
        self,
        locator: LocatorLike,
        action: ElementAction,
        action_kind: ActionKind,
        options: Optional[RetryOptions] = None,
    ) -> Outcome:
        """
        Perform an action with retries and return the terminal Outcome.

        Retryable failures never escape this method; the returned Outcome
        describes them instead.
        """
        options = options or RetryOptions.none()
        description = describe_locator(locator)
        condition = self.evaluator.condition_for(
            action_kind, locator, options.expected_value, options.attribute_name
        )
        policy = BackoffPolicy.from_options(
            options,
            default_base_delay=self.base_delay,
            default_max_attempts=self.max_attempts,
            random_fn=self._random_fn,
            default_exponential=self.use_exponential_backoff,
            default_jitter=self.use_jitter,
        )
        poller = self.poller()

        delays = []
        last_error: Optional[BaseException] = None
        last_kind = FailureKind.TIMED_OUT

        for attempt in range(1, policy.max_attempts + 1):
            try:
                element = poller.until(
                    self.page, condition, description=f"{action_kind.name} readiness of {description}"
                )
                action(element)
                self._validate(poller, locator, action_kind, options)
                self._post_validate(action_kind, description, options)
            except Exception as e:
                last_error = e
                last_kind = classify_failure(e)

                if last_kind is FailureKind.UNEXPECTED:
                    self._log_attempt(
                        action_kind, description, attempt, policy.max_attempts, "aborted", last_kind, e
                    )
                    return Outcome.failure(
                        action_kind, description, attempt, last_kind, e, tuple(delays)
                    )

                if last_kind is FailureKind.NOT_INTERACTABLE and self._try_fallback(
                    poller, locator, action_kind, description, options
                ):
                    self._log_attempt(
                        action_kind, description, attempt, policy.max_attempts,
                        "fallback_succeeded", last_kind, e,
                    )
                    return Outcome.success(
                        action_kind, description, attempt, used_fallback=True, backoff_delays=tuple(delays)
                    )

                if not policy.has_next(attempt):
                    self._log_attempt(
                        action_kind, description, attempt, policy.max_attempts, "exhausted", last_kind, e
                    )
                    continue

                self._log_attempt(
                    action_kind, description, attempt, policy.max_attempts, "retrying", last_kind, e
                )
                if last_kind is FailureKind.STALE:
                    delay = self.stale_retry_delay
                else:
                    delay = policy.delay_for(attempt)
                logger.debug(f"Retrying {action_kind.name} on {description} after {delay:.2f}s")
                delays.append(delay)
                self._sleep(delay)
            else:
                self._log_attempt(action_kind, description, attempt, policy.max_attempts, "succeeded")
                return Outcome.success(action_kind, description, attempt, backoff_delays=tuple(delays))

        logger.error(
            f"Failed to perform {action_kind.name} on element {description} "
            f"after {policy.max_attempts} attempts: {last_error}"
        )
        return Outcome.failure(
            action_kind, description, policy.max_attempts, last_kind, last_error, tuple(delays)
        )

    # =========================================================================
    # Attempt phases
    # =========================================================================

    def _validate(
        self,
        poller: ConditionPoller,
        locator: LocatorLike,
        action_kind: ActionKind,
        options: RetryOptions,
    ) -> None:
        """Wait for an INPUT's attribute to reflect the expected value."""
        if action_kind is not ActionKind.INPUT or options.expected_value is None:
            return

        attribute = options.attribute_name or "value"
        expected = options.expected_value
        shown = options.shown_value
        description = describe_locator(locator)

        def attribute_applied(page: Page) -> Optional[ElementHandle]:
            element = find_first(page, locator)
            if element is None:
                return None
            return element if read_attribute(element, attribute) == expected else None

        poller.until(
            self.page,
            attribute_applied,
            description=f"attribute '{attribute}' == '{shown}' on {description}",
        )
        logger.info(f"Attribute '{attribute}' matched value '{shown}' for element {description}")

    def _post_validate(self, action_kind: ActionKind, description: str, options: RetryOptions) -> None:
        if options.post_validation is None:
            return
        if not options.post_validation(self.page):
            raise ConditionTimeoutError(
                f"Post-validation failed after {action_kind.name} on element {description}"
            )

    def _try_fallback(
        self,
        poller: ConditionPoller,
        locator: LocatorLike,
        action_kind: ActionKind,
        description: str,
        options: RetryOptions,
    ) -> bool:
        """Run the programmatic fallback once; True if the action completed."""
        if not self.fallback.applies_to(action_kind, options):
            return False
        try:
            if not self.fallback.execute(self.page, locator, action_kind, options):
                return False
            self._validate(poller, locator, action_kind, options)
            self._post_validate(action_kind, description, options)
        except Exception as e:
            logger.error(f"Script fallback also failed for {description}: {e}")
            return False
        return True

    def _log_attempt(
        self,
        action_kind: ActionKind,
        description: str,
        attempt: int,
        max_attempts: int,
        outcome: str,
        failure_kind: Optional[FailureKind] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        event = logger.bind(
            event="retry_attempt",
            action_kind=action_kind.value,
            locator=description,
            attempt=attempt,
            max_attempts=max_attempts,
            outcome=outcome,
            failure_kind=failure_kind.value if failure_kind else None,
        )
        if outcome == "aborted":
            event.error(
                f"Unexpected {type(error).__name__} during {action_kind.name} on element "
                f"{description}, attempt {attempt}/{max_attempts}: {error}"
            )
        elif outcome in ("retrying", "exhausted"):
            event.warning(
                f"{type(error).__name__} on element {description}, attempt {attempt}/{max_attempts} "
                f"({outcome})"
            )
        else:
            event.info(f"{action_kind.name} action {outcome} on attempt {attempt} for element {description}")


__all__ = [
    "ElementAction",
    "Outcome",
    "RetryEngine",
]
