# ================================================================================
# Condition Polling
# ================================================================================
#
# Blocking poll of a page predicate, bounded by the explicit wait.
#
# The predicate is evaluated at least once. Errors that only mean the element
# was replaced mid-check (stale) are treated as "not ready yet"; any other
# error propagates to the caller.
#
# Usage:
#   poller = ConditionPoller(timeout=20, interval=0.5)
#   element = poller.until(page, condition, description="#submit clickable")
#
# ================================================================================

import time
from typing import Callable, Optional, TypeVar

from loguru import logger
from playwright.sync_api import Page

from .errors import ConditionTimeoutError, is_stale


T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.5


class ConditionPoller:
    """Polls a predicate until it returns a truthy value or time runs out."""

    def __init__(
        self,
        timeout: float,
        interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            timeout: Wait budget in seconds
            interval: Delay between evaluations in seconds
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock function (injectable for tests)
        """
        self.timeout = timeout
        self.interval = interval
        self._sleep = sleep
        self._clock = clock

    def until(
        self,
        page: Page,
        condition: Callable[[Page], Optional[T]],
        description: str = "condition",
    ) -> T:
        """
        Evaluate `condition(page)` until it returns a truthy value.

        Returns:
            The first truthy value returned by the condition

        Raises:
            ConditionTimeoutError: If the wait budget elapses first
        """
        start = self._clock()
        polls = 0
        last_error: Optional[BaseException] = None

        while True:
            polls += 1
            try:
                value = condition(page)
            except Exception as e:
                if not is_stale(e):
                    raise
                last_error = e
                value = None

            if value:
                return value

            elapsed = self._clock() - start
            remaining = self.timeout - elapsed
            if remaining <= 0:
                message = (
                    f"Timed out after {elapsed:.1f}s ({polls} polls) waiting for: {description}"
                )
                if last_error is not None:
                    message += f". Last error: {last_error}"
                logger.debug(message)
                raise ConditionTimeoutError(message, timeout=self.timeout, last_error=last_error)

            self._sleep(min(self.interval, remaining))
