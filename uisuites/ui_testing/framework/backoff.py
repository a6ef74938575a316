# ================================================================================
# Backoff Policy
# ================================================================================
#
# Computes the wait before the next retry attempt.
#
#   fixed        delay = base_delay
#   exponential  delay = base_delay * 2 ** (attempt - 1)
#   jitter       delay += uniform(0, 20%) of delay
#
# Jitter keeps many parallel sessions from retrying in lock-step.
# No wait is issued after the last attempt.
#
# ================================================================================

import random
from dataclasses import dataclass, field
from typing import Callable, Optional

from .retry_options import RetryOptions


DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.5
JITTER_RATIO = 0.2


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Delay schedule and attempt ceiling for one retry_action call.

    Attributes:
        base_delay: Delay in seconds before the second attempt
        max_attempts: Total number of attempts allowed
        exponential: Double the delay on each attempt
        jitter: Add up to JITTER_RATIO of extra random delay
        random_fn: Source of uniform [0, 1) values for jitter
    """
    base_delay: float = DEFAULT_BASE_DELAY
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    exponential: bool = True
    jitter: bool = True
    random_fn: Callable[[], float] = field(default=random.random, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    @classmethod
    def from_options(
        cls,
        options: RetryOptions,
        default_base_delay: float = DEFAULT_BASE_DELAY,
        default_max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        random_fn: Callable[[], float] = random.random,
        default_exponential: bool = True,
        default_jitter: bool = True,
    ) -> "BackoffPolicy":
        """Build a policy from per-call overrides and configured defaults."""
        return cls(
            base_delay=options.base_delay if options.base_delay is not None else default_base_delay,
            max_attempts=options.max_attempts if options.max_attempts is not None else default_max_attempts,
            exponential=(
                options.use_exponential_backoff
                if options.use_exponential_backoff is not None
                else default_exponential
            ),
            jitter=options.use_jitter if options.use_jitter is not None else default_jitter,
            random_fn=random_fn,
        )

    def delay_for(self, attempt: int) -> float:
        """
        Delay to wait after a failed attempt.

        Args:
            attempt: 1-based number of the attempt that just failed

        Returns:
            Delay in seconds
        """
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")

        delay = self.base_delay
        if self.exponential:
            delay = self.base_delay * (2 ** (attempt - 1))

        if self.jitter:
            delay += delay * JITTER_RATIO * self.random_fn()

        return delay

    def has_next(self, attempt: int) -> bool:
        """Whether another attempt is allowed after `attempt`."""
        return attempt < self.max_attempts

    def next_delay(self, attempt: int) -> Optional[float]:
        """Delay before attempt + 1, or None when attempts are exhausted."""
        if not self.has_next(attempt):
            return None
        return self.delay_for(attempt)
