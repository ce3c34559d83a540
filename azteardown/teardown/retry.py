"""Bounded retry policy."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from azteardown.exceptions import ResourceNotFoundError, RetryExhaustedError, TransientApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retry strategy with a fixed attempt budget and exponential backoff.

    A ResourceNotFoundError stops retrying immediately and yields None; errors
    listed in retry_on are retried; anything else propagates.

    Attributes:
        max_attempts: Maximum number of attempts (including the first)
        delay: Delay before the first retry, in seconds
        backoff: Multiplier applied to the delay after each retry (1.0 = fixed delay)
        retry_on: Exception types that trigger a retry
    """

    def __init__(
        self,
        max_attempts: int = 5,
        delay: float = 1.0,
        backoff: float = 1.0,
        retry_on: tuple[type[BaseException], ...] = (TransientApiError,),
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize retry policy.

        Args:
            max_attempts: Maximum number of attempts (default: 5)
            delay: Initial delay between attempts in seconds (default: 1.0)
            backoff: Delay multiplier (default: 1.0, fixed delay)
            retry_on: Retryable exception types (default: TransientApiError)
            sleep: Sleep function (default: time.sleep)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay < 0:
            raise ValueError("delay cannot be negative")
        if backoff < 1:
            raise ValueError("backoff must be >= 1")

        self.max_attempts = max_attempts
        self.delay = delay
        self.backoff = backoff
        self.retry_on = retry_on
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after the given (1-based) failed attempt."""
        return self.delay * (self.backoff ** (attempt - 1))

    def run(self, fn: Callable[[], T], description: str = "operation") -> Optional[T]:
        """Call fn until it succeeds or the attempt budget is spent.

        Args:
            fn: Zero-argument callable
            description: Used in log and error messages

        Returns:
            Result of fn, or None if it raised ResourceNotFoundError

        Raises:
            RetryExhaustedError: If every attempt raised a retryable error
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn()
            except ResourceNotFoundError:
                logger.debug(f"{description}: resource not found, not retrying")
                return None
            except self.retry_on as e:
                if attempt == self.max_attempts:
                    raise RetryExhaustedError(
                        f"{description} failed after {self.max_attempts} attempts: {e}",
                        attempts=attempt,
                    ) from e

                wait_time = self.delay_for(attempt)
                logger.warning(
                    f"{description} failed (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {wait_time:g}s: {e}"
                )
                self._sleep(wait_time)

        # Unreachable: the loop either returns or raises on the last attempt
        raise RetryExhaustedError(f"{description} failed", attempts=self.max_attempts)
