"""Blocking wait for submitted deletions."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from azteardown.azure.api import OperationHandle
from azteardown.exceptions import DeletionTimeoutError, TeardownCancelledError

logger = logging.getLogger(__name__)


class DeletionWaiter:
    """Polls an OperationHandle until it completes or the timeout elapses.

    Sleeps between polls on a threading.Event, so setting the cancel event
    wakes the waiter immediately.

    Attributes:
        timeout: Default timeout in seconds
        poll_interval: Seconds between polls
        cancel_event: Event that cancels any wait in progress (optional)
    """

    def __init__(
        self,
        timeout: float = 600.0,
        poll_interval: float = 5.0,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize waiter.

        Args:
            timeout: Default timeout in seconds (default: 600)
            poll_interval: Seconds between polls (default: 5)
            cancel_event: Event used for cooperative cancellation (optional)
            clock: Monotonic clock (default: time.monotonic)
        """
        if timeout <= 0:
            raise ValueError("Timeout must be positive")
        if poll_interval <= 0:
            raise ValueError("Poll interval must be positive")

        self.timeout = timeout
        self.poll_interval = poll_interval
        self.cancel_event = cancel_event or threading.Event()
        self._clock = clock

    def wait(self, handle: OperationHandle, timeout: Optional[float] = None) -> bool:
        """Block until the deletion completes.

        Args:
            handle: Handle returned by a delete call
            timeout: Override of the default timeout (optional)

        Returns:
            True if the resource was deleted, False if the deletion failed

        Raises:
            DeletionTimeoutError: If the deletion is still pending after the timeout
            TeardownCancelledError: If the cancel event was set
        """
        limit = self.timeout if timeout is None else timeout
        deadline = self._clock() + limit

        while True:
            if self.cancel_event.is_set():
                raise TeardownCancelledError(f"Cancelled while waiting for {handle.description}")

            result = handle.poll()
            if result is not None:
                logger.debug(f"{handle.description} deletion finished: {'deleted' if result else 'failed'}")
                return result

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise DeletionTimeoutError(handle.description, limit)

            self.cancel_event.wait(min(self.poll_interval, remaining))

    def cancel(self) -> None:
        self.cancel_event.set()
