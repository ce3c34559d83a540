"""Scoped machine locks.

Acquires a lock on a machine through a backend, retrying while the lock is
held elsewhere, and always releases it on the way out.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, Optional, TypeVar

from azteardown.exceptions import LockError
from azteardown.teardown.retry import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LockType(Enum):
    """Kind of lock taken on a machine."""

    WRITE = "write"
    SHARED = "shared"


class LockSession(ABC):
    """An acquired lock on a machine."""

    @property
    @abstractmethod
    def machine(self) -> Any:
        """Machine object that may be modified while the lock is held."""
        pass

    @abstractmethod
    def unlock(self) -> None:
        pass


class LockBackend(ABC):
    """Acquires machine locks on a specific virtualization API."""

    @abstractmethod
    def lock(self, machine_id: str, lock_type: LockType) -> LockSession:
        """Lock a machine.

        Raises:
            ResourceNotFoundError: If the machine does not exist
            LockError: If the lock is currently held elsewhere
        """
        pass


class MachineLocker:
    """Runs callbacks against a machine under a lock.

    Attributes:
        backend: Lock backend
        retry_policy: Policy for lock acquisition (retries LockError)
    """

    def __init__(self, backend: LockBackend, retry_policy: Optional[RetryPolicy] = None) -> None:
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=5, delay=1.0, retry_on=(LockError,))

    @contextmanager
    def locked(self, machine_id: str, lock_type: LockType = LockType.WRITE) -> Iterator[Optional[LockSession]]:
        """Hold a lock on a machine for the duration of the block.

        Yields:
            The lock session, or None if the machine does not exist

        Raises:
            RetryExhaustedError: If the lock could not be acquired
        """
        session = self.retry_policy.run(
            lambda: self.backend.lock(machine_id, lock_type),
            description=f"{lock_type.value} lock on {machine_id}",
        )
        if session is None:
            yield None
            return

        try:
            yield session
        finally:
            session.unlock()
            logger.debug(f"Released {lock_type.value} lock on {machine_id}")

    def apply_to_session(
        self,
        machine_id: str,
        fn: Callable[[LockSession], T],
        lock_type: LockType = LockType.WRITE,
    ) -> Optional[T]:
        """Apply fn to the lock session.

        Returns:
            Result of fn, or None if the machine does not exist
        """
        with self.locked(machine_id, lock_type) as session:
            if session is None:
                return None
            return fn(session)

    def apply(self, machine_id: str, fn: Callable[[Any], T], lock_type: LockType = LockType.WRITE) -> Optional[T]:
        """Apply fn to the locked machine."""
        return self.apply_to_session(machine_id, lambda session: fn(session.machine), lock_type)

    def write_lock_and_apply(self, machine_id: str, fn: Callable[[Any], T]) -> Optional[T]:
        return self.apply(machine_id, fn, LockType.WRITE)

    def read_lock_and_apply(self, machine_id: str, fn: Callable[[Any], T]) -> Optional[T]:
        return self.apply(machine_id, fn, LockType.SHARED)
