"""Error taxonomy for teardown operations."""

from __future__ import annotations

from typing import Optional


class TeardownError(Exception):
    """Base class for all teardown errors."""


class ResourceNotFoundError(TeardownError):
    """Resource does not exist (or was already deleted out-of-band)."""


class TransientApiError(TeardownError):
    """Control-plane call failed.

    Raised by the Resource Control API. Not retried by the orchestrator.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeletionTimeoutError(TeardownError):
    """Deletion did not complete within the configured timeout."""

    def __init__(self, resource: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:g}s waiting for {resource} to be deleted")
        self.resource = resource
        self.timeout = timeout


class TeardownCancelledError(TeardownError):
    """Teardown was cancelled while waiting for a deletion."""


class FatalStepError(TeardownError):
    """Storage key retrieval or blob cleanup failed; teardown aborted."""


class DependentDeletionError(TeardownError):
    """A dependent resource reported a failed deletion."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"Deletion of {kind} {name} failed")
        self.kind = kind
        self.name = name


class LockError(TeardownError):
    """Machine lock could not be acquired (lock is held elsewhere)."""


class RetryExhaustedError(TeardownError):
    """All retry attempts failed."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
