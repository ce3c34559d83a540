"""Teardown operation model.

Summary of one teardown call: the root resource, its scope, and every
dependent resource deletion that was issued.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from azteardown.models.deletion_record import DeletionRecord


class OperationStatus(Enum):
    """Teardown status with state transitions."""

    EXECUTING = "executing"
    NOOP = "noop"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TeardownOperation:
    """Teardown operation entity.

    State transitions:
        executing → noop (root resource was already absent)
        executing → completed (all steps ran; root_deleted reflects the root outcome)
        executing → failed (a step raised)

    Attributes:
        operation_id: Unique identifier for the operation
        resource_id: Slash-encoded id of the root resource
        scope: Resource group the root resource lives in
        started_at: When the teardown started (UTC)
        status: Current status
        root_deleted: Root deletion result (None until known)
        scope_deleted: Whether the resource group was removed
        records: Deletion records, in the order the delete calls were issued
        completed_at: When the teardown finished (optional)
        error_message: Error that aborted the teardown (optional)
    """

    operation_id: str
    resource_id: str
    scope: str
    started_at: datetime
    status: OperationStatus = OperationStatus.EXECUTING
    root_deleted: Optional[bool] = None
    scope_deleted: bool = False
    records: list[DeletionRecord] = field(default_factory=list)
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def add_record(self, record: DeletionRecord) -> None:
        self.records.append(record)

    def finish(self, status: OperationStatus, error_message: Optional[str] = None) -> None:
        """Mark the operation as finished.

        Args:
            status: Final status (noop, completed or failed)
            error_message: Error that aborted the teardown (failed only)
        """
        self.status = status
        self.error_message = error_message
        self.completed_at = datetime.utcnow()

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - noop operations have no records
            - failed operations require error_message
            - completed_at must not be before started_at

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == OperationStatus.NOOP and self.records:
            raise ValueError("No-op operation cannot have deletion records")

        if self.status == OperationStatus.FAILED and not self.error_message:
            raise ValueError("Failed operation requires error_message")

        if self.completed_at and self.completed_at < self.started_at:
            raise ValueError("Completion time before start time")

        return True
