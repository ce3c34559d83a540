"""Deletion record model.

Individual resource deletion attempt with outcome and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DeletionOutcome(Enum):
    """Result classification of a delete call."""

    ALREADY_ABSENT = "already-absent"
    DELETED = "deleted"
    DELETION_PENDING = "deletion-pending"


class ResourceKind(Enum):
    """Resource kinds tracked by a teardown."""

    VIRTUAL_MACHINE = "virtual-machine"
    NETWORK_INTERFACE = "network-interface"
    PUBLIC_IP_ADDRESS = "public-ip-address"
    STORAGE_CONTAINER = "storage-container"
    STORAGE_ACCOUNT = "storage-account"
    RESOURCE_GROUP = "resource-group"


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Represents the deletion of a single resource during a teardown. Each record
    belongs to a TeardownOperation.

    Validation rules:
        - name and scope are non-empty
        - failed records (succeeded=False) require an error_message
        - ALREADY_ABSENT records cannot carry an error

    succeeded=False takes precedence over the outcome: the delete was accepted
    (DELETION_PENDING) but the control plane then reported it as failed, so
    the resource may still exist.

    Attributes:
        kind: Resource kind
        name: Resource name
        scope: Resource group the resource lives in
        outcome: Deletion outcome
        timestamp: When the delete call was issued (UTC)
        succeeded: False if the control plane reported a failed deletion (overrides outcome)
        error_message: Human-readable error if failed (optional)
    """

    kind: ResourceKind
    name: str
    scope: str
    outcome: DeletionOutcome
    timestamp: datetime
    succeeded: bool = True
    error_message: Optional[str] = None

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if not self.name:
            raise ValueError("Record requires a resource name")
        if not self.scope:
            raise ValueError("Record requires a scope")

        if not self.succeeded and not self.error_message:
            raise ValueError("Failed record requires error_message")

        if self.outcome == DeletionOutcome.ALREADY_ABSENT and self.error_message:
            raise ValueError("Already-absent record cannot have an error")

        return True

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "scope": self.scope,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp.isoformat() + "Z",
            "succeeded": self.succeeded,
            "error_message": self.error_message,
        }
