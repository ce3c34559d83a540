"""Audit storage for teardown operations.

Stores and retrieves audit logs in YAML format for compliance and troubleshooting.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from azteardown.models.teardown_operation import TeardownOperation


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() + "Z" if value else None


class AuditStorage:
    """Audit log storage and retrieval.

    Stores teardown audit logs as YAML files organized by year/month.

    Storage structure:
        ~/.azteardown/audit-logs/
            2026/
                10/
                    teardown-op_123.yaml
                    teardown-op_456.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.azteardown/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".azteardown" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_operation(self, operation: TeardownOperation) -> Path:
        """Write a teardown operation and its deletion records.

        Overwrites an existing log with the same operation ID.

        Args:
            operation: Teardown operation to log

        Returns:
            Path of the written audit file
        """
        year_month_dir = self.storage_dir / str(operation.started_at.year) / f"{operation.started_at.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "vm_teardown",
                "created_at": _isoformat(datetime.utcnow()),
            },
            "operation": {
                "operation_id": operation.operation_id,
                "resource_id": operation.resource_id,
                "scope": operation.scope,
                "timestamp": _isoformat(operation.started_at),
                "status": operation.status.value,
                "root_deleted": operation.root_deleted,
                "scope_deleted": operation.scope_deleted,
                "completed_at": _isoformat(operation.completed_at),
                "duration_seconds": operation.duration_seconds,
                "error_message": operation.error_message,
            },
            "records": [record.to_dict() for record in operation.records],
        }

        audit_file = year_month_dir / f"teardown-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.dump(audit_data, f, default_flow_style=False, sort_keys=False)

        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve operation audit log by ID.

        Args:
            operation_id: Operation ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/teardown-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_operations(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[dict]:
        """Query operations within date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all

        Returns:
            List of operation audit logs matching criteria, oldest first
        """
        results = []

        for audit_file in self.storage_dir.glob("*/*/teardown-*.yaml"):
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            timestamp = datetime.fromisoformat(audit_data["operation"]["timestamp"].rstrip("Z"))

            if since and timestamp < since:
                continue
            if until and timestamp > until:
                continue

            results.append(audit_data)

        return sorted(results, key=lambda data: data["operation"]["timestamp"])
