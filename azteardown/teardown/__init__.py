"""Virtual machine teardown module.

This module deletes an Azure virtual machine together with the network and
storage resources it owns, then removes the resource group once it is empty.

Classes:
    TeardownOrchestrator: Main orchestrator for teardown operations
    TeardownContext: Collaborators passed to the orchestrator
    DeletionWaiter: Poll-until-deleted with timeout and cancellation
    RetryPolicy: Bounded retry strategy
    MachineLocker: Scoped machine locks
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

from azteardown.teardown.audit import AuditStorage
from azteardown.teardown.context import TeardownContext
from azteardown.teardown.locking import MachineLocker
from azteardown.teardown.orchestrator import TeardownOrchestrator
from azteardown.teardown.retry import RetryPolicy
from azteardown.teardown.waiter import DeletionWaiter

__all__ = [
    "TeardownOrchestrator",
    "TeardownContext",
    "DeletionWaiter",
    "RetryPolicy",
    "MachineLocker",
    "AuditStorage",
]
