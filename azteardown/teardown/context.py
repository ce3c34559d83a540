"""Explicit collaborators of a teardown."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from azteardown.azure.api import ResourceControlApi
from azteardown.azure.blob import VHD_CONTAINER, BlobHelper
from azteardown.config import Config
from azteardown.teardown.audit import AuditStorage
from azteardown.teardown.naming import ScopeResolver
from azteardown.teardown.waiter import DeletionWaiter


@dataclass
class TeardownContext:
    """Everything the orchestrator needs, passed in at construction.

    Attributes:
        api: Resource Control API
        waiter: Deletion waiter (timeout and cancellation)
        scope_resolver: Region to resource group resolver
        blob_helper_factory: Builds a BlobHelper from (account name, account key)
        audit_storage: Audit log storage (optional, no audit when None)
        wait_for_root: Await the root resource deletion before cleaning dependents
        vhd_container: Container holding the VM disk blobs
    """

    api: ResourceControlApi
    waiter: DeletionWaiter = field(default_factory=DeletionWaiter)
    scope_resolver: ScopeResolver = field(default_factory=ScopeResolver)
    blob_helper_factory: Callable[[str, str], BlobHelper] = BlobHelper
    audit_storage: Optional[AuditStorage] = None
    wait_for_root: bool = True
    vhd_container: str = VHD_CONTAINER

    @classmethod
    def from_config(
        cls,
        config: Config,
        api: Optional[ResourceControlApi] = None,
        cancel_event: Optional[threading.Event] = None,
        audit: bool = True,
    ) -> TeardownContext:
        """Build a context from configuration.

        Args:
            config: Loaded configuration
            api: Resource Control API (default: Azure Resource Manager for config.subscription_id)
            cancel_event: Event for cooperative cancellation (optional)
            audit: Write audit logs (default: True)

        Returns:
            TeardownContext
        """
        if api is None:
            from azteardown.azure.arm import create_arm_api

            api = create_arm_api(config.subscription_id or "")

        return cls(
            api=api,
            waiter=DeletionWaiter(
                timeout=config.delete_timeout,
                poll_interval=config.poll_interval,
                cancel_event=cancel_event,
            ),
            scope_resolver=ScopeResolver(config.resource_group_prefix),
            audit_storage=AuditStorage(config.audit_dir) if audit else None,
            wait_for_root=config.wait_for_root,
        )
