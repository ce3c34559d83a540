"""Virtual machine teardown orchestrator.

Deletes a virtual machine and then the resources it owns, in dependency order:

    virtual machine
      -> network interfaces (public IPs collected first, deleted after their NIC)
      -> VHD container and storage account (kept if it holds custom images)
      -> resource group, only when nothing tracked is left in it

Delete calls tolerate resources that are already gone. Nothing is retried
here; the first failing step aborts the teardown.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Union

from azteardown.azure.api import OperationHandle
from azteardown.exceptions import DependentDeletionError, FatalStepError
from azteardown.models.deletion_record import DeletionOutcome, DeletionRecord, ResourceKind
from azteardown.models.resource_id import ResourceId
from azteardown.models.resources import VirtualMachine
from azteardown.models.teardown_operation import OperationStatus, TeardownOperation
from azteardown.teardown.context import TeardownContext
from azteardown.teardown.naming import storage_account_name

logger = logging.getLogger(__name__)


class TeardownOrchestrator:
    """Tears down a virtual machine and its dependent resources.

    Holds no state between calls; concurrent teardowns of different
    resources are independent.

    Attributes:
        context: Collaborators (API, waiter, resolvers, audit storage)
    """

    def __init__(self, context: TeardownContext) -> None:
        self.context = context

    def teardown(self, resource_id: Union[ResourceId, str]) -> bool:
        """Tear down a virtual machine.

        Args:
            resource_id: ResourceId or slash-encoded id ("eastus/vm1")

        Returns:
            True if the VM did not exist or was deleted, False if its deletion failed

        Raises:
            DeletionTimeoutError: If a deletion did not complete in time
            DependentDeletionError: If a dependent resource failed to delete
            FatalStepError: If storage keys or blob cleanup failed
            TransientApiError: If a control-plane call failed
        """
        return bool(self.run(resource_id).root_deleted)

    def run(self, resource_id: Union[ResourceId, str]) -> TeardownOperation:
        """Tear down a virtual machine and return the full operation record.

        Same semantics as teardown(). The operation is written to audit storage
        whether the teardown completes or fails.
        """
        if isinstance(resource_id, str):
            resource_id = ResourceId.from_slash_encoded(resource_id)

        scope = self.context.scope_resolver.resolve(resource_id.region)
        operation = TeardownOperation(
            operation_id=f"op_{uuid.uuid4()}",
            resource_id=resource_id.slash_encode(),
            scope=scope,
            started_at=datetime.utcnow(),
        )

        virtual_machine = self.context.api.virtual_machines.get(scope, resource_id.id)
        if virtual_machine is None:
            logger.debug(f">> {resource_id.slash_encode()} not found, nothing to destroy")
            operation.root_deleted = True
            operation.finish(OperationStatus.NOOP)
            self._audit(operation)
            return operation

        try:
            logger.debug(f">> destroying {resource_id.slash_encode()} ...")
            operation.root_deleted = self._delete_virtual_machine(scope, virtual_machine, operation)

            # The virtual network is shared by the resource group and goes away with it
            for nic_name in virtual_machine.network_interface_names:
                self._delete_network_interface(scope, nic_name, operation)

            self._delete_storage(scope, virtual_machine, operation)

            operation.scope_deleted = self.delete_scope_if_empty(scope, operation)
        except Exception as e:
            operation.finish(OperationStatus.FAILED, error_message=str(e) or type(e).__name__)
            self._audit(operation)
            raise

        operation.finish(OperationStatus.COMPLETED)
        self._audit(operation)
        return operation

    def delete_scope_if_empty(self, scope: str, operation: Optional[TeardownOperation] = None) -> bool:
        """Delete the resource group if it holds no tracked resources.

        Not transactional: a resource created between the check and the delete
        is lost with the group.

        Args:
            scope: Resource group name
            operation: Operation to record the deletion in (optional)

        Returns:
            True if the group was deleted (or already gone), False if it is not empty
        """
        api = self.context.api
        empty = (
            not api.virtual_machines.list(scope)
            and not api.storage_accounts.list(scope)
            and not api.network_interfaces.list(scope)
            and not api.public_ip_addresses.list(scope)
        )
        if not empty:
            logger.debug(f">> resource group {scope} is not empty, keeping it")
            return False

        logger.debug(f">> the resource group {scope} is empty. Deleting...")
        handle = api.resource_groups.delete(scope)
        self._await_dependent(ResourceKind.RESOURCE_GROUP, scope, scope, handle, operation)
        return True

    def _delete_virtual_machine(
        self, scope: str, virtual_machine: VirtualMachine, operation: TeardownOperation
    ) -> bool:
        name = virtual_machine.name
        kind = ResourceKind.VIRTUAL_MACHINE
        handle = self.context.api.virtual_machines.delete(scope, name)
        if handle is None:
            self._record(operation, kind, name, scope, DeletionOutcome.ALREADY_ABSENT)
            return True

        if not self.context.wait_for_root:
            self._record(operation, kind, name, scope, DeletionOutcome.DELETION_PENDING)
            return True

        deleted = self.context.waiter.wait(handle)
        if deleted:
            self._record(operation, kind, name, scope, DeletionOutcome.DELETED)
        else:
            logger.warning(f"Deletion of virtual machine {name} failed")
            self._record(
                operation,
                kind,
                name,
                scope,
                DeletionOutcome.DELETION_PENDING,
                error_message="Control plane reported a failed deletion",
            )
        return deleted

    def _delete_network_interface(self, scope: str, nic_name: str, operation: TeardownOperation) -> None:
        api = self.context.api
        nic = api.network_interfaces.get(scope, nic_name)
        if nic is None:
            self._record(operation, ResourceKind.NETWORK_INTERFACE, nic_name, scope, DeletionOutcome.ALREADY_ABSENT)
            return

        # The IP references are only reachable through the NIC, so collect them before deleting it
        public_ips = nic.public_ip_names

        logger.debug(f">> destroying nic {nic_name}...")
        handle = api.network_interfaces.delete(scope, nic_name)
        self._await_dependent(ResourceKind.NETWORK_INTERFACE, nic_name, scope, handle, operation)

        for public_ip in public_ips:
            logger.debug(f">> deleting public ip {public_ip}...")
            handle = api.public_ip_addresses.delete(scope, public_ip)
            outcome = DeletionOutcome.ALREADY_ABSENT if handle is None else DeletionOutcome.DELETION_PENDING
            self._record(operation, ResourceKind.PUBLIC_IP_ADDRESS, public_ip, scope, outcome)

    def _delete_storage(self, scope: str, virtual_machine: VirtualMachine, operation: TeardownOperation) -> None:
        account = storage_account_name(virtual_machine.storage_profile)
        if account is None:
            logger.debug(f">> {virtual_machine.name} uses managed disks, no storage account to clean up")
            return

        api = self.context.api
        if api.storage_accounts.get(scope, account) is None:
            self._record(operation, ResourceKind.STORAGE_ACCOUNT, account, scope, DeletionOutcome.ALREADY_ABSENT)
            return

        try:
            keys = api.storage_accounts.get_keys(scope, account)
            blob_helper = self.context.blob_helper_factory(account, keys.key1)
        except Exception as e:
            raise FatalStepError(f"Could not access storage account {account}: {e}") from e

        logger.debug(">> deleting virtual machine disk storage...")
        with blob_helper:
            try:
                container_deleted = blob_helper.delete_container_if_exists(self.context.vhd_container)
                custom_images = blob_helper.custom_image_exists()
            except Exception as e:
                raise FatalStepError(f"Blob cleanup failed for storage account {account}: {e}") from e

            self._record(
                operation,
                ResourceKind.STORAGE_CONTAINER,
                f"{account}/{self.context.vhd_container}",
                scope,
                DeletionOutcome.DELETED if container_deleted else DeletionOutcome.ALREADY_ABSENT,
            )

            if custom_images:
                logger.info(f">> the storage account {account} contains custom images. Will not delete it!")
                return

            logger.debug(f">> deleting storage account {account}...")
            handle = api.storage_accounts.delete(scope, account)
            outcome = DeletionOutcome.ALREADY_ABSENT if handle is None else DeletionOutcome.DELETION_PENDING
            self._record(operation, ResourceKind.STORAGE_ACCOUNT, account, scope, outcome)

    def _await_dependent(
        self,
        kind: ResourceKind,
        name: str,
        scope: str,
        handle: Optional[OperationHandle],
        operation: Optional[TeardownOperation],
    ) -> None:
        if handle is None:
            self._record(operation, kind, name, scope, DeletionOutcome.ALREADY_ABSENT)
            return

        if not self.context.waiter.wait(handle):
            self._record(
                operation,
                kind,
                name,
                scope,
                DeletionOutcome.DELETION_PENDING,
                error_message="Control plane reported a failed deletion",
            )
            raise DependentDeletionError(kind.value, name)

        self._record(operation, kind, name, scope, DeletionOutcome.DELETED)

    def _record(
        self,
        operation: Optional[TeardownOperation],
        kind: ResourceKind,
        name: str,
        scope: str,
        outcome: DeletionOutcome,
        error_message: Optional[str] = None,
    ) -> None:
        if operation is None:
            return
        operation.add_record(
            DeletionRecord(
                kind=kind,
                name=name,
                scope=scope,
                outcome=outcome,
                timestamp=datetime.utcnow(),
                succeeded=error_message is None,
                error_message=error_message,
            )
        )

    def _audit(self, operation: TeardownOperation) -> None:
        if self.context.audit_storage is None:
            return
        path = self.context.audit_storage.log_operation(operation)
        logger.debug(f"Wrote audit log {path}")
