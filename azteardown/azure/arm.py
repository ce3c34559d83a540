"""Azure Resource Manager implementation of the Resource Control API.

Maps each resource kind to its management client and translates Azure SDK
errors: a missing resource becomes None, any other HTTP failure becomes a
TransientApiError.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.core.polling import LROPoller

from azteardown.azure.api import (
    CompletedOperation,
    NetworkInterfaceClient,
    OperationHandle,
    PublicIpAddressClient,
    ResourceControlApi,
    ResourceGroupClient,
    StorageAccountClient,
    VirtualMachineClient,
)
from azteardown.azure.client import create_management_client, get_credential
from azteardown.exceptions import TransientApiError
from azteardown.models.resources import NetworkInterface, StorageAccountKeys, StorageProfile, VirtualMachine

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _call(action: str, fn: Callable[..., R], *args: Any) -> Optional[R]:
    """Invoke an SDK call, mapping "not found" to None.

    Args:
        action: Description used in error messages (e.g., "delete nic1")
        fn: SDK method
        *args: Positional arguments for the SDK method

    Returns:
        SDK result, or None if the resource does not exist

    Raises:
        TransientApiError: On any other HTTP failure
    """
    try:
        return fn(*args)
    except ResourceNotFoundError:
        logger.debug(f"{action}: resource not found")
        return None
    except HttpResponseError as e:
        logger.error(f"Failed to {action}: {e.message}")
        raise TransientApiError(f"Failed to {action}: {e.message}", status_code=e.status_code) from e


class PollerHandle(OperationHandle):
    """OperationHandle backed by an Azure long-running-operation poller."""

    def __init__(self, poller: LROPoller, description: str) -> None:
        self._poller = poller
        self._description = description

    @property
    def description(self) -> str:
        return self._description

    def poll(self) -> Optional[bool]:
        if not self._poller.done():
            return None

        try:
            self._poller.result()
        except ResourceNotFoundError:
            return True
        except HttpResponseError as e:
            logger.warning(f"Deletion of {self._description} failed: {e.message}")
            return False

        status = str(self._poller.status()).lower()
        if status in ("failed", "canceled", "cancelled"):
            logger.warning(f"Deletion of {self._description} ended with status {status}")
            return False
        return True


def _to_virtual_machine(vm: Any) -> VirtualMachine:
    nic_ids = []
    if vm.network_profile and vm.network_profile.network_interfaces:
        nic_ids = [ref.id for ref in vm.network_profile.network_interfaces]

    profile = StorageProfile()
    os_disk = vm.storage_profile.os_disk if vm.storage_profile else None
    if os_disk is not None:
        profile = StorageProfile(
            os_disk_name=os_disk.name,
            os_disk_vhd_uri=os_disk.vhd.uri if os_disk.vhd else None,
        )

    return VirtualMachine(
        name=vm.name,
        location=vm.location or "",
        network_interface_ids=nic_ids,
        storage_profile=profile,
    )


def _to_network_interface(nic: Any) -> NetworkInterface:
    public_ips = [
        ip_config.public_ip_address.id
        for ip_config in (nic.ip_configurations or [])
        if ip_config.public_ip_address is not None
    ]
    return NetworkInterface(name=nic.name, public_ip_ids=public_ips)


class ArmVirtualMachineClient(VirtualMachineClient):
    def __init__(self, compute: Any) -> None:
        self.compute = compute

    def get(self, scope: str, name: str) -> Optional[VirtualMachine]:
        vm = _call(f"get virtual machine {name}", self.compute.virtual_machines.get, scope, name)
        return _to_virtual_machine(vm) if vm is not None else None

    def delete(self, scope: str, name: str) -> Optional[OperationHandle]:
        poller = _call(f"delete virtual machine {name}", self.compute.virtual_machines.begin_delete, scope, name)
        return PollerHandle(poller, f"virtual machine {name}") if poller is not None else None

    def list(self, scope: str) -> list[VirtualMachine]:
        vms = _call(f"list virtual machines in {scope}", lambda: list(self.compute.virtual_machines.list(scope)))
        return [_to_virtual_machine(vm) for vm in vms or []]


class ArmNetworkInterfaceClient(NetworkInterfaceClient):
    def __init__(self, network: Any) -> None:
        self.network = network

    def get(self, scope: str, name: str) -> Optional[NetworkInterface]:
        nic = _call(f"get network interface {name}", self.network.network_interfaces.get, scope, name)
        return _to_network_interface(nic) if nic is not None else None

    def delete(self, scope: str, name: str) -> Optional[OperationHandle]:
        poller = _call(f"delete network interface {name}", self.network.network_interfaces.begin_delete, scope, name)
        return PollerHandle(poller, f"network interface {name}") if poller is not None else None

    def list(self, scope: str) -> list[NetworkInterface]:
        nics = _call(f"list network interfaces in {scope}", lambda: list(self.network.network_interfaces.list(scope)))
        return [_to_network_interface(nic) for nic in nics or []]


class ArmPublicIpAddressClient(PublicIpAddressClient):
    def __init__(self, network: Any) -> None:
        self.network = network

    def get(self, scope: str, name: str) -> Optional[str]:
        ip = _call(f"get public ip {name}", self.network.public_ip_addresses.get, scope, name)
        return ip.name if ip is not None else None

    def delete(self, scope: str, name: str) -> Optional[OperationHandle]:
        poller = _call(f"delete public ip {name}", self.network.public_ip_addresses.begin_delete, scope, name)
        return PollerHandle(poller, f"public ip {name}") if poller is not None else None

    def list(self, scope: str) -> list[str]:
        ips = _call(f"list public ips in {scope}", lambda: list(self.network.public_ip_addresses.list(scope)))
        return [ip.name for ip in ips or []]


class ArmStorageAccountClient(StorageAccountClient):
    def __init__(self, storage: Any) -> None:
        self.storage = storage

    def get(self, scope: str, name: str) -> Optional[str]:
        account = _call(f"get storage account {name}", self.storage.storage_accounts.get_properties, scope, name)
        return account.name if account is not None else None

    def delete(self, scope: str, name: str) -> Optional[OperationHandle]:
        # Storage account deletion is synchronous; probe first so an absent account is reported as such.
        if self.get(scope, name) is None:
            return None
        _call(f"delete storage account {name}", self.storage.storage_accounts.delete, scope, name)
        return CompletedOperation(f"storage account {name}")

    def list(self, scope: str) -> list[str]:
        accounts = _call(
            f"list storage accounts in {scope}",
            lambda: list(self.storage.storage_accounts.list_by_resource_group(scope)),
        )
        return [account.name for account in accounts or []]

    def get_keys(self, scope: str, name: str) -> StorageAccountKeys:
        result = _call(f"list keys of storage account {name}", self.storage.storage_accounts.list_keys, scope, name)
        if result is None or not result.keys:
            raise TransientApiError(f"No access keys returned for storage account {name}")

        keys = [key.value for key in result.keys]
        return StorageAccountKeys(key1=keys[0], key2=keys[1] if len(keys) > 1 else None)


class ArmResourceGroupClient(ResourceGroupClient):
    def __init__(self, resource: Any) -> None:
        self.resource = resource

    def delete(self, name: str) -> Optional[OperationHandle]:
        poller = _call(f"delete resource group {name}", self.resource.resource_groups.begin_delete, name)
        return PollerHandle(poller, f"resource group {name}") if poller is not None else None


def create_arm_api(subscription_id: str, credential: Optional[Any] = None) -> ResourceControlApi:
    """Build a Resource Control API backed by Azure Resource Manager.

    Args:
        subscription_id: Azure subscription ID
        credential: Azure credential (default: service principal or DefaultAzureCredential)

    Returns:
        ResourceControlApi with one sub-client per resource kind
    """
    credential = credential or get_credential()
    compute = create_management_client("compute", subscription_id, credential)
    network = create_management_client("network", subscription_id, credential)
    storage = create_management_client("storage", subscription_id, credential)
    resource = create_management_client("resource", subscription_id, credential)

    return ResourceControlApi(
        virtual_machines=ArmVirtualMachineClient(compute),
        network_interfaces=ArmNetworkInterfaceClient(network),
        public_ip_addresses=ArmPublicIpAddressClient(network),
        storage_accounts=ArmStorageAccountClient(storage),
        resource_groups=ArmResourceGroupClient(resource),
    )
