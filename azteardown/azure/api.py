"""Resource Control API contract.

The orchestrator talks to the control plane only through these interfaces.
Each resource kind has its own sub-client; delete calls return an
OperationHandle that can be polled until the deletion completes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from azteardown.models.resources import NetworkInterface, StorageAccountKeys, VirtualMachine

T = TypeVar("T")


class OperationHandle(ABC):
    """Handle on a submitted (possibly long-running) delete operation."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable name of the resource being deleted."""
        pass

    @abstractmethod
    def poll(self) -> Optional[bool]:
        """Check the operation state without blocking.

        Returns:
            None while pending, True once deleted, False if the deletion failed
        """
        pass


class CompletedOperation(OperationHandle):
    """Handle for a delete call that completed synchronously."""

    def __init__(self, description: str) -> None:
        self._description = description

    @property
    def description(self) -> str:
        return self._description

    def poll(self) -> Optional[bool]:
        return True


class ResourceClient(ABC, Generic[T]):
    """Per-kind sub-client scoped by resource group.

    Implementations must be idempotent-tolerant: `get` and `delete` on a
    resource that does not exist return None instead of raising.
    """

    @abstractmethod
    def get(self, scope: str, name: str) -> Optional[T]:
        """Fetch a resource, or None if it does not exist."""
        pass

    @abstractmethod
    def delete(self, scope: str, name: str) -> Optional[OperationHandle]:
        """Submit a delete, or return None if the resource was already absent."""
        pass

    @abstractmethod
    def list(self, scope: str) -> list[T]:
        """List all resources of this kind in the scope."""
        pass


class VirtualMachineClient(ResourceClient[VirtualMachine]):
    """Virtual machine sub-client."""


class NetworkInterfaceClient(ResourceClient[NetworkInterface]):
    """Network interface sub-client."""


class PublicIpAddressClient(ResourceClient[str]):
    """Public IP sub-client. Resources are represented by their name."""


class StorageAccountClient(ResourceClient[str]):
    """Storage account sub-client. Resources are represented by their name."""

    @abstractmethod
    def get_keys(self, scope: str, name: str) -> StorageAccountKeys:
        """Fetch the access keys of a storage account."""
        pass


class ResourceGroupClient(ABC):
    """Resource group (scope) sub-client."""

    @abstractmethod
    def delete(self, name: str) -> Optional[OperationHandle]:
        """Submit a delete, or return None if the group was already absent."""
        pass


@dataclass(frozen=True)
class ResourceControlApi:
    """Bundle of sub-clients for a single control plane."""

    virtual_machines: VirtualMachineClient
    network_interfaces: NetworkInterfaceClient
    public_ip_addresses: PublicIpAddressClient
    storage_accounts: StorageAccountClient
    resource_groups: ResourceGroupClient
