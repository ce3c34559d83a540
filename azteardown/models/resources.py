"""Resource views returned by the Resource Control API.

These are read-only snapshots fetched at the start of a teardown. They carry
only the fields needed to discover dependent resources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


def name_from_reference(reference_id: str) -> str:
    """Return the last path segment of an ARM reference id.

    Args:
        reference_id: Full ARM id, e.g.
            "/subscriptions/s/resourceGroups/g/providers/Microsoft.Network/networkInterfaces/nic1"

    Returns:
        Resource name ("nic1")
    """
    return reference_id.rstrip("/").split("/")[-1]


@dataclass(frozen=True)
class StorageProfile:
    """Disk storage of a virtual machine.

    Attributes:
        os_disk_name: Name of the OS disk (optional)
        os_disk_vhd_uri: URI of the unmanaged OS disk VHD blob (None for managed disks)
    """

    os_disk_name: Optional[str] = None
    os_disk_vhd_uri: Optional[str] = None


@dataclass(frozen=True)
class VirtualMachine:
    """Root resource of a teardown.

    Attributes:
        name: Virtual machine name
        location: Azure location
        network_interface_ids: ARM ids of attached network interfaces, in declared order
        storage_profile: Disk storage profile
    """

    name: str
    location: str = ""
    network_interface_ids: list[str] = field(default_factory=list)
    storage_profile: StorageProfile = field(default_factory=StorageProfile)

    @property
    def network_interface_names(self) -> list[str]:
        return [name_from_reference(ref) for ref in self.network_interface_ids]


@dataclass(frozen=True)
class NetworkInterface:
    """Network interface attached to a virtual machine.

    Attributes:
        name: Network interface name
        public_ip_ids: ARM ids of public IPs referenced by its IP configurations
    """

    name: str
    public_ip_ids: list[str] = field(default_factory=list)

    @property
    def public_ip_names(self) -> list[str]:
        return [name_from_reference(ref) for ref in self.public_ip_ids]


@dataclass(frozen=True)
class StorageAccountKeys:
    """Access keys of a storage account."""

    key1: str
    key2: Optional[str] = None
