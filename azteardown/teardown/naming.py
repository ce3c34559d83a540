"""Name resolution for scopes and storage accounts."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from azteardown.models.resources import StorageProfile


class ScopeResolver:
    """Derives the resource group that owns resources in a region.

    With a prefix, resources in "eastus" live in "<prefix>-eastus"; without one,
    the region name is used as the resource group name.
    """

    def __init__(self, prefix: Optional[str] = None) -> None:
        self.prefix = prefix

    def resolve(self, region: str) -> str:
        if self.prefix:
            return f"{self.prefix}-{region}"
        return region


def storage_account_name(profile: StorageProfile) -> Optional[str]:
    """Resolve the storage account backing a VM's OS disk.

    The account is the first label of the VHD blob host, e.g.
    "https://acct1.blob.core.windows.net/vhds/vm1.vhd" -> "acct1".

    Args:
        profile: Storage profile of the virtual machine

    Returns:
        Storage account name, or None for managed disks (no VHD URI)

    Raises:
        ValueError: If the VHD URI has no host
    """
    if not profile.os_disk_vhd_uri:
        return None

    host = urlparse(profile.os_disk_vhd_uri).hostname
    if not host:
        raise ValueError(f"Invalid VHD URI: {profile.os_disk_vhd_uri}")
    return host.split(".")[0]
