"""Tests for the Azure Resource Manager control-plane clients.

Management clients are replaced with mocks; only SDK error translation and
model conversion are exercised.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Optional
from unittest.mock import MagicMock, Mock, patch

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from azteardown.azure.api import CompletedOperation
from azteardown.azure.arm import (
    ArmNetworkInterfaceClient,
    ArmPublicIpAddressClient,
    ArmResourceGroupClient,
    ArmStorageAccountClient,
    ArmVirtualMachineClient,
    PollerHandle,
    create_arm_api,
)
from azteardown.exceptions import TransientApiError
from tests.fixtures.cloud import nic_ref, public_ip_ref, vhd_uri


def http_error(message: str = "boom", status_code: int = 500) -> HttpResponseError:
    error = HttpResponseError(message=message)
    error.status_code = status_code
    return error


def sdk_vm(name: str = "vm1", nics=("nic1",), vhd: Optional[str] = None) -> SimpleNamespace:
    return SimpleNamespace(
        name=name,
        location="eastus",
        network_profile=SimpleNamespace(network_interfaces=[SimpleNamespace(id=nic_ref(nic)) for nic in nics]),
        storage_profile=SimpleNamespace(
            os_disk=SimpleNamespace(name=f"{name}-osdisk", vhd=SimpleNamespace(uri=vhd) if vhd else None)
        ),
    )


def sdk_nic(name: str = "nic1", ips=("ip1",)) -> SimpleNamespace:
    configs = [SimpleNamespace(public_ip_address=SimpleNamespace(id=public_ip_ref(ip))) for ip in ips]
    configs.append(SimpleNamespace(public_ip_address=None))
    return SimpleNamespace(name=name, ip_configurations=configs)


class TestPollerHandle:
    """Test suite for PollerHandle."""

    def test_pending(self) -> None:
        poller = Mock()
        poller.done.return_value = False

        assert PollerHandle(poller, "vm1").poll() is None
        poller.result.assert_not_called()

    def test_succeeded(self) -> None:
        poller = Mock()
        poller.done.return_value = True
        poller.status.return_value = "Succeeded"

        assert PollerHandle(poller, "vm1").poll() is True

    @pytest.mark.parametrize("status", ["Failed", "Canceled"])
    def test_failed_status(self, status: str) -> None:
        poller = Mock()
        poller.done.return_value = True
        poller.status.return_value = status

        assert PollerHandle(poller, "vm1").poll() is False

    def test_result_error_is_failed_deletion(self) -> None:
        """Test an LRO error surfaces as a failed deletion."""
        poller = Mock()
        poller.done.return_value = True
        poller.result.side_effect = http_error("Conflict", 409)

        assert PollerHandle(poller, "vm1").poll() is False

    def test_result_not_found_is_deleted(self) -> None:
        """Test a resource that vanished during deletion counts as deleted."""
        poller = Mock()
        poller.done.return_value = True
        poller.result.side_effect = ResourceNotFoundError("gone")

        assert PollerHandle(poller, "vm1").poll() is True


class TestArmVirtualMachineClient:
    """Test suite for ArmVirtualMachineClient."""

    def test_get_converts_model(self) -> None:
        """Test SDK VMs are converted with NIC ids and VHD URI."""
        compute = MagicMock()
        compute.virtual_machines.get.return_value = sdk_vm(nics=("nic1", "nic2"), vhd=vhd_uri("acct1"))

        vm = ArmVirtualMachineClient(compute).get("eastus", "vm1")

        compute.virtual_machines.get.assert_called_once_with("eastus", "vm1")
        assert vm.name == "vm1"
        assert vm.network_interface_names == ["nic1", "nic2"]
        assert vm.storage_profile.os_disk_vhd_uri == vhd_uri("acct1")

    def test_get_managed_disk_vm(self) -> None:
        compute = MagicMock()
        compute.virtual_machines.get.return_value = sdk_vm()

        vm = ArmVirtualMachineClient(compute).get("eastus", "vm1")

        assert vm.storage_profile.os_disk_name == "vm1-osdisk"
        assert vm.storage_profile.os_disk_vhd_uri is None

    def test_get_not_found_returns_none(self) -> None:
        compute = MagicMock()
        compute.virtual_machines.get.side_effect = ResourceNotFoundError("not found")

        assert ArmVirtualMachineClient(compute).get("eastus", "vm1") is None

    def test_delete_returns_poller_handle(self) -> None:
        compute = MagicMock()

        handle = ArmVirtualMachineClient(compute).delete("eastus", "vm1")

        compute.virtual_machines.begin_delete.assert_called_once_with("eastus", "vm1")
        assert isinstance(handle, PollerHandle)
        assert handle.description == "virtual machine vm1"

    def test_delete_not_found_returns_none(self) -> None:
        compute = MagicMock()
        compute.virtual_machines.begin_delete.side_effect = ResourceNotFoundError("not found")

        assert ArmVirtualMachineClient(compute).delete("eastus", "vm1") is None

    def test_http_error_becomes_transient_api_error(self) -> None:
        """Test other HTTP failures raise TransientApiError with the status code."""
        compute = MagicMock()
        cause = http_error("Server busy", 503)
        compute.virtual_machines.begin_delete.side_effect = cause

        with pytest.raises(TransientApiError) as exc_info:
            ArmVirtualMachineClient(compute).delete("eastus", "vm1")

        assert exc_info.value.status_code == 503
        assert exc_info.value.__cause__ is cause

    def test_list(self) -> None:
        compute = MagicMock()
        compute.virtual_machines.list.return_value = iter([sdk_vm("vm1"), sdk_vm("vm2")])

        assert [vm.name for vm in ArmVirtualMachineClient(compute).list("eastus")] == ["vm1", "vm2"]


class TestArmNetworkClients:
    """Test suite for NIC and public IP clients."""

    def test_nic_get_collects_public_ips(self) -> None:
        """Test public IP references are taken from IP configurations that have one."""
        network = MagicMock()
        network.network_interfaces.get.return_value = sdk_nic(ips=("ip1", "ip2"))

        nic = ArmNetworkInterfaceClient(network).get("eastus", "nic1")

        assert nic.public_ip_names == ["ip1", "ip2"]

    def test_nic_list_not_found_scope(self) -> None:
        """Test listing a missing resource group returns an empty list."""
        network = MagicMock()
        network.network_interfaces.list.side_effect = ResourceNotFoundError("no group")

        assert ArmNetworkInterfaceClient(network).list("eastus") == []

    def test_public_ip_list_returns_names(self) -> None:
        network = MagicMock()
        network.public_ip_addresses.list.return_value = [SimpleNamespace(name="ip1")]

        assert ArmPublicIpAddressClient(network).list("eastus") == ["ip1"]

    def test_public_ip_delete(self) -> None:
        network = MagicMock()

        handle = ArmPublicIpAddressClient(network).delete("eastus", "ip1")

        network.public_ip_addresses.begin_delete.assert_called_once_with("eastus", "ip1")
        assert handle.description == "public ip ip1"


class TestArmStorageAccountClient:
    """Test suite for ArmStorageAccountClient."""

    def test_delete_existing_account(self) -> None:
        """Test synchronous deletion returns a completed handle."""
        storage = MagicMock()
        storage.storage_accounts.get_properties.return_value = SimpleNamespace(name="acct1")

        handle = ArmStorageAccountClient(storage).delete("eastus", "acct1")

        storage.storage_accounts.delete.assert_called_once_with("eastus", "acct1")
        assert isinstance(handle, CompletedOperation)
        assert handle.poll() is True

    def test_delete_absent_account(self) -> None:
        storage = MagicMock()
        storage.storage_accounts.get_properties.side_effect = ResourceNotFoundError("not found")

        assert ArmStorageAccountClient(storage).delete("eastus", "acct1") is None
        storage.storage_accounts.delete.assert_not_called()

    def test_get_keys(self) -> None:
        storage = MagicMock()
        storage.storage_accounts.list_keys.return_value = SimpleNamespace(
            keys=[SimpleNamespace(value="key-a"), SimpleNamespace(value="key-b")]
        )

        keys = ArmStorageAccountClient(storage).get_keys("eastus", "acct1")

        assert keys.key1 == "key-a"
        assert keys.key2 == "key-b"

    def test_get_keys_empty(self) -> None:
        storage = MagicMock()
        storage.storage_accounts.list_keys.return_value = SimpleNamespace(keys=[])

        with pytest.raises(TransientApiError, match="No access keys"):
            ArmStorageAccountClient(storage).get_keys("eastus", "acct1")

    def test_list_by_resource_group(self) -> None:
        storage = MagicMock()
        storage.storage_accounts.list_by_resource_group.return_value = [SimpleNamespace(name="acct1")]

        assert ArmStorageAccountClient(storage).list("eastus") == ["acct1"]
        storage.storage_accounts.list_by_resource_group.assert_called_once_with("eastus")


class TestArmResourceGroupClient:
    def test_delete(self) -> None:
        resource = MagicMock()

        handle = ArmResourceGroupClient(resource).delete("eastus")

        resource.resource_groups.begin_delete.assert_called_once_with("eastus")
        assert handle.description == "resource group eastus"

    def test_delete_absent(self) -> None:
        resource = MagicMock()
        resource.resource_groups.begin_delete.side_effect = ResourceNotFoundError("not found")

        assert ArmResourceGroupClient(resource).delete("eastus") is None


class TestCreateArmApi:
    @patch("azteardown.azure.arm.create_management_client")
    def test_builds_one_client_per_service(self, mock_create: Mock) -> None:
        """Test each management client is created once with the shared credential."""
        credential = object()

        api = create_arm_api("sub-123", credential=credential)

        services = [c.args[0] for c in mock_create.call_args_list]
        assert services == ["compute", "network", "storage", "resource"]
        assert all(c.args[1:] == ("sub-123", credential) for c in mock_create.call_args_list)
        assert isinstance(api.virtual_machines, ArmVirtualMachineClient)
        assert api.network_interfaces.network is api.public_ip_addresses.network
