"""Azure credential and management client factory."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.storage import StorageManagementClient

logger = logging.getLogger(__name__)

MANAGEMENT_CLIENTS = {
    "compute": ComputeManagementClient,
    "network": NetworkManagementClient,
    "resource": ResourceManagementClient,
    "storage": StorageManagementClient,
}


def get_credential() -> Any:
    """Get an Azure credential.

    Priority:
        1. Service principal (if AZURE_CLIENT_ID + AZURE_CLIENT_SECRET + AZURE_TENANT_ID are set)
        2. DefaultAzureCredential (CLI login, managed identity, etc.)

    Returns:
        Azure credential object
    """
    client_id = os.environ.get("AZURE_CLIENT_ID")
    client_secret = os.environ.get("AZURE_CLIENT_SECRET")
    tenant_id = os.environ.get("AZURE_TENANT_ID")

    if client_id and client_secret and tenant_id:
        logger.info("Using service principal authentication")
        return ClientSecretCredential(
            tenant_id=tenant_id,
            client_id=client_id,
            client_secret=client_secret,
        )

    logger.info("Using DefaultAzureCredential")
    return DefaultAzureCredential()


def create_management_client(
    service_name: str,
    subscription_id: str,
    credential: Optional[Any] = None,
) -> Any:
    """Create an Azure management client.

    Args:
        service_name: One of "compute", "network", "resource", "storage"
        subscription_id: Azure subscription ID
        credential: Azure credential (default: get_credential())

    Returns:
        Management client instance

    Raises:
        ValueError: If the service name is unknown or subscription_id is empty
    """
    if service_name not in MANAGEMENT_CLIENTS:
        raise ValueError(f"Unknown Azure service: {service_name}")
    if not subscription_id:
        raise ValueError("Azure subscription ID is required (set AZURE_SUBSCRIPTION_ID or --subscription)")

    client_class = MANAGEMENT_CLIENTS[service_name]
    return client_class(credential or get_credential(), subscription_id)
