"""Blob storage helper used during storage account cleanup."""

from __future__ import annotations

import logging
from typing import Any, Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

logger = logging.getLogger(__name__)

VHD_CONTAINER = "vhds"
SYSTEM_CONTAINER = "system"
CUSTOM_IMAGE_PREFIX = "Microsoft.Compute/Images/custom"


class BlobHelper:
    """Blob operations on a single storage account.

    Holds an open BlobServiceClient; use it as a context manager (or call
    close()) so the connection is released on every path.

    Attributes:
        account_name: Storage account name
    """

    def __init__(
        self,
        account_name: str,
        account_key: str,
        endpoint_suffix: str = "core.windows.net",
        service_client: Optional[Any] = None,
    ) -> None:
        """Initialize blob helper.

        Args:
            account_name: Storage account name
            account_key: Storage account access key
            endpoint_suffix: Storage endpoint suffix (default: public Azure cloud)
            service_client: Pre-built BlobServiceClient (optional)
        """
        self.account_name = account_name
        self._service = service_client or BlobServiceClient(
            account_url=f"https://{account_name}.blob.{endpoint_suffix}",
            credential={"account_name": account_name, "account_key": account_key},
        )

    def delete_container_if_exists(self, container_name: str) -> bool:
        """Delete a container and all of its blobs.

        Args:
            container_name: Container to delete

        Returns:
            True if the container was deleted, False if it did not exist
        """
        try:
            self._service.get_container_client(container_name).delete_container()
        except ResourceNotFoundError:
            logger.debug(f"Container {container_name} not found in {self.account_name}")
            return False

        logger.debug(f"Deleted container {container_name} in {self.account_name}")
        return True

    def custom_image_exists(self) -> bool:
        """Check whether the account stores captured custom images."""
        container = self._service.get_container_client(SYSTEM_CONTAINER)
        if not container.exists():
            return False

        for _ in container.list_blobs(name_starts_with=CUSTOM_IMAGE_PREFIX):
            return True
        return False

    def close(self) -> None:
        self._service.close()

    def __enter__(self) -> BlobHelper:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
