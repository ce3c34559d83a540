"""Compound resource identifier.

A resource is addressed by the region it lives in and its local name. The pair
is exchanged as a single slash-encoded string ("eastus/vm1").
"""

from __future__ import annotations

from dataclasses import dataclass

SEPARATOR = "/"


@dataclass(frozen=True)
class ResourceId:
    """Region and local id of a resource.

    Attributes:
        region: Azure location (e.g., "eastus"), never contains a slash
        id: Local resource name, may contain slashes
    """

    region: str
    id: str

    def __post_init__(self) -> None:
        if not self.region:
            raise ValueError("Region cannot be empty")
        if SEPARATOR in self.region:
            raise ValueError(f"Region cannot contain '{SEPARATOR}': {self.region}")
        if not self.id:
            raise ValueError("Resource id cannot be empty")

    @classmethod
    def from_slash_encoded(cls, encoded: str) -> ResourceId:
        """Decode a slash-encoded id.

        Splits on the first slash only, so the local id keeps any slashes it has.

        Args:
            encoded: String in "<region>/<id>" form

        Returns:
            Decoded ResourceId

        Raises:
            ValueError: If the string is not in "<region>/<id>" form
        """
        region, sep, local_id = encoded.partition(SEPARATOR)
        if not sep:
            raise ValueError(f"Invalid resource id '{encoded}': expected <region>/<id>")
        return cls(region=region, id=local_id)

    def slash_encode(self) -> str:
        """Encode as "<region>/<id>"."""
        return f"{self.region}{SEPARATOR}{self.id}"

    def __str__(self) -> str:
        return self.slash_encode()
