"""Port interface for downloading content by address."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ContentStorePort(ABC):
    """Port for fetching raw component bytes."""

    @abstractmethod
    def download(self, address: str) -> bytes:
        """
        Download the bytes stored under a content address.

        Args:
            address: Content address (CID)

        Returns:
            Raw bytes

        Raises:
            ContentNotFound: If nothing is stored under the address
            DownstreamUnavailable: If the store cannot be reached or fails
        """
        pass
