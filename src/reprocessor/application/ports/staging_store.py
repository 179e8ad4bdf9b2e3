"""Port interface for writing staged objects."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StagingStorePort(ABC):
    """Port for the staging area the downstream pipeline reads from."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        """
        Write an object. A write either fully succeeds or raises.

        Args:
            key: Object key
            data: Object bytes
            content_type: Optional MIME type

        Raises:
            DownstreamUnavailable: If the write fails
        """
        pass
