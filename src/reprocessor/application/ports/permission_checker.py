"""Port interface for the authorization service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.models.permissions import PermissionResult


class PermissionCheckerPort(ABC):
    """Port for checking whether an actor may reprocess an entity."""

    @abstractmethod
    def check(self, entity_id: str, actor: str | None = None) -> PermissionResult:
        """
        Check edit permission on an entity.

        Args:
            entity_id: Entity identifier
            actor: Actor identifier (None for anonymous requests)

        Returns:
            PermissionResult with edit flag and collection membership

        Raises:
            DownstreamUnavailable: If the service cannot answer
        """
        pass
