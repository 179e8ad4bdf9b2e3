"""Port interface for reading entities from the content store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.models.entity import Entity


class EntityStorePort(ABC):
    """Port for fetching the current version of an entity."""

    @abstractmethod
    def get_entity(self, entity_id: str) -> Entity:
        """
        Fetch an entity by identifier.

        Args:
            entity_id: 26-character entity identifier

        Returns:
            Entity at its current version

        Raises:
            EntityNotFound: If the store has no such entity
            DownstreamUnavailable: If the store cannot be reached or fails
        """
        pass
