"""Port interface for structured pipeline events."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.models.batch_message import BatchMessage
    from ...domain.models.manifest import BatchManifest
    from ...domain.models.materialized import MaterializedEntity


class PipelineEventsPort(ABC):
    """Port receiving one event per pipeline stage, emitted by the orchestrator."""

    @abstractmethod
    def batch_started(
        self,
        batch_id: str,
        target_id: str,
        phases: list[str],
        cascade: bool,
        stop_id: str,
    ) -> None:
        """Request accepted and batch identifier assigned."""
        pass

    @abstractmethod
    def chain_resolved(self, batch_id: str, entity_ids: list[str]) -> None:
        """Entity chain resolved (leaf first)."""
        pass

    @abstractmethod
    def entities_materialized(
        self,
        batch_id: str,
        entities: list[MaterializedEntity],
    ) -> None:
        """All entities copied into staging."""
        pass

    @abstractmethod
    def manifest_built(self, batch_id: str, manifest: BatchManifest) -> None:
        """Manifest assembled."""
        pass

    @abstractmethod
    def batch_published(
        self,
        batch_id: str,
        message: BatchMessage,
        duration_seconds: float,
    ) -> None:
        """Manifest written and batch message sent."""
        pass

    @abstractmethod
    def batch_failed(self, batch_id: str, error: Exception) -> None:
        """Pipeline aborted; nothing was published."""
        pass


class NullPipelineEvents(PipelineEventsPort):
    """Event sink that drops every event."""

    def batch_started(self, batch_id, target_id, phases, cascade, stop_id) -> None:
        pass

    def chain_resolved(self, batch_id, entity_ids) -> None:
        pass

    def entities_materialized(self, batch_id, entities) -> None:
        pass

    def manifest_built(self, batch_id, manifest) -> None:
        pass

    def batch_published(self, batch_id, message, duration_seconds) -> None:
        pass

    def batch_failed(self, batch_id, error) -> None:
        pass
