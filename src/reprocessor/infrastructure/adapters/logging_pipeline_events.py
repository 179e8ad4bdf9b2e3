"""Pipeline event sink writing structured log records."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from ...application.ports.pipeline_events import PipelineEventsPort

if TYPE_CHECKING:
    from ...domain.models.batch_message import BatchMessage
    from ...domain.models.manifest import BatchManifest
    from ...domain.models.materialized import MaterializedEntity

logger = logging.getLogger(__name__)


class LoggingPipelineEvents(PipelineEventsPort):
    """
    Logs one record per pipeline stage, and a metrics line per published batch.

    Stage records carry their fields in ``extra`` so a JSON formatter can
    pick them up; the metrics line is a single JSON document.
    """

    def __init__(self) -> None:
        self._targets: dict[str, dict[str, object]] = {}

    def batch_started(self, batch_id, target_id, phases, cascade, stop_id) -> None:
        self._targets[batch_id] = {"target_pi": target_id, "phases": phases, "cascade": cascade}
        logger.info(
            f"Batch {batch_id}: target {target_id}, phases {', '.join(phases)}, "
            f"cascade={cascade}, stop_at_pi={stop_id}",
            extra={"event": "batch_started", "batch_id": batch_id, "target_pi": target_id},
        )

    def chain_resolved(self, batch_id: str, entity_ids: list[str]) -> None:
        logger.info(
            f"Batch {batch_id}: resolved {len(entity_ids)} entities ({' -> '.join(entity_ids)})",
            extra={"event": "chain_resolved", "batch_id": batch_id, "entity_pis": entity_ids},
        )

    def entities_materialized(self, batch_id: str, entities: list[MaterializedEntity]) -> None:
        total_bytes = sum(e.total_bytes for e in entities)
        for entity in entities:
            logger.debug(
                f"Batch {batch_id}: {entity.pi} v{entity.ver} staged "
                f"{len(entity.files)} files ({entity.total_bytes} bytes)",
                extra={"event": "entity_materialized", "batch_id": batch_id, "entity_pi": entity.pi},
            )
        logger.info(
            f"Batch {batch_id}: materialized {len(entities)} entities ({total_bytes} bytes)",
            extra={"event": "entities_materialized", "batch_id": batch_id, "total_bytes": total_bytes},
        )

    def manifest_built(self, batch_id: str, manifest: BatchManifest) -> None:
        logger.info(
            f"Batch {batch_id}: manifest has {len(manifest.directories)} directories, "
            f"{manifest.total_files} files, {manifest.total_bytes} bytes",
            extra={
                "event": "manifest_built",
                "batch_id": batch_id,
                "total_files": manifest.total_files,
                "total_bytes": manifest.total_bytes,
            },
        )

    def batch_published(self, batch_id: str, message: BatchMessage, duration_seconds: float) -> None:
        logger.info(
            f"Batch {batch_id}: published ({message.manifest_location}) in {duration_seconds:.2f}s",
            extra={"event": "batch_published", "batch_id": batch_id},
        )
        metrics = {
            "batch_id": batch_id,
            **self._targets.pop(batch_id, {}),
            "total_files": message.total_files,
            "materialized_bytes": message.total_bytes,
            "duration_ms": int(duration_seconds * 1000),
        }
        logger.info(f"[Metrics] {json.dumps(metrics)}", extra={"event": "batch_metrics", **metrics})

    def batch_failed(self, batch_id: str, error: Exception) -> None:
        self._targets.pop(batch_id, None)
        logger.error(
            f"Batch {batch_id}: failed, nothing published: {error}",
            extra={"event": "batch_failed", "batch_id": batch_id, "error_type": type(error).__name__},
        )
