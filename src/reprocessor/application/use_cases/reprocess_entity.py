"""Use case for preparing and publishing a reprocessing batch."""

from __future__ import annotations

import logging
import time
from functools import partial

from ...domain.errors import InternalError
from ...domain.models.batch_message import BatchMessage
from ...domain.models.manifest import BatchManifest
from ...domain.policy.retry_policy import RetryPolicy
from ...domain.services.manifest_builder import build_manifest
from ...domain.types import generate_ulid
from ..dto.reprocess import ReprocessJob, ReprocessResult
from ..ports.batch_queue import BatchQueuePort
from ..ports.pipeline_events import NullPipelineEvents, PipelineEventsPort
from ..ports.staging_store import StagingStorePort
from ..services.component_materializer import ComponentMaterializer
from ..services.entity_resolver import EntityResolver
from ..services.retry import call_with_retry

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "_manifest.json"
DEFAULT_STAGING_ROOT = "reprocessing"
DEFAULT_STATUS_BASE_URL = "https://orchestrator.arke.institute"


def new_batch_id() -> str:
    return f"reprocess_{generate_ulid()}"


def staging_prefix_for(batch_id: str, staging_root: str = DEFAULT_STAGING_ROOT) -> str:
    return f"{staging_root.rstrip('/')}/{batch_id}/"


def publish_batch(
    manifest: BatchManifest,
    staging_prefix: str,
    staging_store: StagingStorePort,
    batch_queue: BatchQueuePort,
    custom_prompts: dict[str, str] | None = None,
    custom_note: str | None = None,
    retry_policy: RetryPolicy | None = None,
) -> BatchMessage:
    """
    Write the manifest next to the staged files, then announce the batch.

    The manifest write is an idempotent staging write and is retried; the
    queue send is not, since a duplicate message would start a second run.

    Returns:
        The message that was sent
    """
    manifest_key = f"{staging_prefix}{MANIFEST_FILENAME}"
    call_with_retry(
        partial(staging_store.put, manifest_key, manifest.to_json().encode("utf-8"), "application/json"),
        retry_policy or RetryPolicy(),
        operation=f"stage manifest {manifest_key}",
    )

    message = BatchMessage.for_manifest(
        manifest,
        manifest_location=manifest_key,
        staging_prefix=staging_prefix,
        custom_prompts=custom_prompts,
        custom_note=custom_note,
    )
    batch_queue.send(message)
    return message


def reprocess_entity(
    job: ReprocessJob,
    resolver: EntityResolver,
    materializer: ComponentMaterializer,
    staging_store: StagingStorePort,
    batch_queue: BatchQueuePort,
    events: PipelineEventsPort | None = None,
    retry_policy: RetryPolicy | None = None,
    staging_root: str = DEFAULT_STAGING_ROOT,
    status_base_url: str = DEFAULT_STATUS_BASE_URL,
    batch_id: str | None = None,
) -> ReprocessResult:
    """
    Orchestrate one reprocessing batch.

    Steps:
    1. Resolve the entity chain (target, plus ancestors when cascading)
    2. Materialize every resolved entity into staging
    3. Build the batch manifest
    4. Publish: write the manifest, send the batch message

    Nothing is published unless every step before it succeeded; any failure
    aborts the whole batch and is re-raised after a ``batch_failed`` event.

    Args:
        job: Validated request with its cascade boundary already chosen
        resolver: Entity chain resolver
        materializer: Component materializer
        staging_store: Staging area for the manifest
        batch_queue: Queue receiving the batch message
        events: Structured event sink (events are dropped when omitted)
        retry_policy: Retry policy for the manifest write
        staging_root: Key prefix under which batches are staged
        status_base_url: Base URL of the orchestrator's status endpoint
        batch_id: Batch identifier (generated when omitted)

    Returns:
        ReprocessResult with batch id, queued entity ids and status URL
    """
    events = events or NullPipelineEvents()
    batch_id = batch_id or new_batch_id()
    staging_prefix = staging_prefix_for(batch_id, staging_root)
    start_time = time.monotonic()

    logger.info(
        f"Starting reprocessing batch {batch_id} for {job.pi}",
        extra={
            "batch_id": batch_id,
            "target_pi": job.pi,
            "phases": job.phases,
            "cascade": job.cascade,
            "stop_at_pi": job.stop_at_pi,
        },
    )
    events.batch_started(batch_id, job.pi, list(job.phases), job.cascade, job.stop_at_pi)

    try:
        entity_ids = resolver.resolve_chain(job.pi, job.cascade, job.stop_at_pi)
        events.chain_resolved(batch_id, entity_ids)

        materialized = materializer.materialize_all(entity_ids, staging_prefix)
        events.entities_materialized(batch_id, materialized)

        manifest = build_manifest(materialized, job.phases, batch_id)
        if len(manifest.directories) != len(entity_ids):
            raise InternalError(
                f"Manifest has {len(manifest.directories)} directories for {len(entity_ids)} entities"
            )
        events.manifest_built(batch_id, manifest)

        message = publish_batch(
            manifest,
            staging_prefix,
            staging_store,
            batch_queue,
            custom_prompts=job.custom_prompts,
            custom_note=job.custom_note,
            retry_policy=retry_policy,
        )
    except Exception as e:
        events.batch_failed(batch_id, e)
        raise

    events.batch_published(batch_id, message, time.monotonic() - start_time)

    return ReprocessResult(
        batch_id=batch_id,
        entities_queued=len(entity_ids),
        entity_pis=entity_ids,
        status_url=f"{status_base_url.rstrip('/')}/status/{batch_id}",
    )
