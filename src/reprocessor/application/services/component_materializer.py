"""Application service copying entity components into staging."""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from functools import partial
from typing import TypeVar

from ...domain.models.materialized import FileInfo, MaterializedEntity
from ...domain.policy.retry_policy import RetryPolicy
from ...domain.services.content_types import infer_content_type
from ..ports.content_store import ContentStorePort
from ..ports.entity_store import EntityStorePort
from ..ports.staging_store import StagingStorePort
from .retry import call_with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ENTITY_WORKERS = 4
DEFAULT_MAX_COMPONENT_WORKERS = 8


def staging_key_for(staging_prefix: str, entity_id: str, component_name: str) -> str:
    """Deterministic staging key of one component."""
    return f"{staging_prefix}{entity_id}/{component_name}"


def _gather(futures: Sequence[Future[T]]) -> list[T]:
    """
    Wait for all futures and return their results in submission order.

    On the first failure, futures that have not started are cancelled and
    the failure is raised.
    """
    done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
    for future in futures:
        if future in done and future.exception() is not None:
            for pending in not_done:
                pending.cancel()
            raise future.exception()  # type: ignore[misc]
    return [future.result() for future in futures]


class ComponentMaterializer:
    """
    Copies every component of an entity from the content store to staging.

    Concurrency is bounded by two thread pools: one for entities and one,
    shared by all entities of a call, for component transfers. Every
    external call goes through the retry policy. A single failed transfer
    fails its entity, and a failed entity fails the whole call. Workers run
    in a copy of the caller's context, so the correlation id follows them.
    """

    def __init__(
        self,
        entity_store: EntityStorePort,
        content_store: ContentStorePort,
        staging_store: StagingStorePort,
        retry_policy: RetryPolicy | None = None,
        max_entity_workers: int = DEFAULT_MAX_ENTITY_WORKERS,
        max_component_workers: int = DEFAULT_MAX_COMPONENT_WORKERS,
    ) -> None:
        if max_entity_workers < 1:
            raise ValueError(f"max_entity_workers must be >= 1, got {max_entity_workers}")
        if max_component_workers < 1:
            raise ValueError(f"max_component_workers must be >= 1, got {max_component_workers}")
        self.entity_store = entity_store
        self.content_store = content_store
        self.staging_store = staging_store
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_entity_workers = max_entity_workers
        self.max_component_workers = max_component_workers

    def materialize_all(
        self,
        entity_ids: Sequence[str],
        staging_prefix: str,
    ) -> list[MaterializedEntity]:
        """
        Materialize several entities concurrently.

        Args:
            entity_ids: Identifiers to stage
            staging_prefix: Key prefix of this batch (ends with "/")

        Returns:
            Materialized entities in the order of ``entity_ids``
        """
        if not entity_ids:
            return []

        with ThreadPoolExecutor(
            max_workers=self.max_component_workers,
            thread_name_prefix="component",
        ) as component_pool, ThreadPoolExecutor(
            max_workers=min(self.max_entity_workers, len(entity_ids)),
            thread_name_prefix="entity",
        ) as entity_pool:
            futures = [
                entity_pool.submit(
                    contextvars.copy_context().run,
                    self.materialize,
                    entity_id,
                    staging_prefix,
                    component_pool,
                )
                for entity_id in entity_ids
            ]
            return _gather(futures)

    def materialize(
        self,
        entity_id: str,
        staging_prefix: str,
        component_pool: ThreadPoolExecutor | None = None,
    ) -> MaterializedEntity:
        """
        Stage all components of one entity.

        Args:
            entity_id: Entity identifier
            staging_prefix: Key prefix of this batch (ends with "/")
            component_pool: Pool for component transfers (a private one is
                created when omitted)

        Returns:
            MaterializedEntity listing the staged files

        Raises:
            EntityNotFound: If the entity is missing
            ContentNotFound: If a component's content is missing
            DownstreamUnavailable: If a transfer still fails after retries
        """
        if component_pool is None:
            with ThreadPoolExecutor(
                max_workers=self.max_component_workers,
                thread_name_prefix="component",
            ) as pool:
                return self.materialize(entity_id, staging_prefix, pool)

        entity = call_with_retry(
            partial(self.entity_store.get_entity, entity_id),
            self.retry_policy,
            operation=f"fetch entity {entity_id}",
        )

        if not entity.components:
            logger.warning(
                f"Entity {entity_id} has no components",
                extra={"entity_id": entity_id, "ver": entity.ver},
            )

        futures = [
            component_pool.submit(
                contextvars.copy_context().run,
                self._stage_component,
                entity_id,
                name,
                address,
                staging_prefix,
            )
            for name, address in entity.components.items()
        ]
        files = _gather(futures)

        materialized = MaterializedEntity(
            pi=entity.pi,
            tip=entity.manifest_cid,
            ver=entity.ver,
            children_pi=list(entity.children_pi),
            parent_pi=entity.parent_pi or None,
            files=files,
        )
        logger.debug(
            f"Materialized {len(files)} components for {entity_id} ({materialized.total_bytes} bytes)",
            extra={"entity_id": entity_id, "files": len(files), "bytes": materialized.total_bytes},
        )
        return materialized

    def _stage_component(
        self,
        entity_id: str,
        component_name: str,
        address: str,
        staging_prefix: str,
    ) -> FileInfo:
        """Download one component and write it to its staging key."""
        content = call_with_retry(
            partial(self.content_store.download, address),
            self.retry_policy,
            operation=f"download {component_name} ({address})",
        )
        key = staging_key_for(staging_prefix, entity_id, component_name)
        content_type = infer_content_type(component_name)
        call_with_retry(
            partial(self.staging_store.put, key, content, content_type),
            self.retry_policy,
            operation=f"stage {key}",
        )
        logger.debug(
            f"Staged {component_name} -> {key} ({len(content)} bytes)",
            extra={"entity_id": entity_id, "component": component_name, "staging_key": key},
        )
        return FileInfo(
            staging_key=key,
            file_name=component_name,
            file_size=len(content),
            content_type=content_type,
        )
