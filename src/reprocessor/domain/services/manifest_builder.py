"""Domain service turning staged entities into a batch manifest."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.manifest import BatchManifest, DirectoryGroup, QueueFileInfo
from ..models.materialized import MaterializedEntity
from ..policy.processing_policy import processing_config_for
from ..types import entity_path


def build_directory_group(entity: MaterializedEntity, phases: Iterable[str]) -> DirectoryGroup:
    """Build the directory group for one staged entity."""
    files = [
        QueueFileInfo(
            staging_key=f.staging_key,
            logical_path=f.file_name,
            file_name=f.file_name,
            file_size=f.file_size,
            content_type=f.content_type,
        )
        for f in entity.files
    ]
    return DirectoryGroup(
        directory_path=entity_path(entity.pi),
        processing_config=processing_config_for(phases),
        files=files,
        existing_pi=entity.pi,
        existing_children_paths=[entity_path(child) for child in entity.children_pi],
        existing_parent_path=entity_path(entity.parent_pi) if entity.parent_pi else None,
    )


def build_manifest(
    entities: Sequence[MaterializedEntity],
    phases: Sequence[str],
    batch_id: str,
) -> BatchManifest:
    """
    Build the manifest for a reprocessing batch.

    Pure function: same inputs give an equal manifest and identical JSON.
    Directory groups keep the order of ``entities`` (leaf first), and batch
    totals are sums over the directory groups.

    Args:
        entities: Staged entities in resolution order
        phases: Requested phases (pinax, cheimarros, description)
        batch_id: Batch identifier

    Returns:
        BatchManifest with one directory group per entity
    """
    phases = tuple(phases)
    return BatchManifest(
        batch_id=batch_id,
        directories=[build_directory_group(entity, phases) for entity in entities],
    )
