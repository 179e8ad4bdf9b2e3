"""Domain models for permission checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


@dataclass(frozen=True)
class CollectionInfo:
    """
    Collection the checked entity belongs to.

    Attributes:
        root_id: Identifier of the collection's root entity (None if not reported)
        role: Actor's role in the collection (owner, editor, viewer, ...)
        id: Collection identifier
        title: Collection title
    """

    root_id: str | None = None
    role: str | None = None
    id: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class PermissionResult:
    """
    Answer of the permission service for one entity.

    Attributes:
        can_edit: Whether the actor may reprocess the entity
        collection: Collection membership (None for free entities)
    """

    can_edit: bool
    collection: CollectionInfo | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PermissionResult:
        """Deserialize from the permission service's JSON shape."""
        collection_data = data.get("collection")
        collection = None
        if isinstance(collection_data, dict):
            collection = CollectionInfo(
                root_id=collection_data.get("rootPi") or None,
                role=collection_data.get("role"),
                id=collection_data.get("id"),
                title=collection_data.get("title"),
            )
        return cls(can_edit=bool(data.get("canEdit", False)), collection=collection)
