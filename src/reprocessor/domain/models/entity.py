"""Domain model for entities read from the content store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..types import ROOT_SENTINEL

if TYPE_CHECKING:
    from typing import Any


@dataclass(frozen=True)
class Entity:
    """
    Current version of a stored entity.

    Entities are owned by the content store; the pipeline only reads them.

    Attributes:
        pi: 26-character entity identifier
        ver: Version number (monotonically increasing)
        ts: Version timestamp as reported by the store
        manifest_cid: Content address of the current version manifest (tip)
        components: Component name -> content address
        children_pi: Ordered child identifiers
        parent_pi: Parent identifier (None for roots)
        prev_cid: Content address of the previous version manifest
        note: Free-text version note
    """

    pi: str
    ver: int
    ts: str = ""
    manifest_cid: str = ""
    components: dict[str, str] = field(default_factory=dict)
    children_pi: list[str] = field(default_factory=list)
    parent_pi: str | None = None
    prev_cid: str | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        """Validate entity."""
        if not self.pi:
            raise ValueError("pi must be non-empty")
        if self.ver < 0:
            raise ValueError(f"ver must be >= 0, got {self.ver}")

    def has_parent(self) -> bool:
        """True if the entity points at a real parent (not absent, not the sentinel)."""
        return bool(self.parent_pi) and self.parent_pi != ROOT_SENTINEL

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entity:
        """Deserialize from the entity store's JSON shape."""
        return cls(
            pi=data["pi"],
            ver=int(data.get("ver", 0)),
            ts=data.get("ts", ""),
            manifest_cid=data.get("manifest_cid", ""),
            components=dict(data.get("components") or {}),
            children_pi=list(data.get("children_pi") or []),
            parent_pi=data.get("parent_pi") or None,
            prev_cid=data.get("prev_cid"),
            note=data.get("note"),
        )
