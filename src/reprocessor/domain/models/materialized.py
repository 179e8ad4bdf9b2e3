"""Domain models for entities copied into staging."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileInfo:
    """
    One staged component.

    Attributes:
        staging_key: Object key the bytes were written to
        file_name: Component name
        file_size: Size in bytes
        content_type: MIME type inferred from the component name
    """

    staging_key: str
    file_name: str
    file_size: int
    content_type: str

    def __post_init__(self) -> None:
        """Validate file info."""
        if not self.staging_key:
            raise ValueError("staging_key must be non-empty")
        if self.file_size < 0:
            raise ValueError(f"file_size must be >= 0, got {self.file_size}")


@dataclass(frozen=True)
class MaterializedEntity:
    """
    Request-scoped view of an entity after its components were staged.

    Attributes:
        pi: Entity identifier
        tip: Manifest content address of the staged version
        ver: Staged version number
        children_pi: Child identifiers at the staged version
        parent_pi: Parent identifier (None if the entity has no parent)
        files: Staged components, in component order
    """

    pi: str
    tip: str
    ver: int
    children_pi: list[str] = field(default_factory=list)
    parent_pi: str | None = None
    files: list[FileInfo] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        """Sum of staged file sizes."""
        return sum(f.file_size for f in self.files)
