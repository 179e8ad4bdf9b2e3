"""Domain models for reprocessing batch manifests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


@dataclass(frozen=True)
class ProcessingConfig:
    """Per-directory switches for the downstream processing phases."""

    ocr: bool = False
    reorganize: bool = False
    pinax: bool = False
    cheimarros: bool = False
    describe: bool = False

    def enabled_phases(self) -> list[str]:
        """Names of the switches that are on."""
        return [name for name, value in self.to_dict().items() if value]

    def to_dict(self) -> dict[str, bool]:
        """Serialize to JSON-compatible dict."""
        return {
            "ocr": self.ocr,
            "reorganize": self.reorganize,
            "pinax": self.pinax,
            "cheimarros": self.cheimarros,
            "describe": self.describe,
        }


@dataclass(frozen=True)
class QueueFileInfo:
    """
    File entry as the downstream orchestrator expects it.

    Attributes:
        staging_key: Object key in the staging bucket
        logical_path: Path of the file inside its directory group
        file_name: File name
        file_size: Size in bytes
        content_type: MIME type
    """

    staging_key: str
    logical_path: str
    file_name: str
    file_size: int
    content_type: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "staging_key": self.staging_key,
            "logical_path": self.logical_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "content_type": self.content_type,
        }


@dataclass(frozen=True)
class DirectoryGroup:
    """
    One entity's slot in a batch manifest.

    File count and byte total are derived from ``files`` so they can never
    drift from the file list.

    Attributes:
        directory_path: Logical path, "/" + entity id
        processing_config: Phase switches for this directory
        files: Staged files
        existing_pi: Entity to update instead of creating a new one
        existing_children_paths: Logical paths of the entity's children
        existing_parent_path: Logical path of the parent (None if no parent)
    """

    directory_path: str
    processing_config: ProcessingConfig
    files: list[QueueFileInfo] = field(default_factory=list)
    existing_pi: str = ""
    existing_children_paths: list[str] = field(default_factory=list)
    existing_parent_path: str | None = None

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.file_size for f in self.files)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict (parent path omitted when absent)."""
        result: dict[str, Any] = {
            "directory_path": self.directory_path,
            "processing_config": self.processing_config.to_dict(),
            "file_count": self.file_count,
            "total_bytes": self.total_bytes,
            "files": [f.to_dict() for f in self.files],
            "existing_pi": self.existing_pi,
            "existing_children_paths": list(self.existing_children_paths),
        }
        if self.existing_parent_path is not None:
            result["existing_parent_path"] = self.existing_parent_path
        return result


@dataclass(frozen=True)
class BatchManifest:
    """
    Structured descriptor of one reprocessing batch.

    Attributes:
        batch_id: Batch identifier
        directories: One directory group per resolved entity, leaf first
    """

    batch_id: str
    directories: list[DirectoryGroup] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return sum(d.file_count for d in self.directories)

    @property
    def total_bytes(self) -> int:
        return sum(d.total_bytes for d in self.directories)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "batch_id": self.batch_id,
            "directories": [d.to_dict() for d in self.directories],
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
        }

    def to_json(self) -> str:
        """Serialize to the JSON document written next to the staged files."""
        return json.dumps(self.to_dict(), indent=2)

    def __post_init__(self) -> None:
        """Validate batch manifest."""
        if not self.batch_id:
            raise ValueError("batch_id must be non-empty")
