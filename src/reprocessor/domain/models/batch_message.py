"""Domain model for the queue message that announces a reprocessing batch."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any

    from .manifest import BatchManifest

UPLOADER = "reprocessor-api"


@dataclass(frozen=True)
class BatchMessage:
    """
    Message sent to the batch queue once a manifest is staged.

    ``reprocessing_mode`` tells the orchestrator to skip discovery and update
    the entities named in the manifest.
    """

    batch_id: str
    manifest_location: str
    staging_prefix: str
    total_files: int
    total_bytes: int
    uploaded_at: str
    finalized_at: str
    uploader: str = UPLOADER
    root_path: str = "/"
    metadata: dict[str, Any] = field(default_factory=dict)
    reprocessing_mode: bool = True
    custom_prompts: dict[str, str] | None = None
    custom_note: str | None = None

    @classmethod
    def for_manifest(
        cls,
        manifest: BatchManifest,
        manifest_location: str,
        staging_prefix: str,
        custom_prompts: dict[str, str] | None = None,
        custom_note: str | None = None,
        now: datetime | None = None,
    ) -> BatchMessage:
        """Build the message for a staged manifest, copying its totals."""
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        return cls(
            batch_id=manifest.batch_id,
            manifest_location=manifest_location,
            staging_prefix=staging_prefix,
            total_files=manifest.total_files,
            total_bytes=manifest.total_bytes,
            uploaded_at=timestamp,
            finalized_at=timestamp,
            custom_prompts=custom_prompts,
            custom_note=custom_note,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict (optional fields omitted when unset)."""
        result: dict[str, Any] = {
            "batch_id": self.batch_id,
            "manifest_location": self.manifest_location,
            "staging_prefix": self.staging_prefix,
            "uploader": self.uploader,
            "root_path": self.root_path,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "uploaded_at": self.uploaded_at,
            "finalized_at": self.finalized_at,
            "metadata": dict(self.metadata),
            "reprocessing_mode": self.reprocessing_mode,
        }
        if self.custom_prompts is not None:
            result["custom_prompts"] = dict(self.custom_prompts)
        if self.custom_note is not None:
            result["custom_note"] = self.custom_note
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
