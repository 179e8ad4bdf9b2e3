"""Domain models for reprocessing batches."""

from .batch_message import BatchMessage
from .entity import Entity
from .manifest import BatchManifest, DirectoryGroup, ProcessingConfig, QueueFileInfo
from .materialized import FileInfo, MaterializedEntity
from .permissions import CollectionInfo, PermissionResult

__all__ = [
    "BatchMessage",
    "Entity",
    "BatchManifest",
    "DirectoryGroup",
    "ProcessingConfig",
    "QueueFileInfo",
    "FileInfo",
    "MaterializedEntity",
    "CollectionInfo",
    "PermissionResult",
]
