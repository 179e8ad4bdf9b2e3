"""Port interface for announcing batches to the processing pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.models.batch_message import BatchMessage


class BatchQueuePort(ABC):
    """Port for the batch queue."""

    @abstractmethod
    def send(self, message: BatchMessage) -> None:
        """
        Send one batch message.

        Args:
            message: Message describing a staged batch

        Raises:
            DownstreamUnavailable: If the queue rejects or cannot receive the message
        """
        pass
