"""SQS batch queue adapter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ...application.ports.batch_queue import BatchQueuePort
from ...domain.errors import DownstreamUnavailable

if TYPE_CHECKING:
    from ...domain.models.batch_message import BatchMessage

logger = logging.getLogger(__name__)

SERVICE = "queue"


class SqsBatchQueue(BatchQueuePort):
    """Sends batch messages as JSON bodies to an SQS queue."""

    def __init__(
        self,
        queue_url: str,
        region: str = "us-east-1",
        client: Any | None = None,
    ) -> None:
        if not queue_url:
            raise ValueError("queue_url must be non-empty")
        self.queue_url = queue_url
        self.client = client or boto3.client("sqs", region_name=region)

    def send(self, message: BatchMessage) -> None:
        """Send one message; the batch id travels as a message attribute."""
        try:
            response = self.client.send_message(
                QueueUrl=self.queue_url,
                MessageBody=message.to_json(),
                MessageAttributes={
                    "batch_id": {"DataType": "String", "StringValue": message.batch_id},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise DownstreamUnavailable(
                SERVICE,
                f"Failed to send batch {message.batch_id}: {e}",
                details={"queue_url": self.queue_url},
            ) from e

        logger.debug(
            f"Sent batch {message.batch_id} to queue",
            extra={"batch_id": message.batch_id, "message_id": response.get("MessageId")},
        )

    def ping(self) -> bool:
        """Check the queue exists and is reachable."""
        try:
            self.client.get_queue_attributes(QueueUrl=self.queue_url, AttributeNames=["QueueArn"])
            return True
        except (ClientError, BotoCoreError) as e:
            logger.debug(f"Batch queue check failed: {e}")
            return False
