"""S3-compatible staging store adapter."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...application.ports.staging_store import StagingStorePort
from ...domain.errors import DownstreamUnavailable

logger = logging.getLogger(__name__)

SERVICE = "staging"


def _s3_client(endpoint_url: str | None, region: str, max_pool_connections: int) -> Any:
    client_kwargs: dict[str, Any] = {
        "service_name": "s3",
        "region_name": region,
        "config": Config(signature_version="s3v4", max_pool_connections=max_pool_connections),
    }
    if endpoint_url:
        client_kwargs["endpoint_url"] = endpoint_url
    return boto3.client(**client_kwargs)


class S3StagingStore(StagingStorePort):
    """
    Writes staged objects to an S3-compatible bucket.

    Works with AWS S3, MinIO, R2 and other S3-compatible services.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        region: str = "us-east-1",
        max_pool_connections: int = 16,
        client: Any | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("bucket must be non-empty")
        self.bucket = bucket
        self.client = client or _s3_client(endpoint_url, region, max_pool_connections)

        logger.debug(
            "S3 staging store initialized",
            extra={"bucket": bucket, "endpoint": endpoint_url, "region": region},
        )

    def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        """Write one object."""
        extra_args: dict[str, Any] = {}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra_args)
        except (ClientError, BotoCoreError) as e:
            raise DownstreamUnavailable(
                SERVICE,
                f"Failed to write {key} to {self.bucket}: {e}",
                details={"bucket": self.bucket, "key": key},
            ) from e

    def ping(self) -> bool:
        """Check the bucket exists and is reachable."""
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.debug(f"Staging bucket check failed: {e}")
            return False
