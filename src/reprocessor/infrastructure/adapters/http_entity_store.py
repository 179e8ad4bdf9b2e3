"""Adapter for the entity and content store HTTP API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...application.ports.content_store import ContentStorePort
from ...application.ports.entity_store import EntityStorePort
from ...domain.errors import ContentNotFound, DownstreamUnavailable, EntityNotFound
from ...domain.models.entity import Entity

logger = logging.getLogger(__name__)

SERVICE = "entity_store"


class HttpEntityStore(EntityStorePort, ContentStorePort):
    """
    Typed client for the store API.

    Serves both entity reads (``GET /entities/{pi}``) and content downloads
    (``GET /cat/{cid}``). Transport failures and unexpected statuses are
    raised as DownstreamUnavailable so the retry wrapper can retry them;
    404s become EntityNotFound / ContentNotFound and are never retried.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = 30.0,
        max_connections: int = 16,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the store client.

        Args:
            base_url: Base URL of the store API
            token: Optional bearer token
            timeout_seconds: Per-request timeout
            max_connections: Connection pool size (should cover the component pool)
            client: Preconfigured httpx client (tests pass one with a MockTransport)
        """
        if client is None:
            if not base_url:
                raise ValueError("base_url must be non-empty")
            headers = {"Authorization": f"Bearer {token}"} if token else {}
            client = httpx.Client(
                base_url=base_url.rstrip("/"),
                headers=headers,
                timeout=timeout_seconds,
                limits=httpx.Limits(max_connections=max_connections),
            )
        self.client = client

    def _get(self, path: str) -> httpx.Response:
        try:
            return self.client.get(path)
        except httpx.HTTPError as e:
            raise DownstreamUnavailable(SERVICE, f"GET {path} failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, what: str) -> None:
        if response.is_success:
            return
        raise DownstreamUnavailable(
            SERVICE,
            f"Failed to fetch {what}: {response.status_code} {response.text}",
            details={"status_code": response.status_code},
        )

    def get_entity(self, entity_id: str) -> Entity:
        """Fetch an entity at its current version."""
        response = self._get(f"/entities/{entity_id}")
        if response.status_code == 404:
            raise EntityNotFound(entity_id)
        self._raise_for_status(response, f"entity {entity_id}")

        try:
            data: dict[str, Any] = response.json()
            return Entity.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise DownstreamUnavailable(
                SERVICE,
                f"Malformed entity payload for {entity_id}: {e}",
            ) from e

    def download(self, address: str) -> bytes:
        """Download raw content bytes."""
        response = self._get(f"/cat/{address}")
        if response.status_code == 404:
            raise ContentNotFound(address)
        self._raise_for_status(response, f"content {address}")
        return response.content

    def ping(self) -> bool:
        """Check the store answers at all (any status below 500)."""
        try:
            return self.client.get("/").status_code < 500
        except httpx.HTTPError as e:
            logger.debug(f"Entity store ping failed: {e}")
            return False

    def close(self) -> None:
        self.client.close()
