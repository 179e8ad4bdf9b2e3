"""Adapter for the collections permission service."""

from __future__ import annotations

import logging

import httpx

from ...application.ports.permission_checker import PermissionCheckerPort
from ...domain.errors import DownstreamUnavailable
from ...domain.models.permissions import PermissionResult

logger = logging.getLogger(__name__)

SERVICE = "permissions"


class HttpPermissionChecker(PermissionCheckerPort):
    """
    Calls ``GET /pi/{pi}/permissions`` on the collections service.

    The service decides:
    - entity in no collection -> anyone can edit
    - entity in a collection -> only owners and editors can edit
    and reports the collection root, which bounds the cascade.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if client is None:
            if not base_url:
                raise ValueError("base_url must be non-empty")
            client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout_seconds)
        self.client = client

    def check(self, entity_id: str, actor: str | None = None) -> PermissionResult:
        """Ask the service whether ``actor`` may edit ``entity_id``."""
        headers = {"X-User-Id": actor} if actor else {}
        path = f"/pi/{entity_id}/permissions"

        try:
            response = self.client.get(path, headers=headers)
        except httpx.HTTPError as e:
            raise DownstreamUnavailable(SERVICE, f"Permission check for {entity_id} failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"Failed to check permissions for {entity_id}: {response.status_code}",
                extra={"entity_id": entity_id, "status_code": response.status_code},
            )
            raise DownstreamUnavailable(
                SERVICE,
                f"Permission check for {entity_id} failed: {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            return PermissionResult.from_dict(response.json())
        except (ValueError, AttributeError) as e:
            raise DownstreamUnavailable(SERVICE, f"Malformed permission payload for {entity_id}") from e

    def ping(self) -> bool:
        """Check the service answers at all (any status below 500)."""
        try:
            return self.client.get("/").status_code < 500
        except httpx.HTTPError as e:
            logger.debug(f"Permission service ping failed: {e}")
            return False

    def close(self) -> None:
        self.client.close()
