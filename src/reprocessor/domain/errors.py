"""Domain errors for the reprocessing pipeline."""

from __future__ import annotations

from typing import Any


class ValidationError(Exception):
    """
    Raised when a reprocessing request is malformed or invalid.

    Attributes:
        message: Human-readable description of the problem
        field: Offending request field (optional)
    """

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class NotFoundError(Exception):
    """Base class for missing entities or content."""

    error_code = "NOT_FOUND"


class EntityNotFound(NotFoundError):
    """
    Raised when the entity store has no entity for an identifier.

    Attributes:
        entity_id: Identifier that was not found
    """

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Entity not found: {entity_id}")


class ContentNotFound(NotFoundError):
    """
    Raised when the content store has no bytes for a content address.

    Attributes:
        address: Content address that was not found
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Content not found: {address}")


class DepthExceeded(Exception):
    """
    Raised when the ancestor walk hits the hop ceiling.

    Attributes:
        entity_id: Target identifier the walk started from
        max_hops: Configured hop ceiling
    """

    error_code = "DEPTH_EXCEEDED"

    def __init__(self, entity_id: str, max_hops: int, message: str | None = None) -> None:
        self.entity_id = entity_id
        self.max_hops = max_hops
        super().__init__(
            message
            or f"Max depth {max_hops} reached while resolving parent chain for {entity_id}"
        )


class CycleDetected(DepthExceeded):
    """
    Raised when the ancestor walk revisits an identifier.

    Attributes:
        entity_id: Target identifier the walk started from
        repeated_id: Identifier that appeared twice in the chain
    """

    def __init__(self, entity_id: str, repeated_id: str, max_hops: int) -> None:
        self.repeated_id = repeated_id
        super().__init__(
            entity_id,
            max_hops,
            message=f"Parent chain for {entity_id} loops back to {repeated_id}",
        )


class PermissionDenied(Exception):
    """
    Raised when the actor may not reprocess the target entity.

    Attributes:
        entity_id: Target identifier
        actor: Actor identifier (None for anonymous requests)
        reason: Reason reported to the caller
    """

    error_code = "FORBIDDEN"

    def __init__(self, entity_id: str, actor: str | None, reason: str) -> None:
        self.entity_id = entity_id
        self.actor = actor
        self.reason = reason
        super().__init__(reason)


class DownstreamUnavailable(Exception):
    """
    Raised when the entity store, staging store, queue or permission service fails.

    Attributes:
        service: Collaborator name (entity_store, staging, queue, permissions)
        message: Error message
        details: Additional error details (status code, response body)
    """

    error_code = "DOWNSTREAM_UNAVAILABLE"

    def __init__(
        self,
        service: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.service = service
        self.message = message
        self.details = details or {}
        super().__init__(f"{service}: {message}")


class InternalError(Exception):
    """Raised for unexpected failures inside the pipeline."""

    error_code = "INTERNAL_ERROR"


# Failures that retrying the same call cannot fix
NON_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    ValidationError,
    NotFoundError,
    PermissionDenied,
    DepthExceeded,
)
