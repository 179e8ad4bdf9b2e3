"""Use case for the reprocessing request surface: validate, authorize, run."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pydantic

from ... import __version__
from ...domain.errors import (
    DepthExceeded,
    DownstreamUnavailable,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from ...domain.models.permissions import PermissionResult
from ...domain.policy.cascade_policy import select_cascade_boundary
from ..dto.reprocess import ErrorResponse, ReprocessJob, ReprocessRequest, ReprocessResult
from ..ports.permission_checker import PermissionCheckerPort

logger = logging.getLogger(__name__)

SERVICE_NAME = "reprocessor-api"

# Status code per error kind; anything else is a 500
ERROR_STATUS: list[tuple[type[Exception], int, str]] = [
    (ValidationError, 400, "VALIDATION_ERROR"),
    (PermissionDenied, 403, "FORBIDDEN"),
    (NotFoundError, 404, "NOT_FOUND"),
    (DepthExceeded, 422, "DEPTH_EXCEEDED"),
    (DownstreamUnavailable, 503, "DOWNSTREAM_UNAVAILABLE"),
]


def service_info() -> dict[str, str]:
    """Health-check payload."""
    return {"service": SERVICE_NAME, "version": __version__, "status": "ok"}


def parse_request(payload: Any) -> ReprocessRequest:
    """
    Validate a raw request body.

    Raises:
        ValidationError: With the first problem found, worded for the caller
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON in request body")
    if not payload.get("pi"):
        raise ValidationError("Missing required field: pi", field="pi")
    if not isinstance(payload.get("phases"), list):
        raise ValidationError("Missing or invalid field: phases (must be non-empty array)", field="phases")

    try:
        return ReprocessRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        if first["type"] == "value_error":
            message = str(first["msg"]).removeprefix("Value error, ")
        elif first["type"] == "missing":
            message = f"Missing required field: {field}"
        else:
            message = f"Invalid field {field}: {first['msg']}"
        raise ValidationError(message, field=field) from e


def authorize_reprocess(
    permission_checker: PermissionCheckerPort,
    entity_id: str,
    actor: str | None,
) -> PermissionResult:
    """
    Check the actor may reprocess the target entity.

    Only the target is checked. Ancestors reached by the cascade are covered
    by the same answer, because the walk stops at the target's collection root.

    Raises:
        PermissionDenied: If the actor may not edit the entity
    """
    permission = permission_checker.check(entity_id, actor)
    if not permission.can_edit:
        if permission.collection is not None and permission.collection.title:
            reason = f'Not authorized to reprocess entities in collection "{permission.collection.title}"'
        else:
            reason = "Not authorized to reprocess this entity"
        raise PermissionDenied(entity_id, actor, reason)

    logger.info(
        f"Actor {actor or 'anonymous'} can reprocess {entity_id}",
        extra={
            "entity_id": entity_id,
            "actor": actor,
            "collection_root": permission.collection.root_id if permission.collection else None,
        },
    )
    return permission


def error_response(error: Exception) -> tuple[int, dict[str, Any]]:
    """Map an exception to a status code and structured body."""
    for error_type, status, code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status, ErrorResponse(error=code, message=str(error)).model_dump()
    return 500, ErrorResponse(
        error="INTERNAL_ERROR",
        message=str(error) or "An internal error occurred",
    ).model_dump()


def handle_reprocess_request(
    payload: Any,
    actor: str | None,
    permission_checker: PermissionCheckerPort,
    run_job: Callable[[ReprocessJob], ReprocessResult],
) -> tuple[int, dict[str, Any]]:
    """
    Serve one reprocessing request end to end.

    Args:
        payload: Decoded request body
        actor: Actor identifier supplied by the gateway (None if anonymous)
        permission_checker: Authorization service adapter
        run_job: Runs the pipeline for a validated job (usually a bound
            ``reprocess_entity``)

    Returns:
        (status_code, body): 200 with a ReprocessResult body, or an error
        status with ``{error, message}``
    """
    try:
        request = parse_request(payload)
        permission = authorize_reprocess(permission_checker, request.pi, actor)
        stop_at_pi = select_cascade_boundary(request.options.stop_at_pi, permission)

        job = ReprocessJob(
            pi=request.pi,
            phases=request.phases,
            cascade=request.cascade,
            stop_at_pi=stop_at_pi,
            custom_prompts=request.options.custom_prompts,
            custom_note=request.options.custom_note,
        )
        result = run_job(job)
    except Exception as e:
        status, body = error_response(e)
        if status >= 500:
            logger.error(f"Reprocess request failed: {e}", exc_info=True, extra={"status": status})
        else:
            logger.warning(f"Reprocess request rejected: {e}", extra={"status": status})
        return status, body

    return 200, result.model_dump()
