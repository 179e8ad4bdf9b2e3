"""Choice of the identifier at which the ancestor walk stops."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..types import ROOT_SENTINEL

if TYPE_CHECKING:
    from ..models.permissions import PermissionResult


def select_cascade_boundary(
    explicit_stop_id: str | None,
    permission: PermissionResult | None,
) -> str:
    """
    Pick the effective cascade stop identifier.

    Precedence:
    1. explicit client override
    2. root of the collection reported by the permission check
    3. the absolute-root sentinel (entity belongs to no collection)

    The permission check only ever covers the target entity. Collection
    membership is assumed to be transitive along the parent chain, so the
    collection root bounds every ancestor the walk can reach.
    """
    if explicit_stop_id:
        return explicit_stop_id
    if permission is not None and permission.collection is not None and permission.collection.root_id:
        return permission.collection.root_id
    return ROOT_SENTINEL
