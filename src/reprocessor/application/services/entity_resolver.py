"""Application service resolving which entities a batch covers."""

from __future__ import annotations

from functools import partial

from ...domain.errors import CycleDetected, DepthExceeded
from ...domain.policy.retry_policy import RetryPolicy
from ..ports.entity_store import EntityStorePort
from .retry import call_with_retry

DEFAULT_MAX_HOPS = 100


class EntityResolver:
    """
    Turns a target identifier into the ordered list of entities to reprocess.

    Performs no I/O other than entity fetches, and no logging, so it can be
    driven directly from unit tests with an in-memory store.
    """

    def __init__(
        self,
        entity_store: EntityStorePort,
        retry_policy: RetryPolicy | None = None,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> None:
        if max_hops < 1:
            raise ValueError(f"max_hops must be >= 1, got {max_hops}")
        self.entity_store = entity_store
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_hops = max_hops

    def resolve_chain(self, target_id: str, cascade: bool, stop_id: str) -> list[str]:
        """
        Resolve the target, plus its ancestors when cascading.

        The walk fetches the current entity and stops when it has no parent,
        its parent is the root sentinel, or its parent is ``stop_id``;
        otherwise the parent is appended and becomes current.

        Args:
            target_id: Entity the request names
            cascade: Whether to walk up the parent chain
            stop_id: Identifier at which the walk halts (not included)

        Returns:
            Identifiers leaf first: target, parent, grandparent, ...

        Raises:
            EntityNotFound: If any entity on the walk is missing
            DepthExceeded: If the hop ceiling is reached
            CycleDetected: If the chain revisits an identifier
        """
        if not cascade:
            return [target_id]

        chain = [target_id]
        visited = {target_id}
        current = target_id

        for _ in range(self.max_hops):
            entity = call_with_retry(
                partial(self.entity_store.get_entity, current),
                self.retry_policy,
                operation=f"fetch entity {current}",
            )
            parent = entity.parent_pi
            if not entity.has_parent() or parent == stop_id:
                return chain
            if parent in visited:
                raise CycleDetected(target_id, parent, self.max_hops)

            chain.append(parent)
            visited.add(parent)
            current = parent

        raise DepthExceeded(target_id, self.max_hops)
