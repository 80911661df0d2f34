"""Resource hierarchy walker - cascade-aware ancestor traversal with cycle protection."""

import asyncio
import logging
from collections.abc import AsyncIterator
from uuid import UUID

from bedrock.application.ports import UnitOfWork
from bedrock.domain.entities import Resource, ResourceHierarchyEdge
from bedrock.domain.exceptions import (
    EvaluationCancelled,
    HierarchyCycleError,
    HierarchyDepthExceeded,
    NotFound,
)
from bedrock.domain.value_objects import CascadeMode

logger = logging.getLogger(__name__)


class ResourceHierarchyWalker:
    """Yields the inheriting ancestors of a resource, nearest first.

    Traversal is breadth-first; the parent edges of one level are fetched
    concurrently. An edge with ``cascade = none`` is neither yielded nor
    followed, which blocks only the path through that edge. Diamonds are
    visited once; a cycle among followed edges raises HierarchyCycleError.
    """

    def __init__(self, max_depth: int = 32) -> None:
        self._max_depth = max_depth

    async def ancestors_with_cascade(
        self,
        uow: UnitOfWork,
        resource_id: UUID,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[tuple[Resource, ResourceHierarchyEdge]]:
        """Async generator of ``(ancestor, edge)``; edge is the hop that reached the ancestor."""
        visited: set[UUID] = {resource_id}
        parents_of: dict[UUID, list[UUID]] = {}
        frontier = [resource_id]
        depth = 0

        while frontier:
            _check_cancelled(cancel_event)
            depth += 1
            edge_lists = await asyncio.gather(
                *(uow.resources.list_parent_edges(child_id) for child_id in frontier)
            )

            reached: list[ResourceHierarchyEdge] = []
            for child_id, edges in zip(frontier, edge_lists):
                for edge in edges:
                    if not CascadeMode(edge.cascade).propagates:
                        logger.debug(
                            "Cascade blocked on edge %s -> %s", edge.parent_id, child_id
                        )
                        continue
                    parent_id = edge.parent_id
                    parents_of.setdefault(child_id, []).append(parent_id)
                    if parent_id in visited:
                        if _reaches(parents_of, parent_id, child_id):
                            logger.warning(
                                "Cycle in resource hierarchy at edge %s -> %s",
                                parent_id,
                                child_id,
                            )
                            raise HierarchyCycleError(child_id, parent_id)
                        continue
                    if depth > self._max_depth:
                        raise HierarchyDepthExceeded(
                            f"Resource hierarchy above {resource_id} deeper than {self._max_depth}"
                        )
                    visited.add(parent_id)
                    reached.append(edge)

            if not reached:
                return
            parents = await asyncio.gather(
                *(uow.resources.get_by_id(edge.parent_id) for edge in reached)
            )
            for edge, parent in zip(reached, parents):
                _check_cancelled(cancel_event)
                if parent is None:
                    raise NotFound("Resource", edge.parent_id)
                yield parent, edge
            frontier = [edge.parent_id for edge in reached]


def _reaches(parents_of: dict[UUID, list[UUID]], start: UUID, target: UUID) -> bool:
    """True when target is start or an ancestor of start along followed edges."""
    stack = [start]
    seen: set[UUID] = set()
    while stack:
        node = stack.pop()
        if node == target:
            return True
        if node in seen:
            continue
        seen.add(node)
        stack.extend(parents_of.get(node, ()))
    return False


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise EvaluationCancelled("Evaluation cancelled during hierarchy traversal")
