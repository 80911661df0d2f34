"""Hierarchy walker port - cascade-aware ancestor traversal."""

import asyncio
from collections.abc import AsyncIterator
from typing import Protocol
from uuid import UUID

from bedrock.application.ports.unit_of_work import UnitOfWork
from bedrock.domain.entities import Resource, ResourceHierarchyEdge


class HierarchyWalker(Protocol):
    """Port for walking inheriting ancestors of a resource, nearest first."""

    def ancestors_with_cascade(
        self,
        uow: UnitOfWork,
        resource_id: UUID,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[tuple[Resource, ResourceHierarchyEdge]]: ...
