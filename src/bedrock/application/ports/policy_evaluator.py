"""Policy evaluator port - explicit resource and collection policies."""

from collections.abc import Mapping
from typing import Any, Protocol
from uuid import UUID

from bedrock.application.dto.decision_dto import Decision
from bedrock.application.ports.unit_of_work import UnitOfWork
from bedrock.domain.entities import Resource, Subject


class PolicyEvaluator(Protocol):
    """Port for deciding from resource/collection policies. None means no policy applied."""

    async def decide(
        self,
        uow: UnitOfWork,
        resource: Resource,
        action: str,
        subject: Subject,
        context: Mapping[str, Any],
        scope_ids: list[UUID],
        tags: Mapping[str, str | None],
    ) -> Decision | None: ...
