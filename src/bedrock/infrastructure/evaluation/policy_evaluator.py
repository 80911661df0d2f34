"""Policy evaluator - explicit allow/deny policies on resources and collections."""

import asyncio
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from bedrock.application.dto.decision_dto import Decision, DecisionMatch
from bedrock.application.ports import UnitOfWork
from bedrock.domain.conditions import DEFAULT_MAX_DEPTH, evaluate
from bedrock.domain.entities import Resource, ResourceCollection, ResourcePolicy, Subject
from bedrock.domain.services import CollectionMatcher
from bedrock.domain.value_objects import PolicyEffect

logger = logging.getLogger(__name__)


class ResourcePolicyEvaluator:
    """Ranks applicable policies and returns the first one that applies.

    Candidates are the policies attached to the resource plus the policies
    of every collection the resource currently matches. Ordering is
    priority descending, then creation time, then id. Deny has no built-in
    precedence over allow beyond that ordering.
    """

    def __init__(
        self,
        matcher: CollectionMatcher,
        condition_max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._matcher = matcher
        self._condition_max_depth = condition_max_depth

    async def decide(
        self,
        uow: UnitOfWork,
        resource: Resource,
        action: str,
        subject: Subject,
        context: Mapping[str, Any],
        scope_ids: list[UUID],
        tags: Mapping[str, str | None],
    ) -> Decision | None:
        """Decision of the first applying policy, or None to fall through.

        Collections are searched in every scope of scope_ids.
        """
        direct, collections_per_scope = await asyncio.gather(
            uow.policies.list_for_resource(resource.id),
            asyncio.gather(
                *(
                    uow.collections.list_for_type(resource.resource_type_id, scope_id)
                    for scope_id in scope_ids
                )
            ),
        )

        now = _context_now(context)
        matched: dict[UUID, ResourceCollection] = {}
        for collections in collections_per_scope:
            for collection in collections:
                if collection.id in matched:
                    continue
                if self._matcher.matches(resource, resource.data, tags, collection.match, now=now):
                    matched[collection.id] = collection

        collection_policies = await asyncio.gather(
            *(uow.policies.list_for_collection(cid) for cid in matched)
        )

        candidates: dict[UUID, ResourcePolicy] = {}
        for policy in [*direct, *(p for ps in collection_policies for p in ps)]:
            candidates.setdefault(policy.id, policy)
        ranked = sorted(
            (p for p in candidates.values() if p.covers(action)),
            key=lambda p: (-p.priority, p.created_at, str(p.id)),
        )

        subject_context = {"subject": subject.context_view(), **context}
        for policy in ranked:
            if not evaluate(
                policy.subject_condition, subject_context, max_depth=self._condition_max_depth
            ):
                continue
            if not evaluate(
                policy.context_condition, context, max_depth=self._condition_max_depth
            ):
                continue
            return _decision_for(policy, action, matched.get(policy.collection_id))

        logger.debug(
            "No policy applies to %s on resource %s (%d candidates)",
            action,
            resource.id,
            len(ranked),
        )
        return None


def _decision_for(
    policy: ResourcePolicy, action: str, collection: ResourceCollection | None
) -> Decision:
    effect = PolicyEffect(policy.effect)
    allowed = effect == PolicyEffect.ALLOW
    label = policy.name or str(policy.id)
    via = f" via collection {collection.name}" if collection is not None else ""
    return Decision(
        allowed=allowed,
        explanation=f"Policy {label}{via} {'allows' if allowed else 'denies'} {action}",
        matches=[
            DecisionMatch(
                phase="policy",
                reference=str(policy.id),
                effect=str(effect),
                detail=f"priority {policy.priority}{via}",
            )
        ],
        evaluated_policy=policy.id,
    )


def _context_now(context: Mapping[str, Any]) -> datetime:
    time_ctx = context.get("time")
    if isinstance(time_ctx, Mapping) and isinstance(time_ctx.get("now"), datetime):
        return time_ctx["now"]
    return datetime.now(UTC)
