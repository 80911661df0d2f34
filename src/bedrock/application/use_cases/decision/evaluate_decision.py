"""Evaluate decision use case - the decision engine.

Phases run in a fixed order and each may end the evaluation early:

    Resolving Resource -> Policy Phase -> Hierarchy Phase -> Role Phase -> Decided

Without a resource, the Policy and Hierarchy phases are skipped. The use
case keeps no state between calls; every call reads one store snapshot
through its own unit of work.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from bedrock.application.dto.decision_dto import (
    Decision,
    DecisionMatch,
    EvaluationInput,
    ResourceRef,
)
from bedrock.application.dto.grant_dto import EffectiveGrant
from bedrock.application.ports import (
    HierarchyWalker,
    PolicyEvaluator,
    RoleResolver,
    UnitOfWork,
)
from bedrock.domain.entities import Resource, Scope, Subject
from bedrock.domain.exceptions import (
    BedrockError,
    DecisionError,
    EvaluationCancelled,
    IntegrityError,
    NotFound,
    ValidationError,
)
from bedrock.infrastructure.evaluation.scope_chain import load_scope_chain

logger = logging.getLogger(__name__)


class EvaluateDecisionUseCase:
    """Produce an allow/deny decision for a subject, action, optional resource and scope."""

    def __init__(
        self,
        unit_of_work_factory: type,
        policy_evaluator: PolicyEvaluator,
        hierarchy_walker: HierarchyWalker,
        role_resolver: RoleResolver,
        max_scope_depth: int = 32,
        enforce_scope_association: bool = True,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._policy_evaluator = policy_evaluator
        self._hierarchy_walker = hierarchy_walker
        self._role_resolver = role_resolver
        self._max_scope_depth = max_scope_depth
        self._enforce_scope_association = enforce_scope_association

    async def execute(
        self,
        input_data: EvaluationInput,
        cancel_event: asyncio.Event | None = None,
    ) -> Decision:
        """Evaluate one request.

        Raises:
            NotFound: unknown subject, scope or resource.
            IntegrityError: cyclic or over-deep resource/scope hierarchy.
            StoreUnavailable: the store failed; not retried here.
            EvaluationCancelled: cancel_event was set before a decision was reached.
            DecisionError: any other failure. No error ever results in an allow.
        """
        try:
            decision = await self._evaluate(input_data, cancel_event)
        except IntegrityError as exc:
            logger.warning("Integrity error evaluating %s: %s", input_data.action, exc)
            raise
        except BedrockError:
            raise
        except Exception as exc:
            logger.exception(
                "Decision failed for actor=%s action=%s", input_data.actor, input_data.action
            )
            raise DecisionError(f"Failed to evaluate {input_data.action}") from exc

        logger.debug(
            "Decision actor=%s action=%s allowed=%s: %s",
            input_data.actor,
            input_data.action,
            decision.allowed,
            decision.explanation,
        )
        return decision

    async def _evaluate(
        self, input_data: EvaluationInput, cancel_event: asyncio.Event | None
    ) -> Decision:
        if not input_data.action:
            raise ValidationError("action is required")
        _check_cancelled(cancel_event)

        async with self._uow_factory() as uow:
            # Resolving resource
            subject, chain = await asyncio.gather(
                _load_subject(uow, input_data.actor),
                load_scope_chain(uow, input_data.scope_id, max_depth=self._max_scope_depth),
            )
            principal = None
            if input_data.on_behalf_of:
                principal = await _load_subject(uow, input_data.on_behalf_of)
            resource = None
            tags: dict[str, str | None] = {}
            if input_data.resource is not None:
                resource = await _resolve_resource(uow, input_data.resource)
                tags = {t.key: t.label for t in await uow.resources.list_tags(resource.id)}

            scope_ids = [s.id for s in chain]
            context = build_context(input_data, subject, principal, chain[0], resource, tags)

            owner_ids: list[UUID] = []
            link_ids: list[UUID] = []
            if resource is not None:
                owner_ids, link_ids = await self._resource_scopes(uow, resource)

            if (
                resource is not None
                and self._enforce_scope_association
                and not _associated(scope_ids, owner_ids, link_ids)
            ):
                return Decision(
                    allowed=False,
                    explanation=(
                        f"Resource {resource.identifier} is not associated with scope "
                        f"{chain[0].name}"
                    ),
                    matches=[
                        DecisionMatch(
                            phase="scope",
                            reference=str(resource.id),
                            effect="deny",
                            detail="not owned by or linked to the scope chain",
                        )
                    ],
                )

            # Policy phase
            if resource is not None:
                _check_cancelled(cancel_event)
                decision = await self._policy_evaluator.decide(
                    uow,
                    resource,
                    input_data.action,
                    subject,
                    context,
                    list(dict.fromkeys([*scope_ids, *owner_ids, *link_ids])),
                    tags,
                )
                if decision is not None:
                    return decision

            _check_cancelled(cancel_event)
            grants = await self._role_resolver.load_grants(
                uow, subject.id, input_data.scope_id
            )

            # Hierarchy phase
            if resource is not None:
                async for ancestor, edge in self._hierarchy_walker.ancestors_with_cascade(
                    uow, resource.id, cancel_event
                ):
                    ancestor_tags = {
                        t.key: t.label for t in await uow.resources.list_tags(ancestor.id)
                    }
                    ancestor_context = _with_resource(context, ancestor, ancestor_tags)
                    grant = self._role_resolver.find_grant(
                        grants,
                        input_data.action,
                        ancestor.resource_type_id,
                        ancestor.identifier,
                        ancestor_context,
                    )
                    if grant is not None:
                        return Decision(
                            allowed=True,
                            explanation=(
                                f"Role {grant.role.name} allows {input_data.action} on "
                                f"{ancestor.identifier}, inherited by {resource.identifier}"
                            ),
                            matches=[
                                DecisionMatch(
                                    phase="hierarchy",
                                    reference=str(ancestor.id),
                                    effect="allow",
                                    detail=f"cascade {edge.cascade} from {ancestor.identifier}",
                                ),
                                _role_match(grant),
                            ],
                            inherited_from=ancestor.id,
                        )

            # Role phase
            _check_cancelled(cancel_event)
            grant = self._role_resolver.find_grant(
                grants,
                input_data.action,
                resource.resource_type_id if resource is not None else None,
                resource.identifier if resource is not None else None,
                context,
            )
            if grant is not None:
                return Decision(
                    allowed=True,
                    explanation=f"Role {grant.role.name} grants {grant.permission.key}",
                    matches=[_role_match(grant)],
                )
            target = f" on {resource.identifier}" if resource is not None else ""
            return Decision(
                allowed=False,
                explanation=f"No policy, inherited or role grant allows {input_data.action}{target}",
            )

    async def _resource_scopes(
        self, uow: UnitOfWork, resource: Resource
    ) -> tuple[list[UUID], list[UUID]]:
        """Owner scope chain (nearest first) and linked scope ids of a resource."""
        owner_chain, links = await asyncio.gather(
            load_scope_chain(uow, resource.owner_scope_id, max_depth=self._max_scope_depth),
            uow.resources.list_scope_links(resource.id),
        )
        return [s.id for s in owner_chain], [link.scope_id for link in links]


def _associated(scope_ids: list[UUID], owner_ids: list[UUID], link_ids: list[UUID]) -> bool:
    """Owned by or linked to the scope chain, or owned below the request scope."""
    if owner_ids[0] in scope_ids:
        return True
    if any(scope_id in scope_ids for scope_id in link_ids):
        return True
    return scope_ids[0] in owner_ids


def build_context(
    input_data: EvaluationInput,
    subject: Subject,
    principal: Subject | None,
    scope: Scope,
    resource: Resource | None,
    tags: dict[str, str | None],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Assemble the read-only condition context. Engine keys override caller keys."""
    now = now or datetime.now(UTC)
    context: dict[str, Any] = dict(input_data.context)
    context.update(
        {
            "subject": subject.context_view(),
            "actor": {"id": subject.id, "type": str(subject.subject_type)},
            "principal": principal.context_view() if principal is not None else None,
            "action": input_data.action,
            "scope": {
                "id": str(scope.id),
                "name": scope.name,
                "type": scope.scope_type,
            },
            "time": {
                "now": now,
                "iso": now.isoformat(),
                "timestamp": now.timestamp(),
                "hour": now.hour,
                "weekday": now.weekday(),
            },
        }
    )
    if resource is not None:
        context = _with_resource(context, resource, tags)
    return context


def _with_resource(
    context: dict[str, Any], resource: Resource, tags: dict[str, str | None]
) -> dict[str, Any]:
    return {
        **context,
        "resource": resource.context_view(),
        "data": dict(resource.data),
        "tags": dict(tags),
    }


async def _load_subject(uow: UnitOfWork, subject_id: str) -> Subject:
    subject = await uow.subjects.get_by_id(subject_id)
    if subject is None:
        raise NotFound("Subject", subject_id)
    return subject


async def _resolve_resource(uow: UnitOfWork, ref: ResourceRef) -> Resource:
    if ref.id is not None:
        resource = await uow.resources.get_by_id(ref.id)
        if resource is not None and resource.resource_type_id != ref.resource_type_id:
            resource = None
        identifier: object = ref.id
    elif ref.external_id:
        resource = await uow.resources.get_by_external_id(ref.resource_type_id, ref.external_id)
        identifier = f"{ref.resource_type_id}/{ref.external_id}"
    else:
        raise ValidationError("resource reference needs an id or an external_id")
    if resource is None:
        raise NotFound("Resource", identifier)
    return resource


def _role_match(grant: EffectiveGrant) -> DecisionMatch:
    detail = grant.permission.key
    if grant.condition is not None:
        detail += " (override condition)" if grant.overridden else " (conditional)"
    return DecisionMatch(
        phase="role",
        reference=str(grant.role.id),
        effect="allow",
        detail=detail,
    )


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise EvaluationCancelled("Evaluation cancelled")
