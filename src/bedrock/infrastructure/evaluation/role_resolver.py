"""Scope/role graph resolver - role-based grants with three-tier overrides."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from bedrock.application.dto.grant_dto import EffectiveGrant
from bedrock.application.ports import UnitOfWork
from bedrock.domain.conditions import DEFAULT_MAX_DEPTH, evaluate
from bedrock.domain.entities import (
    Permission,
    PermissionOverride,
    RoleOverride,
    RolePermission,
    RolePermissionOverride,
)
from bedrock.domain.services.resource_pattern import (
    WILDCARD_PATTERNS,
    match_resource_pattern,
)
from bedrock.domain.value_objects import OverrideState
from bedrock.infrastructure.evaluation.scope_chain import load_scope_chain, visible_scopes

logger = logging.getLogger(__name__)

# Tie-break at equal scope distance: the more specific tier wins.
_TIER_RANK = {"role_permission": 0, "permission": 1, "role": 2}

_Override = RoleOverride | PermissionOverride | RolePermissionOverride


@dataclass(frozen=True)
class _Ruling:
    distance: int
    rank: int
    override: _Override


class ScopeRoleResolver:
    """Resolves whether a subject's roles grant an action within a scope.

    Roles come from memberships on the scope chain (the target scope and its
    ancestors up to and including the first DEFINE scope). Overrides on the
    same chain are applied nearest scope first; a grant survives when no
    nearer override turns it off. Any surviving edge whose condition passes
    grants access.
    """

    def __init__(
        self,
        max_scope_depth: int = 32,
        condition_max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._max_scope_depth = max_scope_depth
        self._condition_max_depth = condition_max_depth

    async def resolve(
        self,
        uow: UnitOfWork,
        subject_id: str,
        scope_id: UUID,
        action: str,
        resource_type_key: str | None,
        resource_pattern: str | None,
        context: Mapping[str, Any],
    ) -> bool:
        """True when any surviving grant edge allows the action."""
        grants = await self.load_grants(uow, subject_id, scope_id)
        grant = self.find_grant(grants, action, resource_type_key, resource_pattern, context)
        return grant is not None

    async def load_grants(
        self, uow: UnitOfWork, subject_id: str, scope_id: UUID
    ) -> list[EffectiveGrant]:
        """Load all grant edges of the subject that survive overrides at scope_id."""
        chain = visible_scopes(
            await load_scope_chain(uow, scope_id, max_depth=self._max_scope_depth)
        )
        scope_ids = [s.id for s in chain]
        distance = {sid: i for i, sid in enumerate(scope_ids)}

        memberships = await uow.subjects.list_memberships(subject_id, scope_ids)
        role_ids = list(dict.fromkeys(m.role_id for m in memberships))
        if not role_ids:
            return []

        roles, edges, role_overrides, rp_overrides = await asyncio.gather(
            uow.roles.get_by_ids(role_ids),
            uow.roles.list_role_permissions(role_ids),
            uow.overrides.list_role_overrides(scope_ids, role_ids),
            uow.overrides.list_role_permission_overrides(scope_ids, role_ids),
        )
        roles_by_id = {r.id: r for r in roles}

        base: dict[tuple[UUID, UUID], RolePermission] = {}
        for edge in edges:
            base.setdefault((edge.role_id, edge.permission_id), edge)
        pairs = list(base)
        for o in rp_overrides:
            pair = (o.role_id, o.permission_id)
            if pair not in base and pair not in pairs:
                pairs.append(pair)

        permission_ids = list(dict.fromkeys(pid for _, pid in pairs))
        if not permission_ids:
            return []
        permissions, permission_overrides = await asyncio.gather(
            uow.roles.get_permissions(permission_ids),
            uow.overrides.list_permission_overrides(scope_ids, permission_ids),
        )
        permissions_by_id = {p.id: p for p in permissions}

        role_tier = _nearest_by_key(role_overrides, distance, lambda o: o.role_id)
        permission_tier = _nearest_by_key(
            permission_overrides, distance, lambda o: o.permission_id
        )
        rp_tier = _nearest_by_key(
            rp_overrides, distance, lambda o: (o.role_id, o.permission_id)
        )
        replacements = _condition_replacements(rp_overrides, distance)

        grants: list[EffectiveGrant] = []
        for role_id, permission_id in pairs:
            role = roles_by_id.get(role_id)
            permission = permissions_by_id.get(permission_id)
            if role is None or permission is None:
                continue
            edge = base.get((role_id, permission_id))
            rp = rp_tier.get((role_id, permission_id))
            exists = edge is not None or (
                rp is not None and rp.override.state == OverrideState.ON
            )
            if not exists:
                continue

            rulings = [
                r
                for r in (role_tier.get(role_id), permission_tier.get(permission_id), rp)
                if r is not None
            ]
            if rulings:
                winner = min(rulings, key=lambda r: (r.distance, r.rank))
                if winner.override.state == OverrideState.OFF:
                    logger.debug(
                        "Grant %s -> %s switched off at scope %s",
                        role.name,
                        permission.key,
                        winner.override.scope_id,
                    )
                    continue

            condition = edge.condition if edge is not None else None
            overridden = False
            replacement = replacements.get((role_id, permission_id))
            if replacement is not None:
                condition = replacement.condition
                overridden = True
            grants.append(
                EffectiveGrant(
                    role=role,
                    permission=permission,
                    condition=condition,
                    overridden=overridden,
                )
            )
        return grants

    def find_grant(
        self,
        grants: list[EffectiveGrant],
        action: str,
        resource_type_key: str | None,
        resource_pattern: str | None,
        context: Mapping[str, Any],
    ) -> EffectiveGrant | None:
        """First grant matching the request whose condition passes, if any."""
        for grant in grants:
            if not permission_matches(
                grant.permission, action, resource_type_key, resource_pattern
            ):
                continue
            if evaluate(grant.condition, context, max_depth=self._condition_max_depth):
                return grant
        return None


def permission_matches(
    permission: Permission,
    action: str,
    resource_type_key: str | None,
    resource_pattern: str | None,
) -> bool:
    """Exact action, type equal or ``*``, identifier glob-matched by the pattern.

    Requests without a resource match only permissions that are not bound
    to a specific resource.
    """
    if permission.action != action:
        return False
    if resource_type_key is None:
        return permission.resource_type in (None, "", "*") and (
            not permission.resource_pattern or permission.resource_pattern in WILDCARD_PATTERNS
        )
    if permission.resource_type not in ("*", resource_type_key):
        return False
    if not permission.resource_pattern:
        return True
    if resource_pattern is None:
        return permission.resource_pattern in WILDCARD_PATTERNS
    return match_resource_pattern(permission.resource_pattern, resource_pattern)


def _nearest_by_key(overrides, distance: dict[UUID, int], key) -> dict[Any, _Ruling]:
    """Nearest explicit (on/off) override per key. Unset overrides carry no opinion."""
    nearest: dict[Any, _Ruling] = {}
    for o in overrides:
        if o.state == OverrideState.UNSET or o.scope_id not in distance:
            continue
        ruling = _Ruling(distance[o.scope_id], _tier_rank(o), o)
        k = key(o)
        current = nearest.get(k)
        if current is None or ruling.distance < current.distance:
            nearest[k] = ruling
        elif ruling.distance == current.distance and o.state == OverrideState.OFF:
            # Duplicate overrides at one scope resolve to off.
            nearest[k] = ruling
    return nearest


def _condition_replacements(
    overrides: list[RolePermissionOverride], distance: dict[UUID, int]
) -> dict[tuple[UUID, UUID], RolePermissionOverride]:
    """Nearest role-permission override per edge, kept when it is not off and carries a condition."""
    nearest: dict[tuple[UUID, UUID], tuple[int, RolePermissionOverride]] = {}
    for o in overrides:
        if o.scope_id not in distance:
            continue
        k = (o.role_id, o.permission_id)
        d = distance[o.scope_id]
        if k not in nearest or d < nearest[k][0]:
            nearest[k] = (d, o)
    return {
        k: o
        for k, (_, o) in nearest.items()
        if o.condition is not None and o.state != OverrideState.OFF
    }


def _tier_rank(override: _Override) -> int:
    if isinstance(override, RolePermissionOverride):
        return _TIER_RANK["role_permission"]
    if isinstance(override, PermissionOverride):
        return _TIER_RANK["permission"]
    return _TIER_RANK["role"]
