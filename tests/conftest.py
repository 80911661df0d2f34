"""Pytest fixtures for Bedrock tests."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest

from bedrock.application.use_cases.decision.evaluate_decision import EvaluateDecisionUseCase
from bedrock.domain.entities import (
    Membership,
    Permission,
    PermissionOverride,
    Resource,
    ResourceCollection,
    ResourceHierarchyEdge,
    ResourcePolicy,
    ResourceScopeLink,
    ResourceTag,
    Role,
    RoleOverride,
    RolePermission,
    RolePermissionOverride,
    Scope,
    Subject,
)
from bedrock.domain.services import CollectionMatcher
from bedrock.domain.value_objects import (
    CascadeMode,
    LinkType,
    OverrideState,
    PolicyEffect,
    ScopeMode,
    SubjectType,
)
from bedrock.infrastructure.evaluation import (
    ResourceHierarchyWalker,
    ResourcePolicyEvaluator,
    ScopeRoleResolver,
)


# --- Fake repositories ---


class FakeScopeRepository:
    """In-memory scope repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Scope] = {}

    async def get_by_id(self, scope_id: UUID) -> Scope | None:
        return self._by_id.get(scope_id)

    def add(self, scope: Scope) -> Scope:
        self._by_id[scope.id] = scope
        return scope


class FakeSubjectRepository:
    """In-memory subject and membership repository."""

    def __init__(self) -> None:
        self._by_id: dict[str, Subject] = {}
        self._memberships: list[Membership] = []

    async def get_by_id(self, subject_id: str) -> Subject | None:
        return self._by_id.get(subject_id)

    async def list_memberships(self, subject_id: str, scope_ids: list[UUID]) -> list[Membership]:
        return [
            m
            for m in self._memberships
            if m.subject_id == subject_id and m.scope_id in scope_ids
        ]

    def add(self, subject: Subject) -> Subject:
        self._by_id[subject.id] = subject
        return subject

    def add_membership(self, membership: Membership) -> None:
        self._memberships.append(membership)


class FakeRoleRepository:
    """In-memory role, permission and grant edge repository."""

    def __init__(self) -> None:
        self._roles: dict[UUID, Role] = {}
        self._permissions: dict[UUID, Permission] = {}
        self._edges: list[RolePermission] = []

    async def get_by_ids(self, role_ids: list[UUID]) -> list[Role]:
        return [self._roles[r] for r in role_ids if r in self._roles]

    async def list_role_permissions(self, role_ids: list[UUID]) -> list[RolePermission]:
        return [e for e in self._edges if e.role_id in role_ids]

    async def get_permissions(self, permission_ids: list[UUID]) -> list[Permission]:
        return [self._permissions[p] for p in permission_ids if p in self._permissions]

    def add_role(self, role: Role) -> Role:
        self._roles[role.id] = role
        return role

    def add_permission(self, permission: Permission) -> Permission:
        self._permissions[permission.id] = permission
        return permission

    def add_edge(self, edge: RolePermission) -> None:
        self._edges.append(edge)


class FakeOverrideRepository:
    """In-memory override repository."""

    def __init__(self) -> None:
        self.role_overrides: list[RoleOverride] = []
        self.permission_overrides: list[PermissionOverride] = []
        self.role_permission_overrides: list[RolePermissionOverride] = []

    async def list_role_overrides(
        self, scope_ids: list[UUID], role_ids: list[UUID]
    ) -> list[RoleOverride]:
        return [
            o for o in self.role_overrides if o.scope_id in scope_ids and o.role_id in role_ids
        ]

    async def list_permission_overrides(
        self, scope_ids: list[UUID], permission_ids: list[UUID]
    ) -> list[PermissionOverride]:
        return [
            o
            for o in self.permission_overrides
            if o.scope_id in scope_ids and o.permission_id in permission_ids
        ]

    async def list_role_permission_overrides(
        self, scope_ids: list[UUID], role_ids: list[UUID]
    ) -> list[RolePermissionOverride]:
        return [
            o
            for o in self.role_permission_overrides
            if o.scope_id in scope_ids and o.role_id in role_ids
        ]


class FakeResourceRepository:
    """In-memory resource repository with tags, scope links and hierarchy edges."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Resource] = {}
        self.tags: list[ResourceTag] = []
        self.links: list[ResourceScopeLink] = []
        self.edges: list[ResourceHierarchyEdge] = []
        self.parent_edge_calls = 0

    async def get_by_id(self, resource_id: UUID) -> Resource | None:
        return self._by_id.get(resource_id)

    async def get_by_external_id(
        self, resource_type_id: str, external_id: str
    ) -> Resource | None:
        for r in self._by_id.values():
            if r.resource_type_id == resource_type_id and r.external_id == external_id:
                return r
        return None

    async def list_tags(self, resource_id: UUID) -> list[ResourceTag]:
        return [t for t in self.tags if t.resource_id == resource_id]

    async def list_scope_links(self, resource_id: UUID) -> list[ResourceScopeLink]:
        return [link for link in self.links if link.resource_id == resource_id]

    async def list_parent_edges(self, child_id: UUID) -> list[ResourceHierarchyEdge]:
        self.parent_edge_calls += 1
        return [e for e in self.edges if e.child_id == child_id]

    def add(self, resource: Resource) -> Resource:
        self._by_id[resource.id] = resource
        return resource

    def set_tag(self, resource_id: UUID, key: str, label: str | None = None) -> None:
        self.tags = [t for t in self.tags if not (t.resource_id == resource_id and t.key == key)]
        self.tags.append(ResourceTag(resource_id=resource_id, key=key, label=label))

    def remove_tag(self, resource_id: UUID, key: str) -> None:
        self.tags = [t for t in self.tags if not (t.resource_id == resource_id and t.key == key)]


class FakeCollectionRepository:
    """In-memory resource collection repository."""

    def __init__(self) -> None:
        self._store: list[ResourceCollection] = []

    async def list_for_type(
        self, resource_type_id: str, scope_id: UUID
    ) -> list[ResourceCollection]:
        return [
            c
            for c in self._store
            if c.resource_type_id == resource_type_id and c.scope_id == scope_id
        ]

    def add(self, collection: ResourceCollection) -> ResourceCollection:
        self._store.append(collection)
        return collection


class FakePolicyRepository:
    """In-memory resource policy repository."""

    def __init__(self) -> None:
        self._store: list[ResourcePolicy] = []

    async def list_for_resource(self, resource_id: UUID) -> list[ResourcePolicy]:
        return [p for p in self._store if p.resource_id == resource_id]

    async def list_for_collection(self, collection_id: UUID) -> list[ResourcePolicy]:
        return [p for p in self._store if p.collection_id == collection_id]

    def add(self, policy: ResourcePolicy) -> ResourcePolicy:
        self._store.append(policy)
        return policy


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.scopes = FakeScopeRepository()
        self.subjects = FakeSubjectRepository()
        self.roles = FakeRoleRepository()
        self.overrides = FakeOverrideRepository()
        self.resources = FakeResourceRepository()
        self.collections = FakeCollectionRepository()
        self.policies = FakePolicyRepository()

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


# --- Store builder ---


_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


class StoreBuilder:
    """Seeds a FakeUnitOfWork with scopes, subjects, roles, resources and policies."""

    def __init__(self, uow: FakeUnitOfWork) -> None:
        self.uow = uow
        self._policy_seq = 0

    def scope(
        self,
        name: str,
        parent: Scope | None = None,
        mode: ScopeMode = ScopeMode.MERGE,
        scope_type: str | None = None,
    ) -> Scope:
        return self.uow.scopes.add(
            Scope(
                id=uuid4(),
                name=name,
                mode=mode,
                parent_id=parent.id if parent else None,
                scope_type=scope_type,
            )
        )

    def subject(
        self,
        subject_id: str,
        subject_type: SubjectType = SubjectType.USER,
        **attributes: Any,
    ) -> Subject:
        return self.uow.subjects.add(
            Subject(id=subject_id, subject_type=subject_type, attributes=attributes)
        )

    def permission(
        self,
        action: str,
        resource_type: str | None = None,
        resource_pattern: str | None = None,
    ) -> Permission:
        return self.uow.roles.add_permission(
            Permission(
                id=uuid4(),
                action=action,
                resource_type=resource_type,
                resource_pattern=resource_pattern,
            )
        )

    def role(
        self,
        name: str,
        scope: Scope | None = None,
        grants: list[Permission | tuple[Permission, dict[str, Any]]] | None = None,
    ) -> Role:
        role = self.uow.roles.add_role(
            Role(id=uuid4(), name=name, scope_id=scope.id if scope else None)
        )
        for grant in grants or []:
            permission, condition = grant if isinstance(grant, tuple) else (grant, None)
            self.uow.roles.add_edge(
                RolePermission(role_id=role.id, permission_id=permission.id, condition=condition)
            )
        return role

    def member(self, subject: Subject, scope: Scope, role: Role) -> None:
        self.uow.subjects.add_membership(
            Membership(subject_id=subject.id, scope_id=scope.id, role_id=role.id)
        )

    def resource(
        self,
        resource_type_id: str,
        external_id: str,
        owner: Scope,
        tags: dict[str, str | None] | None = None,
        **data: Any,
    ) -> Resource:
        resource = self.uow.resources.add(
            Resource(
                id=uuid4(),
                resource_type_id=resource_type_id,
                owner_scope_id=owner.id,
                external_id=external_id,
                name=external_id,
                data=data,
                created_at=_EPOCH,
                updated_at=_EPOCH,
            )
        )
        for key, label in (tags or {}).items():
            self.uow.resources.set_tag(resource.id, key, label)
        return resource

    def link(self, resource: Resource, scope: Scope, link_type: LinkType = LinkType.SHARE) -> None:
        self.uow.resources.links.append(
            ResourceScopeLink(resource_id=resource.id, scope_id=scope.id, link_type=link_type)
        )

    def edge(
        self, parent: Resource, child: Resource, cascade: CascadeMode = CascadeMode.INHERIT
    ) -> None:
        self.uow.resources.edges.append(
            ResourceHierarchyEdge(parent_id=parent.id, child_id=child.id, cascade=cascade)
        )

    def collection(
        self,
        name: str,
        scope: Scope,
        resource_type_id: str,
        match: dict[str, Any] | None = None,
    ) -> ResourceCollection:
        return self.uow.collections.add(
            ResourceCollection(
                id=uuid4(),
                name=name,
                scope_id=scope.id,
                resource_type_id=resource_type_id,
                match=match,
            )
        )

    def policy(
        self,
        effect: PolicyEffect,
        actions: list[str],
        resource: Resource | None = None,
        collection: ResourceCollection | None = None,
        priority: int = 0,
        subject_condition: dict[str, Any] | None = None,
        context_condition: dict[str, Any] | None = None,
        name: str | None = None,
    ) -> ResourcePolicy:
        self._policy_seq += 1
        return self.uow.policies.add(
            ResourcePolicy(
                id=uuid4(),
                effect=effect,
                created_at=_EPOCH + timedelta(seconds=self._policy_seq),
                actions=actions,
                resource_id=resource.id if resource else None,
                collection_id=collection.id if collection else None,
                subject_condition=subject_condition,
                context_condition=context_condition,
                priority=priority,
                name=name,
            )
        )

    def role_override(self, scope: Scope, role: Role, state: OverrideState) -> None:
        self.uow.overrides.role_overrides.append(
            RoleOverride(scope_id=scope.id, role_id=role.id, state=state)
        )

    def permission_override(
        self, scope: Scope, permission: Permission, state: OverrideState
    ) -> None:
        self.uow.overrides.permission_overrides.append(
            PermissionOverride(scope_id=scope.id, permission_id=permission.id, state=state)
        )

    def role_permission_override(
        self,
        scope: Scope,
        role: Role,
        permission: Permission,
        state: OverrideState,
        condition: dict[str, Any] | None = None,
    ) -> None:
        self.uow.overrides.role_permission_overrides.append(
            RolePermissionOverride(
                scope_id=scope.id,
                role_id=role.id,
                permission_id=permission.id,
                state=state,
                condition=condition,
            )
        )


def make_engine(uow_factory, enforce_scope_association: bool = True, max_depth: int = 32):
    """EvaluateDecisionUseCase wired with the real evaluation components."""
    return EvaluateDecisionUseCase(
        unit_of_work_factory=uow_factory,
        policy_evaluator=ResourcePolicyEvaluator(CollectionMatcher()),
        hierarchy_walker=ResourceHierarchyWalker(max_depth=max_depth),
        role_resolver=ScopeRoleResolver(),
        enforce_scope_association=enforce_scope_association,
    )


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def store(fake_uow: FakeUnitOfWork) -> StoreBuilder:
    """Builder seeding the test's FakeUnitOfWork."""
    return StoreBuilder(fake_uow)


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory yielding the test's FakeUnitOfWork on every call."""

    @asynccontextmanager
    async def _factory():
        yield fake_uow

    return _factory


@pytest.fixture
def engine(uow_factory) -> EvaluateDecisionUseCase:
    """Decision engine over the test's store."""
    return make_engine(uow_factory)
