"""Unit tests for EvaluateDecisionUseCase."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from bedrock.application.dto.decision_dto import EvaluationInput, ResourceRef
from bedrock.application.use_cases.decision.evaluate_decision import (
    EvaluateDecisionUseCase,
    build_context,
)
from bedrock.domain.exceptions import (
    DecisionError,
    EvaluationCancelled,
    HierarchyCycleError,
    NotFound,
    StoreUnavailable,
    ValidationError,
)
from bedrock.domain.value_objects import CascadeMode, OverrideState, PolicyEffect, ScopeMode
from bedrock.infrastructure.evaluation import ResourceHierarchyWalker, ScopeRoleResolver

from tests.conftest import make_engine

DRAFT_ONLY = {"==": [{"var": "resource.status"}, "draft"]}


@pytest.fixture
def tenant(store):
    return store.scope("acme", mode=ScopeMode.DEFINE, scope_type="tenant")


@pytest.fixture
def alice(store):
    return store.subject("alice", department="finance")


def _doc_input(action, scope, external_id, actor="alice", resource_type="document", **kwargs):
    return EvaluationInput(
        actor=actor,
        action=action,
        scope_id=scope.id,
        resource=ResourceRef(resource_type_id=resource_type, external_id=external_id),
        **kwargs,
    )


# --- Role phase ---


@pytest.mark.asyncio
async def test_editor_condition_follows_resource_status(store, engine, tenant, alice) -> None:
    """Editor may read doc-1 only while it is a draft."""
    read = store.permission("read", "document", "*")
    editor = store.role("Editor", tenant, grants=[(read, DRAFT_ONLY)])
    store.member(alice, tenant, editor)
    doc = store.resource("document", "doc-1", tenant, status="published")

    decision = await engine.execute(_doc_input("read", tenant, "doc-1"))
    assert decision.allowed is False

    doc.data["status"] = "draft"
    decision = await engine.execute(_doc_input("read", tenant, "doc-1"))
    assert decision.allowed is True
    assert decision.matches[-1].phase == "role"
    assert decision.inherited_from is None


@pytest.mark.asyncio
async def test_action_without_resource_uses_roles_only(store, engine, tenant, alice) -> None:
    invite = store.permission("invite_member")
    admin = store.role("admin", tenant, grants=[invite])
    store.member(alice, tenant, admin)

    allowed = await engine.execute(
        EvaluationInput(actor="alice", action="invite_member", scope_id=tenant.id)
    )
    denied = await engine.execute(
        EvaluationInput(actor="alice", action="delete_tenant", scope_id=tenant.id)
    )

    assert allowed.allowed is True
    assert denied.allowed is False
    assert denied.explanation


@pytest.mark.asyncio
async def test_role_permission_override_off_denies(store, engine, tenant, alice) -> None:
    project = store.scope("q1", parent=tenant)
    delete = store.permission("delete", "document")
    editor = store.role("Editor", tenant, grants=[delete])
    store.member(alice, tenant, editor)
    store.role_permission_override(project, editor, delete, OverrideState.OFF)
    store.resource("document", "doc-1", project)

    decision = await engine.execute(_doc_input("delete", project, "doc-1"))

    assert decision.allowed is False


@pytest.mark.asyncio
async def test_malformed_grant_condition_denies_without_error(
    store, engine, tenant, alice
) -> None:
    read = store.permission("read", "document")
    viewer = store.role("viewer", tenant, grants=[(read, {"no_such_op": [1, 2]})])
    store.member(alice, tenant, viewer)
    store.resource("document", "doc-1", tenant)

    decision = await engine.execute(_doc_input("read", tenant, "doc-1"))

    assert decision.allowed is False


# --- Policy phase ---


@pytest.mark.asyncio
async def test_resource_deny_beats_role_grant(store, engine, tenant, alice) -> None:
    """Unconditioned deny on doc-2 wins over an unconditioned delete grant."""
    delete = store.permission("delete", "document", "*")
    owner = store.role("owner", tenant, grants=[delete])
    store.member(alice, tenant, owner)
    doc = store.resource("document", "doc-2", tenant)
    deny = store.policy(PolicyEffect.DENY, ["delete"], resource=doc, priority=10)

    decision = await engine.execute(_doc_input("delete", tenant, "doc-2"))

    assert decision.allowed is False
    assert decision.evaluated_policy == deny.id


@pytest.mark.asyncio
async def test_higher_priority_policy_decides(store, engine, tenant, alice) -> None:
    doc = store.resource("document", "doc-1", tenant)
    store.policy(PolicyEffect.DENY, ["read"], resource=doc, priority=1)
    allow = store.policy(PolicyEffect.ALLOW, ["read"], resource=doc, priority=5)

    decision = await engine.execute(_doc_input("read", tenant, "doc-1"))

    assert decision.allowed is True
    assert decision.evaluated_policy == allow.id


@pytest.mark.asyncio
async def test_malformed_policy_condition_falls_through(store, engine, tenant, alice) -> None:
    doc = store.resource("document", "doc-1", tenant)
    store.policy(
        PolicyEffect.ALLOW, ["read"], resource=doc, context_condition={"==": "not-a-list"}
    )

    decision = await engine.execute(_doc_input("read", tenant, "doc-1"))

    assert decision.allowed is False
    assert decision.evaluated_policy is None


@pytest.mark.asyncio
async def test_tag_change_applies_collection_policy_immediately(
    store, engine, fake_uow, tenant, alice
) -> None:
    read = store.permission("read", "document")
    viewer = store.role("viewer", tenant, grants=[read])
    store.member(alice, tenant, viewer)
    doc = store.resource("document", "doc-1", tenant)
    legal_hold = store.collection("legal-hold", tenant, "document", {"tags": {"hold": "*"}})
    store.policy(PolicyEffect.DENY, ["*"], collection=legal_hold)

    assert (await engine.execute(_doc_input("read", tenant, "doc-1"))).allowed is True

    fake_uow.resources.set_tag(doc.id, "hold", "litigation-42")
    assert (await engine.execute(_doc_input("read", tenant, "doc-1"))).allowed is False

    fake_uow.resources.remove_tag(doc.id, "hold")
    assert (await engine.execute(_doc_input("read", tenant, "doc-1"))).allowed is True


@pytest.mark.asyncio
async def test_caller_cannot_spoof_subject_in_context(store, engine, tenant, alice) -> None:
    doc = store.resource("document", "doc-1", tenant)
    store.policy(
        PolicyEffect.ALLOW,
        ["read"],
        resource=doc,
        subject_condition={"==": [{"var": "subject.department"}, "legal"]},
    )

    decision = await engine.execute(
        _doc_input("read", tenant, "doc-1", context={"subject": {"department": "legal"}})
    )

    assert decision.allowed is False


# --- Hierarchy phase ---


@pytest.mark.asyncio
async def test_folder_grant_inherited_by_document(store, engine, tenant, alice) -> None:
    read_folders = store.permission("read", "folder", "*")
    viewer = store.role("viewer", tenant, grants=[read_folders])
    store.member(alice, tenant, viewer)
    folder = store.resource("folder", "F", tenant)
    doc = store.resource("document", "D", tenant)
    store.edge(folder, doc, CascadeMode.INHERIT)

    decision = await engine.execute(_doc_input("read", tenant, "D"))

    assert decision.allowed is True
    assert decision.inherited_from == folder.id
    assert decision.matches[0].phase == "hierarchy"


@pytest.mark.asyncio
async def test_cascade_none_blocks_inheritance(store, engine, tenant, alice) -> None:
    read_folders = store.permission("read", "folder", "*")
    viewer = store.role("viewer", tenant, grants=[read_folders])
    store.member(alice, tenant, viewer)
    folder = store.resource("folder", "F", tenant)
    doc = store.resource("document", "D", tenant)
    store.edge(folder, doc, CascadeMode.NONE)

    decision = await engine.execute(_doc_input("read", tenant, "D"))

    assert decision.allowed is False
    assert decision.inherited_from is None


@pytest.mark.asyncio
async def test_hierarchy_cycle_is_surfaced(store, engine, tenant, alice) -> None:
    a = store.resource("folder", "A", tenant)
    b = store.resource("folder", "B", tenant)
    doc = store.resource("document", "D", tenant)
    store.edge(a, doc)
    store.edge(b, a)
    store.edge(a, b)

    with pytest.raises(HierarchyCycleError):
        await engine.execute(_doc_input("read", tenant, "D"))


@pytest.mark.asyncio
async def test_inherited_grant_condition_sees_ancestor_data_and_tags(
    store, engine, tenant, alice
) -> None:
    open_only = {"==": [{"var": "data.status"}, "open"]}
    unrestricted = {"!": {"exists": "tags.restricted"}}
    read_folders = store.permission("read", "folder", "*")
    list_folders = store.permission("list", "folder", "*")
    viewer = store.role(
        "viewer", tenant, grants=[(read_folders, open_only), (list_folders, unrestricted)]
    )
    store.member(alice, tenant, viewer)
    folder = store.resource("folder", "F", tenant, tags={"restricted": "yes"}, status="locked")
    doc = store.resource("document", "D", tenant, status="open")
    store.edge(folder, doc, CascadeMode.INHERIT)

    read = await engine.execute(_doc_input("read", tenant, "D"))
    listing = await engine.execute(_doc_input("list", tenant, "D"))

    assert read.allowed is False
    assert read.inherited_from is None
    assert listing.allowed is False


# --- Resolution and scope association ---


@pytest.mark.asyncio
async def test_unknown_references_raise_not_found(store, engine, tenant, alice) -> None:
    store.resource("document", "doc-1", tenant)

    with pytest.raises(NotFound, match="Subject"):
        await engine.execute(_doc_input("read", tenant, "doc-1", actor="mallory"))
    with pytest.raises(NotFound, match="Scope"):
        await engine.execute(
            EvaluationInput(actor="alice", action="read", scope_id=uuid4())
        )
    with pytest.raises(NotFound, match="Resource"):
        await engine.execute(_doc_input("read", tenant, "doc-404"))
    with pytest.raises(NotFound, match="Subject"):
        await engine.execute(_doc_input("read", tenant, "doc-1", on_behalf_of="ghost"))


@pytest.mark.asyncio
async def test_resource_by_id_must_match_type(store, engine, tenant, alice) -> None:
    doc = store.resource("document", "doc-1", tenant)
    by_id = EvaluationInput(
        actor="alice",
        action="read",
        scope_id=tenant.id,
        resource=ResourceRef(resource_type_id="document", id=doc.id),
    )
    wrong_type = EvaluationInput(
        actor="alice",
        action="read",
        scope_id=tenant.id,
        resource=ResourceRef(resource_type_id="folder", id=doc.id),
    )

    assert (await engine.execute(by_id)).allowed is False
    with pytest.raises(NotFound):
        await engine.execute(wrong_type)


@pytest.mark.asyncio
async def test_resource_ref_without_identifier_is_invalid(engine, tenant, alice) -> None:
    with pytest.raises(ValidationError):
        await engine.execute(
            EvaluationInput(
                actor="alice",
                action="read",
                scope_id=tenant.id,
                resource=ResourceRef(resource_type_id="document"),
            )
        )


@pytest.mark.asyncio
async def test_foreign_tenant_resource_is_denied(store, engine, tenant, alice) -> None:
    other = store.scope("globex", mode=ScopeMode.DEFINE)
    read = store.permission("read", "document", "*")
    viewer = store.role("viewer", tenant, grants=[read])
    store.member(alice, tenant, viewer)
    store.resource("document", "secret", other)

    decision = await engine.execute(_doc_input("read", tenant, "secret"))

    assert decision.allowed is False
    assert decision.matches[0].phase == "scope"


@pytest.mark.asyncio
async def test_linked_and_descendant_resources_are_associated(
    store, engine, tenant, alice
) -> None:
    other = store.scope("globex", mode=ScopeMode.DEFINE)
    project = store.scope("q1", parent=tenant)
    read = store.permission("read", "document", "*")
    viewer = store.role("viewer", tenant, grants=[read])
    store.member(alice, tenant, viewer)
    shared = store.resource("document", "shared", other)
    store.link(shared, tenant)
    store.resource("document", "nested", project)

    assert (await engine.execute(_doc_input("read", tenant, "shared"))).allowed is True
    assert (await engine.execute(_doc_input("read", tenant, "nested"))).allowed is True


@pytest.mark.asyncio
async def test_scope_association_can_be_disabled(store, uow_factory, tenant, alice) -> None:
    other = store.scope("globex", mode=ScopeMode.DEFINE)
    read = store.permission("read", "document", "*")
    viewer = store.role("viewer", tenant, grants=[read])
    store.member(alice, tenant, viewer)
    store.resource("document", "secret", other)

    engine = make_engine(uow_factory, enforce_scope_association=False)
    decision = await engine.execute(_doc_input("read", tenant, "secret"))

    assert decision.allowed is True


@pytest.mark.asyncio
async def test_owner_scope_collection_policy_applies_from_parent_scope(
    store, engine, tenant, alice
) -> None:
    project = store.scope("q1", parent=tenant)
    partner = store.scope("partner", mode=ScopeMode.DEFINE)
    read = store.permission("read", "document", "*")
    viewer = store.role("viewer", tenant, grants=[read])
    store.member(alice, tenant, viewer)
    store.resource("document", "nested", project, tags={"hold": None})
    shared = store.resource("document", "shared", tenant, tags={"embargo": None})
    store.link(shared, partner)
    held = store.collection("held", project, "document", {"tags": {"hold": "*"}})
    embargoed = store.collection("embargoed", partner, "document", {"tags": {"embargo": "*"}})
    store.policy(PolicyEffect.DENY, ["read"], collection=held)
    store.policy(PolicyEffect.DENY, ["read"], collection=embargoed)

    nested = await engine.execute(_doc_input("read", tenant, "nested"))
    linked = await engine.execute(_doc_input("read", tenant, "shared"))

    assert nested.allowed is False
    assert nested.matches[0].phase == "policy"
    assert linked.allowed is False
    assert linked.matches[0].phase == "policy"


# --- Errors and cancellation ---


@pytest.mark.asyncio
async def test_cancel_event_raises(store, engine, tenant, alice) -> None:
    store.resource("document", "doc-1", tenant)
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(EvaluationCancelled):
        await engine.execute(_doc_input("read", tenant, "doc-1"), cancel_event=cancel)


@pytest.mark.asyncio
async def test_unexpected_error_becomes_decision_error(store, uow_factory, tenant, alice) -> None:
    store.resource("document", "doc-1", tenant)
    broken = AsyncMock()
    broken.decide.side_effect = RuntimeError("boom")
    engine = EvaluateDecisionUseCase(
        unit_of_work_factory=uow_factory,
        policy_evaluator=broken,
        hierarchy_walker=ResourceHierarchyWalker(),
        role_resolver=ScopeRoleResolver(),
    )

    with pytest.raises(DecisionError) as exc_info:
        await engine.execute(_doc_input("read", tenant, "doc-1"))
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_store_unavailable_propagates(store, uow_factory, tenant, alice) -> None:
    resolver = AsyncMock()
    resolver.load_grants.side_effect = StoreUnavailable("connection refused")
    engine = EvaluateDecisionUseCase(
        unit_of_work_factory=uow_factory,
        policy_evaluator=AsyncMock(),
        hierarchy_walker=ResourceHierarchyWalker(),
        role_resolver=resolver,
    )

    with pytest.raises(StoreUnavailable):
        await engine.execute(EvaluationInput(actor="alice", action="read", scope_id=tenant.id))


# --- Context ---


def test_build_context_reserved_keys_win(store, tenant, alice) -> None:
    doc = store.resource("document", "doc-1", tenant, status="draft")
    now = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)
    input_data = _doc_input(
        "read", tenant, "doc-1", context={"action": "spoofed", "ip": "10.0.0.1"}
    )

    context = build_context(input_data, alice, None, tenant, doc, {"env": "prod"}, now=now)

    assert context["action"] == "read"
    assert context["ip"] == "10.0.0.1"
    assert context["subject"]["department"] == "finance"
    assert context["resource"]["status"] == "draft"
    assert context["resource"]["external_id"] == "doc-1"
    assert context["tags"] == {"env": "prod"}
    assert context["scope"]["name"] == "acme"
    assert context["time"]["hour"] == 9
    assert context["time"]["weekday"] == 0
    assert context["principal"] is None


@pytest.mark.asyncio
async def test_principal_visible_to_conditions(store, engine, tenant, alice) -> None:
    store.subject("bob", department="legal")
    doc = store.resource("document", "doc-1", tenant)
    store.policy(
        PolicyEffect.ALLOW,
        ["read"],
        resource=doc,
        context_condition={"==": [{"var": "principal.department"}, "legal"]},
    )

    decision = await engine.execute(_doc_input("read", tenant, "doc-1", on_behalf_of="bob"))

    assert decision.allowed is True
