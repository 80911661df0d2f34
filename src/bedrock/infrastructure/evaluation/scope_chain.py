"""Scope ancestor chain loading."""

from uuid import UUID

from bedrock.application.ports import UnitOfWork
from bedrock.domain.entities import Scope
from bedrock.domain.exceptions import NotFound, ScopeCycleError
from bedrock.domain.value_objects import ScopeMode


async def load_scope_chain(uow: UnitOfWork, scope_id: UUID, max_depth: int = 32) -> list[Scope]:
    """Load the scope and all its ancestors, nearest first.

    Raises:
        NotFound: the scope (or a referenced parent) does not exist.
        ScopeCycleError: the parent chain loops or is deeper than max_depth.
    """
    chain: list[Scope] = []
    seen: set[UUID] = set()
    current_id: UUID | None = scope_id
    while current_id is not None:
        if current_id in seen:
            raise ScopeCycleError(f"Cycle in scope tree at {current_id}")
        if len(chain) >= max_depth:
            raise ScopeCycleError(f"Scope tree deeper than {max_depth} at {scope_id}")
        scope = await uow.scopes.get_by_id(current_id)
        if scope is None:
            raise NotFound("Scope", current_id)
        seen.add(current_id)
        chain.append(scope)
        current_id = scope.parent_id
    return chain


def visible_scopes(chain: list[Scope]) -> list[Scope]:
    """Scopes whose roles are visible from chain[0].

    Walks up while the current scope merges with its parent; a DEFINE scope
    is the last visible one.
    """
    visible: list[Scope] = []
    for scope in chain:
        visible.append(scope)
        if scope.mode != ScopeMode.MERGE:
            break
    return visible
