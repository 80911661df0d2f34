"""Index memberships by subject for role resolution.

Revision ID: 002
Revises: 001
Create Date: 2026-10-05

"""

from collections.abc import Sequence

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_index("ix_membership_subject_scope", "membership", ["subject_id", "scope_id"])
    op.create_index(
        "ix_role_permission_override_role", "role_permission_override", ["role_id", "scope_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_role_permission_override_role", table_name="role_permission_override")
    op.drop_index("ix_membership_subject_scope", table_name="membership")
