"""Initial schema - scopes, subjects, roles, overrides, resources, collections, policies.

Revision ID: 001
Revises:
Create Date: 2026-09-28

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_STATE_CHECK = "state IN ('on', 'off', 'unset')"


def upgrade() -> None:
    op.create_table(
        "scope",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("mode", sa.String(16), nullable=False, server_default="merge"),
        sa.Column("parent_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("scope_type", sa.String(50), nullable=True),
        sa.CheckConstraint("mode IN ('define', 'merge')", name="ck_scope_mode"),
        sa.CheckConstraint("parent_id IS NULL OR parent_id <> id", name="ck_scope_not_own_parent"),
    )
    op.create_index("ix_scope_parent_id", "scope", ["parent_id"])

    op.create_table(
        "subject",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("subject_type", sa.String(16), nullable=False),
        sa.Column("attributes", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.CheckConstraint(
            "subject_type IN ('user', 'service', 'agent', 'system')", name="ck_subject_type"
        ),
    )

    op.create_table(
        "role",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.UniqueConstraint("scope_id", "name", name="uq_role_scope_name"),
    )

    op.create_table(
        "permission",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(100), nullable=True),
        sa.Column("resource_pattern", sa.String(500), nullable=True),
    )
    op.create_index(
        "ix_permission_key",
        "permission",
        ["resource_type", "action", "resource_pattern"],
        unique=True,
    )

    op.create_table(
        "role_permission",
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("condition", JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "membership",
        sa.Column("subject_id", sa.String(255), sa.ForeignKey("subject.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "role_override",
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("state", sa.String(8), nullable=False),
        sa.CheckConstraint(_STATE_CHECK, name="ck_role_override_state"),
    )

    op.create_table(
        "permission_override",
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("state", sa.String(8), nullable=False),
        sa.CheckConstraint(_STATE_CHECK, name="ck_permission_override_state"),
    )

    op.create_table(
        "role_permission_override",
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("state", sa.String(8), nullable=False),
        sa.Column("condition", JSONB(), nullable=True),
        sa.CheckConstraint(_STATE_CHECK, name="ck_role_permission_override_state"),
    )

    op.create_table(
        "resource_type",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("description", sa.String(255), nullable=True),
    )

    op.create_table(
        "resource",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("resource_type_id", sa.String(100), sa.ForeignKey("resource_type.id"), nullable=False),
        sa.Column("owner_scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), nullable=False),
        sa.Column("external_id", sa.String(500), nullable=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("data", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("resource_type_id", "external_id", name="uq_resource_type_external_id"),
    )
    op.create_index("ix_resource_owner_scope_id", "resource", ["owner_scope_id"])

    op.create_table(
        "resource_tag",
        sa.Column("resource_id", sa.UUID(), sa.ForeignKey("resource.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("label", sa.String(255), nullable=True),
    )

    op.create_table(
        "resource_scope_link",
        sa.Column("resource_id", sa.UUID(), sa.ForeignKey("resource.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("link_type", sa.String(16), nullable=False),
        sa.CheckConstraint("link_type IN ('share', 'alias', 'mirror')", name="ck_resource_scope_link_type"),
    )

    op.create_table(
        "resource_hierarchy",
        sa.Column("parent_id", sa.UUID(), sa.ForeignKey("resource.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("child_id", sa.UUID(), sa.ForeignKey("resource.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("cascade", sa.String(8), nullable=False, server_default="unset"),
        sa.CheckConstraint("cascade IN ('inherit', 'none', 'unset')", name="ck_resource_hierarchy_cascade"),
        sa.CheckConstraint("parent_id <> child_id", name="ck_resource_hierarchy_not_self"),
    )
    op.create_index("ix_resource_hierarchy_child_id", "resource_hierarchy", ["child_id"])

    op.create_table(
        "resource_collection",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("scope_id", sa.UUID(), sa.ForeignKey("scope.id", ondelete="CASCADE"), nullable=False),
        sa.Column("resource_type_id", sa.String(100), sa.ForeignKey("resource_type.id"), nullable=False),
        sa.Column("match", JSONB(), nullable=True),
        sa.UniqueConstraint("scope_id", "name", name="uq_resource_collection_scope_name"),
    )
    op.create_index(
        "ix_resource_collection_type_scope",
        "resource_collection",
        ["resource_type_id", "scope_id"],
    )

    op.create_table(
        "resource_policy",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("effect", sa.String(8), nullable=False),
        sa.Column("actions", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("resource_id", sa.UUID(), sa.ForeignKey("resource.id", ondelete="CASCADE"), nullable=True),
        sa.Column(
            "collection_id",
            sa.UUID(),
            sa.ForeignKey("resource_collection.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("subject_condition", JSONB(), nullable=True),
        sa.Column("context_condition", JSONB(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("effect IN ('allow', 'deny')", name="ck_resource_policy_effect"),
        sa.CheckConstraint(
            "(resource_id IS NULL) <> (collection_id IS NULL)",
            name="ck_resource_policy_single_target",
        ),
    )
    op.create_index("ix_resource_policy_resource_id", "resource_policy", ["resource_id"])
    op.create_index("ix_resource_policy_collection_id", "resource_policy", ["collection_id"])


def downgrade() -> None:
    op.drop_table("resource_policy")
    op.drop_table("resource_collection")
    op.drop_table("resource_hierarchy")
    op.drop_table("resource_scope_link")
    op.drop_table("resource_tag")
    op.drop_table("resource")
    op.drop_table("resource_type")
    op.drop_table("role_permission_override")
    op.drop_table("permission_override")
    op.drop_table("role_override")
    op.drop_table("membership")
    op.drop_table("role_permission")
    op.drop_table("permission")
    op.drop_table("role")
    op.drop_table("subject")
    op.drop_table("scope")
