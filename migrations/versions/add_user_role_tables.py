"""add_user_role_tables

Add roles, user_roles, consumed_tokens and events tables.

Revision ID: add_user_role_tables
Revises:
Create Date: 2026-10-12

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "add_user_role_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add user-role tables."""
    # ROLES TABLE
    op.create_table(
        "roles",
        sa.Column("role_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_key", sa.String(255), nullable=False),
        sa.Column("groups", sa.JSON(), nullable=False),
        sa.Column("scope_level", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.String(64), nullable=False),
        sa.Column("merchant_id", sa.String(64), nullable=True),
        sa.Column("profile_id", sa.String(64), nullable=True),
        sa.Column("is_invitable", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("last_modified_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("role_id"),
        sa.UniqueConstraint("org_id", "name_key", name="uq_roles_org_name"),
    )
    op.create_index("ix_roles_org_scope", "roles", ["org_id", "scope_level"])

    # USER ROLES TABLE
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("role_id", sa.String(64), nullable=False),
        sa.Column("org_id", sa.String(64), nullable=False),
        sa.Column("merchant_id", sa.String(64), nullable=True),
        sa.Column("profile_id", sa.String(64), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("last_modified_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_user_roles_binding",
        "user_roles",
        [
            "user_id",
            "org_id",
            sa.text("coalesce(merchant_id, '')"),
            sa.text("coalesce(profile_id, '')"),
        ],
        unique=True,
    )
    op.create_index("ix_user_roles_lineage", "user_roles", ["org_id", "merchant_id"])
    op.create_index("ix_user_roles_user_status", "user_roles", ["user_id", "status"])

    # CONSUMED TOKENS TABLE
    op.create_table(
        "consumed_tokens",
        sa.Column("token_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("purpose", sa.String(32), nullable=False),
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("token_id"),
    )

    # EVENTS TABLE
    op.create_table(
        "events",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("event_type", sa.String(128), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_events_type_created",
        "events",
        ["event_type", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Remove user-role tables."""
    op.drop_index("idx_events_type_created", table_name="events")
    op.drop_table("events")

    op.drop_table("consumed_tokens")

    op.drop_index("ix_user_roles_user_status", table_name="user_roles")
    op.drop_index("ix_user_roles_lineage", table_name="user_roles")
    op.drop_index("uq_user_roles_binding", table_name="user_roles")
    op.drop_table("user_roles")

    op.drop_index("ix_roles_org_scope", table_name="roles")
    op.drop_table("roles")
