"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.types import JSON

metadata = MetaData()

# ============================================================================
# ROLES TABLE (custom roles only; predefined roles live in code)
# ============================================================================
roles_table = Table(
    "roles",
    metadata,
    Column("role_id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("name_key", String(255), nullable=False),  # lower(name), for uniqueness
    Column("groups", JSON, nullable=False),  # list of PermissionGroup values
    Column("scope_level", Integer, nullable=False),  # EntityType value
    Column("org_id", String(64), nullable=False),
    Column("merchant_id", String(64), nullable=True),
    Column("profile_id", String(64), nullable=True),
    Column("is_invitable", Boolean, nullable=False),
    Column("created_by", String(64), nullable=False),
    Column("last_modified_by", String(64), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("org_id", "name_key", name="uq_roles_org_name"),
)

Index("ix_roles_org_scope", roles_table.c.org_id, roles_table.c.scope_level)


# ============================================================================
# USER ROLES TABLE (one binding per user and lineage)
# ============================================================================
user_roles_table = Table(
    "user_roles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(64), nullable=False),
    Column("role_id", String(64), nullable=False),
    Column("org_id", String(64), nullable=False),
    Column("merchant_id", String(64), nullable=True),
    Column("profile_id", String(64), nullable=True),
    Column("status", String(16), nullable=False),  # UserRoleStatus as string
    Column("created_by", String(64), nullable=False),
    Column("last_modified_by", String(64), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

# One binding per user and lineage. Absent ids are NULL, which a plain unique
# constraint treats as distinct, so they are coalesced to "" (never a valid id).
Index(
    "uq_user_roles_binding",
    user_roles_table.c.user_id,
    user_roles_table.c.org_id,
    func.coalesce(user_roles_table.c.merchant_id, ""),
    func.coalesce(user_roles_table.c.profile_id, ""),
    unique=True,
)
Index("ix_user_roles_lineage", user_roles_table.c.org_id, user_roles_table.c.merchant_id)
Index("ix_user_roles_user_status", user_roles_table.c.user_id, user_roles_table.c.status)


# ============================================================================
# CONSUMED TOKENS TABLE (single-purpose token ledger)
# ============================================================================
consumed_tokens_table = Table(
    "consumed_tokens",
    metadata,
    Column("token_id", String(64), primary_key=True),
    Column("user_id", String(64), nullable=False),
    Column("purpose", String(32), nullable=False),
    Column("consumed_at", DateTime(timezone=True), nullable=False),
)


# ============================================================================
# EVENTS TABLE (append-only audit log)
# ============================================================================
events_table = Table(
    "events",
    metadata,
    Column("id", String, primary_key=True),
    Column("event_type", String(128), nullable=False),
    Column("payload", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index(
    "idx_events_type_created",
    events_table.c.event_type,
    events_table.c.created_at.desc(),
)
