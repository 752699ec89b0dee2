"""Domain events for roles and user-role bindings."""

from tenantauth.domain.shared.event import Event
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.permission import PermissionGroup


class RoleCreated(Event):
    """Emitted when a custom role is created."""

    role_id: str
    name: str
    scope_level: EntityType
    lineage: Lineage
    groups: list[PermissionGroup]
    created_by: str


class RoleUpdated(Event):
    """Emitted when a custom role's name or groups change."""

    role_id: str
    name: str
    groups: list[PermissionGroup]
    updated_by: str


class UserRoleInvited(Event):
    """Emitted when a user is invited to a lineage."""

    user_id: str
    email: str | None = None
    role_id: str
    lineage: Lineage
    invited_by: str


class UserRoleActivated(Event):
    """Emitted when an invited binding becomes active."""

    user_id: str
    role_id: str
    lineage: Lineage


class UserRoleUpdated(Event):
    user_id: str
    role_id: str
    previous_role_id: str
    lineage: Lineage
    updated_by: str


class UserRoleDeleted(Event):
    user_id: str
    role_id: str
    lineage: Lineage
    deleted_by: str
