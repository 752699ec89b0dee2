"""User-role domain events."""

from .events import (
    RoleCreated,
    RoleUpdated,
    UserRoleActivated,
    UserRoleDeleted,
    UserRoleInvited,
    UserRoleUpdated,
)

__all__ = [
    "RoleCreated",
    "RoleUpdated",
    "UserRoleActivated",
    "UserRoleDeleted",
    "UserRoleInvited",
    "UserRoleUpdated",
]
