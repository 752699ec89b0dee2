"""UserRole - a user bound to a role within a lineage."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from tenantauth.domain.shared.error import InvalidStateError
from tenantauth.domain.shared.model.entity import Entity
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.value import RoleId, UserId


def _utc_now() -> datetime:
    return datetime.now(UTC)


class UserRoleStatus(StrEnum):
    INVITED = "invited"
    ACTIVE = "active"


class UserRole(Entity):
    """A binding of a user to a role at one lineage.

    Invariants:
    - At most one binding per (user, lineage)
    - Status only moves invited -> active
    """

    user_id: UserId
    role_id: RoleId
    lineage: Lineage
    status: UserRoleStatus = UserRoleStatus.INVITED
    created_by: UserId
    last_modified_by: UserId
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def entity_type(self) -> EntityType:
        return self.lineage.entity_type

    @property
    def is_active(self) -> bool:
        return self.status is UserRoleStatus.ACTIVE

    def activate(self) -> None:
        if self.status is not UserRoleStatus.INVITED:
            raise InvalidStateError(
                f"Cannot activate a binding in status {self.status}",
                code="already_active",
            )
        self.status = UserRoleStatus.ACTIVE
        self.last_modified_by = self.user_id
        self.updated_at = _utc_now()

    def reassign(self, role_id: RoleId, by: UserId) -> None:
        self.role_id = role_id
        self.last_modified_by = by
        self.updated_at = _utc_now()

    def reinvite(self, role_id: RoleId, by: UserId) -> None:
        """Refresh a pending invitation with a new role and inviter."""
        if self.status is not UserRoleStatus.INVITED:
            raise InvalidStateError(
                "Only pending invitations can be refreshed",
                code="already_active",
            )
        self.reassign(role_id, by)
