"""Role - a named bundle of permission groups at a scope level."""

from datetime import UTC, datetime

from pydantic import Field, model_validator

from tenantauth.domain.shared.model.entity import Entity
from tenantauth.domain.shared.model.value import ValueObject
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.permission import PermissionGroup
from tenantauth.domain.user_role.model.value import RoleId, UserId


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Role(Entity):
    """A role definition.

    Invariants:
    - `scope_level` never changes after creation
    - Custom roles carry a lineage whose shape matches `scope_level`
    - Predefined roles carry no lineage and apply everywhere
    """

    role_id: RoleId
    name: str
    groups: list[PermissionGroup]
    scope_level: EntityType
    lineage: Lineage | None = None
    created_by: UserId | None = None
    last_modified_by: UserId | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    is_invitable: bool = True
    is_predefined: bool = False

    @model_validator(mode="after")
    def _check_lineage(self) -> "Role":
        if self.lineage is not None:
            self.lineage.require_shape(self.scope_level)
        elif not self.is_predefined:
            raise ValueError("custom roles require a lineage")
        return self

    def is_visible_from(self, lineage: Lineage) -> bool:
        """Predefined roles are visible everywhere; custom roles along their own chain."""
        if self.lineage is None:
            return True
        return self.lineage.is_related(lineage)

    def rename(self, name: str, by: UserId) -> None:
        self.name = name
        self._touch(by)

    def set_groups(self, groups: list[PermissionGroup], by: UserId) -> None:
        self.groups = groups
        self._touch(by)

    def _touch(self, by: UserId) -> None:
        self.last_modified_by = by
        self.updated_at = _utc_now()

    def summary(self) -> "RoleSummary":
        return RoleSummary(
            role_id=self.role_id,
            scope_level=self.scope_level,
            groups=tuple(self.groups),
        )


class RoleSummary(ValueObject):
    """Scope level and groups of a role, without the full record."""

    role_id: RoleId
    scope_level: EntityType
    groups: tuple[PermissionGroup, ...]
