"""AuthorizationResolver - effective permissions and scope of a principal."""

import logging
from dataclasses import dataclass

from tenantauth.domain.shared.error import (
    AuthorizationError,
    InsufficientPrivilegeError,
    RoleNotFoundError,
)
from tenantauth.domain.shared.service import Service
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage, dominates
from tenantauth.domain.user_role.model.permission import Permission, PermissionGroup
from tenantauth.domain.user_role.model.predefined import get_predefined
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.role import Role, RoleSummary
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.domain.user_role.port.role_repository import RoleRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAuthorization:
    permissions: frozenset[Permission]
    groups: frozenset[PermissionGroup]


@dataclass(frozen=True)
class Actor:
    """A full-session principal together with its role's scope."""

    user_id: UserId
    role: Role
    lineage: Lineage

    @property
    def scope(self) -> EntityType:
        return self.role.scope_level

    def dominates(self, target_scope: EntityType, target_lineage: Lineage) -> bool:
        return dominates(self.scope, self.lineage, target_scope, target_lineage)


class AuthorizationResolver(Service):
    """Resolves a principal's role into permissions, scope and boundary."""

    _catalog: PermissionCatalog
    _role_repo: RoleRepository

    async def get_role(self, role_id: RoleId | str, org_id: str) -> Role | None:
        """Predefined roles first, then custom roles of the organization."""
        predefined = get_predefined(role_id)
        if predefined is not None:
            return predefined
        return await self._role_repo.get(RoleId(role_id), org_id)

    async def _principal_role(self, principal: Principal) -> Role:
        if principal.role_id is None or principal.lineage is None:
            raise AuthorizationError("Session has no role or lineage", code="incomplete_session")
        role = await self.get_role(principal.role_id, principal.lineage.org_id)
        if role is None:
            logger.warning(
                "Orphaned binding: user_id=%s role_id=%s", principal.user_id, principal.role_id
            )
            raise RoleNotFoundError(f"Role {principal.role_id} no longer exists")
        return role

    async def resolve(self, principal: Principal) -> ResolvedAuthorization:
        role = await self._principal_role(principal)
        return ResolvedAuthorization(
            permissions=self._catalog.permissions_for(role.groups),
            groups=frozenset(role.groups),
        )

    async def has_permission(self, principal: Principal, permission: Permission) -> bool:
        resolved = await self.resolve(principal)
        return permission in resolved.permissions

    async def role_from_token(self, principal: Principal) -> RoleSummary:
        return (await self._principal_role(principal)).summary()

    async def actor(self, principal: Principal) -> Actor:
        role = await self._principal_role(principal)
        lineage = principal.lineage
        if lineage is None:
            raise AuthorizationError("Session has no lineage", code="incomplete_session")
        return Actor(user_id=principal.user_id, role=role, lineage=lineage)

    def ensure_can_act_on(self, actor: Actor, scope: EntityType, lineage: Lineage) -> None:
        if not actor.dominates(scope, lineage):
            raise InsufficientPrivilegeError(
                f"A {actor.scope.label} role at {actor.lineage} cannot act on "
                f"{scope.label} level at {lineage}",
                code="scope_not_dominated",
            )

    async def available_scopes(self, principal: Principal) -> list[EntityType]:
        """Scope levels at or below the principal's own, highest first."""
        actor = await self.actor(principal)
        return sorted((s for s in EntityType if s <= actor.scope), reverse=True)
