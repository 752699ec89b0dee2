"""RoleService - custom role definitions and binding removal."""

import logging
from dataclasses import dataclass

from tenantauth.domain.shared.audit import AuditTrail
from tenantauth.domain.shared.error import (
    AlreadyExistsError,
    ImmutableFieldError,
    InsufficientPrivilegeError,
    NotFoundError,
    ValidationError,
)
from tenantauth.domain.shared.service import Service
from tenantauth.domain.user_role.event.events import RoleCreated, RoleUpdated, UserRoleDeleted
from tenantauth.domain.user_role.model.catalog import GroupInfo, PermissionCatalog
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.predefined import PREDEFINED_ROLES, predefined_name_taken
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.value import RoleId, UserId, new_role_id
from tenantauth.domain.user_role.port.role_repository import RoleRepository
from tenantauth.domain.user_role.port.user_role_repository import UserRoleRepository
from tenantauth.domain.user_role.service.authorization import Actor, AuthorizationResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleDetails:
    role: Role
    group_infos: list[GroupInfo]


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Role name must not be empty", field="name")
    return cleaned


class RoleService(Service):
    """Creates, updates and lists roles within the caller's lineage."""

    _authorization: AuthorizationResolver
    _catalog: PermissionCatalog
    _role_repo: RoleRepository
    _user_role_repo: UserRoleRepository
    _audit: AuditTrail

    async def _ensure_name_free(
        self, org_id: str, name: str, role_id: RoleId | None = None
    ) -> None:
        if predefined_name_taken(name):
            raise AlreadyExistsError(
                f"Role name {name!r} is reserved by a predefined role",
                code="role_name_taken",
            )
        existing = await self._role_repo.find_by_name(org_id, name)
        if existing is not None and existing.role_id != role_id:
            raise AlreadyExistsError(
                f"Role name {name!r} already exists in organization {org_id}",
                code="role_name_taken",
            )

    async def _visible_role(self, actor: Actor, role_id: RoleId) -> Role:
        role = await self._authorization.get_role(role_id, actor.lineage.org_id)
        if role is None or not role.is_visible_from(actor.lineage):
            raise NotFoundError(f"Role not found: {role_id}", code="role_not_found")
        return role

    async def create_role(
        self,
        principal: Principal,
        name: str,
        groups: list[str],
        scope_level: EntityType,
        lineage: Lineage,
    ) -> Role:
        """Create a custom role.

        Raises:
            InvalidScopeError: lineage ids do not match ``scope_level``
            UnknownPermissionGroupError: a tag is not in the catalog
            InsufficientPrivilegeError: the creator does not dominate the target scope
            AlreadyExistsError: the name is taken in the organization
        """
        lineage.require_shape(scope_level)
        parsed = self._catalog.parse_groups(groups)
        actor = await self._authorization.actor(principal)
        self._authorization.ensure_can_act_on(actor, scope_level, lineage)

        cleaned = _clean_name(name)
        await self._ensure_name_free(lineage.org_id, cleaned)

        role = Role(
            role_id=new_role_id(),
            name=cleaned,
            groups=parsed,
            scope_level=scope_level,
            lineage=lineage,
            created_by=actor.user_id,
            last_modified_by=actor.user_id,
            is_invitable=scope_level < EntityType.ORGANIZATION,
        )
        await self._role_repo.save(role)
        logger.info(
            "Role created: role_id=%s scope=%s lineage=%s by=%s",
            role.role_id,
            scope_level.label,
            lineage,
            actor.user_id,
        )
        await self._audit.record(
            RoleCreated(
                role_id=role.role_id,
                name=role.name,
                scope_level=role.scope_level,
                lineage=lineage,
                groups=role.groups,
                created_by=actor.user_id,
            )
        )
        return role

    async def update_role(
        self,
        principal: Principal,
        role_id: RoleId,
        name: str | None = None,
        groups: list[str] | None = None,
        scope_level: EntityType | None = None,
    ) -> Role:
        """Rename a role or replace its groups. Scope level never changes."""
        actor = await self._authorization.actor(principal)
        role = await self._visible_role(actor, role_id)

        if role.is_predefined or role.lineage is None:
            raise ImmutableFieldError(
                f"Predefined role {role_id} cannot be modified",
                field="role_id",
                code="predefined_role",
            )
        if scope_level is not None and scope_level != role.scope_level:
            raise ImmutableFieldError(
                "The scope level of a role cannot change",
                field="scope_level",
            )
        if name is None and groups is None:
            raise ValidationError("Nothing to update", code="empty_update")

        parsed = self._catalog.parse_groups(groups) if groups is not None else None
        self._authorization.ensure_can_act_on(actor, role.scope_level, role.lineage)

        if name is not None:
            cleaned = _clean_name(name)
            if cleaned.lower() != role.name.lower():
                await self._ensure_name_free(role.lineage.org_id, cleaned, role.role_id)
            role.rename(cleaned, actor.user_id)
        if parsed is not None:
            role.set_groups(parsed, actor.user_id)

        await self._role_repo.save(role)
        logger.info("Role updated: role_id=%s by=%s", role.role_id, actor.user_id)
        await self._audit.record(
            RoleUpdated(
                role_id=role.role_id,
                name=role.name,
                groups=role.groups,
                updated_by=actor.user_id,
            )
        )
        return role

    async def get_role(self, principal: Principal, role_id: RoleId) -> RoleDetails:
        actor = await self._authorization.actor(principal)
        role = await self._visible_role(actor, role_id)
        return RoleDetails(
            role=role,
            group_infos=[self._catalog.describe(g) for g in role.groups],
        )

    async def list_invitable_roles(self, principal: Principal) -> list[Role]:
        """Roles the principal may grant, broadest scope first, then by name."""
        actor = await self._authorization.actor(principal)

        candidates = [r.model_copy(deep=True) for r in PREDEFINED_ROLES.values()]
        candidates += await self._role_repo.list_related(actor.lineage, actor.scope)

        invitable = [
            r
            for r in candidates
            if r.is_invitable
            and r.scope_level <= actor.scope
            and (r.lineage is None or actor.dominates(r.scope_level, r.lineage))
        ]
        return sorted(invitable, key=lambda r: (-r.scope_level, r.name.lower()))

    async def delete_user_role_binding(
        self, principal: Principal, user_id: UserId, lineage: Lineage
    ) -> None:
        actor = await self._authorization.actor(principal)
        if user_id == actor.user_id:
            raise InsufficientPrivilegeError(
                "Users cannot delete their own role", code="cannot_delete_self"
            )
        self._authorization.ensure_can_act_on(actor, lineage.entity_type, lineage)

        binding = await self._user_role_repo.get(user_id, lineage)
        if binding is None or not await self._user_role_repo.delete(user_id, lineage):
            raise NotFoundError(
                f"No role binding for user {user_id} at {lineage}",
                code="user_role_not_found",
            )

        logger.info(
            "User role deleted: user_id=%s lineage=%s by=%s", user_id, lineage, actor.user_id
        )
        await self._audit.record(
            UserRoleDeleted(
                user_id=user_id,
                role_id=binding.role_id,
                lineage=lineage,
                deleted_by=actor.user_id,
            )
        )
