"""CreateRole and UpdateRole commands and handlers."""

from tenantauth.domain.shared.authorization.gate import requires
from tenantauth.domain.shared.command import Command, CommandHandler, Result
from tenantauth.domain.shared.port.unit_of_work import UnitOfWork
from tenantauth.domain.user_role.dto import RoleDTO, ScopeName, parse_scope
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.permission import Permission
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.value import RoleId
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver
from tenantauth.domain.user_role.service.role import RoleService


class CreateRole(Command):
    """Command to create a custom role."""

    name: str
    groups: list[str]
    scope_level: ScopeName
    lineage: Lineage


class CreateRoleResult(Result):
    role: RoleDTO


class CreateRoleHandler(CommandHandler[CreateRole, CreateRoleResult]):
    __auth__ = requires(Permission.USERS_WRITE)
    principal: Principal
    authorization: AuthorizationResolver
    role_service: RoleService
    uow: UnitOfWork

    async def run(self, cmd: CreateRole) -> CreateRoleResult:
        role = await self.role_service.create_role(
            self.principal,
            name=cmd.name,
            groups=cmd.groups,
            scope_level=parse_scope(cmd.scope_level),
            lineage=cmd.lineage,
        )
        await self.uow.commit()
        return CreateRoleResult(role=RoleDTO.from_role(role))


class UpdateRole(Command):
    """Rename a role or replace its groups. ``scope_level`` is accepted only to reject changes."""

    role_id: str
    name: str | None = None
    groups: list[str] | None = None
    scope_level: ScopeName | None = None


class UpdateRoleResult(Result):
    role: RoleDTO


class UpdateRoleHandler(CommandHandler[UpdateRole, UpdateRoleResult]):
    __auth__ = requires(Permission.USERS_WRITE)
    principal: Principal
    authorization: AuthorizationResolver
    role_service: RoleService
    uow: UnitOfWork

    async def run(self, cmd: UpdateRole) -> UpdateRoleResult:
        role = await self.role_service.update_role(
            self.principal,
            RoleId(cmd.role_id),
            name=cmd.name,
            groups=cmd.groups,
            scope_level=parse_scope(cmd.scope_level) if cmd.scope_level else None,
        )
        await self.uow.commit()
        return UpdateRoleResult(role=RoleDTO.from_role(role))
