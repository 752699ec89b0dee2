"""Commands that manage other users' bindings: invite, reassign, delete."""

from datetime import datetime

from tenantauth.domain.shared.authorization.gate import requires
from tenantauth.domain.shared.command import Command, CommandHandler, Result
from tenantauth.domain.shared.port.unit_of_work import UnitOfWork
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.permission import Permission
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.user_role import UserRole
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver
from tenantauth.domain.user_role.service.invitation import InvitationService
from tenantauth.domain.user_role.service.role import RoleService


class UserRoleResult(Result):
    user_id: str
    role_id: str
    lineage: Lineage
    status: str
    updated_at: datetime

    @classmethod
    def from_binding(cls, binding: UserRole) -> "UserRoleResult":
        return cls(
            user_id=binding.user_id,
            role_id=binding.role_id,
            lineage=binding.lineage,
            status=binding.status,
            updated_at=binding.updated_at,
        )


class InviteUser(Command):
    user_id: str
    email: str | None = None
    role_id: str
    lineage: Lineage


class InviteUserHandler(CommandHandler[InviteUser, UserRoleResult]):
    __auth__ = requires(Permission.USERS_WRITE)
    principal: Principal
    authorization: AuthorizationResolver
    invitation_service: InvitationService
    uow: UnitOfWork

    async def run(self, cmd: InviteUser) -> UserRoleResult:
        binding = await self.invitation_service.invite_user(
            self.principal,
            user_id=UserId(cmd.user_id),
            role_id=RoleId(cmd.role_id),
            lineage=cmd.lineage,
            email=cmd.email,
        )
        await self.uow.commit()
        return UserRoleResult.from_binding(binding)


class UpdateUserRole(Command):
    """Reassign the role of an existing binding."""

    user_id: str
    role_id: str
    lineage: Lineage


class UpdateUserRoleHandler(CommandHandler[UpdateUserRole, UserRoleResult]):
    __auth__ = requires(Permission.USERS_WRITE)
    principal: Principal
    authorization: AuthorizationResolver
    invitation_service: InvitationService
    uow: UnitOfWork

    async def run(self, cmd: UpdateUserRole) -> UserRoleResult:
        binding = await self.invitation_service.update_user_role(
            self.principal,
            user_id=UserId(cmd.user_id),
            role_id=RoleId(cmd.role_id),
            lineage=cmd.lineage,
        )
        await self.uow.commit()
        return UserRoleResult.from_binding(binding)


class DeleteUserRole(Command):
    user_id: str
    lineage: Lineage


class DeleteUserRoleResult(Result):
    deleted: bool = True


class DeleteUserRoleHandler(CommandHandler[DeleteUserRole, DeleteUserRoleResult]):
    __auth__ = requires(Permission.USERS_WRITE)
    principal: Principal
    authorization: AuthorizationResolver
    role_service: RoleService
    uow: UnitOfWork

    async def run(self, cmd: DeleteUserRole) -> DeleteUserRoleResult:
        await self.role_service.delete_user_role_binding(
            self.principal, UserId(cmd.user_id), cmd.lineage
        )
        await self.uow.commit()
        return DeleteUserRoleResult()
