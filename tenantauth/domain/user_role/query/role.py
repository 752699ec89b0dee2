"""Role queries: the caller's own role, a role by id, invitable roles and scopes."""

from tenantauth.domain.shared.authorization.gate import authenticated, requires
from tenantauth.domain.shared.query import Query, QueryHandler
from tenantauth.domain.shared.query import Result as QueryResult
from tenantauth.domain.user_role.dto import GroupInfoDTO, RoleDTO, ScopeName
from tenantauth.domain.user_role.model.permission import Permission
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.value import RoleId
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver
from tenantauth.domain.user_role.service.role import RoleService


class GetRoleFromToken(Query):
    """Scope level and groups of the caller's own role."""


class GetRoleFromTokenResult(QueryResult):
    role_id: str
    scope_level: ScopeName
    groups: list[str]


class GetRoleFromTokenHandler(QueryHandler[GetRoleFromToken, GetRoleFromTokenResult]):
    __auth__ = authenticated()
    principal: Principal
    authorization: AuthorizationResolver

    async def run(self, query: GetRoleFromToken) -> GetRoleFromTokenResult:
        summary = await self.authorization.role_from_token(self.principal)
        return GetRoleFromTokenResult(
            role_id=summary.role_id,
            scope_level=summary.scope_level.label,  # type: ignore[arg-type]
            groups=[str(g) for g in summary.groups],
        )


class GetRole(Query):
    role_id: str


class GetRoleResult(QueryResult):
    role: RoleDTO
    group_info: list[GroupInfoDTO]


class GetRoleHandler(QueryHandler[GetRole, GetRoleResult]):
    __auth__ = requires(Permission.USERS_READ)
    principal: Principal
    authorization: AuthorizationResolver
    role_service: RoleService

    async def run(self, query: GetRole) -> GetRoleResult:
        details = await self.role_service.get_role(self.principal, RoleId(query.role_id))
        return GetRoleResult(
            role=RoleDTO.from_role(details.role),
            group_info=[GroupInfoDTO.from_info(i) for i in details.group_infos],
        )


class ListInvitableRoles(Query):
    """Roles the caller may grant when inviting or reassigning."""


class ListInvitableRolesResult(QueryResult):
    roles: list[RoleDTO]


class ListInvitableRolesHandler(QueryHandler[ListInvitableRoles, ListInvitableRolesResult]):
    __auth__ = requires(Permission.USERS_READ)
    principal: Principal
    authorization: AuthorizationResolver
    role_service: RoleService

    async def run(self, query: ListInvitableRoles) -> ListInvitableRolesResult:
        roles = await self.role_service.list_invitable_roles(self.principal)
        return ListInvitableRolesResult(roles=[RoleDTO.from_role(r) for r in roles])


class ListRoleScopes(Query):
    pass


class ListRoleScopesResult(QueryResult):
    scopes: list[ScopeName]


class ListRoleScopesHandler(QueryHandler[ListRoleScopes, ListRoleScopesResult]):
    __auth__ = requires(Permission.USERS_READ)
    principal: Principal
    authorization: AuthorizationResolver

    async def run(self, query: ListRoleScopes) -> ListRoleScopesResult:
        scopes = await self.authorization.available_scopes(self.principal)
        return ListRoleScopesResult(scopes=[s.label for s in scopes])  # type: ignore[misc]
