"""User, role and invitation REST routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from tenantauth.domain.user_role.command.invitation import (
    AcceptInvitation,
    AcceptInvitationHandler,
    AcceptInvitationResult,
    MerchantSelect,
    MerchantSelectHandler,
    SessionResult,
)
from tenantauth.domain.user_role.command.role import (
    CreateRole,
    CreateRoleHandler,
    CreateRoleResult,
    UpdateRole,
    UpdateRoleHandler,
    UpdateRoleResult,
)
from tenantauth.domain.user_role.command.user_role import (
    DeleteUserRole,
    DeleteUserRoleHandler,
    DeleteUserRoleResult,
    InviteUser,
    InviteUserHandler,
    UpdateUserRole,
    UpdateUserRoleHandler,
    UserRoleResult,
)
from tenantauth.domain.user_role.dto import ScopeName
from tenantauth.domain.user_role.query.authorization_info import (
    GetAuthorizationInfo,
    GetAuthorizationInfoHandler,
    GetAuthorizationInfoResult,
    GetRoleInformation,
    GetRoleInformationHandler,
    GetRoleInformationResult,
)
from tenantauth.domain.user_role.query.list_users import (
    ListUsersInLineage,
    ListUsersInLineageHandler,
    ListUsersInLineageResult,
)
from tenantauth.domain.user_role.query.role import (
    GetRole,
    GetRoleFromToken,
    GetRoleFromTokenHandler,
    GetRoleFromTokenResult,
    GetRoleHandler,
    GetRoleResult,
    ListInvitableRoles,
    ListInvitableRolesHandler,
    ListInvitableRolesResult,
    ListRoleScopes,
    ListRoleScopesHandler,
    ListRoleScopesResult,
)

router = APIRouter(prefix="/user", tags=["Users"], route_class=DishkaRoute)


class UpdateRoleBody(BaseModel):
    name: str | None = None
    groups: list[str] | None = None
    scope_level: ScopeName | None = None


# --- Catalog ---


@router.get("/permission_info", response_model=GetAuthorizationInfoResult)
async def get_authorization_info(
    handler: FromDishka[GetAuthorizationInfoHandler],
) -> GetAuthorizationInfoResult:
    return await handler.run(GetAuthorizationInfo())


@router.get("/module/list", response_model=GetRoleInformationResult)
async def get_role_information(
    handler: FromDishka[GetRoleInformationHandler],
) -> GetRoleInformationResult:
    return await handler.run(GetRoleInformation())


# --- Roles ---


@router.get("/role", response_model=GetRoleFromTokenResult)
async def get_role_from_token(
    handler: FromDishka[GetRoleFromTokenHandler],
) -> GetRoleFromTokenResult:
    return await handler.run(GetRoleFromToken())


@router.post("/role", response_model=CreateRoleResult, status_code=201)
async def create_role(
    body: CreateRole,
    handler: FromDishka[CreateRoleHandler],
) -> CreateRoleResult:
    return await handler.run(body)


@router.get("/role/list/invite", response_model=ListInvitableRolesResult)
async def list_invitable_roles(
    handler: FromDishka[ListInvitableRolesHandler],
) -> ListInvitableRolesResult:
    return await handler.run(ListInvitableRoles())


@router.get("/role/scopes", response_model=ListRoleScopesResult)
async def list_role_scopes(
    handler: FromDishka[ListRoleScopesHandler],
) -> ListRoleScopesResult:
    return await handler.run(ListRoleScopes())


@router.get("/role/{role_id}", response_model=GetRoleResult)
async def get_role(
    role_id: str,
    handler: FromDishka[GetRoleHandler],
) -> GetRoleResult:
    return await handler.run(GetRole(role_id=role_id))


@router.put("/role/{role_id}", response_model=UpdateRoleResult)
async def update_role(
    role_id: str,
    body: UpdateRoleBody,
    handler: FromDishka[UpdateRoleHandler],
) -> UpdateRoleResult:
    return await handler.run(UpdateRole(role_id=role_id, **body.model_dump()))


# --- User role bindings ---


@router.get("/list", response_model=ListUsersInLineageResult)
async def list_users_in_lineage(
    handler: FromDishka[ListUsersInLineageHandler],
) -> ListUsersInLineageResult:
    return await handler.run(ListUsersInLineage())


@router.post("/invite", response_model=UserRoleResult, status_code=201)
async def invite_user(
    body: InviteUser,
    handler: FromDishka[InviteUserHandler],
) -> UserRoleResult:
    return await handler.run(body)


@router.post("/update_role", response_model=UserRoleResult)
async def update_user_role(
    body: UpdateUserRole,
    handler: FromDishka[UpdateUserRoleHandler],
) -> UserRoleResult:
    return await handler.run(body)


@router.delete("/user_role", response_model=DeleteUserRoleResult)
async def delete_user_role(
    body: DeleteUserRole,
    handler: FromDishka[DeleteUserRoleHandler],
) -> DeleteUserRoleResult:
    return await handler.run(body)


# --- Token exchange ---


@router.post("/accept_invite", response_model=AcceptInvitationResult)
async def accept_invitation(
    body: AcceptInvitation,
    handler: FromDishka[AcceptInvitationHandler],
) -> AcceptInvitationResult:
    return await handler.run(body)


@router.post("/merchant_select", response_model=SessionResult)
async def merchant_select(
    body: MerchantSelect,
    handler: FromDishka[MerchantSelectHandler],
) -> SessionResult:
    return await handler.run(body)
