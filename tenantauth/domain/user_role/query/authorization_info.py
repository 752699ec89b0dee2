"""Catalog listings: permission groups and parent groups."""

from pydantic import BaseModel

from tenantauth.domain.shared.authorization.gate import requires
from tenantauth.domain.shared.query import Query, QueryHandler
from tenantauth.domain.shared.query import Result as QueryResult
from tenantauth.domain.user_role.dto import GroupInfoDTO
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.domain.user_role.model.permission import Permission
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver


class GetAuthorizationInfo(Query):
    """All permission groups with their descriptions and permissions."""


class GetAuthorizationInfoResult(QueryResult):
    groups: list[GroupInfoDTO]


class GetAuthorizationInfoHandler(QueryHandler[GetAuthorizationInfo, GetAuthorizationInfoResult]):
    __auth__ = requires(Permission.USERS_READ)
    principal: Principal
    authorization: AuthorizationResolver
    catalog: PermissionCatalog

    async def run(self, query: GetAuthorizationInfo) -> GetAuthorizationInfoResult:
        return GetAuthorizationInfoResult(
            groups=[
                GroupInfoDTO.from_info(info)
                for info in self.catalog.all_group_tags_with_descriptions()
            ]
        )


class GetRoleInformation(Query):
    """Parent groups and the permission groups under each."""


class ParentGroupDTO(BaseModel):
    name: str
    description: str
    groups: list[str]


class GetRoleInformationResult(QueryResult):
    parent_groups: list[ParentGroupDTO]


class GetRoleInformationHandler(QueryHandler[GetRoleInformation, GetRoleInformationResult]):
    __auth__ = requires(Permission.USERS_READ)
    principal: Principal
    authorization: AuthorizationResolver
    catalog: PermissionCatalog

    async def run(self, query: GetRoleInformation) -> GetRoleInformationResult:
        return GetRoleInformationResult(
            parent_groups=[
                ParentGroupDTO(
                    name=p.parent,
                    description=p.description,
                    groups=[str(g) for g in p.groups],
                )
                for p in self.catalog.parent_groups()
            ]
        )
