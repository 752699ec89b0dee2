"""ListUsersInLineage query and handler."""

from pydantic import BaseModel

from tenantauth.domain.shared.authorization.gate import authenticated
from tenantauth.domain.shared.query import Query, QueryHandler
from tenantauth.domain.shared.query import Result as QueryResult
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver
from tenantauth.domain.user_role.service.lineage import LineageDirectory


class ListUsersInLineage(Query):
    """Users bound anywhere inside the caller's boundary."""


class UserSummaryDTO(BaseModel):
    user_id: str
    role_id: str
    role_name: str | None
    lineage: Lineage
    entity_type: str
    status: str


class ListUsersInLineageResult(QueryResult):
    users: list[UserSummaryDTO]


class ListUsersInLineageHandler(QueryHandler[ListUsersInLineage, ListUsersInLineageResult]):
    __auth__ = authenticated()
    principal: Principal
    authorization: AuthorizationResolver
    directory: LineageDirectory

    async def run(self, query: ListUsersInLineage) -> ListUsersInLineageResult:
        users = await self.directory.list_users_in_lineage(self.principal)
        return ListUsersInLineageResult(
            users=[
                UserSummaryDTO(
                    user_id=u.user_id,
                    role_id=u.role_id,
                    role_name=u.role_name,
                    lineage=u.lineage,
                    entity_type=u.entity_type.label,
                    status=u.status,
                )
                for u in users
            ]
        )
