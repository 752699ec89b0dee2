"""LineageDirectory - users visible within a principal's boundary."""

from dataclasses import dataclass

from tenantauth.domain.shared.service import Service
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.user_role import UserRoleStatus
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.domain.user_role.port.user_role_repository import UserRoleRepository
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver


@dataclass(frozen=True)
class UserSummary:
    user_id: UserId
    role_id: RoleId
    role_name: str | None
    lineage: Lineage
    entity_type: EntityType
    status: UserRoleStatus


class LineageDirectory(Service):
    _authorization: AuthorizationResolver
    _user_role_repo: UserRoleRepository

    async def list_users_in_lineage(self, principal: Principal) -> list[UserSummary]:
        """Bindings the principal dominates, ordered by user id.

        Rows are streamed from storage and filtered one at a time. Role names
        are looked up once per role id after the stream is drained, so no
        second query runs while the cursor is open.
        """
        actor = await self._authorization.actor(principal)
        boundary = actor.lineage.bounded_to(actor.scope)

        visible = [
            binding
            async for binding in self._user_role_repo.stream_within(boundary)
            if actor.dominates(binding.entity_type, binding.lineage)
        ]

        role_names: dict[RoleId, str | None] = {}
        for binding in visible:
            if binding.role_id not in role_names:
                role = await self._authorization.get_role(binding.role_id, binding.lineage.org_id)
                role_names[binding.role_id] = role.name if role is not None else None

        return [
            UserSummary(
                user_id=binding.user_id,
                role_id=binding.role_id,
                role_name=role_names[binding.role_id],
                lineage=binding.lineage,
                entity_type=binding.entity_type,
                status=binding.status,
            )
            for binding in visible
        ]
