"""Repository port for custom Role persistence."""

from abc import abstractmethod
from typing import Protocol

from tenantauth.domain.shared.port import Port
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.value import RoleId


class RoleRepository(Port, Protocol):
    """Storage for custom roles. Predefined roles never reach storage."""

    @abstractmethod
    async def get(self, role_id: RoleId, org_id: str) -> Role | None:
        """Get a role by id within an organization."""
        ...

    @abstractmethod
    async def save(self, role: Role) -> None:
        """Insert or update a role."""
        ...

    @abstractmethod
    async def find_by_name(self, org_id: str, name: str) -> Role | None:
        """Case-insensitive name lookup within an organization."""
        ...

    @abstractmethod
    async def list_related(self, lineage: Lineage, max_scope: EntityType) -> list[Role]:
        """Roles at or below ``max_scope`` whose lineage lies along ``lineage``'s chain."""
        ...
