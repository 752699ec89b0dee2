"""Repository port for UserRole bindings."""

from abc import abstractmethod
from collections.abc import AsyncIterator
from typing import Protocol

from tenantauth.domain.shared.port import Port
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.user_role import UserRole
from tenantauth.domain.user_role.model.value import UserId


class UserRoleRepository(Port, Protocol):
    """Storage for user-role bindings, keyed by (user, lineage)."""

    @abstractmethod
    async def get(self, user_id: UserId, lineage: Lineage) -> UserRole | None:
        """Get the binding for a user at exactly this lineage."""
        ...

    @abstractmethod
    async def add(self, binding: UserRole) -> None:
        """Insert a new binding. Raises AlreadyExistsError if one exists for the key."""
        ...

    @abstractmethod
    async def update(self, binding: UserRole) -> None:
        """Update role and audit fields of an existing binding."""
        ...

    @abstractmethod
    async def activate(self, user_id: UserId, lineage: Lineage) -> bool:
        """Conditionally move a binding from invited to active.

        Returns False if the binding is missing or was not in invited status.
        """
        ...

    @abstractmethod
    async def delete(self, user_id: UserId, lineage: Lineage) -> bool:
        """Delete a binding. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def list_invited(self, user_id: UserId) -> list[UserRole]:
        """All invited bindings for a user."""
        ...

    @abstractmethod
    def stream_within(self, boundary: Lineage) -> AsyncIterator[UserRole]:
        """Lazily yield every binding at or below ``boundary``, ordered by user id."""
        ...
