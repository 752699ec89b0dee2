"""EventRepository port - append-only audit log."""

from abc import abstractmethod
from typing import Protocol

from tenantauth.domain.shared.event import Event, EventId
from tenantauth.domain.shared.port import Port


class EventRepository(Port, Protocol):
    """Repository for domain events.

    Events are appended to a log and never updated. Implementations must keep
    a failed append from affecting the surrounding unit of work.
    """

    @abstractmethod
    async def append(self, event: Event) -> None:
        """Append an event to the log."""
        ...

    @abstractmethod
    async def get(self, event_id: EventId) -> Event | None:
        """Get an event by ID."""
        ...
