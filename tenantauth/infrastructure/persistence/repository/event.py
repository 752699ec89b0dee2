"""SQLAlchemy adapter implementing EventRepository."""

import logging
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.shared.event import Event, EventId
from tenantauth.domain.shared.port.event_repository import EventRepository
from tenantauth.infrastructure.persistence.tables import events_table

logger = logging.getLogger(__name__)


class SQLAlchemyEventRepository(EventRepository):
    """Append-only audit log.

    Each append runs in its own savepoint so a failed insert is rolled back
    alone and the surrounding unit of work can still commit.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, event: Event) -> None:
        stmt = insert(events_table).values(
            id=str(event.id),
            event_type=type(event).__name__,
            payload=event.model_dump(mode="json"),
            created_at=event.created_at,
        )
        async with self._session.begin_nested():
            await self._session.execute(stmt)

    async def get(self, event_id: EventId) -> Event | None:
        stmt = select(events_table.c.event_type, events_table.c.payload).where(
            events_table.c.id == str(event_id)
        )
        result = await self._session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        event_type, payload = row
        return self._deserialize(event_type, payload)

    async def list_by_type(self, event_type: str, limit: int = 50) -> list[Event]:
        stmt = (
            select(events_table.c.event_type, events_table.c.payload)
            .where(events_table.c.event_type == event_type)
            .order_by(events_table.c.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        events = [self._deserialize(t, p) for t, p in result.all()]
        return [e for e in events if e is not None]

    @staticmethod
    def _deserialize(event_type: str, payload: dict[str, Any]) -> Event | None:
        cls = Event.lookup(event_type)
        if cls is None:
            logger.warning("Unknown event type in audit log: %s", event_type)
            return None
        return cls.model_validate(payload)
