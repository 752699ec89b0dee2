"""Domain events emitted on every state transition."""

from datetime import UTC, datetime
from typing import Any, ClassVar, NewType
from uuid import UUID, uuid4

from pydantic import Field

from tenantauth.domain.shared.model.entity import Entity

EventId = NewType("EventId", UUID)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_event_id() -> EventId:
    return EventId(uuid4())


class Event(Entity):
    """Base class for domain events.

    Subclasses are automatically registered by name in Event._registry so the
    event log can be read back into typed events.
    """

    id: EventId = Field(default_factory=_new_event_id)
    created_at: datetime = Field(default_factory=_utc_now)

    _registry: ClassVar[dict[str, type["Event"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry[cls.__name__] = cls

    @classmethod
    def lookup(cls, name: str) -> type["Event"] | None:
        return cls._registry.get(name)
