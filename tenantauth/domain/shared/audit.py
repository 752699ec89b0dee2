"""AuditTrail - fire-and-forget recording of state transitions."""

import logging

from tenantauth.domain.shared.event import Event
from tenantauth.domain.shared.port.event_repository import EventRepository
from tenantauth.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AuditTrail(Service):
    """Records one event per state transition.

    Recording never decides the outcome of the operation that emitted the
    event: failures are logged and dropped.
    """

    _repo: EventRepository

    async def record(self, event: Event) -> None:
        try:
            await self._repo.append(event)
        except Exception:
            logger.warning(
                "Dropped audit event %s id=%s",
                type(event).__name__,
                event.id,
                exc_info=True,
            )
