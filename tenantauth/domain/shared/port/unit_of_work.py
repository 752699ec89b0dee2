"""UnitOfWork port - the transaction boundary of one request."""

from abc import abstractmethod
from typing import Protocol

from tenantauth.domain.shared.port import Port


class UnitOfWork(Port, Protocol):
    """Commits the writes made so far in the current unit of work.

    Work that is never committed is discarded when the unit of work closes.
    Command handlers commit before they build a result, so nothing reaches
    the caller (least of all a token) for writes that did not persist.
    """

    @abstractmethod
    async def commit(self) -> None:
        """Make pending writes durable.

        Raises:
            StorageUnavailableError: the store could not commit; nothing was persisted
        """
        ...
