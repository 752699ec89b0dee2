"""Translation of driver failures into domain-visible storage errors."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

from tenantauth.domain.shared.error import StorageUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Raise StorageUnavailableError for failures a caller may safely retry.

    Integrity errors and programming errors pass through untouched.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.warning("Storage unavailable during %s: %s", operation, e.orig)
        raise StorageUnavailableError(f"Storage unavailable during {operation}") from e
    except DBAPIError as e:
        if not e.connection_invalidated:
            raise
        logger.warning("Connection lost during %s", operation)
        raise StorageUnavailableError(f"Storage unavailable during {operation}") from e
