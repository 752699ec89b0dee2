"""Optional locking capability a handler may request from its caller.

The core never acquires locks itself. A handler that needs one declares a
``LockRequest`` in ``__lock__`` and the transport decides how to honor it.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LockRequest:
    """Name of the resource to lock and how long the caller may hold it."""

    resource: str
    ttl_seconds: int = 30
