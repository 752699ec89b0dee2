"""Port marker for interfaces implemented by infrastructure adapters."""

from typing import Protocol


class Port(Protocol):
    """Base for all outbound ports (storage, token signing, audit)."""
