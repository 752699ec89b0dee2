"""Custom Dishka scopes for tenantauth."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (catalog, engine, token issuer)
    - UOW: Unit of Work (one HTTP request, one database transaction)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
