"""Error hierarchy for tenantauth.

Error layers:
- TenantAuthError: Base class for all tenantauth errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage outages (5xx responses)

Every error carries a ``code``. It defaults to the class name so each kind stays
distinguishable to the caller even when two kinds share an HTTP status.
These errors are mapped to HTTP responses by the exception handler in app.py.
"""


class TenantAuthError(Exception):
    """Base class for all tenantauth errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(TenantAuthError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found (or not visible from the caller's lineage)."""


class RoleNotFoundError(DomainError):
    """The principal's own role no longer exists (orphaned binding)."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None, code: str | None = None) -> None:
        super().__init__(message, code=code or "VALIDATION_ERROR")
        self.field = field


class UnknownPermissionGroupError(DomainError):
    """A permission group tag is not in the catalog."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Unknown permission group: {tag}")
        self.tag = tag


class InvalidScopeError(DomainError):
    """Lineage fields do not match the scope level they are used with."""


class ImmutableFieldError(DomainError):
    """Attempt to change a field that cannot change after creation."""

    def __init__(self, message: str, field: str, code: str | None = None) -> None:
        super().__init__(message, code=code)
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class InvalidSelectionError(DomainError):
    """A selected merchant is not among the invitee's candidates."""


class ConflictError(DomainError):
    """Resource already exists or was changed concurrently."""


class AlreadyExistsError(ConflictError):
    """A role name or user-role binding already exists."""


class AlreadyProcessedError(ConflictError):
    """A single-use transition (token or invitation) has already happened."""


class AuthorizationError(DomainError):
    """User not authorized for this operation."""


class InsufficientPrivilegeError(AuthorizationError):
    """Caller's scope or permissions do not cover the target."""


class InvalidTokenPurposeError(AuthorizationError):
    """The presented credential was issued for a different purpose."""


# =============================================================================
# Infrastructure Errors (system-level failures - typically 5xx)
# =============================================================================


class InfrastructureError(TenantAuthError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend is unavailable. Safe for the caller to retry."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
