"""Centralized error transformation for API routes.

Maps tenantauth errors (domain and infrastructure) to HTTPException responses.
Every kind keeps its own ``code`` in the body, so a wrong token purpose is
never confused with a missing permission even where statuses coincide.
"""

from typing import Any

from fastapi import HTTPException

from tenantauth.domain.shared.error import (
    AlreadyExistsError,
    AlreadyProcessedError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    ImmutableFieldError,
    InfrastructureError,
    InsufficientPrivilegeError,
    InvalidScopeError,
    InvalidSelectionError,
    InvalidStateError,
    InvalidTokenPurposeError,
    NotFoundError,
    RoleNotFoundError,
    StorageUnavailableError,
    TenantAuthError,
    UnknownPermissionGroupError,
    ValidationError,
)

STORAGE_RETRY_AFTER_SECONDS = 5

# Looked up along the error's MRO, so the most specific entry wins.
ERROR_STATUS_MAP: dict[type[TenantAuthError], int] = {
    InvalidTokenPurposeError: 401,
    RoleNotFoundError: 401,
    InsufficientPrivilegeError: 403,
    AuthorizationError: 403,
    NotFoundError: 404,
    AlreadyExistsError: 409,
    AlreadyProcessedError: 409,
    ConflictError: 409,
    InvalidStateError: 409,
    InvalidScopeError: 400,
    InvalidSelectionError: 400,
    ImmutableFieldError: 400,
    ValidationError: 422,
    UnknownPermissionGroupError: 422,
    StorageUnavailableError: 503,
    ConfigurationError: 500,
    InfrastructureError: 503,
}

# Authorization codes that mean "no usable credential" rather than "not allowed".
UNAUTHENTICATED_CODES = frozenset(
    {"missing_token", "invalid_token", "token_expired", "incomplete_session"}
)


def status_for(error: TenantAuthError) -> int:
    if isinstance(error, AuthorizationError) and error.code in UNAUTHENTICATED_CODES:
        return 401
    for cls in type(error).__mro__:
        status = ERROR_STATUS_MAP.get(cls)
        if status is not None:
            return status
    return 400


def map_error(error: TenantAuthError) -> HTTPException:
    """Map a tenantauth error to an HTTPException."""
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }
    field = getattr(error, "field", None)
    if field is not None:
        detail["field"] = field
    if isinstance(error, UnknownPermissionGroupError):
        detail["group"] = error.tag

    status_code = status_for(error)
    headers: dict[str, str] | None = None
    if status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(error, StorageUnavailableError):
        headers = {"Retry-After": str(STORAGE_RETRY_AFTER_SECONDS)}

    return HTTPException(status_code=status_code, detail=detail, headers=headers)
