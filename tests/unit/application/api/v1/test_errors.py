"""Unit tests for API error mapping."""

import pytest

from tenantauth.application.api.v1.errors import map_error, status_for
from tenantauth.domain.shared.error import (
    AlreadyExistsError,
    AlreadyProcessedError,
    AuthorizationError,
    ConfigurationError,
    ImmutableFieldError,
    InsufficientPrivilegeError,
    InvalidScopeError,
    InvalidSelectionError,
    InvalidTokenPurposeError,
    NotFoundError,
    RoleNotFoundError,
    StorageUnavailableError,
    UnknownPermissionGroupError,
    ValidationError,
)


class TestStatusFor:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (InsufficientPrivilegeError("no"), 403),
            (InvalidTokenPurposeError("wrong"), 401),
            (RoleNotFoundError("gone"), 401),
            (AuthorizationError("missing", code="missing_token"), 401),
            (AuthorizationError("expired", code="token_expired"), 401),
            (AuthorizationError("other", code="access_denied"), 403),
            (NotFoundError("nope"), 404),
            (AlreadyExistsError("dup"), 409),
            (AlreadyProcessedError("used"), 409),
            (InvalidScopeError("shape"), 400),
            (InvalidSelectionError("m"), 400),
            (ImmutableFieldError("no", field="scope_level"), 400),
            (ValidationError("bad"), 422),
            (UnknownPermissionGroupError("nope"), 422),
            (StorageUnavailableError("down"), 503),
            (ConfigurationError("broken"), 500),
        ],
    )
    def test_status(self, error, status):
        assert status_for(error) == status


class TestMapError:
    def test_detail_carries_code(self):
        exc = map_error(AlreadyExistsError("taken", code="role_name_taken"))

        assert exc.status_code == 409
        assert exc.detail == {"code": "role_name_taken", "message": "taken"}
        assert exc.headers is None

    def test_field_and_group(self):
        assert map_error(ImmutableFieldError("no", field="scope_level")).detail["field"] == (
            "scope_level"
        )
        assert map_error(UnknownPermissionGroupError("nope")).detail["group"] == "nope"

    def test_unauthenticated_challenge(self):
        exc = map_error(AuthorizationError("missing", code="missing_token"))

        assert exc.headers == {"WWW-Authenticate": "Bearer"}

    def test_storage_retry_hint(self):
        exc = map_error(StorageUnavailableError("down"))

        assert exc.headers == {"Retry-After": "5"}

    def test_purpose_and_privilege_codes_differ(self):
        purpose = map_error(InvalidTokenPurposeError("wrong"))
        privilege = map_error(InsufficientPrivilegeError("no"))

        assert purpose.detail["code"] != privilege.detail["code"]
