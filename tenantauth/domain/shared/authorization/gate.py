"""Handler-level authorization gates and the single function that enforces them.

Three kinds of requirement exist:

- ``Authenticated``: any full-session principal, no permission check
- ``RequirePermission``: a full-session principal whose role grants a permission
- ``RequireTokenPurpose``: a single-purpose principal whose token was issued for
  one of the accepted purposes

A principal holding a single-purpose token never passes the first two kinds,
so such a token cannot be used for anything until it is exchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from tenantauth.domain.shared.error import (
    AuthorizationError,
    ConfigurationError,
    InsufficientPrivilegeError,
    InvalidTokenPurposeError,
)

if TYPE_CHECKING:
    from tenantauth.domain.user_role.model.permission import Permission
    from tenantauth.domain.user_role.model.principal import Principal, TokenPurpose

logger = logging.getLogger("tenantauth.authz")


class PermissionResolver(Protocol):
    """What the gate needs from the authorization resolver."""

    async def has_permission(self, principal: Principal, permission: Permission) -> bool: ...


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``.
    """


@dataclass(frozen=True)
class Authenticated(Gate):
    """Any principal with a full session."""


@dataclass(frozen=True)
class RequirePermission(Gate):
    """Full session whose role grants ``permission``."""

    permission: Permission


@dataclass(frozen=True)
class RequireTokenPurpose(Gate):
    """Single-purpose principal whose token purpose is in ``purposes``."""

    purposes: frozenset[TokenPurpose]


_AUTHENTICATED = Authenticated()


def authenticated() -> Authenticated:
    return _AUTHENTICATED


def requires(permission: Permission) -> RequirePermission:
    return RequirePermission(permission=permission)


def token_purpose(*purposes: TokenPurpose) -> RequireTokenPurpose:
    return RequireTokenPurpose(purposes=frozenset(purposes))


async def enforce(
    gate: Gate | None,
    principal: Principal | None,
    resolver: PermissionResolver | None,
    handler_name: str = "",
) -> None:
    """Raise unless ``principal`` satisfies ``gate``. Runs before any handler logic."""
    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {handler_name} has no __auth__ declaration")

    if principal is None:
        raise AuthorizationError("Authentication required", code="missing_token")

    logger.debug(
        "Auth check: handler=%s, gate=%s, user_id=%s, purpose=%s",
        handler_name,
        gate,
        principal.user_id,
        principal.token_purpose,
    )

    if isinstance(gate, RequireTokenPurpose):
        if principal.token_purpose not in gate.purposes:
            raise InvalidTokenPurposeError(
                f"{handler_name} requires a token issued for "
                f"{', '.join(sorted(gate.purposes))}"
            )
        return

    if principal.is_single_purpose:
        raise InvalidTokenPurposeError(
            f"A {principal.token_purpose} token cannot be used for {handler_name}"
        )
    if not principal.has_session:
        raise AuthorizationError(
            "Session has no role or lineage",
            code="incomplete_session",
        )

    if isinstance(gate, Authenticated):
        return

    if isinstance(gate, RequirePermission):
        if resolver is None:
            raise ConfigurationError(
                f"Handler {handler_name} requires {gate.permission} but has no resolver"
            )
        if not await resolver.has_permission(principal, gate.permission):
            logger.debug("Denied: user_id=%s lacks %s", principal.user_id, gate.permission)
            raise InsufficientPrivilegeError(
                f"Access denied: {gate.permission} required for {handler_name}",
                code="access_denied",
            )
        return

    raise ConfigurationError(  # pragma: no cover - future gate types handled here
        f"Handler {handler_name} has unhandled __auth__ type: {type(gate).__name__}"
    )
