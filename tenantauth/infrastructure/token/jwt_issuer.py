"""JWT adapter for the TokenIssuer port.

- Session tokens carry the role id and lineage, no purpose
- Single-purpose tokens carry a ``purpose`` claim and nothing that grants access
- Every token has a ``jti``; it becomes ``Principal.token_id`` for single-use checks
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from pydantic import ValidationError

from tenantauth.config import JwtConfig
from tenantauth.domain.shared.error import AuthorizationError, ConfigurationError
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.principal import Principal, TokenPurpose
from tenantauth.domain.user_role.model.token import (
    IntermediateTokenDescriptor,
    SessionDescriptor,
)
from tenantauth.domain.user_role.model.value import RoleId, TokenId, UserId, new_token_id

logger = logging.getLogger(__name__)


class JwtTokenIssuer:
    """HS256 bearer tokens signed with the configured secret."""

    def __init__(self, config: JwtConfig) -> None:
        if not config.secret:
            raise ConfigurationError("auth.jwt.secret must be set")
        self._config = config

    def _encode(self, payload: dict[str, Any], expires_in: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {
            **payload,
            "aud": self._config.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
        }
        payload.setdefault("jti", new_token_id())
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def issue_session(self, descriptor: SessionDescriptor) -> str:
        lineage = descriptor.lineage
        return self._encode(
            {
                "sub": descriptor.user_id,
                "role_id": descriptor.role_id,
                "org_id": lineage.org_id,
                "merchant_id": lineage.merchant_id,
                "profile_id": lineage.profile_id,
            },
            timedelta(minutes=self._config.session_expire_minutes),
        )

    def issue_intermediate(self, descriptor: IntermediateTokenDescriptor) -> str:
        return self._encode(
            {
                "sub": descriptor.user_id,
                "purpose": str(descriptor.purpose),
                "jti": descriptor.token_id,
                "merchant_ids": [c.merchant_id for c in descriptor.candidates],
            },
            timedelta(minutes=self._config.single_purpose_expire_minutes),
        )

    def issue_single_purpose(self, user_id: UserId, purpose: TokenPurpose) -> str:
        """Token for an out-of-band step, e.g. the link in an invitation email."""
        return self._encode(
            {"sub": user_id, "purpose": str(purpose)},
            timedelta(minutes=self._config.single_purpose_expire_minutes),
        )

    def decode_principal(self, token: str) -> Principal:
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                options={"require": ["sub", "exp", "jti"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthorizationError("Token has expired", code="token_expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", e)
            raise AuthorizationError("Invalid token", code="invalid_token") from e

        token_id = TokenId(payload["jti"])
        raw_purpose = payload.get("purpose")
        if raw_purpose is not None:
            try:
                purpose = TokenPurpose(raw_purpose)
            except ValueError as e:
                raise AuthorizationError("Invalid token", code="invalid_token") from e
            return Principal(
                user_id=UserId(payload["sub"]),
                token_purpose=purpose,
                token_id=token_id,
            )

        org_id = payload.get("org_id")
        role_id = payload.get("role_id")
        if not org_id or not role_id:
            raise AuthorizationError("Invalid token", code="invalid_token")
        try:
            lineage = Lineage(
                org_id=org_id,
                merchant_id=payload.get("merchant_id"),
                profile_id=payload.get("profile_id"),
            )
        except ValidationError as e:
            raise AuthorizationError("Invalid token", code="invalid_token") from e
        return Principal(
            user_id=UserId(payload["sub"]),
            role_id=RoleId(role_id),
            lineage=lineage,
            token_id=token_id,
        )
