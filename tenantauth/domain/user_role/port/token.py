"""Ports for single-use token bookkeeping and token signing."""

from abc import abstractmethod
from typing import Protocol

from tenantauth.domain.shared.port import Port
from tenantauth.domain.user_role.model.principal import Principal, TokenPurpose
from tenantauth.domain.user_role.model.token import (
    IntermediateTokenDescriptor,
    SessionDescriptor,
)
from tenantauth.domain.user_role.model.value import TokenId, UserId


class TokenLedger(Port, Protocol):
    """Records single-purpose tokens that have been exchanged."""

    @abstractmethod
    async def consume(self, token_id: TokenId, user_id: UserId, purpose: TokenPurpose) -> bool:
        """Mark a token as used. Returns False if it was already used."""
        ...


class TokenIssuer(Port, Protocol):
    """Signs descriptors into bearer tokens and reads them back."""

    @abstractmethod
    def issue_session(self, descriptor: SessionDescriptor) -> str: ...

    @abstractmethod
    def issue_intermediate(self, descriptor: IntermediateTokenDescriptor) -> str: ...

    @abstractmethod
    def decode_principal(self, token: str) -> Principal:
        """Verify a bearer token.

        Raises:
            AuthorizationError: code ``token_expired`` or ``invalid_token``
        """
        ...
