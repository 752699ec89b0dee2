"""AcceptInvitation and MerchantSelect: exchanging single-purpose tokens.

Both handlers are reachable only with a single-purpose token. Neither checks
a permission, since the invitee has no role until the exchange completes.
"""

from typing import Literal

import logfire

from tenantauth.domain.shared.authorization.gate import token_purpose
from tenantauth.domain.shared.command import Command, CommandHandler, Result
from tenantauth.domain.shared.port.unit_of_work import UnitOfWork
from tenantauth.domain.user_role.dto import MerchantChoiceDTO
from tenantauth.domain.user_role.model.principal import Principal, TokenPurpose
from tenantauth.domain.user_role.model.token import SessionDescriptor
from tenantauth.domain.user_role.port.token import TokenIssuer
from tenantauth.domain.user_role.service.invitation import InvitationService


class SessionResult(Result):
    token: str
    token_type: Literal["session", "merchant_select"] = "session"


def _session_result(issuer: TokenIssuer, descriptor: SessionDescriptor) -> SessionResult:
    return SessionResult(token=issuer.issue_session(descriptor))


class AcceptInvitation(Command):
    """Accept pending invitations, optionally only for some merchants."""

    merchant_ids: list[str] | None = None


class AcceptInvitationResult(SessionResult):
    status: Literal["active", "pending_merchant_select"]
    merchants: list[MerchantChoiceDTO] = []


class AcceptInvitationHandler(CommandHandler[AcceptInvitation, AcceptInvitationResult]):
    __auth__ = token_purpose(TokenPurpose.ACCEPT_INVITE)
    principal: Principal
    invitation_service: InvitationService
    token_issuer: TokenIssuer
    uow: UnitOfWork

    async def run(self, cmd: AcceptInvitation) -> AcceptInvitationResult:
        with logfire.span("AcceptInvitation", user_id=self.principal.user_id):
            outcome = await self.invitation_service.accept_invitation(
                self.principal, merchant_ids=cmd.merchant_ids
            )
        await self.uow.commit()

        if outcome.session is not None:
            return AcceptInvitationResult(
                status="active",
                token=self.token_issuer.issue_session(outcome.session),
            )

        pending = outcome.pending
        assert pending is not None  # AcceptOutcome always carries one of the two
        return AcceptInvitationResult(
            status="pending_merchant_select",
            token=self.token_issuer.issue_intermediate(pending),
            token_type="merchant_select",
            merchants=[MerchantChoiceDTO.from_choice(c) for c in pending.candidates],
        )


class MerchantSelect(Command):
    merchant_id: str


class MerchantSelectHandler(CommandHandler[MerchantSelect, SessionResult]):
    __auth__ = token_purpose(TokenPurpose.ACCEPT_INVITE, TokenPurpose.MERCHANT_SELECT)
    principal: Principal
    invitation_service: InvitationService
    token_issuer: TokenIssuer
    uow: UnitOfWork

    async def run(self, cmd: MerchantSelect) -> SessionResult:
        with logfire.span("MerchantSelect", user_id=self.principal.user_id):
            descriptor = await self.invitation_service.merchant_select(
                self.principal, cmd.merchant_id
            )
        await self.uow.commit()
        return _session_result(self.token_issuer, descriptor)
