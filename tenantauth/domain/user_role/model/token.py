"""Descriptors handed to the token issuer, and the ephemeral invitation context."""

from tenantauth.domain.shared.model.value import ValueObject
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.permission import Permission
from tenantauth.domain.user_role.model.principal import TokenPurpose
from tenantauth.domain.user_role.model.value import RoleId, TokenId, UserId


class SessionDescriptor(ValueObject):
    """Claims for a fully scoped session token (no purpose restriction)."""

    user_id: UserId
    role_id: RoleId
    lineage: Lineage
    scope_level: EntityType
    permissions: frozenset[Permission]


class MerchantChoice(ValueObject):
    """One merchant an invitee may pick."""

    merchant_id: str
    org_id: str
    role_id: RoleId
    role_name: str


class IntermediateTokenDescriptor(ValueObject):
    """Claims for the single-purpose token that lets an invitee pick a merchant."""

    user_id: UserId
    token_id: TokenId
    purpose: TokenPurpose = TokenPurpose.MERCHANT_SELECT
    candidates: tuple[MerchantChoice, ...]


class InvitationContext(ValueObject):
    """What an accept call found for the invitee. Never persisted."""

    user_id: UserId
    candidates: tuple[MerchantChoice, ...]

    @property
    def merchant_ids(self) -> list[str]:
        return [c.merchant_id for c in self.candidates]

    @property
    def is_multi_merchant(self) -> bool:
        return len(self.candidates) > 1

    def choice_for(self, merchant_id: str) -> MerchantChoice | None:
        for choice in self.candidates:
            if choice.merchant_id == merchant_id:
                return choice
        return None
