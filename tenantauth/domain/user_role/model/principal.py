"""Principal - the authenticated caller, resolved per-request from its bearer token."""

from dataclasses import dataclass
from enum import StrEnum

from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.value import RoleId, TokenId, UserId


class TokenPurpose(StrEnum):
    """Restriction carried by a single-purpose token."""

    ACCEPT_INVITE = "accept_invite"
    MERCHANT_SELECT = "merchant_select"


@dataclass(frozen=True)
class Principal:
    """The authenticated identity of the current requester.

    A full-session principal has a role and a lineage and no token purpose.
    A single-purpose principal has a purpose and usually neither role nor
    lineage; it can only reach handlers gated on that purpose.
    """

    user_id: UserId
    role_id: RoleId | None = None
    lineage: Lineage | None = None
    token_purpose: TokenPurpose | None = None
    token_id: TokenId | None = None

    @property
    def is_single_purpose(self) -> bool:
        return self.token_purpose is not None

    @property
    def has_session(self) -> bool:
        return self.role_id is not None and self.lineage is not None
