"""InvitationService - invitation, acceptance, merchant selection and reassignment.

State per invited user and lineage:

    NO_BINDING --invite--> INVITED --accept--> ACTIVE (one merchant)
                                   |--accept--> PENDING_MERCHANT_SELECT (several)
    PENDING_MERCHANT_SELECT --merchant_select--> ACTIVE

PENDING_MERCHANT_SELECT is never stored. It is the intermediate token plus
the bindings that are still ``invited``.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import StrEnum

from tenantauth.domain.shared.audit import AuditTrail
from tenantauth.domain.shared.error import (
    AlreadyExistsError,
    AlreadyProcessedError,
    InsufficientPrivilegeError,
    InvalidScopeError,
    InvalidSelectionError,
    NotFoundError,
    RoleNotFoundError,
)
from tenantauth.domain.shared.service import Service
from tenantauth.domain.user_role.event.events import (
    UserRoleActivated,
    UserRoleInvited,
    UserRoleUpdated,
)
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.token import (
    IntermediateTokenDescriptor,
    InvitationContext,
    MerchantChoice,
    SessionDescriptor,
)
from tenantauth.domain.user_role.model.user_role import UserRole, UserRoleStatus
from tenantauth.domain.user_role.model.value import RoleId, UserId, new_token_id
from tenantauth.domain.user_role.port.token import TokenLedger
from tenantauth.domain.user_role.port.user_role_repository import UserRoleRepository
from tenantauth.domain.user_role.service.authorization import Actor, AuthorizationResolver

logger = logging.getLogger(__name__)


class ReinvitePolicy(StrEnum):
    """What inviting a user with a pending invitation at the same lineage does."""

    REJECT = "reject"
    REFRESH = "refresh"


@dataclass(frozen=True)
class AcceptOutcome:
    """Exactly one of ``session`` or ``pending`` is set."""

    session: SessionDescriptor | None = None
    pending: IntermediateTokenDescriptor | None = None


def _broadest(bindings: list[UserRole]) -> UserRole:
    return sorted(
        bindings, key=lambda b: (-b.entity_type, b.lineage.profile_id or "")
    )[0]


class InvitationService(Service):
    _authorization: AuthorizationResolver
    _catalog: PermissionCatalog
    _user_role_repo: UserRoleRepository
    _token_ledger: TokenLedger
    _audit: AuditTrail
    _reinvite_policy: ReinvitePolicy = ReinvitePolicy.REJECT

    async def _grantable_role(self, actor: Actor, role_id: RoleId) -> Role:
        role = await self._authorization.get_role(role_id, actor.lineage.org_id)
        if role is None or not role.is_visible_from(actor.lineage):
            raise NotFoundError(f"Role not found: {role_id}", code="role_not_found")
        if not role.is_invitable:
            raise InsufficientPrivilegeError(
                f"Role {role_id} cannot be granted", code="role_not_invitable"
            )
        return role

    async def invite_user(
        self,
        principal: Principal,
        user_id: UserId,
        role_id: RoleId,
        lineage: Lineage,
        email: str | None = None,
    ) -> UserRole:
        actor = await self._authorization.actor(principal)
        role = await self._grantable_role(actor, role_id)
        lineage.require_shape(role.scope_level)
        self._authorization.ensure_can_act_on(actor, role.scope_level, lineage)

        existing = await self._user_role_repo.get(user_id, lineage)
        if existing is not None:
            if existing.is_active or self._reinvite_policy is ReinvitePolicy.REJECT:
                raise AlreadyExistsError(
                    f"User {user_id} already has a {existing.status} role at {lineage}",
                    code="user_role_exists",
                )
            existing.reinvite(role.role_id, actor.user_id)
            await self._user_role_repo.update(existing)
            binding = existing
            logger.info("Invitation refreshed: user_id=%s lineage=%s", user_id, lineage)
        else:
            binding = UserRole(
                user_id=user_id,
                role_id=role.role_id,
                lineage=lineage,
                status=UserRoleStatus.INVITED,
                created_by=actor.user_id,
                last_modified_by=actor.user_id,
            )
            await self._user_role_repo.add(binding)
            logger.info(
                "User invited: user_id=%s role_id=%s lineage=%s by=%s",
                user_id,
                role.role_id,
                lineage,
                actor.user_id,
            )

        await self._audit.record(
            UserRoleInvited(
                user_id=user_id,
                email=email,
                role_id=role.role_id,
                lineage=lineage,
                invited_by=actor.user_id,
            )
        )
        return binding

    async def _pending_by_merchant(self, user_id: UserId) -> dict[str, list[UserRole]]:
        by_merchant: dict[str, list[UserRole]] = defaultdict(list)
        for binding in await self._user_role_repo.list_invited(user_id):
            if binding.lineage.merchant_id is not None:
                by_merchant[binding.lineage.merchant_id].append(binding)
        return dict(sorted(by_merchant.items()))

    async def _context(
        self, user_id: UserId, by_merchant: dict[str, list[UserRole]]
    ) -> InvitationContext:
        choices = []
        for merchant_id, bindings in by_merchant.items():
            binding = _broadest(bindings)
            role = await self._authorization.get_role(binding.role_id, binding.lineage.org_id)
            choices.append(
                MerchantChoice(
                    merchant_id=merchant_id,
                    org_id=binding.lineage.org_id,
                    role_id=binding.role_id,
                    role_name=role.name if role is not None else binding.role_id,
                )
            )
        return InvitationContext(user_id=user_id, candidates=tuple(choices))

    async def _consume(self, principal: Principal) -> None:
        if principal.token_id is None or principal.token_purpose is None:
            logger.debug(
                "No token id on principal %s, relying on conditional activation",
                principal.user_id,
            )
            return
        consumed = await self._token_ledger.consume(
            principal.token_id, principal.user_id, principal.token_purpose
        )
        if not consumed:
            raise AlreadyProcessedError("This token has already been used", code="token_used")

    async def _activate(self, user_id: UserId, bindings: list[UserRole]) -> SessionDescriptor:
        activated = 0
        for binding in bindings:
            if await self._user_role_repo.activate(user_id, binding.lineage):
                binding.activate()
                activated += 1
                logger.info("User role activated: user_id=%s lineage=%s", user_id, binding.lineage)
                await self._audit.record(
                    UserRoleActivated(
                        user_id=user_id, role_id=binding.role_id, lineage=binding.lineage
                    )
                )
        if activated == 0:
            raise AlreadyProcessedError(
                "The invitation has already been accepted", code="invitation_accepted"
            )
        return await self._session_for(_broadest(bindings))

    async def _session_for(self, binding: UserRole) -> SessionDescriptor:
        role = await self._authorization.get_role(binding.role_id, binding.lineage.org_id)
        if role is None:
            raise RoleNotFoundError(f"Role {binding.role_id} no longer exists")
        return SessionDescriptor(
            user_id=binding.user_id,
            role_id=binding.role_id,
            lineage=binding.lineage,
            scope_level=role.scope_level,
            permissions=self._catalog.permissions_for(role.groups),
        )

    async def accept_invitation(
        self, principal: Principal, merchant_ids: list[str] | None = None
    ) -> AcceptOutcome:
        """Accept pending invitations.

        One merchant: its bindings become active and a session is returned.
        Several merchants: a merchant-select token descriptor is returned and
        the bindings stay invited until one merchant is selected.
        """
        by_merchant = await self._pending_by_merchant(principal.user_id)
        if not by_merchant:
            raise NotFoundError("No pending invitation", code="invitation_not_found")

        if merchant_ids:
            unknown = sorted(set(merchant_ids) - by_merchant.keys())
            if unknown:
                raise InvalidSelectionError(
                    f"Not invited to merchant(s): {', '.join(unknown)}",
                    code="merchant_not_invited",
                )
            by_merchant = {m: b for m, b in by_merchant.items() if m in merchant_ids}

        await self._consume(principal)

        if len(by_merchant) == 1:
            [bindings] = by_merchant.values()
            return AcceptOutcome(session=await self._activate(principal.user_id, bindings))

        context = await self._context(principal.user_id, by_merchant)
        logger.info(
            "Merchant selection pending: user_id=%s candidates=%s",
            principal.user_id,
            context.merchant_ids,
        )
        return AcceptOutcome(
            pending=IntermediateTokenDescriptor(
                user_id=principal.user_id,
                token_id=new_token_id(),
                candidates=context.candidates,
            )
        )

    async def merchant_select(self, principal: Principal, merchant_id: str) -> SessionDescriptor:
        """Activate the invitation for one merchant. The presented token is spent."""
        by_merchant = await self._pending_by_merchant(principal.user_id)
        bindings = by_merchant.get(merchant_id)
        if not bindings:
            raise InvalidSelectionError(
                f"Merchant {merchant_id} is not among the pending invitations",
                code="merchant_not_invited",
            )
        await self._consume(principal)
        return await self._activate(principal.user_id, bindings)

    async def update_user_role(
        self, principal: Principal, user_id: UserId, role_id: RoleId, lineage: Lineage
    ) -> UserRole:
        actor = await self._authorization.actor(principal)
        if user_id == actor.user_id:
            raise InsufficientPrivilegeError(
                "Users cannot change their own role", code="cannot_update_self"
            )
        self._authorization.ensure_can_act_on(actor, lineage.entity_type, lineage)

        binding = await self._user_role_repo.get(user_id, lineage)
        if binding is None:
            raise NotFoundError(
                f"No role binding for user {user_id} at {lineage}",
                code="user_role_not_found",
            )

        role = await self._grantable_role(actor, role_id)
        if role.scope_level != binding.entity_type:
            raise InvalidScopeError(
                f"A {role.scope_level.label} role cannot be bound at a "
                f"{binding.entity_type.label} lineage",
                code="role_scope_mismatch",
            )

        previous = binding.role_id
        binding.reassign(role.role_id, actor.user_id)
        await self._user_role_repo.update(binding)
        logger.info(
            "User role updated: user_id=%s lineage=%s %s -> %s by=%s",
            user_id,
            lineage,
            previous,
            role.role_id,
            actor.user_id,
        )
        await self._audit.record(
            UserRoleUpdated(
                user_id=user_id,
                role_id=role.role_id,
                previous_role_id=previous,
                lineage=lineage,
                updated_by=actor.user_id,
            )
        )
        return binding
