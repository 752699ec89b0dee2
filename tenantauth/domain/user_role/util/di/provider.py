"""DI provider for the user-role domain."""

import logging

from dishka import from_context, provide
from starlette.requests import Request

from tenantauth.config import Config
from tenantauth.domain.shared.audit import AuditTrail
from tenantauth.domain.shared.error import AuthorizationError
from tenantauth.domain.user_role.command.invitation import (
    AcceptInvitationHandler,
    MerchantSelectHandler,
)
from tenantauth.domain.user_role.command.role import CreateRoleHandler, UpdateRoleHandler
from tenantauth.domain.user_role.command.user_role import (
    DeleteUserRoleHandler,
    InviteUserHandler,
    UpdateUserRoleHandler,
)
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.port.token import TokenIssuer, TokenLedger
from tenantauth.domain.user_role.port.user_role_repository import UserRoleRepository
from tenantauth.domain.user_role.query.authorization_info import (
    GetAuthorizationInfoHandler,
    GetRoleInformationHandler,
)
from tenantauth.domain.user_role.query.list_users import ListUsersInLineageHandler
from tenantauth.domain.user_role.query.role import (
    GetRoleFromTokenHandler,
    GetRoleHandler,
    ListInvitableRolesHandler,
    ListRoleScopesHandler,
)
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver
from tenantauth.domain.user_role.service.invitation import InvitationService, ReinvitePolicy
from tenantauth.domain.user_role.service.lineage import LineageDirectory
from tenantauth.domain.user_role.service.role import RoleService
from tenantauth.util.di.base import Provider
from tenantauth.util.di.scope import Scope

logger = logging.getLogger(__name__)


class UserRoleProvider(Provider):
    """DI provider for user-role services and handlers."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command Handlers
    create_role_handler = provide(CreateRoleHandler, scope=Scope.UOW)
    update_role_handler = provide(UpdateRoleHandler, scope=Scope.UOW)
    invite_user_handler = provide(InviteUserHandler, scope=Scope.UOW)
    accept_invitation_handler = provide(AcceptInvitationHandler, scope=Scope.UOW)
    merchant_select_handler = provide(MerchantSelectHandler, scope=Scope.UOW)
    update_user_role_handler = provide(UpdateUserRoleHandler, scope=Scope.UOW)
    delete_user_role_handler = provide(DeleteUserRoleHandler, scope=Scope.UOW)

    # Query Handlers
    get_authorization_info_handler = provide(GetAuthorizationInfoHandler, scope=Scope.UOW)
    get_role_information_handler = provide(GetRoleInformationHandler, scope=Scope.UOW)
    get_role_from_token_handler = provide(GetRoleFromTokenHandler, scope=Scope.UOW)
    get_role_handler = provide(GetRoleHandler, scope=Scope.UOW)
    list_invitable_roles_handler = provide(ListInvitableRolesHandler, scope=Scope.UOW)
    list_role_scopes_handler = provide(ListRoleScopesHandler, scope=Scope.UOW)
    list_users_handler = provide(ListUsersInLineageHandler, scope=Scope.UOW)

    # Services
    authorization_resolver = provide(AuthorizationResolver, scope=Scope.UOW)
    role_service = provide(RoleService, scope=Scope.UOW)
    lineage_directory = provide(LineageDirectory, scope=Scope.UOW)
    audit_trail = provide(AuditTrail, scope=Scope.UOW)

    @provide(scope=Scope.UOW)
    def get_invitation_service(
        self,
        config: Config,
        authorization: AuthorizationResolver,
        catalog: PermissionCatalog,
        user_role_repo: UserRoleRepository,
        token_ledger: TokenLedger,
        audit: AuditTrail,
    ) -> InvitationService:
        return InvitationService(
            _authorization=authorization,
            _catalog=catalog,
            _user_role_repo=user_role_repo,
            _token_ledger=token_ledger,
            _audit=audit,
            _reinvite_policy=ReinvitePolicy(config.invitations.reinvite_policy),
        )

    @provide(scope=Scope.UOW)
    def get_principal(self, request: Request, issuer: TokenIssuer) -> Principal:
        """Decode the bearer token. Raises AuthorizationError if absent or invalid."""
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            raise AuthorizationError("Authentication required", code="missing_token")

        principal = issuer.decode_principal(auth_header[7:])
        logger.debug(
            "Principal resolved: user_id=%s role_id=%s purpose=%s",
            principal.user_id,
            principal.role_id,
            principal.token_purpose,
        )
        return principal
