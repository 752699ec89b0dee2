"""Predefined roles. Available in every organization, never stored, never updated."""

from datetime import UTC, datetime

from tenantauth.domain.user_role.model.lineage import EntityType
from tenantauth.domain.user_role.model.permission import PermissionGroup as G
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.value import RoleId

_EPOCH = datetime(2024, 1, 1, tzinfo=UTC)

_ALL_MERCHANT_GROUPS = [
    G.OPERATIONS_MANAGE,
    G.CONNECTORS_MANAGE,
    G.WORKFLOWS_MANAGE,
    G.ANALYTICS_VIEW,
    G.USERS_WRITE,
    G.MERCHANT_DETAILS_MANAGE,
]
_VIEW_GROUPS = [
    G.OPERATIONS_VIEW,
    G.CONNECTORS_VIEW,
    G.WORKFLOWS_VIEW,
    G.ANALYTICS_VIEW,
    G.USERS_READ,
    G.MERCHANT_DETAILS_VIEW,
]


def _predefined(
    role_id: str,
    name: str,
    scope: EntityType,
    groups: list[G],
    *,
    invitable: bool = True,
) -> Role:
    return Role(
        role_id=RoleId(role_id),
        name=name,
        groups=groups,
        scope_level=scope,
        lineage=None,
        created_at=_EPOCH,
        updated_at=_EPOCH,
        is_invitable=invitable,
        is_predefined=True,
    )


ORG_ADMIN = _predefined(
    "org_admin",
    "organization_admin",
    EntityType.ORGANIZATION,
    [*_ALL_MERCHANT_GROUPS, G.ORGANIZATION_MANAGE],
    invitable=False,
)

PREDEFINED_ROLES: dict[RoleId, Role] = {
    r.role_id: r
    for r in (
        ORG_ADMIN,
        _predefined("merchant_admin", "admin", EntityType.MERCHANT, _ALL_MERCHANT_GROUPS),
        _predefined("merchant_view_only", "view_only", EntityType.MERCHANT, _VIEW_GROUPS),
        _predefined(
            "merchant_iam_admin",
            "iam",
            EntityType.MERCHANT,
            [G.OPERATIONS_VIEW, G.ANALYTICS_VIEW, G.USERS_WRITE, G.MERCHANT_DETAILS_VIEW],
        ),
        _predefined(
            "merchant_developer",
            "developer",
            EntityType.MERCHANT,
            [
                G.OPERATIONS_VIEW,
                G.CONNECTORS_VIEW,
                G.ANALYTICS_VIEW,
                G.USERS_READ,
                G.MERCHANT_DETAILS_MANAGE,
            ],
        ),
        _predefined(
            "merchant_operator",
            "operator",
            EntityType.MERCHANT,
            [
                G.OPERATIONS_MANAGE,
                G.CONNECTORS_VIEW,
                G.WORKFLOWS_MANAGE,
                G.ANALYTICS_VIEW,
                G.USERS_READ,
                G.MERCHANT_DETAILS_VIEW,
            ],
        ),
        _predefined(
            "merchant_customer_support",
            "customer_support",
            EntityType.MERCHANT,
            [G.OPERATIONS_VIEW, G.ANALYTICS_VIEW, G.USERS_READ, G.MERCHANT_DETAILS_VIEW],
        ),
        _predefined(
            "profile_admin",
            "profile_admin",
            EntityType.PROFILE,
            [G.OPERATIONS_MANAGE, G.CONNECTORS_MANAGE, G.WORKFLOWS_MANAGE, G.USERS_WRITE],
        ),
        _predefined(
            "profile_view_only",
            "profile_view_only",
            EntityType.PROFILE,
            [G.OPERATIONS_VIEW, G.CONNECTORS_VIEW, G.WORKFLOWS_VIEW, G.USERS_READ],
        ),
    )
}


def get_predefined(role_id: str) -> Role | None:
    """Return a copy so callers cannot mutate the shared definition."""
    role = PREDEFINED_ROLES.get(RoleId(role_id))
    return role.model_copy(deep=True) if role is not None else None


def predefined_name_taken(name: str) -> bool:
    lowered = name.strip().lower()
    return any(r.name.lower() == lowered for r in PREDEFINED_ROLES.values())
