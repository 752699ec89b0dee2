"""PermissionCatalog - static mapping from group tags to permissions.

Built once at startup and shared read-only by every request. An inconsistent
catalog (a group missing from the table, a group with no permissions, or a
manage group that does not include its view group) is a ConfigurationError
raised at construction, never per request.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tenantauth.domain.shared.error import (
    ConfigurationError,
    UnknownPermissionGroupError,
    ValidationError,
)
from tenantauth.domain.user_role.model.permission import ParentGroup, Permission, PermissionGroup

P = Permission
G = PermissionGroup


@dataclass(frozen=True)
class GroupInfo:
    group: PermissionGroup
    parent: ParentGroup
    description: str
    permissions: frozenset[Permission]


@dataclass(frozen=True)
class ParentGroupInfo:
    parent: ParentGroup
    description: str
    groups: tuple[PermissionGroup, ...]


_VIEW_OPERATIONS = {
    P.PAYMENT_READ,
    P.REFUND_READ,
    P.DISPUTE_READ,
    P.CUSTOMER_READ,
    P.MANDATE_READ,
}
_VIEW_CONNECTORS = {P.CONNECTOR_READ}
_VIEW_WORKFLOWS = {P.ROUTING_READ, P.SURCHARGE_READ}
_VIEW_MERCHANT = {P.MERCHANT_ACCOUNT_READ, P.API_KEY_READ, P.WEBHOOK_EVENT_READ}

_DEFAULT_GROUPS: dict[PermissionGroup, tuple[ParentGroup, str, set[Permission]]] = {
    G.OPERATIONS_VIEW: (
        ParentGroup.OPERATIONS,
        "View payments, refunds, disputes, customers and mandates",
        _VIEW_OPERATIONS,
    ),
    G.OPERATIONS_MANAGE: (
        ParentGroup.OPERATIONS,
        "Create, modify and cancel payments, refunds, disputes and mandates",
        _VIEW_OPERATIONS | {P.PAYMENT_WRITE, P.REFUND_WRITE, P.DISPUTE_WRITE, P.MANDATE_WRITE},
    ),
    G.CONNECTORS_VIEW: (
        ParentGroup.CONNECTORS,
        "View connected processors and their settings",
        _VIEW_CONNECTORS,
    ),
    G.CONNECTORS_MANAGE: (
        ParentGroup.CONNECTORS,
        "Connect, configure and disconnect processors",
        _VIEW_CONNECTORS | {P.CONNECTOR_WRITE},
    ),
    G.WORKFLOWS_VIEW: (
        ParentGroup.WORKFLOWS,
        "View routing and surcharge rules",
        _VIEW_WORKFLOWS,
    ),
    G.WORKFLOWS_MANAGE: (
        ParentGroup.WORKFLOWS,
        "Create and modify routing and surcharge rules",
        _VIEW_WORKFLOWS | {P.ROUTING_WRITE, P.SURCHARGE_WRITE},
    ),
    G.ANALYTICS_VIEW: (
        ParentGroup.ANALYTICS,
        "View analytics and reports",
        {P.ANALYTICS_READ},
    ),
    G.USERS_READ: (
        ParentGroup.USERS,
        "View team members and their roles",
        {P.USERS_READ},
    ),
    G.USERS_WRITE: (
        ParentGroup.USERS,
        "Invite team members, manage roles and remove users",
        {P.USERS_READ, P.USERS_WRITE},
    ),
    G.MERCHANT_DETAILS_VIEW: (
        ParentGroup.MERCHANT,
        "View merchant settings, API keys and webhooks",
        _VIEW_MERCHANT,
    ),
    G.MERCHANT_DETAILS_MANAGE: (
        ParentGroup.MERCHANT,
        "Modify merchant settings, API keys and webhooks",
        _VIEW_MERCHANT | {P.MERCHANT_ACCOUNT_WRITE, P.API_KEY_WRITE, P.WEBHOOK_EVENT_WRITE},
    ),
    G.ORGANIZATION_MANAGE: (
        ParentGroup.ORGANIZATION,
        "Manage the organization and create merchants",
        {P.ORGANIZATION_ACCOUNT_WRITE},
    ),
}

_PARENT_DESCRIPTIONS: dict[ParentGroup, str] = {
    ParentGroup.OPERATIONS: "Payments, refunds, disputes, customers and mandates",
    ParentGroup.CONNECTORS: "Payment processors and payout connectors",
    ParentGroup.WORKFLOWS: "Routing, surcharge and 3DS decision rules",
    ParentGroup.ANALYTICS: "Analytics and reports",
    ParentGroup.USERS: "Team members and roles",
    ParentGroup.MERCHANT: "Merchant settings, API keys and webhooks",
    ParentGroup.ORGANIZATION: "Organization settings",
}

# A manage group grants everything its view group grants.
_MANAGE_INCLUDES_VIEW: dict[PermissionGroup, PermissionGroup] = {
    G.OPERATIONS_MANAGE: G.OPERATIONS_VIEW,
    G.CONNECTORS_MANAGE: G.CONNECTORS_VIEW,
    G.WORKFLOWS_MANAGE: G.WORKFLOWS_VIEW,
    G.USERS_WRITE: G.USERS_READ,
    G.MERCHANT_DETAILS_MANAGE: G.MERCHANT_DETAILS_VIEW,
}


class PermissionCatalog:
    """Read-only lookups over permission groups.

    Pass an alternate ``groups`` table to test against a different catalog.
    """

    def __init__(
        self,
        groups: Mapping[PermissionGroup, GroupInfo],
        parent_descriptions: Mapping[ParentGroup, str],
    ) -> None:
        self._groups = dict(groups)
        self._parent_descriptions = dict(parent_descriptions)
        self._validate()

    @classmethod
    def default(cls) -> "PermissionCatalog":
        return cls(
            {
                group: GroupInfo(group, parent, description, frozenset(perms))
                for group, (parent, description, perms) in _DEFAULT_GROUPS.items()
            },
            _PARENT_DESCRIPTIONS,
        )

    def _validate(self) -> None:
        missing = [g for g in PermissionGroup if g not in self._groups]
        if missing:
            raise ConfigurationError(
                f"Permission catalog has no entry for: {', '.join(missing)}"
            )
        for group, info in self._groups.items():
            if info.group is not group:
                raise ConfigurationError(f"Catalog entry {group} describes {info.group}")
            if not info.permissions:
                raise ConfigurationError(f"Permission group {group} grants nothing")
            if info.parent not in self._parent_descriptions:
                raise ConfigurationError(
                    f"Permission group {group} has undescribed parent {info.parent}"
                )
        for manage, view in _MANAGE_INCLUDES_VIEW.items():
            if not self._groups[view].permissions <= self._groups[manage].permissions:
                raise ConfigurationError(f"{manage} does not include everything in {view}")

    def permissions_for(self, groups: Iterable[PermissionGroup]) -> frozenset[Permission]:
        perms: set[Permission] = set()
        for group in groups:
            info = self._groups.get(group)
            if info is None:
                raise ConfigurationError(f"Permission group {group} is not in the catalog")
            perms |= info.permissions
        return frozenset(perms)

    def parse_groups(self, raw: Iterable[str]) -> list[PermissionGroup]:
        """Turn request tags into groups: unknown tags fail, duplicates collapse in order."""
        parsed: list[PermissionGroup] = []
        for tag in raw:
            try:
                group = PermissionGroup(tag)
            except ValueError:
                raise UnknownPermissionGroupError(tag) from None
            if group not in self._groups:
                raise UnknownPermissionGroupError(tag)
            if group not in parsed:
                parsed.append(group)
        if not parsed:
            raise ValidationError("A role needs at least one permission group", field="groups")
        return parsed

    def describe(self, group: PermissionGroup) -> GroupInfo:
        return self._groups[group]

    def all_group_tags_with_descriptions(self) -> list[GroupInfo]:
        return [self._groups[g] for g in PermissionGroup if g in self._groups]

    def parent_groups(self) -> list[ParentGroupInfo]:
        return [
            ParentGroupInfo(
                parent=parent,
                description=self._parent_descriptions[parent],
                groups=tuple(
                    info.group for info in self._groups.values() if info.parent is parent
                ),
            )
            for parent in ParentGroup
            if parent in self._parent_descriptions
        ]
