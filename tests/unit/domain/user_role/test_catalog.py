"""Unit tests for PermissionCatalog."""

import pytest

from tenantauth.domain.shared.error import (
    ConfigurationError,
    UnknownPermissionGroupError,
    ValidationError,
)
from tenantauth.domain.user_role.model.catalog import GroupInfo, PermissionCatalog
from tenantauth.domain.user_role.model.permission import ParentGroup, Permission, PermissionGroup


class TestDefaultCatalog:
    def test_every_group_is_described(self, catalog: PermissionCatalog):
        tags = {info.group for info in catalog.all_group_tags_with_descriptions()}
        assert tags == set(PermissionGroup)

    def test_manage_includes_view(self, catalog: PermissionCatalog):
        view = catalog.permissions_for([PermissionGroup.OPERATIONS_VIEW])
        manage = catalog.permissions_for([PermissionGroup.OPERATIONS_MANAGE])
        assert view < manage

    def test_users_write_grants_users_read(self, catalog: PermissionCatalog):
        perms = catalog.permissions_for([PermissionGroup.USERS_WRITE])
        assert Permission.USERS_READ in perms
        assert Permission.USERS_WRITE in perms

    def test_permissions_union(self, catalog: PermissionCatalog):
        perms = catalog.permissions_for(
            [PermissionGroup.ANALYTICS_VIEW, PermissionGroup.CONNECTORS_VIEW]
        )
        assert perms == {Permission.ANALYTICS_READ, Permission.CONNECTOR_READ}

    def test_parent_groups_partition_all_groups(self, catalog: PermissionCatalog):
        parents = catalog.parent_groups()
        assert [p.parent for p in parents] == list(ParentGroup)
        grouped = [g for p in parents for g in p.groups]
        assert sorted(grouped) == sorted(PermissionGroup)
        assert all(p.description for p in parents)


class TestParseGroups:
    def test_parses_known_tags(self, catalog: PermissionCatalog):
        assert catalog.parse_groups(["users-read", "analytics-view"]) == [
            PermissionGroup.USERS_READ,
            PermissionGroup.ANALYTICS_VIEW,
        ]

    def test_duplicates_collapse_in_order(self, catalog: PermissionCatalog):
        parsed = catalog.parse_groups(["users-read", "analytics-view", "users-read"])
        assert parsed == [PermissionGroup.USERS_READ, PermissionGroup.ANALYTICS_VIEW]

    def test_unknown_tag(self, catalog: PermissionCatalog):
        with pytest.raises(UnknownPermissionGroupError) as exc_info:
            catalog.parse_groups(["users-read", "payments-everything"])

        assert exc_info.value.tag == "payments-everything"

    def test_empty_list(self, catalog: PermissionCatalog):
        with pytest.raises(ValidationError) as exc_info:
            catalog.parse_groups([])

        assert exc_info.value.field == "groups"


class TestCatalogValidation:
    def _groups(self) -> dict[PermissionGroup, GroupInfo]:
        default = PermissionCatalog.default()
        return {info.group: info for info in default.all_group_tags_with_descriptions()}

    def _parents(self) -> dict[ParentGroup, str]:
        return {p.parent: p.description for p in PermissionCatalog.default().parent_groups()}

    def test_missing_group_fails_at_construction(self):
        groups = self._groups()
        del groups[PermissionGroup.USERS_READ]

        with pytest.raises(ConfigurationError):
            PermissionCatalog(groups, self._parents())

    def test_empty_group_fails_at_construction(self):
        groups = self._groups()
        groups[PermissionGroup.ANALYTICS_VIEW] = GroupInfo(
            PermissionGroup.ANALYTICS_VIEW, ParentGroup.ANALYTICS, "nothing", frozenset()
        )

        with pytest.raises(ConfigurationError):
            PermissionCatalog(groups, self._parents())

    def test_manage_without_view_fails_at_construction(self):
        groups = self._groups()
        groups[PermissionGroup.USERS_WRITE] = GroupInfo(
            PermissionGroup.USERS_WRITE,
            ParentGroup.USERS,
            "write only",
            frozenset({Permission.USERS_WRITE}),
        )

        with pytest.raises(ConfigurationError):
            PermissionCatalog(groups, self._parents())
