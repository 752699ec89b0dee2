"""Unit tests for RoleService."""

import pytest

from tenantauth.domain.shared.error import (
    AlreadyExistsError,
    ImmutableFieldError,
    InsufficientPrivilegeError,
    InvalidScopeError,
    NotFoundError,
    UnknownPermissionGroupError,
    ValidationError,
)
from tenantauth.domain.user_role.event import RoleCreated, RoleUpdated, UserRoleDeleted
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.permission import PermissionGroup
from tenantauth.domain.user_role.model.principal import Principal
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.domain.user_role.service.role import RoleService

ORG = Lineage(org_id="org_1")
M1 = Lineage(org_id="org_1", merchant_id="m_1")
M2 = Lineage(org_id="org_1", merchant_id="m_2")
P1 = Lineage(org_id="org_1", merchant_id="m_1", profile_id="p_1")
ORG2_M = Lineage(org_id="org_2", merchant_id="m_9")


def session(role_id: str, lineage: Lineage, user_id: str = "u_admin") -> Principal:
    return Principal(user_id=UserId(user_id), role_id=RoleId(role_id), lineage=lineage)


ORG_ADMIN = session("org_admin", ORG)
MERCHANT_ADMIN = session("merchant_admin", M1)
PROFILE_ADMIN = session("profile_admin", P1)


class TestCreateRole:
    @pytest.mark.asyncio
    async def test_creates_merchant_role(self, role_service: RoleService, role_repo, event_repo):
        role = await role_service.create_role(
            ORG_ADMIN,
            name="Auditors",
            groups=["analytics-view", "users-read"],
            scope_level=EntityType.MERCHANT,
            lineage=M1,
        )

        assert role.role_id.startswith("role_")
        assert role.groups == [PermissionGroup.ANALYTICS_VIEW, PermissionGroup.USERS_READ]
        assert role.is_invitable
        assert role.created_by == "u_admin"
        assert role.role_id in role_repo.roles
        [event] = event_repo.of_type(RoleCreated)
        assert event.role_id == role.role_id

    @pytest.mark.asyncio
    async def test_org_scoped_role_is_not_invitable(self, role_service: RoleService):
        role = await role_service.create_role(
            ORG_ADMIN,
            name="finance",
            groups=["analytics-view"],
            scope_level=EntityType.ORGANIZATION,
            lineage=ORG,
        )

        assert role.is_invitable is False

    @pytest.mark.asyncio
    async def test_lineage_must_match_scope(self, role_service: RoleService):
        with pytest.raises(InvalidScopeError):
            await role_service.create_role(
                ORG_ADMIN,
                name="x",
                groups=["analytics-view"],
                scope_level=EntityType.PROFILE,
                lineage=M1,
            )

    @pytest.mark.asyncio
    async def test_unknown_group(self, role_service: RoleService):
        with pytest.raises(UnknownPermissionGroupError):
            await role_service.create_role(
                ORG_ADMIN,
                name="x",
                groups=["analytics-view", "god-mode"],
                scope_level=EntityType.MERCHANT,
                lineage=M1,
            )

    @pytest.mark.asyncio
    async def test_empty_name(self, role_service: RoleService):
        with pytest.raises(ValidationError) as exc_info:
            await role_service.create_role(
                ORG_ADMIN,
                name="   ",
                groups=["analytics-view"],
                scope_level=EntityType.MERCHANT,
                lineage=M1,
            )

        assert exc_info.value.field == "name"

    @pytest.mark.asyncio
    async def test_merchant_admin_cannot_create_in_sibling_merchant(
        self, role_service: RoleService
    ):
        with pytest.raises(InsufficientPrivilegeError):
            await role_service.create_role(
                MERCHANT_ADMIN,
                name="x",
                groups=["analytics-view"],
                scope_level=EntityType.MERCHANT,
                lineage=M2,
            )

    @pytest.mark.asyncio
    async def test_profile_admin_cannot_create_merchant_role(self, role_service: RoleService):
        with pytest.raises(InsufficientPrivilegeError):
            await role_service.create_role(
                PROFILE_ADMIN,
                name="x",
                groups=["analytics-view"],
                scope_level=EntityType.MERCHANT,
                lineage=M1,
            )

    @pytest.mark.asyncio
    async def test_duplicate_name_is_case_insensitive(self, role_service: RoleService):
        await role_service.create_role(
            ORG_ADMIN,
            name="Auditors",
            groups=["analytics-view"],
            scope_level=EntityType.MERCHANT,
            lineage=M1,
        )

        with pytest.raises(AlreadyExistsError) as exc_info:
            await role_service.create_role(
                ORG_ADMIN,
                name="auditors",
                groups=["users-read"],
                scope_level=EntityType.MERCHANT,
                lineage=M2,
            )

        assert exc_info.value.code == "role_name_taken"

    @pytest.mark.asyncio
    async def test_predefined_name_is_reserved(self, role_service: RoleService):
        with pytest.raises(AlreadyExistsError):
            await role_service.create_role(
                ORG_ADMIN,
                name="Admin",
                groups=["analytics-view"],
                scope_level=EntityType.MERCHANT,
                lineage=M1,
            )

    @pytest.mark.asyncio
    async def test_same_name_in_other_org(self, role_service: RoleService):
        await role_service.create_role(
            ORG_ADMIN,
            name="auditors",
            groups=["analytics-view"],
            scope_level=EntityType.MERCHANT,
            lineage=M1,
        )

        role = await role_service.create_role(
            session("org_admin", Lineage(org_id="org_2")),
            name="auditors",
            groups=["analytics-view"],
            scope_level=EntityType.MERCHANT,
            lineage=ORG2_M,
        )

        assert role.lineage == ORG2_M


class TestUpdateRole:
    async def _create(self, role_service: RoleService, name: str = "auditors", lineage=M1):
        return await role_service.create_role(
            ORG_ADMIN,
            name=name,
            groups=["analytics-view"],
            scope_level=lineage.entity_type,
            lineage=lineage,
        )

    @pytest.mark.asyncio
    async def test_rename_and_regroup(self, role_service: RoleService, event_repo):
        role = await self._create(role_service)

        updated = await role_service.update_role(
            MERCHANT_ADMIN,
            role.role_id,
            name="Readers",
            groups=["users-read", "users-read"],
        )

        assert updated.name == "Readers"
        assert updated.groups == [PermissionGroup.USERS_READ]
        assert updated.scope_level is EntityType.MERCHANT
        assert updated.last_modified_by == "u_admin"
        assert event_repo.of_type(RoleUpdated)

    @pytest.mark.asyncio
    async def test_rename_to_same_name_other_case(self, role_service: RoleService):
        role = await self._create(role_service)

        updated = await role_service.update_role(ORG_ADMIN, role.role_id, name="AUDITORS")

        assert updated.name == "AUDITORS"

    @pytest.mark.asyncio
    async def test_rename_collision(self, role_service: RoleService):
        await self._create(role_service, name="first")
        second = await self._create(role_service, name="second")

        with pytest.raises(AlreadyExistsError):
            await role_service.update_role(ORG_ADMIN, second.role_id, name="First")

    @pytest.mark.asyncio
    async def test_scope_level_is_immutable(self, role_service: RoleService):
        role = await self._create(role_service)

        with pytest.raises(ImmutableFieldError) as exc_info:
            await role_service.update_role(
                ORG_ADMIN, role.role_id, name="x", scope_level=EntityType.PROFILE
            )

        assert exc_info.value.field == "scope_level"

    @pytest.mark.asyncio
    async def test_unchanged_scope_level_is_accepted(self, role_service: RoleService):
        role = await self._create(role_service)

        updated = await role_service.update_role(
            ORG_ADMIN, role.role_id, name="renamed", scope_level=EntityType.MERCHANT
        )

        assert updated.name == "renamed"

    @pytest.mark.asyncio
    async def test_predefined_role_is_immutable(self, role_service: RoleService):
        with pytest.raises(ImmutableFieldError) as exc_info:
            await role_service.update_role(
                ORG_ADMIN, RoleId("merchant_admin"), groups=["users-read"]
            )

        assert exc_info.value.code == "predefined_role"

    @pytest.mark.asyncio
    async def test_empty_update(self, role_service: RoleService):
        role = await self._create(role_service)

        with pytest.raises(ValidationError) as exc_info:
            await role_service.update_role(ORG_ADMIN, role.role_id)

        assert exc_info.value.code == "empty_update"

    @pytest.mark.asyncio
    async def test_role_of_sibling_merchant_is_not_found(self, role_service: RoleService):
        role = await self._create(role_service, lineage=M2)

        with pytest.raises(NotFoundError):
            await role_service.update_role(MERCHANT_ADMIN, role.role_id, name="x")

    @pytest.mark.asyncio
    async def test_profile_admin_cannot_update_merchant_role(self, role_service: RoleService):
        role = await self._create(role_service)

        with pytest.raises(InsufficientPrivilegeError):
            await role_service.update_role(PROFILE_ADMIN, role.role_id, name="x")


class TestGetRole:
    @pytest.mark.asyncio
    async def test_predefined_with_group_info(self, role_service: RoleService):
        details = await role_service.get_role(MERCHANT_ADMIN, RoleId("merchant_view_only"))

        assert details.role.is_predefined
        assert [i.group for i in details.group_infos] == details.role.groups

    @pytest.mark.asyncio
    async def test_unknown(self, role_service: RoleService):
        with pytest.raises(NotFoundError):
            await role_service.get_role(MERCHANT_ADMIN, RoleId("role_missing"))


class TestListInvitableRoles:
    @pytest.mark.asyncio
    async def test_merchant_admin(self, role_service: RoleService):
        here = await role_service.create_role(
            ORG_ADMIN,
            name="auditors",
            groups=["analytics-view"],
            scope_level=EntityType.MERCHANT,
            lineage=M1,
        )
        below = await role_service.create_role(
            ORG_ADMIN,
            name="p-readers",
            groups=["users-read"],
            scope_level=EntityType.PROFILE,
            lineage=P1,
        )
        elsewhere = await role_service.create_role(
            ORG_ADMIN,
            name="m2-only",
            groups=["users-read"],
            scope_level=EntityType.MERCHANT,
            lineage=M2,
        )

        roles = await role_service.list_invitable_roles(MERCHANT_ADMIN)
        ids = [r.role_id for r in roles]

        assert "org_admin" not in ids
        assert here.role_id in ids
        assert below.role_id in ids
        assert elsewhere.role_id not in ids
        assert "merchant_admin" in ids and "profile_view_only" in ids

    @pytest.mark.asyncio
    async def test_ordering(self, role_service: RoleService):
        roles = await role_service.list_invitable_roles(ORG_ADMIN)

        keys = [(-r.scope_level, r.name.lower()) for r in roles]
        assert keys == sorted(keys)
        assert roles[0].scope_level is EntityType.MERCHANT

    @pytest.mark.asyncio
    async def test_profile_admin_only_sees_profile_roles(self, role_service: RoleService):
        roles = await role_service.list_invitable_roles(PROFILE_ADMIN)

        assert roles
        assert all(r.scope_level is EntityType.PROFILE for r in roles)

    @pytest.mark.asyncio
    async def test_org_roles_never_listed(self, role_service: RoleService):
        await role_service.create_role(
            ORG_ADMIN,
            name="finance",
            groups=["analytics-view"],
            scope_level=EntityType.ORGANIZATION,
            lineage=ORG,
        )

        roles = await role_service.list_invitable_roles(ORG_ADMIN)

        assert all(r.scope_level < EntityType.ORGANIZATION for r in roles)


class TestDeleteUserRoleBinding:
    @pytest.mark.asyncio
    async def test_deletes_binding(self, role_service: RoleService, user_role_repo, event_repo):
        user_role_repo.put("u_2", "merchant_view_only", M1)

        await role_service.delete_user_role_binding(MERCHANT_ADMIN, UserId("u_2"), M1)

        assert await user_role_repo.get(UserId("u_2"), M1) is None
        [event] = event_repo.of_type(UserRoleDeleted)
        assert event.role_id == "merchant_view_only"

    @pytest.mark.asyncio
    async def test_repeated_delete_is_not_found(self, role_service: RoleService, user_role_repo):
        user_role_repo.put("u_2", "merchant_view_only", M1)
        await role_service.delete_user_role_binding(MERCHANT_ADMIN, UserId("u_2"), M1)

        with pytest.raises(NotFoundError):
            await role_service.delete_user_role_binding(MERCHANT_ADMIN, UserId("u_2"), M1)

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, role_service: RoleService, user_role_repo):
        user_role_repo.put("u_admin", "merchant_admin", M1)

        with pytest.raises(InsufficientPrivilegeError) as exc_info:
            await role_service.delete_user_role_binding(MERCHANT_ADMIN, UserId("u_admin"), M1)

        assert exc_info.value.code == "cannot_delete_self"

    @pytest.mark.asyncio
    async def test_outside_boundary(self, role_service: RoleService, user_role_repo):
        user_role_repo.put("u_2", "merchant_view_only", M2)

        with pytest.raises(InsufficientPrivilegeError):
            await role_service.delete_user_role_binding(MERCHANT_ADMIN, UserId("u_2"), M2)

        assert await user_role_repo.get(UserId("u_2"), M2) is not None

    @pytest.mark.asyncio
    async def test_profile_admin_cannot_delete_merchant_binding(
        self, role_service: RoleService, user_role_repo
    ):
        user_role_repo.put("u_2", "merchant_view_only", M1)

        with pytest.raises(InsufficientPrivilegeError):
            await role_service.delete_user_role_binding(PROFILE_ADMIN, UserId("u_2"), M1)
