"""Integration tests for SQLAlchemyUserRoleRepository."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.shared.error import AlreadyExistsError
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.user_role import UserRole, UserRoleStatus
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.infrastructure.persistence.repository.user_role import (
    SQLAlchemyUserRoleRepository,
)
from tenantauth.infrastructure.persistence.tables import user_roles_table

ORG = Lineage(org_id="org_1")
M1 = Lineage(org_id="org_1", merchant_id="m_1")
M2 = Lineage(org_id="org_1", merchant_id="m_2")
P1 = Lineage(org_id="org_1", merchant_id="m_1", profile_id="p_1")


def _make_binding(
    user_id: str = "u_1",
    lineage: Lineage = M1,
    role_id: str = "merchant_view_only",
    status: UserRoleStatus = UserRoleStatus.INVITED,
) -> UserRole:
    return UserRole(
        user_id=UserId(user_id),
        role_id=RoleId(role_id),
        lineage=lineage,
        status=status,
        created_by=UserId("u_admin"),
        last_modified_by=UserId("u_admin"),
    )


@pytest.mark.asyncio
class TestUserRoleRepo:
    async def test_add_and_get(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)

        await repo.add(_make_binding(lineage=P1))
        await db_session.commit()

        got = await repo.get(UserId("u_1"), P1)
        assert got is not None
        assert got.lineage == P1
        assert got.status is UserRoleStatus.INVITED
        assert await repo.get(UserId("u_1"), M1) is None

    async def test_duplicate_binding(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding())

        with pytest.raises(AlreadyExistsError):
            await repo.add(_make_binding(role_id="merchant_admin"))

        # the failed insert is rolled back alone
        got = await repo.get(UserId("u_1"), M1)
        assert got is not None and got.role_id == "merchant_view_only"

    async def test_activate_is_conditional(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding())

        assert await repo.activate(UserId("u_1"), M1) is True
        assert await repo.activate(UserId("u_1"), M1) is False
        assert await repo.activate(UserId("u_1"), M2) is False

        got = await repo.get(UserId("u_1"), M1)
        assert got.status is UserRoleStatus.ACTIVE
        assert got.last_modified_by == "u_1"

    async def test_update_role(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        binding = _make_binding(status=UserRoleStatus.ACTIVE)
        await repo.add(binding)

        binding.reassign(RoleId("merchant_operator"), UserId("u_other_admin"))
        await repo.update(binding)

        got = await repo.get(UserId("u_1"), M1)
        assert got.role_id == "merchant_operator"
        assert got.last_modified_by == "u_other_admin"
        assert got.status is UserRoleStatus.ACTIVE

    async def test_delete(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding())

        assert await repo.delete(UserId("u_1"), M1) is True
        assert await repo.delete(UserId("u_1"), M1) is False

    async def test_list_invited_skips_active(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding(lineage=M2))
        await repo.add(_make_binding(lineage=M1))
        await repo.add(_make_binding(lineage=P1, status=UserRoleStatus.ACTIVE))

        invited = await repo.list_invited(UserId("u_1"))

        assert [b.lineage for b in invited] == [M1, M2]

    async def test_stream_within_boundary(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding("u_org", ORG, "org_admin"))
        await repo.add(_make_binding("u_m1", M1))
        await repo.add(_make_binding("u_m2", M2))
        await repo.add(_make_binding("u_p1", P1, "profile_view_only"))
        await repo.add(_make_binding("u_x", Lineage(org_id="org_2", merchant_id="m_9")))
        await db_session.commit()

        org_users = [b.user_id async for b in repo.stream_within(ORG)]
        merchant_users = [b.user_id async for b in repo.stream_within(M1)]

        assert org_users == ["u_m1", "u_m2", "u_org", "u_p1"]
        assert merchant_users == ["u_m1", "u_p1"]

    async def test_levels_of_one_lineage_are_separate_bindings(self, db_session: AsyncSession):
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding(lineage=ORG, role_id="org_admin"))
        await repo.add(_make_binding(lineage=M1))
        await repo.add(_make_binding(lineage=P1, role_id="profile_view_only"))

        assert await repo.delete(UserId("u_1"), M1) is True

        assert await repo.get(UserId("u_1"), M1) is None
        assert (await repo.get(UserId("u_1"), ORG)).role_id == "org_admin"
        assert (await repo.get(UserId("u_1"), P1)).role_id == "profile_view_only"

    async def test_duplicate_org_binding(self, db_session: AsyncSession):
        """Absent merchant and profile ids still count toward uniqueness."""
        repo = SQLAlchemyUserRoleRepository(db_session)
        await repo.add(_make_binding(lineage=ORG, role_id="org_admin"))

        with pytest.raises(AlreadyExistsError):
            await repo.add(_make_binding(lineage=ORG, role_id="org_admin"))

    async def test_slash_in_stored_id_does_not_alias_deeper_lineage(
        self, db_session: AsyncSession
    ):
        now = datetime.now(UTC)
        await db_session.execute(
            insert(user_roles_table).values(
                user_id="u_1",
                role_id="merchant_admin",
                org_id="org_1",
                merchant_id="m_1/p_1",
                profile_id=None,
                status="active",
                created_by="u_admin",
                last_modified_by="u_admin",
                created_at=now,
                updated_at=now,
            )
        )
        repo = SQLAlchemyUserRoleRepository(db_session)

        assert await repo.get(UserId("u_1"), P1) is None
        assert await repo.delete(UserId("u_1"), P1) is False
        assert await repo.activate(UserId("u_1"), P1) is False

        await repo.add(_make_binding(lineage=P1))
        assert (await repo.get(UserId("u_1"), P1)).lineage == P1
