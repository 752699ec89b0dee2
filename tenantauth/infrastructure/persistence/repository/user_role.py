"""SQLAlchemy implementation of UserRoleRepository."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime

from sqlalchemy import Column, ColumnElement, delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.shared.error import AlreadyExistsError
from tenantauth.domain.user_role.model.lineage import Lineage
from tenantauth.domain.user_role.model.user_role import UserRole, UserRoleStatus
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.domain.user_role.port.user_role_repository import UserRoleRepository
from tenantauth.infrastructure.persistence.errors import storage_errors
from tenantauth.infrastructure.persistence.tables import user_roles_table

t = user_roles_table


def _row_to_user_role(row: dict) -> UserRole:
    return UserRole(
        user_id=UserId(row["user_id"]),
        role_id=RoleId(row["role_id"]),
        lineage=Lineage(
            org_id=row["org_id"],
            merchant_id=row["merchant_id"],
            profile_id=row["profile_id"],
        ),
        status=UserRoleStatus(row["status"]),
        created_by=UserId(row["created_by"]),
        last_modified_by=UserId(row["last_modified_by"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _user_role_to_dict(binding: UserRole) -> dict:
    return {
        "user_id": binding.user_id,
        "role_id": binding.role_id,
        "org_id": binding.lineage.org_id,
        "merchant_id": binding.lineage.merchant_id,
        "profile_id": binding.lineage.profile_id,
        "status": str(binding.status),
        "created_by": binding.created_by,
        "last_modified_by": binding.last_modified_by,
        "created_at": binding.created_at,
        "updated_at": binding.updated_at,
    }


def _matches(column: Column, value: str | None) -> ColumnElement[bool]:
    return column.is_(None) if value is None else column == value


def _key(user_id: UserId, lineage: Lineage) -> tuple[ColumnElement[bool], ...]:
    """Match the binding at exactly `lineage`; a missing level must be NULL in the row."""
    return (
        t.c.user_id == user_id,
        t.c.org_id == lineage.org_id,
        _matches(t.c.merchant_id, lineage.merchant_id),
        _matches(t.c.profile_id, lineage.profile_id),
    )


class SQLAlchemyUserRoleRepository(UserRoleRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: UserId, lineage: Lineage) -> UserRole | None:
        with storage_errors("user role lookup"):
            result = await self.session.execute(select(t).where(*_key(user_id, lineage)))
        row = result.mappings().first()
        return _row_to_user_role(dict(row)) if row else None

    async def add(self, binding: UserRole) -> None:
        with storage_errors("user role insert"):
            try:
                async with self.session.begin_nested():
                    await self.session.execute(insert(t).values(**_user_role_to_dict(binding)))
            except IntegrityError as e:
                raise AlreadyExistsError(
                    f"User {binding.user_id} already has a role at {binding.lineage}",
                    code="user_role_exists",
                ) from e

    async def update(self, binding: UserRole) -> None:
        stmt = (
            update(t)
            .where(*_key(binding.user_id, binding.lineage))
            .values(
                role_id=binding.role_id,
                last_modified_by=binding.last_modified_by,
                updated_at=binding.updated_at,
            )
        )
        with storage_errors("user role update"):
            await self.session.execute(stmt)

    async def activate(self, user_id: UserId, lineage: Lineage) -> bool:
        stmt = (
            update(t)
            .where(*_key(user_id, lineage), t.c.status == UserRoleStatus.INVITED.value)
            .values(
                status=UserRoleStatus.ACTIVE.value,
                last_modified_by=user_id,
                updated_at=datetime.now(UTC),
            )
        )
        with storage_errors("user role activation"):
            result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, user_id: UserId, lineage: Lineage) -> bool:
        with storage_errors("user role delete"):
            result = await self.session.execute(delete(t).where(*_key(user_id, lineage)))
        return result.rowcount > 0

    async def list_invited(self, user_id: UserId) -> list[UserRole]:
        stmt = (
            select(t)
            .where(t.c.user_id == user_id, t.c.status == UserRoleStatus.INVITED.value)
            .order_by(t.c.merchant_id.nulls_first(), t.c.profile_id.nulls_first())
        )
        with storage_errors("invitation lookup"):
            result = await self.session.execute(stmt)
        return [_row_to_user_role(dict(row)) for row in result.mappings().all()]

    async def stream_within(self, boundary: Lineage) -> AsyncIterator[UserRole]:
        conditions = [t.c.org_id == boundary.org_id]
        if boundary.merchant_id is not None:
            conditions.append(t.c.merchant_id == boundary.merchant_id)
        if boundary.profile_id is not None:
            conditions.append(t.c.profile_id == boundary.profile_id)
        stmt = (
            select(t)
            .where(*conditions)
            .order_by(t.c.user_id, t.c.merchant_id.nulls_first(), t.c.profile_id.nulls_first())
        )

        with storage_errors("user listing"):
            result = await self.session.stream(stmt)
            async for row in result.mappings():
                yield _row_to_user_role(dict(row))
