"""SQLAlchemy implementation of RoleRepository."""

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.shared.error import AlreadyExistsError
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.permission import PermissionGroup
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.value import RoleId, UserId
from tenantauth.domain.user_role.port.role_repository import RoleRepository
from tenantauth.infrastructure.persistence.errors import storage_errors
from tenantauth.infrastructure.persistence.tables import roles_table


def _row_to_role(row: dict) -> Role:
    return Role(
        role_id=RoleId(row["role_id"]),
        name=row["name"],
        groups=[PermissionGroup(g) for g in row["groups"]],
        scope_level=EntityType(row["scope_level"]),
        lineage=Lineage(
            org_id=row["org_id"],
            merchant_id=row["merchant_id"],
            profile_id=row["profile_id"],
        ),
        created_by=UserId(row["created_by"]),
        last_modified_by=UserId(row["last_modified_by"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        is_invitable=row["is_invitable"],
    )


def _role_to_dict(role: Role) -> dict:
    if role.lineage is None:
        raise ValueError(f"Predefined role {role.role_id} cannot be stored")
    return {
        "role_id": role.role_id,
        "name": role.name,
        "name_key": role.name.lower(),
        "groups": [str(g) for g in role.groups],
        "scope_level": int(role.scope_level),
        "org_id": role.lineage.org_id,
        "merchant_id": role.lineage.merchant_id,
        "profile_id": role.lineage.profile_id,
        "is_invitable": role.is_invitable,
        "created_by": role.created_by or "",
        "last_modified_by": role.last_modified_by or role.created_by or "",
        "created_at": role.created_at,
        "updated_at": role.updated_at,
    }


class SQLAlchemyRoleRepository(RoleRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, role_id: RoleId, org_id: str) -> Role | None:
        stmt = select(roles_table).where(
            roles_table.c.role_id == role_id,
            roles_table.c.org_id == org_id,
        )
        with storage_errors("role lookup"):
            result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_role(dict(row)) if row else None

    async def save(self, role: Role) -> None:
        """Insert or update. A name clash inside the organization raises AlreadyExistsError."""
        values = _role_to_dict(role)
        exists = select(roles_table.c.role_id).where(roles_table.c.role_id == role.role_id)
        with storage_errors("role save"):
            try:
                async with self.session.begin_nested():
                    if (await self.session.execute(exists)).first() is None:
                        await self.session.execute(insert(roles_table).values(**values))
                    else:
                        mutable = ("name", "name_key", "groups", "last_modified_by", "updated_at")
                        changes = {k: values[k] for k in mutable}
                        await self.session.execute(
                            update(roles_table)
                            .where(roles_table.c.role_id == role.role_id)
                            .values(**changes)
                        )
            except IntegrityError as e:
                raise AlreadyExistsError(
                    f"Role name {role.name!r} already exists", code="role_name_taken"
                ) from e

    async def find_by_name(self, org_id: str, name: str) -> Role | None:
        stmt = select(roles_table).where(
            roles_table.c.org_id == org_id,
            roles_table.c.name_key == name.strip().lower(),
        )
        with storage_errors("role lookup"):
            result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_role(dict(row)) if row else None

    async def list_related(self, lineage: Lineage, max_scope: EntityType) -> list[Role]:
        stmt = (
            select(roles_table)
            .where(
                roles_table.c.org_id == lineage.org_id,
                roles_table.c.scope_level <= int(max_scope),
            )
            .order_by(roles_table.c.scope_level.desc(), roles_table.c.name_key)
        )
        with storage_errors("role listing"):
            result = await self.session.execute(stmt)
        roles = [_row_to_role(dict(row)) for row in result.mappings().all()]
        return [r for r in roles if r.lineage is not None and r.lineage.is_related(lineage)]
