"""SQLAlchemy implementation of UnitOfWork."""

from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.shared.port.unit_of_work import UnitOfWork
from tenantauth.infrastructure.persistence.errors import storage_errors


class SQLAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        with storage_errors("commit"):
            await self.session.commit()
