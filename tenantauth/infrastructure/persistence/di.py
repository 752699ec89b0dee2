from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tenantauth.config import Config
from tenantauth.domain.shared.port.event_repository import EventRepository
from tenantauth.domain.shared.port.unit_of_work import UnitOfWork
from tenantauth.domain.user_role.port.role_repository import RoleRepository
from tenantauth.domain.user_role.port.token import TokenLedger
from tenantauth.domain.user_role.port.user_role_repository import UserRoleRepository
from tenantauth.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from tenantauth.infrastructure.persistence.repository.event import SQLAlchemyEventRepository
from tenantauth.infrastructure.persistence.repository.role import SQLAlchemyRoleRepository
from tenantauth.infrastructure.persistence.repository.token_ledger import SQLAlchemyTokenLedger
from tenantauth.infrastructure.persistence.repository.user_role import (
    SQLAlchemyUserRoleRepository,
)
from tenantauth.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork
from tenantauth.util.di.base import Provider
from tenantauth.util.di.scope import Scope


class PersistenceProvider(Provider):
    # APP-scoped factories
    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> AsyncEngine:
        return create_db_engine(config.database)

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # UOW-scoped session (one transaction per unit of work). Closing it discards
    # anything a handler did not commit through UnitOfWork.
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session

    unit_of_work = provide(SQLAlchemyUnitOfWork, scope=Scope.UOW, provides=UnitOfWork)

    # UOW-scoped repositories
    role_repo = provide(SQLAlchemyRoleRepository, scope=Scope.UOW, provides=RoleRepository)
    user_role_repo = provide(
        SQLAlchemyUserRoleRepository, scope=Scope.UOW, provides=UserRoleRepository
    )
    token_ledger = provide(SQLAlchemyTokenLedger, scope=Scope.UOW, provides=TokenLedger)
    event_repo = provide(SQLAlchemyEventRepository, scope=Scope.UOW, provides=EventRepository)
