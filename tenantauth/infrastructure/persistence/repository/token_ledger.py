"""SQLAlchemy implementation of TokenLedger."""

import logging
from datetime import UTC, datetime

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.user_role.model.principal import TokenPurpose
from tenantauth.domain.user_role.model.value import TokenId, UserId
from tenantauth.domain.user_role.port.token import TokenLedger
from tenantauth.infrastructure.persistence.errors import storage_errors
from tenantauth.infrastructure.persistence.tables import consumed_tokens_table

logger = logging.getLogger(__name__)


class SQLAlchemyTokenLedger(TokenLedger):
    """The primary key on token_id makes consumption a conditional write."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def consume(self, token_id: TokenId, user_id: UserId, purpose: TokenPurpose) -> bool:
        stmt = insert(consumed_tokens_table).values(
            token_id=token_id,
            user_id=user_id,
            purpose=str(purpose),
            consumed_at=datetime.now(UTC),
        )
        with storage_errors("token consumption"):
            try:
                async with self._session.begin_nested():
                    await self._session.execute(stmt)
            except IntegrityError:
                logger.info("Replay of consumed token: token_id=%s user_id=%s", token_id, user_id)
                return False
        return True
