"""Integration tests for SQLAlchemyTokenLedger."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tenantauth.domain.user_role.model.principal import TokenPurpose
from tenantauth.domain.user_role.model.value import TokenId, UserId
from tenantauth.infrastructure.persistence.repository.token_ledger import SQLAlchemyTokenLedger


@pytest.mark.asyncio
class TestTokenLedger:
    async def test_first_consumption_wins(self, db_session: AsyncSession):
        ledger = SQLAlchemyTokenLedger(db_session)

        first = await ledger.consume(TokenId("tok_1"), UserId("u_1"), TokenPurpose.ACCEPT_INVITE)
        second = await ledger.consume(TokenId("tok_1"), UserId("u_1"), TokenPurpose.ACCEPT_INVITE)

        assert first is True
        assert second is False

    async def test_distinct_tokens(self, db_session: AsyncSession):
        ledger = SQLAlchemyTokenLedger(db_session)

        assert await ledger.consume(TokenId("a"), UserId("u_1"), TokenPurpose.ACCEPT_INVITE)
        assert await ledger.consume(TokenId("b"), UserId("u_1"), TokenPurpose.MERCHANT_SELECT)

    async def test_replay_survives_commit(self, db_session: AsyncSession):
        ledger = SQLAlchemyTokenLedger(db_session)
        await ledger.consume(TokenId("tok_1"), UserId("u_1"), TokenPurpose.MERCHANT_SELECT)
        await db_session.commit()

        assert not await ledger.consume(
            TokenId("tok_1"), UserId("u_1"), TokenPurpose.MERCHANT_SELECT
        )
