"""Integration tests for the daily quota reset."""

from datetime import timedelta

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from tests.conftest import MakeBalance
from tests.factories.ledger import TODAY
from wordbank.repos.balance import TokenBalanceRepository
from wordbank.tasks.quota_reset import reset_all_daily_quotas


@pytest.mark.integration
class TestResetAllDailyQuotas:
    async def test_resets_every_balance(self, db_session: AsyncSession, make_balance: MakeBalance) -> None:
        yesterday = TODAY - timedelta(days=1)
        await make_balance("a", daily_free_quota=500, daily_used_quota=500, quota_reset_date=yesterday)
        await make_balance("b", daily_free_quota=100, daily_used_quota=10, quota_reset_date=yesterday, total_credits=7)

        assert await reset_all_daily_quotas(db_session, TODAY) == 2

        repo = TokenBalanceRepository(db_session)
        a = await repo.get_balance("a")
        b = await repo.get_balance("b")
        assert a is not None and b is not None
        assert (a.daily_used_quota, a.quota_reset_date) == (0, TODAY)
        assert (b.daily_used_quota, b.quota_reset_date) == (0, TODAY)
        assert b.total_credits == 7
        assert b.daily_free_quota == 100

    async def test_idempotent(self, db_session: AsyncSession, make_balance: MakeBalance) -> None:
        await make_balance("c", daily_free_quota=500, daily_used_quota=250, quota_reset_date=TODAY - timedelta(days=1))
        repo = TokenBalanceRepository(db_session)

        await reset_all_daily_quotas(db_session, TODAY)
        once = await repo.get_balance("c")
        assert once is not None
        once_state = (once.daily_used_quota, once.quota_reset_date, once.daily_free_quota, once.total_credits)

        await reset_all_daily_quotas(db_session, TODAY)
        twice = await repo.get_balance("c")
        assert twice is not None
        assert (twice.daily_used_quota, twice.quota_reset_date, twice.daily_free_quota, twice.total_credits) == once_state

    async def test_no_balances(self, db_session: AsyncSession) -> None:
        assert await reset_all_daily_quotas(db_session, TODAY) == 0
