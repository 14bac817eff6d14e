"""Integration tests for TokenConsumptionRepository."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from tests.factories.ledger import TokenConsumptionRecordCreateFactory
from wordbank.repos.consume import TokenConsumptionRepository
from wordbank.schemas.ledger import ConsumptionRecordFilters


@pytest.mark.integration
class TestTokenConsumptionRepository:
    """Integration tests for TokenConsumptionRepository."""

    @pytest.fixture
    def consume_repo(self, db_session: AsyncSession) -> TokenConsumptionRepository:
        return TokenConsumptionRepository(db_session)

    async def test_create_record(self, consume_repo: TokenConsumptionRepository) -> None:
        created = await consume_repo.create_record(TokenConsumptionRecordCreateFactory.build(user_id="u-rec"))
        assert created.id is not None
        assert created.total_cost == 200
        assert created.created_at is not None

    async def test_list_and_filter_by_source(self, consume_repo: TokenConsumptionRepository) -> None:
        await consume_repo.create_record(TokenConsumptionRecordCreateFactory.build(user_id="u-src", source="chat"))
        await consume_repo.create_record(TokenConsumptionRecordCreateFactory.build(user_id="u-src", source="agent"))
        await consume_repo.create_record(TokenConsumptionRecordCreateFactory.build(user_id="u-src", source="chat"))

        all_records = await consume_repo.list_records("u-src")
        assert len(all_records) == 3

        chat = ConsumptionRecordFilters(source="chat")
        assert len(await consume_repo.list_records("u-src", chat)) == 2
        assert await consume_repo.count_records("u-src", chat) == 2

    async def test_filter_by_date_window(self, consume_repo: TokenConsumptionRepository) -> None:
        await consume_repo.create_record(TokenConsumptionRecordCreateFactory.build(user_id="u-date"))
        now = datetime.now(timezone.utc)

        inside = ConsumptionRecordFilters(start_date=now - timedelta(hours=1), end_date=now + timedelta(hours=1))
        assert await consume_repo.count_records("u-date", inside) == 1

        future = ConsumptionRecordFilters(start_date=now + timedelta(hours=1))
        assert await consume_repo.count_records("u-date", future) == 0

        past = ConsumptionRecordFilters(end_date=now - timedelta(hours=1))
        assert await consume_repo.count_records("u-date", past) == 0

    async def test_statistics_by_source(self, consume_repo: TokenConsumptionRepository) -> None:
        await consume_repo.create_record(
            TokenConsumptionRecordCreateFactory.build(user_id="u-stats", source="chat", total_cost=100, used_daily_free=100)
        )
        await consume_repo.create_record(
            TokenConsumptionRecordCreateFactory.build(
                user_id="u-stats", source="chat", total_cost=50, used_daily_free=0, used_paid=50
            )
        )
        await consume_repo.create_record(
            TokenConsumptionRecordCreateFactory.build(
                user_id="u-stats", source="book_creation", total_cost=30, used_daily_free=0, used_paid=30
            )
        )
        await consume_repo.create_record(TokenConsumptionRecordCreateFactory.build(user_id="someone-else"))

        stats = await consume_repo.get_statistics("u-stats")
        assert stats.total_records == 3
        assert stats.total_cost == 180
        assert stats.total_daily_free == 100
        assert stats.total_paid == 80
        assert stats.by_source["chat"].count == 2
        assert stats.by_source["chat"].total_cost == 150
        assert stats.by_source["book_creation"].total_cost == 30

    async def test_statistics_empty(self, consume_repo: TokenConsumptionRepository) -> None:
        stats = await consume_repo.get_statistics("nobody")
        assert stats.total_records == 0
        assert stats.by_source == {}
