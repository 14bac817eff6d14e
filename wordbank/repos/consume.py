import logging
from typing import Any

from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.models.consume import TokenConsumptionRecord, TokenConsumptionRecordCreate
from wordbank.schemas.ledger import ConsumptionRecordFilters, ConsumptionStatistics, SourceStatistics

logger = logging.getLogger(__name__)


class TokenConsumptionRepository:
    """Append-only consumption record data access layer"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_record(self, record_data: TokenConsumptionRecordCreate) -> TokenConsumptionRecord:
        """
        Appends a consumption record.
        This function does NOT commit the transaction, but it does flush the session.
        """
        record = TokenConsumptionRecord(**record_data.model_dump())
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)

        logger.debug(
            f"Created consumption record {record.id} for user {record.user_id}: "
            f"model={record.model_id}, total_cost={record.total_cost}"
        )
        return record

    def _apply_filters(self, query: Any, user_id: str, filters: ConsumptionRecordFilters | None) -> Any:
        query = query.where(TokenConsumptionRecord.user_id == user_id)
        if filters is None:
            return query
        if filters.source is not None:
            query = query.where(TokenConsumptionRecord.source == filters.source)
        if filters.start_date is not None:
            query = query.where(col(TokenConsumptionRecord.created_at) >= filters.start_date)
        if filters.end_date is not None:
            query = query.where(col(TokenConsumptionRecord.created_at) <= filters.end_date)
        return query

    async def list_records(
        self,
        user_id: str,
        filters: ConsumptionRecordFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[TokenConsumptionRecord]:
        """Lists a user's consumption records, newest first."""
        query = self._apply_filters(select(TokenConsumptionRecord), user_id, filters)
        query = (
            query.order_by(col(TokenConsumptionRecord.created_at).desc(), col(TokenConsumptionRecord.id).desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.exec(query)
        return list(result.all())

    async def count_records(self, user_id: str, filters: ConsumptionRecordFilters | None = None) -> int:
        query = self._apply_filters(select(func.count()).select_from(TokenConsumptionRecord), user_id, filters)
        result = await self.db.exec(query)
        return result.one()

    async def get_statistics(self, user_id: str, filters: ConsumptionRecordFilters | None = None) -> ConsumptionStatistics:
        """
        Aggregates a user's consumption per source.

        Args:
            user_id: The user ID.
            filters: Optional date window; a ``source`` filter narrows to one source.

        Returns:
            Totals across all sources plus a per-source breakdown.
        """
        query = select(
            TokenConsumptionRecord.source,
            func.count().label("count"),
            func.coalesce(func.sum(TokenConsumptionRecord.total_cost), 0).label("total_cost"),
            func.coalesce(func.sum(TokenConsumptionRecord.input_chars), 0).label("input_chars"),
            func.coalesce(func.sum(TokenConsumptionRecord.output_chars), 0).label("output_chars"),
            func.coalesce(func.sum(TokenConsumptionRecord.used_daily_free), 0).label("used_daily_free"),
            func.coalesce(func.sum(TokenConsumptionRecord.used_paid), 0).label("used_paid"),
        )
        query = self._apply_filters(query, user_id, filters).group_by(TokenConsumptionRecord.source)
        result = await self.db.exec(query)

        stats = ConsumptionStatistics()
        for source, count, total_cost, input_chars, output_chars, used_daily_free, used_paid in result.all():
            stats.total_records += count
            stats.total_cost += total_cost
            stats.total_input_chars += input_chars
            stats.total_output_chars += output_chars
            stats.total_daily_free += used_daily_free
            stats.total_paid += used_paid
            stats.by_source[source] = SourceStatistics(count=count, total_cost=total_cost)
        return stats
