"""Request and result schemas of the ledger services."""

from datetime import date, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from wordbank.utils.dates import parse_date_end, parse_date_start

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing, newest first."""

    items: list[T] = Field(default_factory=list)
    total: int = Field(default=0, description="Rows matching the filters across all pages")
    page: int = Field(default=1, description="1-based page number")
    limit: int = Field(default=20, description="Page size")

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


class ConsumptionParams(BaseModel):
    user_id: str = Field(description="User being charged")
    model_id: str = Field(description="Model whose pricing applies")
    input_chars: int = Field(default=0, description="Input character count")
    output_chars: int = Field(default=0, description="Output character count")
    source: str = Field(default="chat", description="chat | generation | agent | book_creation")
    related_id: str | None = Field(default=None, description="Caller-side request ID")


class ConsumptionResult(BaseModel):
    success: bool = True
    total_cost: int = 0
    input_cost: int = 0
    output_cost: int = 0
    used_daily_free: int = 0
    used_paid: int = Field(default=0, description="Credits drawn from paid credits only, gift usage excluded")
    member_benefit_applied: bool = False
    remaining_balance: int = Field(default=0, description="max(0, total_credits - frozen_credits) after the charge")
    remaining_daily_free: int = 0


class DailyQuotaInfo(BaseModel):
    daily_free_quota: int
    daily_used_quota: int
    remaining: int
    quota_reset_date: date | None = None


class ConsumptionRecordFilters(BaseModel):
    source: str | None = None
    start_date: datetime | None = Field(default=None, description="Inclusive lower bound on created_at")
    end_date: datetime | None = Field(default=None, description="Inclusive upper bound on created_at")

    @classmethod
    def for_local_dates(
        cls,
        start_date: str | None = None,
        end_date: str | None = None,
        source: str | None = None,
        tz: str | None = None,
    ) -> "ConsumptionRecordFilters":
        """Filters from YYYY-MM-DD calendar days, whole days inclusive, in ``tz``."""
        return cls(
            source=source,
            start_date=parse_date_start(start_date, tz) if start_date else None,
            end_date=parse_date_end(end_date, tz) if end_date else None,
        )


class SourceStatistics(BaseModel):
    count: int = 0
    total_cost: int = 0


class ConsumptionStatistics(BaseModel):
    total_records: int = 0
    total_cost: int = 0
    total_input_chars: int = 0
    total_output_chars: int = 0
    total_daily_free: int = 0
    total_paid: int = 0
    by_source: dict[str, SourceStatistics] = Field(default_factory=dict)
