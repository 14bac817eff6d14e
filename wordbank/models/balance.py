from datetime import date, datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import TIMESTAMP, BigInteger, Date
from sqlmodel import Column, Field, SQLModel


class UserTokenBalanceBase(SQLModel):
    """Base model for a user's word-credit balance with shared fields."""

    user_id: str = Field(unique=True, index=True, description="User ID")
    total_credits: int = Field(
        default=0, sa_type=BigInteger, description="Owned credits across gift + paid (excludes daily free quota)"
    )
    used_credits: int = Field(default=0, sa_type=BigInteger, description="Lifetime consumption counter (reporting only)")
    gift_credits: int = Field(default=0, sa_type=BigInteger, description="Part of total_credits that came from gifts")
    frozen_credits: int = Field(default=0, sa_type=BigInteger, description="Part of total_credits held and unspendable")
    daily_free_quota: int = Field(default=0, description="Free credits spendable per calendar day")
    daily_used_quota: int = Field(default=0, description="Free credits spent today")
    quota_reset_date: date | None = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Calendar day the daily counter was last reset",
    )
    last_consumed_at: datetime | None = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="Time of the last successful consumption",
    )


class UserTokenBalance(UserTokenBalanceBase, table=True):
    """User balance table - one mutable row per user, never deleted"""

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False, onupdate=lambda: datetime.now(timezone.utc)),
    )

    @property
    def available_daily_free(self) -> int:
        return max(0, self.daily_free_quota - self.daily_used_quota)

    @property
    def available_paid(self) -> int:
        return max(0, self.total_credits - self.gift_credits - self.frozen_credits)

    @property
    def available_total(self) -> int:
        return self.available_daily_free + self.gift_credits + self.available_paid


class UserTokenBalanceCreate(SQLModel):
    """Schema for creating a new balance row."""

    user_id: str = Field(description="User ID")
    total_credits: int = Field(default=0, description="Initial owned credits")
    gift_credits: int = Field(default=0, description="Initial gift credits")
    daily_free_quota: int = Field(default=0, description="Initial daily free quota")
    quota_reset_date: date | None = Field(default=None, description="Initial reset day")


class UserTokenBalanceRead(UserTokenBalanceBase):
    """Schema for reading a balance, includes ID and timestamps."""

    id: UUID = Field(description="Unique identifier for this balance")
    created_at: datetime = Field(description="Creation time")
    updated_at: datetime = Field(description="Update time")
