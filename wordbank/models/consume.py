from datetime import datetime, timezone
from enum import StrEnum
from uuid import UUID, uuid4

from sqlalchemy import TIMESTAMP, Index
from sqlmodel import Column, Field, SQLModel


class ConsumptionSource(StrEnum):
    CHAT = "chat"
    GENERATION = "generation"
    AGENT = "agent"
    BOOK_CREATION = "book_creation"


class TokenConsumptionRecordBase(SQLModel):
    """Base model for a consumption record with shared fields."""

    user_id: str = Field(index=True, description="User ID")
    model_id: str = Field(description="Model ID the usage was billed against")

    # Usage
    input_chars: int = Field(default=0, description="Input character count")
    output_chars: int = Field(default=0, description="Output character count")

    # Pricing frozen at calculation time
    input_ratio: float = Field(default=0.0, description="Characters per credit for input at calculation time")
    output_ratio: float = Field(default=0.0, description="Characters per credit for output at calculation time")
    calculated_input_cost: int = Field(default=0, description="Input cost after membership benefits")
    calculated_output_cost: int = Field(default=0, description="Output cost after membership benefits")
    total_cost: int = Field(default=0, description="Total credits charged")

    # Tier breakdown; used_paid also absorbs gift usage
    used_daily_free: int = Field(default=0, description="Credits drawn from the daily free quota")
    used_paid: int = Field(default=0, description="Credits drawn from gift + paid credits")

    # Membership
    is_member: bool = Field(default=False, description="Whether an active membership was found")
    member_free_input: int = Field(default=0, description="Input characters exempted by membership")

    source: str = Field(index=True, description="Origin: chat | generation | agent | book_creation")
    related_id: str | None = Field(default=None, description="Caller-side request ID")


class TokenConsumptionRecord(TokenConsumptionRecordBase, table=True):
    """Consumption record table - append-only, one row per AI usage event"""

    __table_args__ = (Index("idx_tokenconsumptionrecord_user_created", "user_id", "created_at"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False, index=True),
    )


class TokenConsumptionRecordCreate(TokenConsumptionRecordBase):
    """Schema for appending a consumption record."""

    pass


class TokenConsumptionRecordRead(TokenConsumptionRecordBase):
    """Schema for reading a consumption record, includes ID and timestamp."""

    id: UUID = Field(description="Unique identifier for this record")
    created_at: datetime = Field(description="Creation time")
