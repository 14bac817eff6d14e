from datetime import datetime, timezone
from enum import StrEnum
from uuid import UUID, uuid4

from sqlalchemy import TIMESTAMP, BigInteger, Index
from sqlmodel import Column, Field, SQLModel


class TransactionType(StrEnum):
    RECHARGE = "recharge"
    CONSUME = "consume"
    REFUND = "refund"
    EXPIRE = "expire"
    GIFT = "gift"


class TokenTransactionBase(SQLModel):
    """Base model for a ledger entry with shared fields."""

    user_id: str = Field(index=True, description="User ID")
    type: str = Field(index=True, description="Entry type: recharge | consume | refund | expire | gift")
    amount: int = Field(sa_type=BigInteger, description="Signed amount: positive credits, negative debits")
    balance_before: int = Field(sa_type=BigInteger, description="total_credits before this entry")
    balance_after: int = Field(sa_type=BigInteger, description="total_credits after this entry")
    source: str = Field(description="Origin tag: order, redeem_code, chat, auto_init, admin, ...")
    related_id: str | None = Field(default=None, description="Order / redemption code / request ID")
    model_name: str | None = Field(default=None, description="Model display name for consume entries")
    remark: str | None = Field(default=None, description="Free-text note")


class TokenTransaction(TokenTransactionBase, table=True):
    """Ledger table - append-only, one row per balance-affecting operation"""

    __table_args__ = (Index("idx_tokentransaction_user_created", "user_id", "created_at"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
    )


class TokenTransactionCreate(TokenTransactionBase):
    """Schema for appending a ledger entry."""

    pass


class TokenTransactionRead(TokenTransactionBase):
    """Schema for reading a ledger entry."""

    id: UUID = Field(description="Unique identifier for this entry")
    created_at: datetime = Field(description="Creation time")
