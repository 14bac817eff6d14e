import logging

from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.models.transaction import TokenTransaction, TokenTransactionCreate

logger = logging.getLogger(__name__)


class TokenTransactionRepository:
    """Append-only ledger data access layer"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_transaction(self, transaction_data: TokenTransactionCreate) -> TokenTransaction:
        """
        Appends a ledger entry.
        This function does NOT commit the transaction, but it does flush the session.

        Args:
            transaction_data: The entry to append.

        Returns:
            The newly created TokenTransaction instance.
        """
        transaction = TokenTransaction(**transaction_data.model_dump())
        self.db.add(transaction)
        await self.db.flush()
        await self.db.refresh(transaction)

        logger.info(
            f"Ledger {transaction.type} for user {transaction.user_id}: amount={transaction.amount}, "
            f"balance {transaction.balance_before} -> {transaction.balance_after}, source={transaction.source}"
        )
        return transaction

    async def list_transactions(
        self,
        user_id: str,
        type: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[TokenTransaction]:
        """
        Lists a user's ledger entries, newest first.

        Args:
            user_id: The user ID.
            type: Optional entry type filter.
            limit: Maximum number of entries to return.
            offset: Number of entries to skip.
        """
        query = select(TokenTransaction).where(TokenTransaction.user_id == user_id)
        if type is not None:
            query = query.where(TokenTransaction.type == type)
        query = (
            query.order_by(col(TokenTransaction.created_at).desc(), col(TokenTransaction.id).desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.exec(query)
        return list(result.all())

    async def count_transactions(self, user_id: str, type: str | None = None) -> int:
        query = select(func.count()).select_from(TokenTransaction).where(TokenTransaction.user_id == user_id)
        if type is not None:
            query = query.where(TokenTransaction.type == type)
        result = await self.db.exec(query)
        return result.one()

    async def list_all_for_user(self, user_id: str) -> list[TokenTransaction]:
        """All of a user's entries in write order, oldest first."""
        query = (
            select(TokenTransaction)
            .where(TokenTransaction.user_id == user_id)
            .order_by(col(TokenTransaction.created_at).asc())
        )
        result = await self.db.exec(query)
        return list(result.all())

    async def has_transaction(self, user_id: str, type: str) -> bool:
        """Whether the user already has any entry of ``type``."""
        query = select(TokenTransaction.id).where(TokenTransaction.user_id == user_id, TokenTransaction.type == type)
        result = await self.db.exec(query.limit(1))
        return result.first() is not None
