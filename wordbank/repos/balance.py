import logging
from datetime import date

from sqlalchemy import text, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.models.balance import UserTokenBalance, UserTokenBalanceCreate

logger = logging.getLogger(__name__)


class TokenBalanceRepository:
    """Balance row data access layer"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_balance(self, user_id: str) -> UserTokenBalance | None:
        """
        Fetches a user's balance row without locking it.

        Args:
            user_id: The user ID.

        Returns:
            The UserTokenBalance, or None if the user has no row yet.
        """
        logger.debug(f"Fetching balance for user: {user_id}")
        result = await self.db.exec(select(UserTokenBalance).where(UserTokenBalance.user_id == user_id))
        return result.one_or_none()

    async def prepare_row_lock(self, user_id: str, timeout_ms: int = 0) -> None:
        """
        Readies the current transaction for a locking read of a user's row.

        PostgreSQL honours ``FOR UPDATE``; the wait for it is bounded by
        ``lock_timeout`` when ``timeout_ms`` is positive. SQLite ignores
        ``FOR UPDATE`` and only opens a transaction on the first write, so a
        no-op write on the row takes the database write lock up front. Other
        writers then wait on the busy timeout and read committed state.
        """
        conn = await self.db.connection()
        if conn.dialect.name == "postgresql":
            if timeout_ms > 0:
                await conn.execute(text(f"SET LOCAL lock_timeout = {int(timeout_ms)}"))
        elif conn.dialect.name == "sqlite":
            await conn.execute(
                text(f"UPDATE {UserTokenBalance.__tablename__} SET user_id = user_id WHERE user_id = :user_id"),
                {"user_id": user_id},
            )

    async def get_balance_for_update(self, user_id: str, lock_timeout_ms: int = 0) -> UserTokenBalance | None:
        """
        Fetches a user's balance row and locks it until the transaction ends.

        Args:
            user_id: The user ID.
            lock_timeout_ms: Max lock wait on PostgreSQL, 0 waits forever.

        Returns:
            The locked UserTokenBalance, or None if the user has no row yet.
        """
        logger.debug(f"Locking balance for user: {user_id}")
        await self.prepare_row_lock(user_id, lock_timeout_ms)
        statement = (
            select(UserTokenBalance)
            .where(UserTokenBalance.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.exec(statement)
        return result.one_or_none()

    async def create_balance(self, balance_data: UserTokenBalanceCreate) -> UserTokenBalance:
        """
        Creates a balance row.
        This function does NOT commit the transaction, but it does flush the session.
        A concurrent insert for the same user surfaces as IntegrityError on flush.
        """
        logger.debug(f"Creating balance for user: {balance_data.user_id}")
        balance = UserTokenBalance(**balance_data.model_dump())
        self.db.add(balance)
        await self.db.flush()
        await self.db.refresh(balance)

        logger.info(
            f"Created balance for user {balance.user_id}: total={balance.total_credits}, "
            f"gift={balance.gift_credits}, daily_free_quota={balance.daily_free_quota}"
        )
        return balance

    async def get_or_create_balance_for_update(
        self, balance_data: UserTokenBalanceCreate, lock_timeout_ms: int = 0
    ) -> UserTokenBalance:
        """
        Locks a user's balance row, creating it first if missing.
        This function does NOT commit the transaction.
        """
        balance = await self.get_balance_for_update(balance_data.user_id, lock_timeout_ms)
        if balance is not None:
            return balance
        await self.create_balance(balance_data)
        balance = await self.get_balance_for_update(balance_data.user_id, lock_timeout_ms)
        assert balance is not None
        return balance

    async def save_balance(self, balance: UserTokenBalance) -> UserTokenBalance:
        """
        Persists in-place changes of a balance row.
        This function does NOT commit the transaction.
        """
        self.db.add(balance)
        await self.db.flush()
        await self.db.refresh(balance)
        logger.debug(
            f"Saved balance for user {balance.user_id}: total={balance.total_credits}, "
            f"gift={balance.gift_credits}, used={balance.used_credits}, "
            f"daily={balance.daily_used_quota}/{balance.daily_free_quota}"
        )
        return balance

    async def reset_all_daily_quotas(self, today: date) -> int:
        """
        Zeroes every user's daily usage counter in one statement. Does NOT commit.
        Running it twice for the same day leaves the table unchanged.

        Returns:
            Number of rows matched.
        """
        statement = update(UserTokenBalance).values(daily_used_quota=0, quota_reset_date=today)
        result = await self.db.exec(statement)
        logger.info(f"Reset daily quota for {result.rowcount} balances (date={today})")
        return result.rowcount
