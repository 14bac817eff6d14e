"""Balance service core module

Owns every operation that adds credits to a balance (recharge, gift,
refund), the lazily seeded balance read, and daily quota administration.
Each mutating method is one all-or-nothing unit of work on its session.
"""

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.common.code import ErrCode
from wordbank.configs import configs
from wordbank.infra.database import atomic
from wordbank.models.balance import UserTokenBalance, UserTokenBalanceCreate
from wordbank.models.transaction import TokenTransactionCreate, TokenTransactionRead, TransactionType
from wordbank.repos.balance import TokenBalanceRepository
from wordbank.repos.transaction import TokenTransactionRepository
from wordbank.schemas.ledger import DailyQuotaInfo, Page
from wordbank.utils.dates import Clock, ledger_clock

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def validate_paging(page: int, limit: int) -> int:
    """Returns the row offset for ``page``."""
    if page < 1:
        raise ErrCode.INVALID_PARAMETER.with_messages(f"Page must be >= 1, got {page}")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ErrCode.INVALID_PARAMETER.with_messages(f"Limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}")
    return (page - 1) * limit


class TokenBalanceService:
    """Core business logic layer for balances and credit top-ups"""

    def __init__(self, db: AsyncSession, clock: Clock = ledger_clock):
        self.db = db
        self.clock = clock
        self.repo = TokenBalanceRepository(db)
        self.transactions = TokenTransactionRepository(db)

    def _new_balance(self, user_id: str) -> UserTokenBalanceCreate:
        return UserTokenBalanceCreate(
            user_id=user_id,
            daily_free_quota=configs.Ledger.DefaultDailyFreeQuota,
            quota_reset_date=self.clock(),
        )

    async def _lock_balance(self, user_id: str) -> UserTokenBalance:
        return await self.repo.get_or_create_balance_for_update(
            self._new_balance(user_id), configs.Ledger.LockTimeoutMs
        )

    async def _credit(
        self,
        balance: UserTokenBalance,
        amount: int,
        type: TransactionType,
        source: str,
        related_id: str | None = None,
        remark: str | None = None,
        used_reduction: int = 0,
    ) -> UserTokenBalance:
        """Adds ``amount`` to a locked balance and appends the matching ledger entry."""
        balance_before = balance.total_credits
        balance.total_credits += amount
        if type == TransactionType.GIFT:
            balance.gift_credits += amount
        balance.used_credits -= used_reduction
        balance = await self.repo.save_balance(balance)

        await self.transactions.create_transaction(
            TokenTransactionCreate(
                user_id=balance.user_id,
                type=type,
                amount=amount,
                balance_before=balance_before,
                balance_after=balance.total_credits,
                source=source,
                related_id=related_id,
                remark=remark,
            )
        )
        return balance

    async def _needs_welcome_gift(self, balance: UserTokenBalance) -> bool:
        """Only a never-used, never-gifted, empty balance qualifies."""
        if configs.Ledger.WelcomeGiftCredits <= 0:
            return False
        if balance.total_credits > 0 or balance.gift_credits > 0 or balance.used_credits > 0:
            return False
        return not await self.transactions.has_transaction(balance.user_id, TransactionType.GIFT)

    async def _get_or_create(self, user_id: str) -> UserTokenBalance:
        """Read a balance, creating it with the default daily quota. Never grants credits."""
        balance = await self.repo.get_balance(user_id)
        if balance is not None:
            return balance
        async with atomic(self.db):
            balance = await self._lock_balance(user_id)
        return balance

    async def get_balance(self, user_id: str) -> UserTokenBalance:
        """
        Get a user's balance, creating and seeding it on first touch.

        A new balance starts with the default daily free quota. A balance that
        is empty, has never consumed anything and has never received any gift
        gets the welcome gift now, recorded as a ``gift`` ledger entry.

        Args:
            user_id: User ID

        Returns:
            The user's balance
        """
        balance = await self.repo.get_balance(user_id)
        if balance is not None and not await self._needs_welcome_gift(balance):
            return balance

        async with atomic(self.db):
            balance = await self._lock_balance(user_id)
            if await self._needs_welcome_gift(balance):
                balance = await self._credit(
                    balance,
                    configs.Ledger.WelcomeGiftCredits,
                    TransactionType.GIFT,
                    configs.Ledger.WelcomeGiftSource,
                    remark="Welcome gift",
                )
                logger.info(f"Granted welcome gift of {configs.Ledger.WelcomeGiftCredits} to user {user_id}")
        return balance

    async def get_daily_quota(self, user_id: str) -> DailyQuotaInfo:
        """Today's daily free quota usage; a counter from an earlier day reads as unused."""
        balance = await self._get_or_create(user_id)
        today = self.clock()
        used = balance.daily_used_quota
        if balance.quota_reset_date is None or balance.quota_reset_date < today:
            used = 0
        return DailyQuotaInfo(
            daily_free_quota=balance.daily_free_quota,
            daily_used_quota=used,
            remaining=max(0, balance.daily_free_quota - used),
            quota_reset_date=balance.quota_reset_date,
        )

    async def recharge(
        self,
        user_id: str,
        amount: int,
        is_gift: bool,
        source: str,
        related_id: str | None = None,
        remark: str | None = None,
    ) -> UserTokenBalance:
        """
        Credit purchased or gifted credits to a user.

        Args:
            user_id: User ID
            amount: Credits to add (must be positive)
            is_gift: Whether the credits are gift credits
            source: Origin tag (order, redeem_code, admin, ...)
            related_id: Order or redemption code ID
            remark: Free-text note

        Returns:
            The updated balance

        Raises:
            ErrCode.INVALID_PARAMETER: If amount is not positive
            ErrCode.CONCURRENCY_CONFLICT: If the balance row could not be locked
        """
        if amount <= 0:
            raise ErrCode.INVALID_PARAMETER.with_messages("Amount must be positive")

        type = TransactionType.GIFT if is_gift else TransactionType.RECHARGE
        async with atomic(self.db):
            balance = await self._lock_balance(user_id)
            balance = await self._credit(balance, amount, type, source, related_id, remark)

        logger.info(
            f"Recharged {amount} ({type}) to user {user_id}, source={source}, "
            f"new total: {balance.total_credits} (gift={balance.gift_credits})"
        )
        return balance

    async def refund(
        self,
        user_id: str,
        amount: int,
        source: str,
        related_id: str | None = None,
        remark: str | None = None,
    ) -> UserTokenBalance:
        """
        Return credits to a user's paid balance.
        The lifetime used counter shrinks by the same amount but never below zero.

        Raises:
            ErrCode.INVALID_PARAMETER: If amount is not positive
        """
        if amount <= 0:
            raise ErrCode.INVALID_PARAMETER.with_messages("Amount must be positive")

        async with atomic(self.db):
            balance = await self._lock_balance(user_id)
            balance = await self._credit(
                balance,
                amount,
                TransactionType.REFUND,
                source,
                related_id,
                remark,
                used_reduction=min(balance.used_credits, amount),
            )

        logger.info(f"Refunded {amount} to user {user_id}, source={source}, new total: {balance.total_credits}")
        return balance

    async def list_transactions(
        self,
        user_id: str,
        type: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[TokenTransactionRead]:
        offset = validate_paging(page, limit)
        rows = await self.transactions.list_transactions(user_id, type=type, limit=limit, offset=offset)
        total = await self.transactions.count_transactions(user_id, type=type)
        return Page[TokenTransactionRead](
            items=[TokenTransactionRead.model_validate(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )

    async def set_daily_quota(self, user_id: str, quota: int) -> UserTokenBalance:
        """
        Admin: change a user's daily free quota.
        Today's usage is capped at the new quota.
        """
        if quota < 0:
            raise ErrCode.INVALID_PARAMETER.with_messages("Daily quota must not be negative")

        async with atomic(self.db):
            balance = await self._lock_balance(user_id)
            balance.daily_free_quota = quota
            balance.daily_used_quota = min(balance.daily_used_quota, quota)
            balance = await self.repo.save_balance(balance)

        logger.info(f"Set daily free quota of user {user_id} to {quota}")
        return balance

    async def reset_daily_quota(self, user_id: str) -> UserTokenBalance:
        """
        Admin: zero one user's daily usage now.

        Raises:
            ErrCode.BALANCE_NOT_FOUND: If the user has no balance
        """
        async with atomic(self.db):
            balance = await self.repo.get_balance_for_update(user_id, configs.Ledger.LockTimeoutMs)
            if balance is None:
                raise ErrCode.BALANCE_NOT_FOUND.with_messages(f"No balance for user '{user_id}'")
            balance.daily_used_quota = 0
            balance.quota_reset_date = self.clock()
            balance = await self.repo.save_balance(balance)

        logger.info(f"Reset daily quota for user {user_id}")
        return balance
