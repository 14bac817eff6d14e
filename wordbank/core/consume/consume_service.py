"""Consumption orchestrator.

``calculate_and_consume`` prices one AI request, locks the caller's balance
row, allocates the cost across daily free, gift and paid credits and
writes the balance, the consumption record and the ledger entry in a single
transaction. Nothing is persisted unless all of it is.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from sqlmodel.ext.asyncio.session import AsyncSession

from wordbank.common.code import ErrCode, ErrCodeError
from wordbank.configs import configs
from wordbank.core.balance import validate_paging
from wordbank.core.consume.allocator import Allocation, BalanceSnapshot, allocate, apply_allocation
from wordbank.core.consume.calculator import CostCalculation, calculate_cost
from wordbank.core.consume.providers import MembershipProvider, ModelPricingProvider, NoMembership
from wordbank.infra.database import atomic
from wordbank.models.balance import UserTokenBalance
from wordbank.models.consume import TokenConsumptionRecordCreate, TokenConsumptionRecordRead
from wordbank.models.transaction import TokenTransactionCreate, TransactionType
from wordbank.repos.balance import TokenBalanceRepository
from wordbank.repos.consume import TokenConsumptionRepository
from wordbank.repos.transaction import TokenTransactionRepository
from wordbank.schemas.ledger import (
    ConsumptionParams,
    ConsumptionRecordFilters,
    ConsumptionResult,
    ConsumptionStatistics,
    Page,
)
from wordbank.schemas.pricing import ModelPricing
from wordbank.utils.dates import Clock, ledger_clock

logger = logging.getLogger(__name__)


def snapshot_of(balance: UserTokenBalance) -> BalanceSnapshot:
    return BalanceSnapshot(
        total_credits=balance.total_credits,
        used_credits=balance.used_credits,
        gift_credits=balance.gift_credits,
        frozen_credits=balance.frozen_credits,
        daily_free_quota=balance.daily_free_quota,
        daily_used_quota=balance.daily_used_quota,
    )


def consumption_remark(params: ConsumptionParams, allocation: Allocation) -> str:
    parts = []
    if allocation.used_daily_free > 0:
        parts.append(f"daily free {allocation.used_daily_free}")
    if allocation.used_gift > 0:
        parts.append(f"gift {allocation.used_gift}")
    if allocation.used_paid > 0:
        parts.append(f"paid {allocation.used_paid}")
    return f"AI usage: input {params.input_chars} chars, output {params.output_chars} chars ({' + '.join(parts)})"


class TokenConsumptionService:
    """Charges AI usage against word-credit balances"""

    def __init__(
        self,
        db: AsyncSession,
        models: ModelPricingProvider,
        memberships: MembershipProvider | None = None,
        clock: Clock = ledger_clock,
    ):
        self.db = db
        self.models = models
        self.memberships = memberships or NoMembership()
        self.clock = clock
        self.balances = TokenBalanceRepository(db)
        self.records = TokenConsumptionRepository(db)
        self.transactions = TokenTransactionRepository(db)

    async def _get_model(self, model_id: str) -> ModelPricing:
        model = await self.models.get_model(model_id)
        if model is None:
            raise ErrCode.MODEL_NOT_FOUND.with_messages(f"Model '{model_id}' not found")
        return model

    def _normalize_daily_quota(self, balance: UserTokenBalance) -> None:
        """Zero a daily counter left over from an earlier day."""
        today = self.clock()
        if balance.quota_reset_date is not None and balance.quota_reset_date >= today:
            return
        if balance.daily_used_quota:
            logger.debug(
                f"Stale daily quota for user {balance.user_id} "
                f"(reset_date={balance.quota_reset_date}), zeroing {balance.daily_used_quota}"
            )
        balance.daily_used_quota = 0
        balance.quota_reset_date = today

    async def calculate_and_consume(self, params: ConsumptionParams) -> ConsumptionResult:
        """
        Charge one AI request.

        Args:
            params: Who is charged, for which model, and how many characters

        Returns:
            ConsumptionResult with the cost and its tier breakdown

        Raises:
            ErrCode.INVALID_PARAMETER: If a character count is negative
            ErrCode.MODEL_NOT_FOUND: If the model has no pricing
            ErrCode.BALANCE_REQUIRED: If a zero-rated model is used without a positive balance
            ErrCode.BALANCE_NOT_FOUND: If the user has no balance row
            ErrCode.INSUFFICIENT_BALANCE: If the tiers together cannot cover the cost
            ErrCode.CONCURRENCY_CONFLICT: If the balance row could not be locked
        """
        if params.input_chars < 0 or params.output_chars < 0:
            raise ErrCode.INVALID_PARAMETER.with_messages("Character counts must not be negative")

        model = await self._get_model(params.model_id)

        if model.is_free:
            logger.debug(f"Model {model.id} is free, skipping charge for user {params.user_id}")
            return ConsumptionResult(success=True)

        if model.is_zero_rated:
            balance = await self.balances.get_balance(params.user_id)
            if balance is None or balance.total_credits <= 0:
                raise ErrCode.BALANCE_REQUIRED.with_messages("A positive balance is required to use this model")
            return ConsumptionResult(
                success=True,
                remaining_balance=max(0, balance.total_credits - balance.frozen_credits),
                remaining_daily_free=balance.available_daily_free,
            )

        benefits = await self.memberships.get_active_benefits(params.user_id)
        cost: CostCalculation = calculate_cost(model, params.input_chars, params.output_chars, benefits)
        logger.debug(
            f"Cost for user {params.user_id} on {model.id}: input={cost.input_cost}, "
            f"output={cost.output_cost}, total={cost.total_cost}, member={benefits is not None}"
        )

        try:
            async with atomic(self.db):
                balance = await self.balances.get_balance_for_update(params.user_id, configs.Ledger.LockTimeoutMs)
                if balance is None:
                    raise ErrCode.BALANCE_NOT_FOUND.with_messages(f"No balance for user '{params.user_id}'")

                self._normalize_daily_quota(balance)
                before = snapshot_of(balance)
                allocation = allocate(cost.total_cost, before)
                after = apply_allocation(before, allocation)

                balance.total_credits = after.total_credits
                balance.used_credits = after.used_credits
                balance.gift_credits = after.gift_credits
                balance.daily_used_quota = after.daily_used_quota
                balance.last_consumed_at = datetime.now(timezone.utc)
                balance = await self.balances.save_balance(balance)

                await self.records.create_record(
                    TokenConsumptionRecordCreate(
                        user_id=params.user_id,
                        model_id=model.id,
                        input_chars=params.input_chars,
                        output_chars=params.output_chars,
                        input_ratio=model.input_ratio,
                        output_ratio=model.output_ratio,
                        calculated_input_cost=cost.input_cost,
                        calculated_output_cost=cost.output_cost,
                        total_cost=cost.total_cost,
                        used_daily_free=allocation.used_daily_free,
                        used_paid=allocation.owned,
                        is_member=benefits is not None,
                        member_free_input=cost.member_free_input,
                        source=params.source,
                        related_id=params.related_id,
                    )
                )

                if allocation.total > 0:
                    await self.transactions.create_transaction(
                        TokenTransactionCreate(
                            user_id=params.user_id,
                            type=TransactionType.CONSUME,
                            amount=after.total_credits - before.total_credits,
                            balance_before=before.total_credits,
                            balance_after=after.total_credits,
                            source=params.source,
                            related_id=params.related_id,
                            model_name=model.display_name,
                            remark=consumption_remark(params, allocation),
                        )
                    )
        except ErrCodeError as e:
            if e.code is ErrCode.INSUFFICIENT_BALANCE:
                logger.warning(f"Insufficient balance for user {params.user_id}: {e.details}")
            raise

        logger.info(
            f"Consumed {cost.total_cost} for user {params.user_id} on {model.id}: "
            f"daily_free={allocation.used_daily_free}, gift={allocation.used_gift}, paid={allocation.used_paid}"
        )
        return ConsumptionResult(
            success=True,
            total_cost=cost.total_cost,
            input_cost=cost.input_cost,
            output_cost=cost.output_cost,
            used_daily_free=allocation.used_daily_free,
            used_paid=allocation.used_paid,
            member_benefit_applied=benefits is not None and cost.benefit_applied,
            remaining_balance=max(0, balance.total_credits - balance.frozen_credits),
            remaining_daily_free=balance.available_daily_free,
        )

    async def estimate_cost(self, model_id: str, input_chars: int, output_chars: int, user_id: str | None = None) -> int:
        """What a request would cost, membership benefits included, without charging."""
        model = await self._get_model(model_id)
        benefits = await self.memberships.get_active_benefits(user_id) if user_id else None
        return calculate_cost(model, input_chars, output_chars, benefits).total_cost

    async def check_balance(self, user_id: str, estimated_cost: int) -> bool:
        """Whether the user could currently afford ``estimated_cost``. Takes no lock."""
        balance = await self.balances.get_balance(user_id)
        if balance is None:
            return False
        snapshot = snapshot_of(balance)
        if balance.quota_reset_date is None or balance.quota_reset_date < self.clock():
            snapshot = replace(snapshot, daily_used_quota=0)
        return snapshot.available_total >= estimated_cost

    async def list_consumption_records(
        self,
        user_id: str,
        filters: ConsumptionRecordFilters | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[TokenConsumptionRecordRead]:
        offset = validate_paging(page, limit)
        rows = await self.records.list_records(user_id, filters, limit=limit, offset=offset)
        total = await self.records.count_records(user_id, filters)
        return Page[TokenConsumptionRecordRead](
            items=[TokenConsumptionRecordRead.model_validate(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )

    async def get_consumption_statistics(
        self,
        user_id: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> ConsumptionStatistics:
        filters = ConsumptionRecordFilters(start_date=start_date, end_date=end_date)
        return await self.records.get_statistics(user_id, filters)
