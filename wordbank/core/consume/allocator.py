"""Tiered allocation of a cost across daily free, gift and paid credits.

Priority is fixed: daily free quota first, then gift credits, then paid
credits. ``allocate`` either covers the whole cost or raises; it never
returns a partial allocation.
"""

from dataclasses import dataclass, replace

from wordbank.common.code import ErrCode, ErrCodeError


@dataclass(frozen=True)
class BalanceSnapshot:
    """The mutable fields of a balance row, as an immutable value."""

    total_credits: int = 0
    used_credits: int = 0
    gift_credits: int = 0
    frozen_credits: int = 0
    daily_free_quota: int = 0
    daily_used_quota: int = 0

    @property
    def available_daily_free(self) -> int:
        return max(0, self.daily_free_quota - self.daily_used_quota)

    @property
    def available_gift(self) -> int:
        return max(0, self.gift_credits)

    @property
    def available_paid(self) -> int:
        return max(0, self.total_credits - self.gift_credits - self.frozen_credits)

    @property
    def available_total(self) -> int:
        return self.available_daily_free + self.available_gift + self.available_paid


@dataclass(frozen=True)
class Allocation:
    used_daily_free: int = 0
    used_gift: int = 0
    used_paid: int = 0

    @property
    def total(self) -> int:
        return self.used_daily_free + self.used_gift + self.used_paid

    @property
    def owned(self) -> int:
        """Part drawn from total_credits (gift + paid)."""
        return self.used_gift + self.used_paid


def insufficient_balance(required: int, snapshot: BalanceSnapshot) -> ErrCodeError:
    return ErrCode.INSUFFICIENT_BALANCE.with_details(
        f"Insufficient balance: required {required}, available {snapshot.available_total}",
        required=required,
        available=snapshot.available_total,
        available_daily_free=snapshot.available_daily_free,
        available_gift=snapshot.available_gift,
        available_paid=snapshot.available_paid,
    )


def allocate(required_cost: int, snapshot: BalanceSnapshot) -> Allocation:
    """
    Split ``required_cost`` across the three tiers.

    Raises:
        ErrCodeError: INSUFFICIENT_BALANCE when the tiers together fall short,
            INVALID_PARAMETER for a negative cost
    """
    if required_cost < 0:
        raise ErrCode.INVALID_PARAMETER.with_messages(f"Cost must not be negative, got {required_cost}")
    if snapshot.available_total < required_cost:
        raise insufficient_balance(required_cost, snapshot)

    remaining = required_cost
    used_daily_free = min(snapshot.available_daily_free, remaining)
    remaining -= used_daily_free
    used_gift = min(snapshot.available_gift, remaining)
    remaining -= used_gift
    used_paid = min(snapshot.available_paid, remaining)
    remaining -= used_paid
    assert remaining == 0

    return Allocation(used_daily_free=used_daily_free, used_gift=used_gift, used_paid=used_paid)


def apply_allocation(snapshot: BalanceSnapshot, allocation: Allocation) -> BalanceSnapshot:
    return replace(
        snapshot,
        daily_used_quota=snapshot.daily_used_quota + allocation.used_daily_free,
        gift_credits=snapshot.gift_credits - allocation.used_gift,
        total_credits=snapshot.total_credits - allocation.owned,
        used_credits=snapshot.used_credits + allocation.total,
    )
