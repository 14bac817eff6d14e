"""Lookups the ledger consumes but does not own.

Production wiring plugs in the platform's model catalog and membership
service; the static implementations back tests and single-process setups.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from wordbank.schemas.pricing import MembershipBenefits, ModelPricing


class ModelPricingProvider(Protocol):
    async def get_model(self, model_id: str) -> ModelPricing | None: ...


class MembershipProvider(Protocol):
    async def get_active_benefits(self, user_id: str) -> MembershipBenefits | None: ...


class StaticModelCatalog:
    """In-memory model pricing keyed by model ID."""

    def __init__(self, models: Iterable[ModelPricing] = ()):
        self._models = {model.id: model for model in models}

    def add(self, model: ModelPricing) -> None:
        self._models[model.id] = model

    async def get_model(self, model_id: str) -> ModelPricing | None:
        return self._models.get(model_id)


@dataclass
class Membership:
    user_id: str
    benefits: MembershipBenefits
    start_date: datetime | None = None
    end_date: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        if self.start_date is not None and now < self.start_date:
            return False
        if self.end_date is not None and now > self.end_date:
            return False
        return True


class StaticMembershipDirectory:
    """In-memory memberships; only one inside its [start, end] window counts."""

    def __init__(
        self,
        memberships: Iterable[Membership] = (),
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._memberships: dict[str, list[Membership]] = {}
        self._now = now
        for membership in memberships:
            self.add(membership)

    def add(self, membership: Membership) -> None:
        self._memberships.setdefault(membership.user_id, []).append(membership)

    async def get_active_benefits(self, user_id: str) -> MembershipBenefits | None:
        now = self._now()
        for membership in self._memberships.get(user_id, []):
            if membership.is_active(now):
                return membership.benefits
        return None


class NoMembership:
    """Membership lookup for deployments without memberships."""

    async def get_active_benefits(self, user_id: str) -> MembershipBenefits | None:
        return None
