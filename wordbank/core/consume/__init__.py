"""Consumption pricing and charging package."""

from wordbank.core.consume.allocator import Allocation, BalanceSnapshot, allocate, apply_allocation
from wordbank.core.consume.calculator import CostCalculation, calculate_cost, chars_to_credits
from wordbank.core.consume.characters import (
    LanguageType,
    count_chars,
    count_message_chars,
    detect_language,
    estimate_tokens,
    token_to_chars,
)
from wordbank.core.consume.consume_service import TokenConsumptionService
from wordbank.core.consume.providers import (
    Membership,
    MembershipProvider,
    ModelPricingProvider,
    NoMembership,
    StaticMembershipDirectory,
    StaticModelCatalog,
)

__all__ = [
    "Allocation",
    "BalanceSnapshot",
    "CostCalculation",
    "LanguageType",
    "Membership",
    "MembershipProvider",
    "ModelPricingProvider",
    "NoMembership",
    "StaticMembershipDirectory",
    "StaticModelCatalog",
    "TokenConsumptionService",
    "allocate",
    "apply_allocation",
    "calculate_cost",
    "chars_to_credits",
    "count_chars",
    "count_message_chars",
    "detect_language",
    "estimate_tokens",
    "token_to_chars",
]
