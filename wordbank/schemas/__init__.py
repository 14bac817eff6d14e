from .ledger import (
    ConsumptionParams,
    ConsumptionRecordFilters,
    ConsumptionResult,
    ConsumptionStatistics,
    DailyQuotaInfo,
    Page,
    SourceStatistics,
)
from .pricing import MembershipBenefits, ModelPricing

__all__ = [
    "ConsumptionParams",
    "ConsumptionRecordFilters",
    "ConsumptionResult",
    "ConsumptionStatistics",
    "DailyQuotaInfo",
    "MembershipBenefits",
    "ModelPricing",
    "Page",
    "SourceStatistics",
]
