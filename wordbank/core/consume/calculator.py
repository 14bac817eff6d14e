"""Character-to-credit cost calculation.

Costs are whole credits, always rounded up. Membership benefits are applied
after the raw cost: first the free-output benefit, then the per-request
free input allowance.
"""

import math
from dataclasses import dataclass

from wordbank.schemas.pricing import MembershipBenefits, ModelPricing


@dataclass(frozen=True)
class CostCalculation:
    input_cost: int = 0
    output_cost: int = 0
    total_cost: int = 0
    member_free_input: int = 0
    benefit_applied: bool = False


def chars_to_credits(chars: int, ratio: float) -> int:
    """Credits for ``chars`` characters at ``ratio`` characters per credit."""
    if chars <= 0 or ratio <= 0:
        return 0
    return math.ceil(chars / ratio)


def calculate_cost(
    model: ModelPricing,
    input_chars: int,
    output_chars: int,
    benefits: MembershipBenefits | None = None,
) -> CostCalculation:
    """
    Compute what one request costs.

    Args:
        model: Pricing of the model used
        input_chars: Input character count
        output_chars: Output character count
        benefits: Active membership benefits, if any

    Returns:
        CostCalculation with the post-benefit breakdown
    """
    if model.is_free or model.is_zero_rated:
        return CostCalculation()

    input_cost = 0
    if input_chars >= model.min_input_chars:
        input_cost = chars_to_credits(input_chars, model.input_ratio)
    output_cost = chars_to_credits(output_chars, model.output_ratio)

    member_free_input = 0
    benefit_applied = False
    if benefits is not None:
        if benefits.output_free:
            output_cost = 0
            benefit_applied = True

        allowance = benefits.free_input_chars_per_request
        if allowance > 0 and input_chars > 0:
            member_free_input = min(input_chars, allowance)
            # a ratio-0 input side is already free, so only the exemption is recorded
            input_cost = max(0, input_cost - chars_to_credits(member_free_input, model.input_ratio))
            benefit_applied = True

    return CostCalculation(
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=input_cost + output_cost,
        member_free_input=member_free_input,
        benefit_applied=benefit_applied,
    )
