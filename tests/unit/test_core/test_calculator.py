"""Unit tests for wordbank.core.consume.calculator."""

from wordbank.core.consume.calculator import CostCalculation, calculate_cost, chars_to_credits
from wordbank.schemas.pricing import MembershipBenefits, ModelPricing


def make_model(**overrides: object) -> ModelPricing:
    data: dict[str, object] = {
        "id": "m1",
        "display_name": "Model One",
        "input_ratio": 10.0,
        "output_ratio": 5.0,
        "min_input_chars": 0,
        "is_free": False,
    }
    data.update(overrides)
    return ModelPricing(**data)


class TestCharsToCredits:
    def test_rounds_up(self) -> None:
        assert chars_to_credits(11, 10.0) == 2

    def test_exact(self) -> None:
        assert chars_to_credits(20, 10.0) == 2

    def test_fractional_ratio(self) -> None:
        assert chars_to_credits(3, 1.5) == 2

    def test_zero_ratio_is_free(self) -> None:
        assert chars_to_credits(100, 0) == 0

    def test_zero_chars(self) -> None:
        assert chars_to_credits(0, 10.0) == 0


class TestCalculateCost:
    def test_basic(self) -> None:
        cost = calculate_cost(make_model(), 1000, 500)
        assert cost == CostCalculation(input_cost=100, output_cost=100, total_cost=200)

    def test_ceiling_rounding(self) -> None:
        cost = calculate_cost(make_model(), 1, 1)
        assert cost.input_cost == 1
        assert cost.output_cost == 1

    def test_input_below_min_chars_not_charged(self) -> None:
        cost = calculate_cost(make_model(min_input_chars=100), 99, 50)
        assert cost.input_cost == 0
        assert cost.output_cost == 10

    def test_input_at_min_chars_charged(self) -> None:
        cost = calculate_cost(make_model(min_input_chars=100), 100, 0)
        assert cost.input_cost == 10

    def test_free_model(self) -> None:
        assert calculate_cost(make_model(is_free=True), 1000, 1000) == CostCalculation()

    def test_zero_rated_model(self) -> None:
        assert calculate_cost(make_model(input_ratio=0, output_ratio=0), 1000, 1000).total_cost == 0

    def test_zero_input_ratio_only(self) -> None:
        cost = calculate_cost(make_model(input_ratio=0), 1000, 50)
        assert cost.input_cost == 0
        assert cost.output_cost == 10


class TestMembershipBenefits:
    def test_output_free(self) -> None:
        cost = calculate_cost(make_model(), 1000, 500, MembershipBenefits(output_free=True))
        assert cost.output_cost == 0
        assert cost.input_cost == 100
        assert cost.total_cost == 100
        assert cost.benefit_applied is True

    def test_free_input_allowance(self) -> None:
        benefits = MembershipBenefits(free_input_chars_per_request=300)
        cost = calculate_cost(make_model(), 1000, 0, benefits)
        assert cost.input_cost == 70
        assert cost.member_free_input == 300
        assert cost.benefit_applied is True

    def test_free_input_allowance_exceeds_input(self) -> None:
        benefits = MembershipBenefits(free_input_chars_per_request=5000)
        cost = calculate_cost(make_model(), 1000, 0, benefits)
        assert cost.input_cost == 0
        assert cost.member_free_input == 1000

    def test_free_input_never_negative(self) -> None:
        # Below min_input_chars input is already free; the allowance must not push it negative
        benefits = MembershipBenefits(free_input_chars_per_request=50)
        cost = calculate_cost(make_model(min_input_chars=100), 50, 0, benefits)
        assert cost.input_cost == 0

    def test_free_input_recorded_without_input_ratio(self) -> None:
        benefits = MembershipBenefits(free_input_chars_per_request=50)
        cost = calculate_cost(make_model(input_ratio=0), 100, 10, benefits)
        assert cost.input_cost == 0
        assert cost.member_free_input == 50
        assert cost.benefit_applied is True
        assert cost.total_cost == 2

    def test_both_benefits(self) -> None:
        benefits = MembershipBenefits(output_free=True, free_input_chars_per_request=200)
        cost = calculate_cost(make_model(), 1000, 500, benefits)
        assert cost.total_cost == 80

    def test_plan_without_benefits(self) -> None:
        cost = calculate_cost(make_model(), 1000, 500, MembershipBenefits())
        assert cost.total_cost == 200
        assert cost.benefit_applied is False
