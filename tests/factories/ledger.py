from datetime import date

from polyfactory import Use
from polyfactory.factories.pydantic_factory import ModelFactory

from wordbank.models.balance import UserTokenBalanceCreate
from wordbank.models.consume import TokenConsumptionRecordCreate
from wordbank.models.transaction import TokenTransactionCreate
from wordbank.schemas.ledger import ConsumptionParams
from wordbank.schemas.pricing import ModelPricing

TODAY = date(2026, 10, 18)


class UserTokenBalanceCreateFactory(ModelFactory[UserTokenBalanceCreate]):
    """Factory for UserTokenBalanceCreate schema."""

    __model__ = UserTokenBalanceCreate

    user_id = Use(lambda: "test-user")
    total_credits = Use(lambda: 1000)
    gift_credits = Use(lambda: 200)
    daily_free_quota = Use(lambda: 500)
    quota_reset_date = TODAY


class TokenTransactionCreateFactory(ModelFactory[TokenTransactionCreate]):
    """Factory for TokenTransactionCreate schema."""

    __model__ = TokenTransactionCreate

    user_id = Use(lambda: "test-user")
    type = "recharge"
    amount = Use(lambda: 100)
    balance_before = Use(lambda: 0)
    balance_after = Use(lambda: 100)
    source = "order"
    related_id = None
    model_name = None
    remark = None


class TokenConsumptionRecordCreateFactory(ModelFactory[TokenConsumptionRecordCreate]):
    """Factory for TokenConsumptionRecordCreate schema."""

    __model__ = TokenConsumptionRecordCreate

    user_id = Use(lambda: "test-user")
    model_id = "model-standard"
    input_chars = Use(lambda: 1000)
    output_chars = Use(lambda: 500)
    input_ratio = 10.0
    output_ratio = 5.0
    calculated_input_cost = Use(lambda: 100)
    calculated_output_cost = Use(lambda: 100)
    total_cost = Use(lambda: 200)
    used_daily_free = Use(lambda: 200)
    used_paid = Use(lambda: 0)
    is_member = False
    member_free_input = 0
    source = "chat"
    related_id = None


class ConsumptionParamsFactory(ModelFactory[ConsumptionParams]):
    """Factory for ConsumptionParams schema."""

    __model__ = ConsumptionParams

    user_id = Use(lambda: "test-user")
    model_id = "model-standard"
    input_chars = Use(lambda: 0)
    output_chars = Use(lambda: 0)
    source = "chat"
    related_id = None


class ModelPricingFactory(ModelFactory[ModelPricing]):
    """Factory for ModelPricing schema. One credit per character by default."""

    __model__ = ModelPricing

    id = "model-standard"
    display_name = "Standard Model"
    input_ratio = 1.0
    output_ratio = 1.0
    min_input_chars = 0
    is_free = False
