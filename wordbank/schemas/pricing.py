"""Schemas for the collaborators the ledger consumes but does not own."""

from pydantic import BaseModel, Field


class ModelPricing(BaseModel):
    """Price ratios of one AI model, as returned by a model-pricing lookup."""

    id: str = Field(description="Model ID")
    display_name: str = Field(description="Human-readable model name, copied into ledger entries")
    input_ratio: float = Field(default=0.0, description="Input characters per credit (0 = input is free)")
    output_ratio: float = Field(default=0.0, description="Output characters per credit (0 = output is free)")
    min_input_chars: int = Field(default=0, description="Inputs shorter than this are not charged")
    is_free: bool = Field(default=False, description="Bypass charging entirely")

    @property
    def is_zero_rated(self) -> bool:
        return self.input_ratio <= 0 and self.output_ratio <= 0


class MembershipBenefits(BaseModel):
    """Benefits of a user's currently active membership plan."""

    plan_name: str | None = Field(default=None, description="Plan name, for logging only")
    output_free: bool = Field(default=False, description="Output is never charged")
    free_input_chars_per_request: int = Field(default=0, description="Input characters exempt per request")
    daily_token_limit: int | None = Field(default=None, description="Plan daily limit, informational")
