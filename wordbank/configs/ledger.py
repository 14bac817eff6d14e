"""Word-credit ledger configuration.

Env-var examples (WORDBANK_ prefix, _ nesting):
  WORDBANK_LEDGER_DefaultDailyFreeQuota=10000
  WORDBANK_LEDGER_WelcomeGiftCredits=0
  WORDBANK_LEDGER_Timezone=Asia/Shanghai
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class LedgerConfig(BaseSettings):
    DefaultDailyFreeQuota: int = Field(
        default=10000,
        description="Daily free quota assigned to a balance that has none",
    )
    WelcomeGiftCredits: int = Field(
        default=500000,
        description="One-time gift credited when a balance is first seen empty (0 disables)",
    )
    WelcomeGiftSource: str = Field(
        default="auto_init",
        description="Ledger source tag used for the welcome gift",
    )
    Timezone: str = Field(
        default="Asia/Shanghai",
        description="IANA timezone defining the ledger's calendar day",
    )
    QuotaResetHour: int = Field(default=0, description="Local hour of the daily quota reset")
    QuotaResetMinute: int = Field(default=0, description="Local minute of the daily quota reset")
    LockTimeoutMs: int = Field(
        default=5000,
        description="Max wait for a balance row lock on PostgreSQL (0 = wait forever)",
    )
