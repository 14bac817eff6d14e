from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .database import DatabaseConfig
from .ledger import LedgerConfig
from .redis import RedisConfig


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WORDBANK_",
        env_nested_delimiter="_",
        case_sensitive=False,
        extra="ignore",
    )

    Title: str = Field(default="wordbank", description="Service name")
    Env: str = Field(default="dev", description="Deployment environment (dev, test, prod)")
    LogLevel: str = Field(default="INFO", description="Root log level")

    Database: DatabaseConfig = Field(default_factory=lambda: DatabaseConfig(), description="Database configuration")
    Redis: RedisConfig = Field(default_factory=lambda: RedisConfig(), description="Redis configuration")
    Ledger: LedgerConfig = Field(default_factory=lambda: LedgerConfig(), description="Credit ledger configuration")


configs = AppConfig()

__all__ = ["AppConfig", "configs"]
