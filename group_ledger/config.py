from __future__ import annotations

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
    )

    database_url: str = Field("sqlite+aiosqlite:///./group_ledger.db", alias="DATABASE_URL")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")

    # Absolute tolerance when checking that exact-split shares add up to the amount.
    share_tolerance: Decimal = Field(Decimal("0.01"), alias="SHARE_TOLERANCE", gt=0)
    # Balances within this distance of zero are treated as settled.
    settle_epsilon: Decimal = Field(Decimal("0.000001"), alias="SETTLE_EPSILON", gt=0)
    # Net balances below this magnitude are clamped to exactly zero.
    balance_noise: Decimal = Field(Decimal("0.000000001"), alias="BALANCE_NOISE", gt=0)
    # Smallest currency unit used when dividing equal splits.
    money_quantum: Decimal = Field(Decimal("0.01"), alias="MONEY_QUANTUM", gt=0)


settings = Settings()
