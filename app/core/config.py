# app/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from decimal import Decimal
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./hostel_store.db"

    # No authentication yet: every sale and stock change is attributed
    # to this principal
    SYSTEM_PRINCIPAL_ID: str = "000000000000000000000001"

    # Settlement
    SETTLEMENT_MAX_ATTEMPTS: int = 3
    SETTLEMENT_PRICE_SOURCE: Literal["cart", "catalog"] = "cart"

    # Balances
    MAX_DEDUCTION: Decimal = Decimal("5000.00")

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    SALES_RATE_LIMIT: str = "30/minute"

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]



    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
