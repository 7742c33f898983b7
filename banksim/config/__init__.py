"""
Application Settings
Load from environment variables
"""

from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Database
    # ======================
    DATABASE_URL: str = "sqlite+aiosqlite:///./banksim.db"
    AUTO_CREATE_TABLES: bool = True

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CONFIG_DIR: Path = Path(__file__).resolve().parents[2] / "config"

    # ======================
    # Simulation clock
    # ======================
    REAL_MS_PER_GAME_DAY: int = 60_000
    DAYS_PER_YEAR: int = 12
    DAYS_PER_MONTH: int = 30
    SLOT_IDS: List[int] = [1, 2, 3]

    # ======================
    # Money
    # ======================
    STARTING_CASH: Decimal = Decimal("100000.00")
    ANNUAL_GROWTH_RATE: Decimal = Decimal("0.07")
    ANNUAL_DIVIDEND_RATE: Decimal = Decimal("0.02")
    DAILY_WITHDRAWAL_LIMIT: Decimal = Decimal("500.00")
    REPAYMENT_PERIOD_DAYS: int = 30

    # ======================
    # Spending
    # ======================
    SPENDING_SEED: Optional[int] = None

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
