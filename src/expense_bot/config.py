"""Application configuration via pydantic-settings."""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # LINE
    line_channel_secret: str = ""
    line_channel_access_token: str = ""
    line_group_id: str = ""  # Target of scheduled stock alerts

    # Supabase (PostgREST)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    expenses_table: str = "expenses"
    messages_table: str = "line_messages"
    inventory_table: str = "ingredients"

    # Commands
    wake_word: str = "พอส"

    # Expense extraction and duplicate detection
    max_amount: Decimal = Decimal("1000000")
    amount_tolerance: Decimal = Decimal("10")
    similarity_threshold: float = 0.7
    duplicate_max_days_apart: int = 3
    duplicate_lookback_days: int = 30
    duplicate_query_limit: int = 50

    # Outbound call budgets (seconds)
    store_timeout_seconds: float = 5.0
    reply_timeout_seconds: float = 5.0

    # Scheduler
    scheduler_secret: str = ""

    # App
    timezone: str = "Asia/Bangkok"
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
