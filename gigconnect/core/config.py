"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB (local key-value store)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "gigconnect"

    # PostgreSQL (remote mirror). Empty host disables sync.
    postgres_host: str = ""
    postgres_port: int = 5432
    postgres_user: str = "gigconnect"
    postgres_password: str = "password"
    postgres_db: str = "gigconnect"
    sync_debounce_seconds: float = 1.2

    # Paystack
    paystack_secret_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"
    paystack_timeout_seconds: int = 30

    # Marketplace rules
    platform_fee_rate: float = 0.10
    referral_bonus: float = 5.0
    admin_email: str = ""
    seed_local: bool = False
    require_job_approval: bool = False

    # App
    allowed_origins: str = "*"
    port: int = 4242
    debug: bool = False

    @property
    def remote_sync_enabled(self) -> bool:
        return bool(self.postgres_host)

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
