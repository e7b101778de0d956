# backend/weddinglens/core/config.py
from decimal import Decimal
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="development or production")

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///./weddinglens.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = False

    # Bearer token verification for customer-facing routes
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-not-for-production"),
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Stripe Configuration
    stripe_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe secret key for backend API calls",
    )
    stripe_webhook_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe webhook signing secret (empty disables signature checks)",
    )
    stripe_currency: str = Field(default="inr", description="Settlement currency for payments")
    stripe_timeout_seconds: int = Field(
        default=8, description="Overall timeout for outbound Stripe calls"
    )
    stripe_max_network_retries: int = Field(
        default=1, description="Retries for transient Stripe network failures"
    )

    # Pricing / earnings
    platform_commission_rate: Decimal = Field(
        default=Decimal("0.15"), description="Platform share of each paid booking"
    )
    enforce_server_pricing: bool = Field(
        default=False,
        description="Reject bookings whose total deviates from the catalog quote",
    )

    # Slot locking
    redis_url: str = Field(
        default="", description="Redis URL for cross-process slot locks (empty = in-process)"
    )
    slot_lock_ttl_seconds: int = 30
    slot_lock_wait_seconds: float = 5.0

    # Catalog
    seed_catalog_on_startup: bool = True
    catalog_seed_path: Optional[str] = None

    # Use ConfigDict instead of Config class (Pydantic V2 style)
    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("platform_commission_rate")
    @classmethod
    def _validate_commission_rate(cls, value: Decimal) -> Decimal:
        if value < 0 or value > 1:
            raise ValueError("platform_commission_rate must be between 0 and 1")
        return value

    @field_validator("stripe_currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key.get_secret_value())

    @property
    def webhook_secret(self) -> Optional[str]:
        """Return the signing secret, or None when webhook verification is disabled."""
        secret = self.stripe_webhook_secret.get_secret_value()
        return secret or None

    def get_database_url(self) -> str:
        return self.database_url


settings = Settings()
