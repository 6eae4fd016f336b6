"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # API SECURITY
    # ===================
    cron_secret: Optional[str] = Field(
        None,
        description="Bearer token required by the scheduled sync endpoints"
    )

    # ===================
    # CARRIERS
    # ===================
    enabled_carriers: list[str] = Field(
        default=["USPS"],
        description="Carriers whose resources are shown and synced"
    )
    carrier_catalog_urls: dict[str, str] = Field(
        default={
            "USPS": "https://apis.usps.com/shipping-catalog/v1",
            "UPS": "https://onlinetools.ups.com/api/shipping-catalog/v1",
        },
        description="Catalog endpoint base URL per carrier"
    )
    carrier_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Timeout for a single carrier catalog request"
    )

    # Credentials used by the scheduled sync (interactive syncs send their own)
    usps_consumer_key: Optional[str] = Field(None, description="USPS OAuth consumer key")
    usps_consumer_secret: Optional[str] = Field(None, description="USPS OAuth consumer secret")
    ups_account_number: Optional[str] = Field(None, description="UPS account number")
    ups_access_token: Optional[str] = Field(None, description="UPS OAuth access token")

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def cron_credentials(self) -> dict[str, dict[str, str]]:
        """Carrier credentials configured for the scheduled sync."""
        credentials: dict[str, dict[str, str]] = {}
        if self.usps_consumer_key and self.usps_consumer_secret:
            credentials["USPS"] = {
                "consumer_key": self.usps_consumer_key,
                "consumer_secret": self.usps_consumer_secret,
            }
        if self.ups_account_number and self.ups_access_token:
            credentials["UPS"] = {
                "account_number": self.ups_account_number,
                "access_token": self.ups_access_token,
            }
        return credentials


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
