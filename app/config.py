"""Application settings loaded from environment variables."""

from __future__ import annotations

from decimal import Decimal

from pydantic_settings import BaseSettings


def _parse_int_list(raw: str) -> list[int]:
    return [int(part) for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # App
    app_name: str = "Notemarket API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"
    enable_scheduler: bool = True

    # Scheduling
    timezone: str = "UTC"

    # Performance tuning
    auth_token_cache_ttl_seconds: int = 15
    auth_token_cache_max_entries: int = 1024
    slow_request_log_threshold_ms: int = 0
    slow_query_log_threshold_ms: int = 0
    user_cache_ttl_seconds: int = 30
    data_cache_max_entries: int = 5000

    # Economy
    points_per_dollar: int = 100
    points_discount: Decimal = Decimal("0.05")
    donation_platform_fee: Decimal = Decimal("0.30")
    donation_amounts: str = "25,50,100,200"
    point_packages: str = "10,25,50,100"

    # Storage
    note_files_bucket: str = "note-images"
    signed_url_ttl_seconds: int = 3600

    # Rate limits (requests per window, per client address)
    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = 60
    rate_limit_purchase: int = 10
    rate_limit_donate: int = 10
    rate_limit_redeem_promo: int = 5
    rate_limit_buy_points: int = 5

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def donation_amounts_list(self) -> list[int]:
        """Allowed donation presets, in points."""
        return _parse_int_list(self.donation_amounts)

    @property
    def point_packages_list(self) -> list[int]:
        """Purchasable point packs, in whole dollars."""
        return _parse_int_list(self.point_packages)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
