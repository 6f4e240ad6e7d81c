"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    site_url: str = Field(
        "http://localhost:3000",
        description="Public dashboard URL used for checkout redirects when no Origin header is sent",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on public endpoints",
    )
    rate_limit_backend: str = Field(
        "memory",
        description="Counter store for the rate limiter: memory or redis",
    )
    rate_limit_redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis URL used when rate_limit_backend=redis",
    )
    rate_limit_requests: int = Field(
        60,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Session credential resolution."""

    access_token_cookie: str = Field(
        "sb-access-token",
        description="Cookie holding the auth provider access token when no Bearer header is sent",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class StoreSettings(BaseSettings):
    """Hosted database / auth provider configuration."""

    backend: str = Field(
        "supabase",
        description="Data store backend: supabase or memory",
    )
    supabase_url: str | None = Field(
        None,
        description="Supabase project URL (e.g., https://<ref>.supabase.co)",
    )
    supabase_service_key: str | None = Field(
        None,
        description="Service role key used for PostgREST and admin auth calls",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )


class StripeSettings(BaseSettings):
    """Payment provider configuration."""

    secret_key: str | None = Field(
        None,
        description="Stripe secret API key",
    )
    currency: str = Field(
        "usd",
        description="Currency used for credit purchases",
    )

    model_config = SettingsConfigDict(
        env_prefix="STRIPE_",
        case_sensitive=False,
    )


class BackendSettings(BaseSettings):
    """External account-creation job backend."""

    base_url: str = Field(
        "https://api.hootservices.com",
        description="Job backend base URL",
    )
    api_key: str | None = Field(
        None,
        description="Key sent as X-API-Key on every backend call",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="BACKEND_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, description="Rotate file after this many bytes (0 disables rotation)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Nested groups are created via default_factory so env loading works.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    stripe: StripeSettings = Field(default_factory=StripeSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
