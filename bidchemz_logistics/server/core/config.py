"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class AuthConfig(BaseModel):
    """Token signing configuration."""

    jwt_secret: str = Field(
        default="dev-jwt-secret-change-me", alias="JWT_SECRET", description="Secret used to sign access tokens"
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM", description="JWT signing algorithm")
    jwt_expires_days: int = Field(default=7, alias="JWT_EXPIRES_DAYS", description="Access token lifetime in days")
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS", description="bcrypt cost factor")

    model_config = {"populate_by_name": True}


class WebhookConfig(BaseModel):
    """Outbound marketplace webhook configuration."""

    url: Optional[str] = Field(
        default=None, alias="WEBHOOK_URL", description="Marketplace endpoint receiving webhook events"
    )
    secret: str = Field(
        default="bidchemz-webhook-secret", alias="WEBHOOK_SECRET", description="HMAC-SHA256 signing secret"
    )
    timeout_seconds: float = Field(default=10.0, alias="WEBHOOK_TIMEOUT_SECONDS", description="HTTP timeout")
    max_attempts: int = Field(default=5, alias="WEBHOOK_MAX_ATTEMPTS", description="Retry ceiling per webhook log")

    model_config = {"populate_by_name": True}


class RateLimitConfig(BaseModel):
    """In-memory fixed-window rate limiting configuration."""

    enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED", description="Enable the rate limit middleware")
    max_requests: int = Field(
        default=100, alias="RATE_LIMIT_MAX_REQUESTS", description="Requests allowed per client and path per window"
    )
    window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS", description="Window length")

    model_config = {"populate_by_name": True}


class QuoteTimingConfig(BaseModel):
    """Quote expiry and countdown timer configuration."""

    expiry_hours: int = Field(
        default=48, alias="QUOTE_EXPIRY_HOURS", description="Expiry applied to newly created quotes"
    )
    timer_minutes: int = Field(
        default=60, alias="QUOTE_TIMER_MINUTES", description="Countdown started once partners are matched"
    )
    warning_minutes: int = Field(
        default=10, alias="QUOTE_WARNING_MINUTES", description="Remaining minutes that trigger expiry warnings"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Server host address to bind to",
        alias="BIDCHEMZ_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Server port number",
        alias="BIDCHEMZ_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="BIDCHEMZ_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="simple, detailed or json", alias="LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Write logs to LOG_FILE_DIR as well", alias="ENABLE_FILE_LOGGING"
    )
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public URL used in verification and password reset links",
        alias="APP_URL",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./bidchemz.db",
        description="Async database connection URL; Postgres URLs are normalised to asyncpg",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Secrets for machine callers
    # =====================================================================
    cron_secret: str = Field(
        default="dev-cron-secret",
        description="Bearer secret required by the background jobs endpoint",
        alias="CRON_SECRET",
    )
    monitoring_secret: Optional[str] = Field(
        default=None,
        description="When set, /health requires X-Monitoring-Secret",
        alias="MONITORING_SECRET",
    )

    # =====================================================================
    # File Storage
    # =====================================================================
    upload_dir: str = Field(
        default="uploads/encrypted",
        description="Directory holding encrypted document blobs",
        alias="UPLOAD_DIR",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted document size",
        alias="MAX_UPLOAD_BYTES",
    )

    # =====================================================================
    # Grouped configuration sources (flattened env aliases)
    # =====================================================================
    JWT_SECRET: str = Field(default="dev-jwt-secret-change-me")
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRES_DAYS: int = Field(default=7)
    BCRYPT_ROUNDS: int = Field(default=10)
    WEBHOOK_URL: Optional[str] = Field(default=None)
    WEBHOOK_SECRET: str = Field(default="bidchemz-webhook-secret")
    WEBHOOK_TIMEOUT_SECONDS: float = Field(default=10.0)
    WEBHOOK_MAX_ATTEMPTS: int = Field(default=5)
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=100)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=60)
    QUOTE_EXPIRY_HOURS: int = Field(default=48)
    QUOTE_TIMER_MINUTES: int = Field(default=60)
    QUOTE_WARNING_MINUTES: int = Field(default=10)
    CORS_ORIGINS: list[str] = Field(default=["*"])
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: list[str] = Field(default=["*"])
    CORS_ALLOW_HEADERS: list[str] = Field(default=["*"])

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def auth(self) -> AuthConfig:
        """Get token signing configuration from environment variables."""
        return AuthConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def webhook(self) -> WebhookConfig:
        """Get webhook configuration from environment variables."""
        return WebhookConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def rate_limit(self) -> RateLimitConfig:
        """Get rate limit configuration from environment variables."""
        return RateLimitConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def quote_timing(self) -> QuoteTimingConfig:
        """Get quote timer configuration from environment variables."""
        return QuoteTimingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
