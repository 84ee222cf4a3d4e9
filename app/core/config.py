"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (Twilio credentials, limits, port)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Twilio
    TWILIO_ACCOUNT_SID: Optional[str] = Field(
        default=None,
        description="Twilio account SID"
    )
    TWILIO_AUTH_TOKEN: Optional[str] = Field(
        default=None,
        description="Twilio auth token"
    )
    TWILIO_FROM_NUMBER: Optional[str] = Field(
        default=None,
        description="Twilio-assigned originating number (+15005550006)"
    )
    TWILIO_API_BASE_URL: str = Field(
        default="https://api.twilio.com/2010-04-01",
        description="Twilio REST API base URL"
    )
    TWILIO_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Twilio request timeout in seconds"
    )
    SIMULATED_SEND_DELAY_SECONDS: float = Field(
        default=1.0,
        description="Artificial latency of the simulated gateway used when Twilio is not configured"
    )

    # Server
    HOST: str = Field(default="0.0.0.0", description="Listening interface")
    PORT: int = Field(default=3000, description="Listening port")

    # Validation
    PHONE_VALIDATION_MODE: Literal["regional", "generic"] = Field(
        default="regional",
        description="'regional' accepts local mobile numbers only, 'generic' accepts any E.164-like number"
    )
    REGIONAL_COUNTRY_CODE: str = Field(
        default="63",
        description="Country code used to rewrite local trunk-prefix numbers"
    )
    REGIONAL_MOBILE_PREFIX: str = Field(
        default="9",
        description="Leading digit of regional mobile numbers after the trunk/country prefix"
    )
    MAX_MESSAGE_LENGTH: int = Field(default=160, description="Maximum SMS body length")
    MAX_SENDER_LENGTH: int = Field(default=11, description="Maximum sender label length")

    # Cooldown
    COOLDOWN_SECONDS: int = Field(
        default=10,
        description="Minimum interval between sends to the same number"
    )
    COOLDOWN_RETENTION_SECONDS: int = Field(
        default=3600,
        description="Cooldown entries older than this are purged"
    )
    COOLDOWN_SWEEP_INTERVAL_SECONDS: int = Field(
        default=600,
        description="How often expired cooldown entries are purged"
    )

    # Rate Limiting
    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=5,
        description="Maximum send attempts per client address per window"
    )
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=900,
        description="Rate limit window in seconds"
    )
    TRUST_FORWARDED_FOR: bool = Field(
        default=False,
        description="Use X-Forwarded-For as the client address (behind a reverse proxy)"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    STATIC_DIR: str = Field(
        default="public",
        description="Directory holding the browser UI"
    )

    @field_validator("COOLDOWN_RETENTION_SECONDS")
    @classmethod
    def validate_retention(cls, v: int, info: ValidationInfo) -> int:
        """Retention must outlive the cooldown window so the sweep never frees an active slot."""
        cooldown = info.data.get("COOLDOWN_SECONDS")
        if cooldown is not None and v <= cooldown:
            raise ValueError("COOLDOWN_RETENTION_SECONDS must be greater than COOLDOWN_SECONDS")
        return v

    @property
    def twilio_configured(self) -> bool:
        """Check if all Twilio credentials are present."""
        return bool(
            self.TWILIO_ACCOUNT_SID
            and self.TWILIO_AUTH_TOKEN
            and self.TWILIO_FROM_NUMBER
            and self.TWILIO_ACCOUNT_SID != "your_twilio_sid"
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []

    if config.RATE_LIMIT_MAX_REQUESTS < 1:
        errors.append("RATE_LIMIT_MAX_REQUESTS must be at least 1")
    if config.COOLDOWN_SECONDS < 1:
        errors.append("COOLDOWN_SECONDS must be at least 1")

    # Production-specific validations
    if config.is_production:
        if not config.TWILIO_ACCOUNT_SID:
            errors.append("TWILIO_ACCOUNT_SID is required in production")
        if not config.TWILIO_AUTH_TOKEN:
            errors.append("TWILIO_AUTH_TOKEN is required in production")
        if not config.TWILIO_FROM_NUMBER:
            errors.append("TWILIO_FROM_NUMBER is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
