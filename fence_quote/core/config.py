# fence_quote/core/config.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Server
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # Origins allowed to submit leads. Empty means every origin is accepted.
    allowed_origins: str = Field(default="", validation_alias="ALLOWED_ORIGINS")
    allowed_headers: str = Field(default="*", validation_alias="ALLOWED_HEADERS")

    # Rate Limiting
    lead_rate_limit_max: int = Field(default=8, ge=1, validation_alias="LEAD_RATE_LIMIT_MAX")
    lead_rate_window_seconds: int = Field(default=600, ge=1, validation_alias="LEAD_RATE_WINDOW_SECONDS")
    lead_rate_sweep_threshold: int = Field(default=1000, ge=1, validation_alias="LEAD_RATE_SWEEP_THRESHOLD")

    # Email (SendGrid)
    sendgrid_api_key: str = Field(default="", validation_alias="SENDGRID_API_KEY")
    from_email: str = Field(default="", validation_alias="FROM_EMAIL")
    sendgrid_api_url: str = Field(
        default="https://api.sendgrid.com/v3/mail/send",
        validation_alias="SENDGRID_API_URL",
    )
    sendgrid_timeout_seconds: Optional[float] = Field(default=None, gt=0, validation_alias="SENDGRID_TIMEOUT_SECONDS")

    # Monitoring
    sentry_dsn: Optional[str] = Field(default=None, validation_alias="SENTRY_DSN")

    @field_validator("environment")
    def validate_environment(cls, v):
        valid_envs = ["development", "testing", "staging", "production"]
        if v not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v):
        valid_formats = ["json", "console"]
        if v not in valid_formats:
            raise ValueError(f"log_format must be one of {valid_formats}")
        return v

    @field_validator("sendgrid_api_key", "from_email")
    def strip_credentials(cls, v):
        return (v or "").strip()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def email_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.from_email)

    def origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def cors_origins(self) -> List[str]:
        return self.origins() or ["*"]


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings."""
    return settings
