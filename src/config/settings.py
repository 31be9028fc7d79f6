"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.

Secrets have no defaults: DATABASE_URL and SECRET_KEY must always be
provided, and SMTP credentials must be provided when MAIL_BACKEND=smtp.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.registration import WorkflowPolicy


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database configuration
    database_url: str
    pool_min_size: int = 2  # Minimum connections in pool
    pool_max_size: int = 10  # Maximum connections in pool

    # Security settings
    secret_key: str = Field(..., min_length=32)  # Token signing secret
    token_ttl_seconds: int = 3600  # Admin token lifetime
    bcrypt_cost: int = 10  # bcrypt work factor

    # Admin accounts
    admin_signup_enabled: bool = False
    bootstrap_admin_username: str | None = None
    bootstrap_admin_password: str | None = None

    # Workflow settings
    default_amount: int = 500
    currency_symbol: str = "Rs."
    allow_approve_rejected: bool = True
    max_screenshot_bytes: int = 5 * 1024 * 1024

    # Mail settings
    mail_backend: Literal["smtp", "console"] = "smtp"
    mail_from: str | None = None
    mail_timeout_seconds: float = 30.0
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True

    # Server
    port: int = 8000

    @model_validator(mode="after")
    def _require_smtp_credentials(self) -> "Settings":
        if self.mail_backend == "smtp":
            missing = [
                name
                for name in ("smtp_host", "smtp_username", "smtp_password", "mail_from")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"MAIL_BACKEND=smtp requires: {', '.join(missing)}")
        return self

    def workflow_policy(self) -> WorkflowPolicy:
        """Build the workflow rules from these settings."""
        return WorkflowPolicy(
            default_amount=self.default_amount,
            currency_symbol=self.currency_symbol,
            allow_approve_rejected=self.allow_approve_rejected,
            mail_timeout_seconds=self.mail_timeout_seconds,
            max_screenshot_bytes=self.max_screenshot_bytes,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
