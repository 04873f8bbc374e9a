"""
Application settings.

All configuration comes from the environment (or a local .env / .env.local
file). The variable names match the ones the deployed functions already use,
including the VITE_-prefixed aliases shared with the frontend build.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings for the email endpoints, the change feed and the auth delegate."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # SMTP transport used by /api/send-share-email
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server hostname")
    smtp_port: int = Field(default=587, description="SMTP port (465 = implicit TLS)")
    smtp_user: Optional[str] = Field(default=None, description="SMTP username")
    smtp_pass: Optional[str] = Field(default=None, description="SMTP password / app password")
    from_email: Optional[str] = Field(default=None, description="Sender address, defaults to SMTP_USER")

    # Hosted backend
    supabase_url: Optional[str] = Field(default=None)
    supabase_service_role_key: Optional[str] = Field(default=None)
    supabase_anon_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"),
    )

    # Third-party email API
    sendgrid_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SENDGRID_API_KEY", "VITE_SENDGRID_API_KEY"),
    )
    sendgrid_from_email: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SENDGRID_FROM_EMAIL", "VITE_FROM_EMAIL"),
    )

    app_url: str = Field(default="http://localhost:5173", description="Public app URL for auth redirects")
    api_url: str = Field(default="http://localhost:8000", description="Base URL of the email endpoint")

    email_log_only_fallback: bool = Field(
        default=True,
        description="Log share emails that no provider accepted instead of failing outright",
    )
    share_from_name: str = Field(default="Notel")
    share_from_email: str = Field(default="noreply@notel.app")

    webhook_secret: Optional[str] = Field(default=None, description="Shared secret for database webhooks")
    log_level: str = Field(default="INFO")

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_pass)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    @property
    def sendgrid_configured(self) -> bool:
        return bool(self.sendgrid_api_key)

    @property
    def sender_address(self) -> Optional[str]:
        """Address used in the From header of SMTP mail."""
        return self.from_email or self.smtp_user


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    settings = Settings()
    logger.debug(
        "Settings loaded (smtp=%s, supabase=%s, sendgrid=%s)",
        settings.smtp_configured,
        settings.supabase_configured,
        settings.sendgrid_configured,
    )
    return settings


def reset_settings() -> None:
    """Drop the cached settings (useful for testing)."""
    get_settings.cache_clear()
