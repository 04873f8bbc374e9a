"""
Shared pytest fixtures for the Notel backend tests.

These fixtures provide isolated settings, a fresh change feed per test and
scriptable email providers.
"""

from typing import Optional

import pytest

from change_feed.feed import ChangeFeed
from change_feed.session import RealtimeSession
from change_feed.subscriptions import SubscriptionRegistry
from mail.providers import EmailProvider
from shared.config import Settings, reset_settings
from shared.models import EmailMessage, ShareEmailRequest


class ScriptedProvider(EmailProvider):
    """Provider whose outcome is fixed up front."""

    def __init__(
        self,
        name: str = "scripted",
        fail: bool = False,
        configured: bool = True,
        confirms_delivery: bool = True,
    ):
        super().__init__()
        self.name = name
        self.fail = fail
        self.configured = configured
        self.confirms_delivery = confirms_delivery
        self.delivered: list[EmailMessage] = []

    def is_configured(self) -> bool:
        return self.configured

    def _deliver(self, message: EmailMessage) -> Optional[str]:
        if self.fail:
            raise RuntimeError(f"{self.name} unavailable")
        self.delivered.append(message)
        return f"{self.name}-{len(self.delivered)}"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Never let cached settings leak between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings that ignore any local .env file."""
    return Settings(
        _env_file=None,
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer@example.com",
        smtp_pass="app-password",
        from_email="notel@example.com",
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-role-key",
        supabase_anon_key="anon-key",
        sendgrid_api_key=None,
        sendgrid_from_email=None,
        api_url="https://api.notel.app",
        app_url="https://notel.app",
        email_log_only_fallback=True,
        webhook_secret=None,
    )


@pytest.fixture
def make_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def message() -> EmailMessage:
    return EmailMessage(
        to="friend@example.com",
        subject="Ada shared \"Roadmap\" with you",
        html="<p>Roadmap</p>",
        text="Roadmap",
    )


@pytest.fixture
def share_request() -> ShareEmailRequest:
    return ShareEmailRequest(
        recipient_email="friend@example.com",
        share_url="https://notel.app/share/abc123",
        content_title="Roadmap",
        content_type="page",
        sender_name="Ada",
        sender_email="ada@example.com",
    )


@pytest.fixture
def feed() -> ChangeFeed:
    """Fresh ChangeFeed for each test."""
    return ChangeFeed()


@pytest.fixture
def registry(feed: ChangeFeed) -> SubscriptionRegistry:
    return SubscriptionRegistry(feed)


@pytest.fixture
def session(feed: ChangeFeed) -> RealtimeSession:
    realtime = RealtimeSession(feed)
    yield realtime
    realtime.close()
