"""
Tests for settings loading.
"""

from shared.config import Settings, get_settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASS", "FROM_EMAIL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.smtp_host == "smtp.gmail.com"
        assert settings.smtp_port == 587
        assert settings.smtp_configured is False
        assert settings.email_log_only_fallback is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SMTP_HOST", "smtp-mail.outlook.com")
        monkeypatch.setenv("SMTP_PORT", "465")
        monkeypatch.setenv("SMTP_USER", "me@outlook.com")
        monkeypatch.setenv("SMTP_PASS", "secret")
        monkeypatch.delenv("FROM_EMAIL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.smtp_host == "smtp-mail.outlook.com"
        assert settings.smtp_port == 465
        assert settings.smtp_configured is True
        # FROM_EMAIL falls back to the SMTP user
        assert settings.sender_address == "me@outlook.com"

    def test_vite_aliases(self, monkeypatch):
        monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
        monkeypatch.delenv("SENDGRID_FROM_EMAIL", raising=False)
        monkeypatch.setenv("VITE_SENDGRID_API_KEY", "SG.key")
        monkeypatch.setenv("VITE_FROM_EMAIL", "hello@notel.app")

        settings = Settings(_env_file=None)

        assert settings.sendgrid_api_key == "SG.key"
        assert settings.sendgrid_from_email == "hello@notel.app"
        assert settings.sendgrid_configured is True

    def test_supabase_configured(self, settings):
        assert settings.supabase_configured is True
        assert Settings(_env_file=None, supabase_url=None, supabase_service_role_key=None).supabase_configured is False


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
