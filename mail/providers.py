"""
Email providers used by the share and SMTP endpoints.

Each provider wraps one way of getting a message out the door:
- SMTP: any mail server reachable with username/password
- Auth invite: the hosted auth service's invite email
- REST RPC: a database function that sends mail, called over HTTP
- SendGrid: third-party email API
- Log only: writes the message to the log and sends nothing

Design decisions:
- Delivery failures are returned, never raised, so a dispatcher can fall
  through to the next provider
- Every attempt is logged
- Providers track their attempts for test assertions
- Only a missing configuration at construction time raises
"""

import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr
from typing import Any, Optional
from uuid import uuid4

import httpx
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from supabase import Client, create_client

from shared.config import Settings
from shared.models import EmailMessage

logger = logging.getLogger("email_dispatch")

# Amount of HTML the log-only provider writes to the log
LOG_PREVIEW_CHARS = 200


class EmailConfigurationError(Exception):
    """A transport was requested without the settings it needs."""


@dataclass
class ProviderAttempt:
    """
    Result of handing a message to one provider.

    Captures success/failure and metadata for debugging and testing.
    """
    provider: str
    recipient: str
    success: bool
    confirms_delivery: bool = True
    error: Optional[str] = None
    message_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"{status} {self.provider} to {self.recipient}"


class EmailProvider(ABC):
    """
    Base class for providers.

    Subclasses implement `_deliver`, returning an optional message id or
    raising on failure. `send` turns that into a ProviderAttempt.
    """

    name = "base"
    confirms_delivery = True

    def __init__(self):
        self.attempts: list[ProviderAttempt] = []

    def is_configured(self) -> bool:
        return True

    def send(self, message: EmailMessage) -> ProviderAttempt:
        """
        Send a message through this provider.

        Args:
            message: The email to send

        Returns:
            ProviderAttempt indicating success/failure
        """
        try:
            message_id = self._deliver(message)
        except Exception as e:
            attempt = ProviderAttempt(
                provider=self.name,
                recipient=message.to,
                success=False,
                confirms_delivery=self.confirms_delivery,
                error=str(e) or e.__class__.__name__,
            )
            logger.error(f"[{self.name.upper()} FAILED] To: {message.to} | Error: {attempt.error}")
        else:
            attempt = ProviderAttempt(
                provider=self.name,
                recipient=message.to,
                success=True,
                confirms_delivery=self.confirms_delivery,
                message_id=message_id,
            )
            logger.info(f"[{self.name.upper()}] To: {message.to} | Subject: {message.subject}")

        self.attempts.append(attempt)
        return attempt

    @abstractmethod
    def _deliver(self, message: EmailMessage) -> Optional[str]:
        ...

    def get_attempt_count(self) -> int:
        """Get the number of attempts made (for testing)."""
        return len(self.attempts)


class SmtpProvider(EmailProvider):
    """
    SMTP provider.

    Port 465 uses implicit TLS. Other ports upgrade with STARTTLS when the
    server offers it.
    """

    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        from_email: Optional[str] = None,
        timeout: float = 30.0,
    ):
        super().__init__()
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email or username
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpProvider":
        """
        Build the provider from settings.

        Raises:
            EmailConfigurationError: If SMTP_USER or SMTP_PASS is missing
        """
        if not settings.smtp_configured:
            raise EmailConfigurationError(
                "SMTP credentials not configured. "
                "Please set SMTP_USER and SMTP_PASS environment variables."
            )
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_pass,
            from_email=settings.sender_address,
        )

    def is_configured(self) -> bool:
        return bool(self.host and self.username and self.password)

    def build_mime(self, message: EmailMessage) -> MimeMessage:
        """Build a multipart/alternative message with text and HTML parts."""
        mime = MimeMessage()
        sender = message.from_email or self.from_email
        mime["From"] = formataddr((message.from_name, sender)) if message.from_name else sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content(message.text or "")
        mime.add_alternative(message.html, subtype="html")
        return mime

    def _deliver(self, message: EmailMessage) -> Optional[str]:
        mime = self.build_mime(message)
        context = ssl.create_default_context()

        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                server.login(self.username, self.password)
                server.send_message(mime)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
                server.login(self.username, self.password)
                server.send_message(mime)

        # SMTP doesn't return a message ID, generate one
        return f"smtp-{uuid4()}"


class AuthInviteProvider(EmailProvider):
    """
    Sends through the hosted auth service's invite email.

    The share details travel as user metadata so the invite template can
    link to the shared content.
    """

    name = "auth_invite"

    def __init__(self, client: Client, metadata: Optional[dict[str, Any]] = None):
        super().__init__()
        self.client = client
        self.metadata = metadata or {}

    def _deliver(self, message: EmailMessage) -> Optional[str]:
        response = self.client.auth.admin.generate_link({
            "type": "invite",
            "email": message.to,
            "options": {"data": {**self.metadata, "custom_email": True}},
        })
        user = getattr(response, "user", None)
        return getattr(user, "id", None)


class RestRpcProvider(EmailProvider):
    """Calls the `send_email` database function through the REST API."""

    name = "rest_rpc"

    def __init__(
        self,
        base_url: str,
        service_key: str,
        from_name: str = "Notel",
        from_email: str = "noreply@notel.app",
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.from_name = from_name
        self.from_email = from_email
        self.http_client = http_client or httpx.Client(timeout=10.0)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/rpc/send_email"

    def _deliver(self, message: EmailMessage) -> Optional[str]:
        response = self.http_client.post(
            self.endpoint,
            headers={
                "Authorization": f"Bearer {self.service_key}",
                "apikey": self.service_key,
                "Content-Type": "application/json",
            },
            json={
                "to_email": message.to,
                "subject": message.subject,
                "html_content": message.html,
                "from_name": message.from_name or self.from_name,
                "from_email": message.from_email or self.from_email,
            },
        )
        if not response.is_success:
            raise RuntimeError(f"Direct email API failed: {response.status_code} {response.text}")
        return None


class SendGridProvider(EmailProvider):
    """Third-party email API. The sender address must be verified with SendGrid."""

    name = "sendgrid"

    def __init__(
        self,
        api_key: Optional[str],
        from_email: Optional[str],
        client: Optional[SendGridAPIClient] = None,
    ):
        super().__init__()
        self.api_key = api_key
        self.from_email = from_email
        self._client = client

    def is_configured(self) -> bool:
        return bool(self.api_key and self.from_email)

    def _get_client(self) -> SendGridAPIClient:
        if self._client is None:
            self._client = SendGridAPIClient(api_key=self.api_key)
        return self._client

    def _deliver(self, message: EmailMessage) -> Optional[str]:
        mail = Mail(
            from_email=message.from_email or self.from_email,
            to_emails=message.to,
            subject=message.subject,
            html_content=message.html,
            plain_text_content=message.text,
        )
        response = self._get_client().send(mail)
        if response.status_code >= 300:
            raise RuntimeError(f"SendGrid returned {response.status_code}: {response.body}")
        headers = response.headers or {}
        return headers.get("X-Message-Id")


class LogOnlyProvider(EmailProvider):
    """
    Writes the intended email to the log and sends nothing.

    Always succeeds, but never confirms delivery.
    """

    name = "log_only"
    confirms_delivery = False

    def _deliver(self, message: EmailMessage) -> Optional[str]:
        preview = message.html[:LOG_PREVIEW_CHARS]
        if len(message.html) > LOG_PREVIEW_CHARS:
            preview += "..."
        logger.warning(
            f"[EMAIL NOT SENT] To: {message.to} | Subject: {message.subject} | Preview: {preview}"
        )
        return None


def create_service_client(settings: Settings) -> Client:
    """
    Create a backend client with the service-role key.

    Raises:
        EmailConfigurationError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing
    """
    if not settings.supabase_configured:
        raise EmailConfigurationError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)
