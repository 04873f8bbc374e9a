"""
Outbound client for the email endpoints.

Used by services that want to send a share email or a chat invitation
without talking to a provider themselves. Share emails go to the share
function; chat invitations are rendered here and posted to the SMTP
endpoint.

Never raises: transport and HTTP errors come back as
EmailResponse(success=False, error=...).
"""

import logging
from typing import Optional

import httpx

from shared.config import Settings
from shared.models import ChatInvitation, EmailResponse, ShareEmailRequest
from shared.templates import render_chat_invitation

logger = logging.getLogger("email_dispatch")


class EmailServiceClient:
    """HTTP client for the share function and the SMTP email endpoint."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self.http_client = http_client or httpx.Client(timeout=15.0)

    @property
    def share_function_url(self) -> str:
        return f"{(self.settings.supabase_url or '').rstrip('/')}/functions/v1/send-share-email"

    @property
    def email_endpoint_url(self) -> str:
        return f"{self.settings.api_url.rstrip('/')}/api/send-share-email"

    def send_share_email(self, request: ShareEmailRequest) -> EmailResponse:
        """Ask the share function to email a shared page or event."""
        anon_key = self.settings.supabase_anon_key or ""
        return self._post(
            self.share_function_url,
            payload=request.model_dump(by_alias=True, mode="json"),
            headers={
                "Authorization": f"Bearer {anon_key}",
                "apikey": anon_key,
            },
        )

    def send_chat_invitation(self, invitation: ChatInvitation) -> EmailResponse:
        """Render a chat invitation and send it through the SMTP endpoint."""
        subject, html, text = render_chat_invitation(invitation)
        return self._post(
            self.email_endpoint_url,
            payload={
                "to": invitation.recipient_email,
                "subject": subject,
                "html": html,
                "text": text,
            },
        )

    def _post(self, url: str, payload: dict, headers: Optional[dict] = None) -> EmailResponse:
        try:
            response = self.http_client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Email service unreachable at {url}: {e}")
            return EmailResponse(success=False, error=str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = data.get("error") or "Unknown error"
            logger.error(f"Email service error: {response.status_code} - {error}")
            return EmailResponse(
                success=False,
                error=f"Email service error: {response.status_code} - {error}",
            )

        return EmailResponse(success=bool(data.get("success")), error=data.get("error"))
