"""
Waterfall email dispatch.

A message is offered to a list of providers in order until one accepts it.
There is no retry, backoff or idempotency key: every provider gets exactly
one attempt.

The result says how the message went out instead of collapsing everything
into a single success flag:

    DELIVERED               the first provider accepted it
    DELIVERED_VIA_FALLBACK  a later provider accepted it
    LOGGED_ONLY             only a non-confirming provider (log only) took it
    NOT_DELIVERED           nothing accepted it
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from supabase import Client

from mail.providers import (
    AuthInviteProvider,
    EmailConfigurationError,
    EmailProvider,
    LogOnlyProvider,
    ProviderAttempt,
    RestRpcProvider,
    SendGridProvider,
    create_service_client,
)
from shared.config import Settings
from shared.models import EmailMessage, ShareEmailRequest

logger = logging.getLogger("email_dispatch")


class DeliveryStatus(str, Enum):
    """Outcome of a dispatch."""
    DELIVERED = "delivered"
    DELIVERED_VIA_FALLBACK = "delivered_via_fallback"
    LOGGED_ONLY = "logged_only"
    NOT_DELIVERED = "not_delivered"


@dataclass
class DispatchResult:
    """Outcome of offering one message to the provider chain."""
    status: DeliveryStatus
    recipient: str
    provider: Optional[str] = None
    attempts: list[ProviderAttempt] = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        """True if a provider that confirms delivery accepted the message."""
        return self.status in (DeliveryStatus.DELIVERED, DeliveryStatus.DELIVERED_VIA_FALLBACK)

    @property
    def last_error(self) -> Optional[str]:
        for attempt in reversed(self.attempts):
            if attempt.error:
                return attempt.error
        return None


class EmailDispatcher:
    """
    Offers a message to each provider in turn.

    Example usage:
        dispatcher = EmailDispatcher([primary, secondary, LogOnlyProvider()])
        result = dispatcher.dispatch(message)
        if not result.delivered:
            ...
    """

    def __init__(self, providers: Sequence[EmailProvider]):
        if not providers:
            raise ValueError("At least one email provider is required")
        self.providers = list(providers)

    def dispatch(self, message: EmailMessage) -> DispatchResult:
        """
        Send a message through the first provider that accepts it.

        Unconfigured providers are skipped and recorded as failed attempts.
        A failing provider is logged and the next one is tried.
        """
        attempts: list[ProviderAttempt] = []

        for position, provider in enumerate(self.providers):
            if not provider.is_configured():
                logger.debug(f"Skipping {provider.name}: not configured")
                attempts.append(ProviderAttempt(
                    provider=provider.name,
                    recipient=message.to,
                    success=False,
                    confirms_delivery=provider.confirms_delivery,
                    error="not configured",
                ))
                continue

            attempt = provider.send(message)
            attempts.append(attempt)

            if not attempt.success:
                logger.info(f"{provider.name} failed for {message.to}, trying next provider")
                continue

            if not attempt.confirms_delivery:
                status = DeliveryStatus.LOGGED_ONLY
            elif position == 0:
                status = DeliveryStatus.DELIVERED
            else:
                status = DeliveryStatus.DELIVERED_VIA_FALLBACK

            logger.info(f"Dispatch to {message.to}: {status.value} via {provider.name}")
            return DispatchResult(
                status=status,
                recipient=message.to,
                provider=provider.name,
                attempts=attempts,
            )

        logger.error(f"All {len(self.providers)} email providers failed for {message.to}")
        return DispatchResult(
            status=DeliveryStatus.NOT_DELIVERED,
            recipient=message.to,
            attempts=attempts,
        )


def build_share_dispatcher(
    settings: Settings,
    request: Optional[ShareEmailRequest] = None,
    client: Optional[Client] = None,
) -> EmailDispatcher:
    """
    Build the provider chain for share emails.

    Order: auth invite, REST RPC, SendGrid (when configured), log only
    (when EMAIL_LOG_ONLY_FALLBACK is set).

    Raises:
        EmailConfigurationError: If the backend URL or service key is missing
    """
    if not settings.supabase_configured:
        raise EmailConfigurationError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
    if client is None:
        client = create_service_client(settings)

    metadata = {}
    if request is not None:
        metadata = {
            "share_url": request.share_url,
            "content_title": request.content_title,
            "sender_name": request.sender_name,
        }

    providers: list[EmailProvider] = [
        AuthInviteProvider(client, metadata=metadata),
        RestRpcProvider(
            base_url=settings.supabase_url,
            service_key=settings.supabase_service_role_key,
            from_name=settings.share_from_name,
            from_email=settings.share_from_email,
        ),
    ]
    if settings.sendgrid_configured:
        providers.append(SendGridProvider(settings.sendgrid_api_key, settings.sendgrid_from_email))
    if settings.email_log_only_fallback:
        providers.append(LogOnlyProvider())

    return EmailDispatcher(providers)
