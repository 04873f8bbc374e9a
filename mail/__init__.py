"""
Email delivery.

- Providers (SMTP, auth invite, REST RPC, SendGrid, log only)
- The waterfall dispatcher that tries them in order
- An HTTP client for the email endpoints
"""

from mail.providers import (
    EmailConfigurationError,
    EmailProvider,
    ProviderAttempt,
    SmtpProvider,
    AuthInviteProvider,
    RestRpcProvider,
    SendGridProvider,
    LogOnlyProvider,
)
from mail.dispatcher import DeliveryStatus, DispatchResult, EmailDispatcher, build_share_dispatcher
from mail.client import EmailServiceClient

__all__ = [
    "EmailConfigurationError",
    "EmailProvider",
    "ProviderAttempt",
    "SmtpProvider",
    "AuthInviteProvider",
    "RestRpcProvider",
    "SendGridProvider",
    "LogOnlyProvider",
    "DeliveryStatus",
    "DispatchResult",
    "EmailDispatcher",
    "build_share_dispatcher",
    "EmailServiceClient",
]
