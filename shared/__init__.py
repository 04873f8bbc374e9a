"""
Shared infrastructure for the email endpoints, the change feed and auth.

This package contains:
- Settings loaded from the environment
- Request and message models
- Email templates
"""

from shared.config import Settings, get_settings, reset_settings
from shared.models import (
    ChatInvitation,
    ContentType,
    EmailMessage,
    EmailResponse,
    ShareEmailRequest,
)
from shared.templates import render_chat_invitation, render_share_email

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "ChatInvitation",
    "ContentType",
    "EmailMessage",
    "EmailResponse",
    "ShareEmailRequest",
    "render_chat_invitation",
    "render_share_email",
]
