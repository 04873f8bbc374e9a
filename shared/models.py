"""
Domain models shared by the email endpoints and the outbound email client.

Design decisions:
- Using Pydantic for validation and serialization
- Request bodies keep the camelCase field names the frontend already sends,
  exposed as snake_case attributes in Python
- Messages are ephemeral: built per request, never persisted
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Kinds of content a user can share."""
    PAGE = "page"
    EVENT = "event"


class EmailMessage(BaseModel):
    """
    A single outbound email.

    Constructed for one send attempt and discarded afterwards.
    """
    to: str = Field(..., description="Recipient address")
    subject: str = Field(..., description="Subject line")
    html: str = Field(..., description="HTML body")
    text: Optional[str] = Field(default=None, description="Plain-text body")
    from_email: Optional[str] = Field(default=None, description="Sender address")
    from_name: Optional[str] = Field(default=None, description="Sender display name")


class ShareEmailRequest(BaseModel):
    """Payload for sharing a page or calendar event by email."""
    model_config = ConfigDict(populate_by_name=True)

    recipient_email: str = Field(..., alias="recipientEmail")
    share_url: str = Field(..., alias="shareUrl")
    content_title: str = Field(..., alias="contentTitle")
    content_type: ContentType = Field(default=ContentType.PAGE, alias="contentType")
    sender_name: str = Field(default="Someone", alias="senderName")
    sender_email: str = Field(default="", alias="senderEmail")


class ChatInvitation(BaseModel):
    """Invitation to join a chat conversation."""
    recipient_email: str
    sender_name: str
    sender_email: str
    chat_url: str
    personal_message: Optional[str] = None


class EmailResponse(BaseModel):
    """Envelope returned by the email endpoints and the outbound client."""
    success: bool
    error: Optional[str] = None
