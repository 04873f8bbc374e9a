"""
Email templates for share notifications and chat invitations.

Templates are plain strings with {variable} placeholders rendered with
str.format. Literal braces in the embedded CSS are doubled.

Every value interpolated into an HTML template is escaped first; the plain
text variants are rendered unescaped.
"""

from html import escape

from shared.models import ChatInvitation, ContentType, ShareEmailRequest


# =============================================================================
# Share Email
# =============================================================================

SHARE_SUBJECT = '{sender_name} shared "{content_title}" with you'

SHARE_TEXT = """Hi there!

{sender_name} ({sender_email}) has shared "{content_title}" with you.

View the {content_label}: {share_url}

Want to edit or save to your workspace? You can sign up when you're ready.

Best regards,
The Notel Team"""

SHARE_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Shared {content_label}</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      line-height: 1.6;
      color: #374151;
      max-width: 600px;
      margin: 0 auto;
      padding: 20px;
      background-color: #f9fafb;
    }}
    .container {{ background: white; border-radius: 8px; padding: 32px; box-shadow: 0 1px 3px rgba(0, 0, 0, 0.1); }}
    .title {{ font-size: 24px; font-weight: 600; color: #111827; margin: 0 0 8px 0; }}
    .subtitle {{ color: #6b7280; margin: 0; }}
    .shared-item {{ background: #f3f4f6; border-radius: 6px; padding: 16px; margin: 16px 0; border-left: 3px solid #3b82f6; }}
    .shared-title {{ font-weight: 500; color: #111827; margin: 0 0 4px 0; }}
    .shared-type {{ color: #6b7280; font-size: 14px; text-transform: uppercase; letter-spacing: 0.5px; }}
    .cta-button {{ display: inline-block; background: #111827; color: white; text-decoration: none; padding: 12px 24px; border-radius: 6px; font-weight: 500; margin: 20px 0; }}
    .footer {{ margin-top: 32px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1 class="title">You've been shared something</h1>
      <p class="subtitle">View and collaborate on shared content</p>
    </div>
    <div class="content">
      <div class="sender-info">
        <strong>{sender_name}</strong> ({sender_email}) shared this with you:
      </div>
      <div class="shared-item">
        <div class="shared-type">{content_label}</div>
        <div class="shared-title">{content_title}</div>
      </div>
      <a href="{share_url}" class="cta-button">View {content_label}</a>
      <p style="color: #6b7280; font-size: 14px; margin-top: 16px;">
        Want to edit or save to your workspace? You can sign up when you're ready.
      </p>
    </div>
    <div class="footer">
      <p>This email was sent because someone shared content with you using Notel.</p>
      <p>Notel - Minimalist productivity, inspired by Notion</p>
    </div>
  </div>
</body>
</html>"""


# =============================================================================
# Chat Invitation
# =============================================================================

CHAT_SUBJECT = "{sender_name} wants to chat with you on Notel"

CHAT_TEXT = """Hi there!

{sender_name} ({sender_email}) wants to start a chat conversation with you on Notel.

{personal_message_block}Join the conversation: {chat_url}

Notel is a minimalist productivity app with real-time chat features. You can sign up when you're ready.

Best regards,
The Notel Team"""

CHAT_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Chat Invitation</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      line-height: 1.6;
      color: #374151;
      max-width: 600px;
      margin: 0 auto;
      padding: 20px;
      background-color: #f9fafb;
    }}
    .container {{ background: white; border-radius: 12px; padding: 32px; box-shadow: 0 4px 6px -1px rgba(0, 0, 0, 0.1); }}
    .header {{ text-align: center; margin-bottom: 32px; }}
    .title {{ font-size: 24px; font-weight: bold; color: #1f2937; margin: 0 0 8px 0; }}
    .sender-info {{ background: #f3f4f6; padding: 16px; border-radius: 8px; margin: 24px 0; border-left: 4px solid #8b5cf6; }}
    .personal-message {{ background: #fef3c7; padding: 16px; border-radius: 8px; margin: 24px 0; border-left: 4px solid #f59e0b; font-style: italic; }}
    .cta-button {{ display: inline-block; background: #8b5cf6; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; font-weight: 600; margin: 24px 0; }}
    .footer {{ text-align: center; margin-top: 32px; padding-top: 24px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1 class="title">Chat Invitation</h1>
      <p class="subtitle">Someone wants to start a conversation with you</p>
    </div>
    <div class="sender-info">
      <strong>{sender_name}</strong> ({sender_email}) wants to chat with you on Notel.
    </div>
    {personal_message_block}
    <div style="text-align: center;">
      <a href="{chat_url}" class="cta-button">Join Chat Conversation</a>
    </div>
    <div class="footer">
      <p>This chat invitation was sent via Notel.</p>
      <p>Notel - Minimalist productivity, inspired by Notion</p>
    </div>
  </div>
</body>
</html>"""


# =============================================================================
# Rendering
# =============================================================================

def content_label(content_type: ContentType) -> str:
    """Human label for a shared content type."""
    return "event" if content_type == ContentType.EVENT else "page"


def render_share_email(request: ShareEmailRequest) -> tuple[str, str, str]:
    """
    Render a share notification.

    Returns:
        Tuple of (subject, html, text)
    """
    context = {
        "sender_name": request.sender_name,
        "sender_email": request.sender_email,
        "content_title": request.content_title,
        "content_label": content_label(request.content_type),
        "share_url": request.share_url,
    }
    subject = SHARE_SUBJECT.format(**context)
    text = SHARE_TEXT.format(**context)
    html = SHARE_HTML.format(**{k: escape(v) for k, v in context.items()})
    return subject, html, text


def render_chat_invitation(invitation: ChatInvitation) -> tuple[str, str, str]:
    """
    Render a chat invitation.

    Returns:
        Tuple of (subject, html, text)
    """
    context = {
        "sender_name": invitation.sender_name,
        "sender_email": invitation.sender_email,
        "chat_url": invitation.chat_url,
    }
    subject = CHAT_SUBJECT.format(**context)

    message = invitation.personal_message
    text = CHAT_TEXT.format(
        personal_message_block=f'Personal message: "{message}"\n\n' if message else "",
        **context,
    )
    html = CHAT_HTML.format(
        personal_message_block=(
            f'<div class="personal-message">"{escape(message)}"</div>' if message else ""
        ),
        **{k: escape(v) for k, v in context.items()},
    )
    return subject, html, text
