"""
FastAPI application for Notel's email and realtime endpoints.

This application provides:
1. POST /api/send-share-email - send one email over SMTP
2. POST /functions/v1/send-share-email - render and send a share email through
   the provider waterfall (with CORS preflight)
3. POST /webhooks/database - ingest database row changes into the change feed

Every error comes back as {"success": false, "error": "..."}.

Run with:
    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)

from change_feed.feed import ChangeFeed
from change_feed.session import RealtimeSession
from change_feed.webhooks import handle_webhook_event
from mail.dispatcher import DeliveryStatus, EmailDispatcher, build_share_dispatcher
from mail.providers import EmailConfigurationError, EmailProvider, SmtpProvider
from shared.config import Settings, get_settings
from shared.models import ContentType, EmailMessage, EmailResponse, ShareEmailRequest
from shared.templates import render_share_email

logger = logging.getLogger("api")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}


# Request / response models
class SendEmailBody(BaseModel):
    """Body of /api/send-share-email. Presence of fields is checked by the handler."""
    to: Optional[str] = None
    subject: Optional[str] = None
    html: Optional[str] = None
    text: Optional[str] = None


class ShareFunctionBody(BaseModel):
    """Body of the share function, in the frontend's camelCase."""
    model_config = ConfigDict(populate_by_name=True)

    recipient_email: Optional[str] = Field(default=None, alias="recipientEmail")
    share_url: Optional[str] = Field(default=None, alias="shareUrl")
    content_title: Optional[str] = Field(default=None, alias="contentTitle")
    content_type: ContentType = Field(default=ContentType.PAGE, alias="contentType")
    sender_name: Optional[str] = Field(default=None, alias="senderName")
    sender_email: Optional[str] = Field(default=None, alias="senderEmail")


class ShareEmailResponse(BaseModel):
    """Result of the share function, including how the email went out."""
    success: bool
    status: DeliveryStatus
    provider: Optional[str] = None
    error: Optional[str] = None


SmtpFactory = Callable[[], EmailProvider]
DispatcherFactory = Callable[[ShareEmailRequest], EmailDispatcher]


def get_smtp_factory(settings: Settings = Depends(get_settings)) -> SmtpFactory:
    """Deferred SMTP transport, built only after the request is validated."""
    return lambda: SmtpProvider.from_settings(settings)


def get_share_dispatcher_factory(settings: Settings = Depends(get_settings)) -> DispatcherFactory:
    """Deferred share waterfall, built only after the request is validated."""
    return lambda request: build_share_dispatcher(settings, request)


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the change feed and the realtime session for the app's lifetime."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    app.state.change_feed = ChangeFeed()
    app.state.realtime = RealtimeSession(app.state.change_feed)
    logger.info("Starting Notel email & realtime API")
    yield
    app.state.realtime.close()
    logger.info("Shutting down")


app = FastAPI(
    title="Notel Email & Realtime API",
    description="Transactional email endpoints and database change ingestion for Notel.",
    version="1.0.0",
    lifespan=lifespan,
)


# =============================================================================
# Error Envelope
# =============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": error},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body"},
        headers=ALLOW_ORIGIN,
    )


@app.exception_handler(ValidationError)
async def settings_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    fields = ", ".join(str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc"))
    logger.error(f"Invalid {exc.title}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": f"Invalid server configuration: {fields or exc.title}"},
        headers=ALLOW_ORIGIN,
    )


@app.exception_handler(EmailConfigurationError)
async def configuration_error_handler(request: Request, exc: EmailConfigurationError) -> JSONResponse:
    logger.error(f"Email transport not configured: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc)},
        headers=ALLOW_ORIGIN,
    )


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "notel-email-api"}


# =============================================================================
# SMTP Email
# =============================================================================

@app.post(
    "/api/send-share-email",
    response_model=EmailResponse,
    response_model_exclude_none=True,
    tags=["Email"],
)
def send_email(body: SendEmailBody, smtp_factory: SmtpFactory = Depends(get_smtp_factory)):
    """
    Send one email over SMTP.

    Requires SMTP_USER and SMTP_PASS; SMTP_HOST, SMTP_PORT and FROM_EMAIL
    are optional.
    """
    if not body.to or not body.subject or not body.html:
        raise HTTPException(status_code=400, detail="Missing required fields: to, subject, html")

    provider = smtp_factory()
    logger.info(f"Sending share email via SMTP: to={body.to} subject={body.subject!r}")

    attempt = provider.send(EmailMessage(to=body.to, subject=body.subject, html=body.html, text=body.text))
    if not attempt.success:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": attempt.error or "Failed to send email"},
        )
    return EmailResponse(success=True)


# =============================================================================
# Share Function
# =============================================================================

@app.options("/functions/v1/send-share-email", tags=["Email"])
def share_email_preflight():
    """CORS preflight for browser callers."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@app.post("/functions/v1/send-share-email", response_model=ShareEmailResponse, tags=["Email"])
def send_share_email(
    body: ShareFunctionBody,
    dispatcher_factory: DispatcherFactory = Depends(get_share_dispatcher_factory),
):
    """
    Render a share email and send it through the provider waterfall.

    delivered / delivered_via_fallback -> 200, success true
    logged_only                        -> 202, success false (nothing was sent)
    not_delivered                      -> 500, success false
    """
    if not body.recipient_email or not body.share_url or not body.content_title:
        raise HTTPException(status_code=400, detail="Missing required fields", headers=ALLOW_ORIGIN)

    request = ShareEmailRequest(
        recipient_email=body.recipient_email,
        share_url=body.share_url,
        content_title=body.content_title,
        content_type=body.content_type,
        sender_name=body.sender_name or "Someone",
        sender_email=body.sender_email or "",
    )
    subject, html, text = render_share_email(request)
    logger.info(f"Sending share email to {request.recipient_email}: {subject}")

    result = dispatcher_factory(request).dispatch(
        EmailMessage(to=request.recipient_email, subject=subject, html=html, text=text)
    )

    if result.delivered:
        status_code, error = 200, None
    elif result.status == DeliveryStatus.LOGGED_ONLY:
        status_code, error = 202, "Email delivery unconfirmed: no provider accepted the message"
    else:
        status_code, error = 500, result.last_error or "Failed to send email"

    response = ShareEmailResponse(
        success=result.delivered,
        status=result.status,
        provider=result.provider,
        error=error,
    )
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", exclude_none=True),
        headers=ALLOW_ORIGIN,
    )


# =============================================================================
# Database Webhooks
# =============================================================================

@app.post("/webhooks/database", tags=["Realtime"])
async def database_webhook(
    request: Request,
    payload: dict[str, Any] = Body(...),
    x_webhook_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    """Publish a database row change to the change feed."""
    if settings.webhook_secret and x_webhook_secret != settings.webhook_secret:
        raise HTTPException(status_code=401, detail="Invalid webhook secret")

    delivered = handle_webhook_event(payload, request.app.state.change_feed)
    return {"success": True, "delivered": delivered}
