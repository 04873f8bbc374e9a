"""
Auth delegate.

Thin call-through to the hosted identity provider: email/password sign in
and sign up, Google OAuth, sign out and session lookup. Provider errors are
caught and reported in AuthResult.error, never raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from supabase import AuthError, Client, create_client

from shared.config import Settings

logger = logging.getLogger("auth")


@dataclass
class AuthResult:
    """Outcome of an auth call."""
    user_id: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _user_result(user: Any) -> AuthResult:
    if user is None:
        return AuthResult()
    return AuthResult(user_id=getattr(user, "id", None), email=getattr(user, "email", None))


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or error.__class__.__name__


class AuthClient:
    """Delegates authentication to the hosted provider."""

    def __init__(self, client: Client, redirect_url: str):
        self.client = client
        self.redirect_url = redirect_url

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthClient":
        """Build a client with the public (anon) key."""
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required for auth")
        return cls(create_client(settings.supabase_url, settings.supabase_anon_key), settings.app_url)

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Sign in failed for {email}: {_error_message(e)}")
            return AuthResult(email=email, error=_error_message(e))
        logger.info(f"Signed in {email}")
        return _user_result(response.user)

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Create an account; the confirmation email links back to the app."""
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"email_redirect_to": self.redirect_url},
            })
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Sign up failed for {email}: {_error_message(e)}")
            return AuthResult(email=email, error=_error_message(e))
        logger.info(f"Signed up {email}")
        return _user_result(response.user)

    def sign_in_with_google(self) -> AuthResult:
        """Start Google OAuth. The caller redirects the user to result.url."""
        try:
            response = self.client.auth.sign_in_with_oauth({
                "provider": "google",
                "options": {"redirect_to": self.redirect_url},
            })
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Google sign in failed: {_error_message(e)}")
            return AuthResult(error=_error_message(e))
        return AuthResult(url=response.url)

    def sign_out(self) -> AuthResult:
        try:
            self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Sign out failed: {_error_message(e)}")
            return AuthResult(error=_error_message(e))
        return AuthResult()

    def get_session(self) -> AuthResult:
        """Current session's user, or an empty result when signed out."""
        try:
            session = self.client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            return AuthResult(error=_error_message(e))
        if session is None:
            return AuthResult()
        return _user_result(session.user)
