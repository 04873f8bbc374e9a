"""Auth delegate over the hosted identity provider."""

from auth.client import AuthClient, AuthResult

__all__ = ["AuthClient", "AuthResult"]
