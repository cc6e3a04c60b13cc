"""
Session Verification

The backend's auth service issues access tokens; this module only asks
whether a token is still good. There is no account management here.

Every guarded surface (Streamlit pages, the document API) goes through
SessionVerifier and turns AuthMissingError into a redirect to the auth
entry point. AuthMissingError is never shown to the user as an error.
"""

from typing import Optional

import httpx
from pydantic import BaseModel
from supabase import AuthError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.services.storage import SupabaseClient


class AuthMissingError(Exception):
    """No valid session. Resolved by redirecting to the auth entry point."""

    def __init__(self, reason: str = "No active session"):
        super().__init__(reason)
        self.reason = reason


class AuthSession(BaseModel):
    """A verified, signed-in user."""

    access_token: str
    user_id: str
    email: Optional[str] = None


class SessionVerifier:
    """Checks access tokens against the backend's auth service."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    def _fetch_user(self, access_token: str):
        return self._client.connect().auth.get_user(access_token)

    def verify(self, access_token: Optional[str]) -> AuthSession:
        """
        Verify an access token.

        Raises:
            AuthMissingError: if the token is absent, expired or rejected
        """
        if not access_token:
            raise AuthMissingError("No active session")

        try:
            response = self._fetch_user(access_token)
        except AuthError as e:
            raise AuthMissingError(f"Session rejected: {e}") from e

        user = response.user if response is not None else None
        if user is None:
            raise AuthMissingError("Session expired")

        return AuthSession(
            access_token=access_token,
            user_id=str(user.id),
            email=user.email,
        )

    def check(self, session: Optional[AuthSession]) -> AuthSession:
        """
        Re-verify a stored session before serving a page.

        Raises:
            AuthMissingError: if there is no session or its token no longer verifies
        """
        if session is None:
            raise AuthMissingError("No active session")
        return self.verify(session.access_token)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Exchange credentials for a session via the backend's auth service.

        Raises:
            AuthMissingError: if the credentials are rejected
        """
        try:
            response = self._client.connect().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise AuthMissingError(str(e)) from e

        if response.session is None or response.user is None:
            raise AuthMissingError("Sign-in did not return a session")

        self._client.set_access_token(response.session.access_token)
        return AuthSession(
            access_token=response.session.access_token,
            user_id=str(response.user.id),
            email=response.user.email,
        )
