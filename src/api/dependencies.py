"""
API dependency helpers.

require_session is THE guard for every API route: it finds the access
token (bearer header first, then the session cookie), verifies it, and
raises AuthMissingError when there is none. The app turns that into a
redirect to the auth entry point.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from src.audit import AuditLogger
from src.auth import AuthMissingError, AuthSession, SessionVerifier
from src.config import get_settings, require_backend_settings
from src.orchestrator import DashboardFlow, create_app_components
from src.services.storage import SupabaseClient


_audit_logger = AuditLogger()


def get_session_verifier() -> SessionVerifier:
    return SessionVerifier(SupabaseClient(require_backend_settings()))


def _token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return request.cookies.get(get_settings().app.session_cookie_name)


def require_session(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    verifier: SessionVerifier = Depends(get_session_verifier),
) -> AuthSession:
    """Verified session for this request, or AuthMissingError."""
    token = _token_from_request(request, authorization)
    try:
        return verifier.verify(token)
    except AuthMissingError as e:
        _audit_logger.log_auth_redirect(get_settings().app.auth_entry_path, e.reason)
        raise


def get_dashboard_flow(session: AuthSession = Depends(require_session)) -> DashboardFlow:
    """Dashboard flow whose queries run as the signed-in user."""
    _, dashboard_flow, _ = create_app_components(
        use_storage=True,
        access_token=session.access_token,
    )
    return dashboard_flow
