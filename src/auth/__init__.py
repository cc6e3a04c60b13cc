"""Authentication package."""

from src.auth.session import AuthMissingError, AuthSession, SessionVerifier

__all__ = ["AuthMissingError", "AuthSession", "SessionVerifier"]
