"""
Email/password authentication against Supabase Auth.
"""

import logging
from typing import Any, Optional

from timecapsule.core.errors import AuthError, ValidationError
from timecapsule.core.models import Session
from timecapsule.service.gateway import SupabaseGateway

logger = logging.getLogger(__name__)

def _session_from_response(response: Any) -> Optional[Session]:
    auth_session = getattr(response, "session", None)
    user = getattr(response, "user", None) or getattr(auth_session, "user", None)
    if auth_session is None or user is None:
        return None
    return Session(
        user_id=str(user.id),
        email=getattr(user, "email", None),
        access_token=auth_session.access_token,
        refresh_token=getattr(auth_session, "refresh_token", None)
    )

def _require_credentials(email: str, password: str):
    if not email or not email.strip() or not password:
        raise ValidationError("Email and password are required")

class AuthGateway:
    """Sign users in and out, producing explicit Session objects."""

    def __init__(self, gateway: SupabaseGateway):
        self.gateway = gateway

    def sign_in(self, email: str, password: str) -> Session:
        """
        Sign in with email and password.

        Returns:
            The authenticated session

        Raises:
            ValidationError: empty credentials
            AuthError: credentials rejected
        """
        _require_credentials(email, password)
        try:
            response = self.gateway.anon_client().auth.sign_in_with_password(
                {"email": email.strip(), "password": password}
            )
        except Exception as e:
            logger.error(f"Sign-in failed for {email}: {e}")
            raise AuthError(f"Sign-in failed: {e}")

        session = _session_from_response(response)
        if session is None:
            raise AuthError("Sign-in returned no session")

        logger.info(f"✅ Signed in user {session.user_id}")
        return session

    def sign_up(self, email: str, password: str) -> Optional[Session]:
        """
        Register a new account.

        Returns:
            The session, or None when the account still needs email confirmation
        """
        _require_credentials(email, password)
        try:
            response = self.gateway.anon_client().auth.sign_up(
                {"email": email.strip(), "password": password}
            )
        except Exception as e:
            logger.error(f"Sign-up failed for {email}: {e}")
            raise AuthError(f"Sign-up failed: {e}")

        session = _session_from_response(response)
        if session is None:
            logger.info(f"Sign-up for {email} awaiting email confirmation")
        return session

    def sign_out(self, session: Optional[Session]):
        """End the session. Signing out without a session is a no-op."""
        if session is None:
            return
        try:
            self.gateway.for_session(session).auth.sign_out()
        except Exception as e:
            logger.warning(f"Error signing out user {session.user_id}: {e}")
        finally:
            self.gateway.forget(session)
