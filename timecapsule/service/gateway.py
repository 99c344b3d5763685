"""
Supabase client construction for end-user and service-level access.
End-user clients carry the user's JWT so row-level security applies; the
service-role client is handed out only to the enrichment writer.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Optional
from supabase import Client

from timecapsule.core.config import config
from timecapsule.core.errors import AuthError
from timecapsule.core.models import Session

logger = logging.getLogger(__name__)

class SupabaseGateway:
    """Hands out Supabase clients scoped to a session."""

    def __init__(
        self,
        anon_client_factory: Optional[Callable[[], Client]] = None,
        service_client_factory: Optional[Callable[[], Client]] = None,
        max_sessions: int = 256
    ):
        """
        Initialize the gateway.

        Args:
            anon_client_factory: Builds an anon-key client (defaults to config)
            service_client_factory: Builds a service-role client (defaults to config)
            max_sessions: How many session clients are cached; the least
                recently used is dropped first
        """
        self._anon_client_factory = anon_client_factory or config.get_anon_client
        self._service_client_factory = service_client_factory or config._get_supabase_client
        self.max_sessions = max_sessions
        self._session_clients: "OrderedDict[str, Client]" = OrderedDict()
        self._lock = threading.Lock()

    def anon_client(self) -> Client:
        """Client without a user session, used for sign-in and sign-up."""
        return self._anon_client_factory()

    def for_session(self, session: Session) -> Client:
        """
        Get a client authenticated as the session's user.

        Args:
            session: Authenticated session

        Returns:
            Supabase client bound to the user's access token
        """
        if session is None:
            raise AuthError("User not authenticated")

        with self._lock:
            client = self._session_clients.get(session.access_token)
            if client is not None:
                self._session_clients.move_to_end(session.access_token)
                return client

            client = self._anon_client_factory()
            try:
                client.auth.set_session(session.access_token, session.refresh_token or "")
            except Exception as e:
                logger.error(f"Failed to attach session for user {session.user_id}: {e}")
                raise AuthError(f"Session rejected: {e}")

            self._session_clients[session.access_token] = client
            while len(self._session_clients) > self.max_sessions:
                self._session_clients.popitem(last=False)
            return client

    def forget(self, session: Session):
        """Drop the cached client of a session (after sign-out)."""
        with self._lock:
            self._session_clients.pop(session.access_token, None)

    def service_client(self) -> Client:
        """Service-role client. Bypasses row-level security."""
        return self._service_client_factory()
