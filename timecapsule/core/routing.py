"""
Route guards for the presentation layer.
"""

from typing import Optional

from timecapsule.core.models import Session

LOGIN = "login"
DASHBOARD = "dashboard"
CREATE = "create"
CAPSULE_PREFIX = "capsule/"

PROTECTED_ROUTES = (DASHBOARD, CREATE)


def capsule_route(capsule_id: str) -> str:
    return f"{CAPSULE_PREFIX}{capsule_id}"


def capsule_id_from_route(path: str) -> Optional[str]:
    """Capsule id of a detail route, None for any other path."""
    path = path.strip("/")
    if not path.startswith(CAPSULE_PREFIX):
        return None
    capsule_id = path[len(CAPSULE_PREFIX):]
    return capsule_id or None


def resolve_route(path: Optional[str], session: Optional[Session]) -> str:
    """
    Apply the auth guards to a requested path.

    Unauthenticated users land on login for every protected path; signed-in
    users are sent from login to the dashboard. The root path and unknown
    paths redirect based on the session.
    """
    path = (path or "").strip("/")
    authenticated = session is not None

    if path == LOGIN:
        return DASHBOARD if authenticated else LOGIN

    if path in PROTECTED_ROUTES or capsule_id_from_route(path):
        return path if authenticated else LOGIN

    return DASHBOARD if authenticated else LOGIN
