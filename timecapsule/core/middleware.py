"""
Middleware for bearer-credential checks on the enrichment endpoint.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from timecapsule.core.config import config
import logging

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Only submissions are guarded; preflight and other verbs are answered by the router
PROTECTED_PREFIXES = ["/api/process-capsule-ai"]

def _bearer_token(request: Request) -> str:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()

async def bearer_auth_middleware(request: Request, call_next):
    """
    Reject enrichment submissions that do not carry an accepted bearer credential.

    This middleware:
    1. Checks POST requests on protected routes for an Authorization header
    2. Accepts the configured Supabase anon or service-role key
    3. Answers 401 for a missing or unknown credential
    """
    is_protected = request.method == "POST" and any(
        request.url.path.startswith(prefix) for prefix in PROTECTED_PREFIXES
    )

    if is_protected:
        accepted = config.accepted_bearer_tokens()
        if not accepted:
            logger.error("No Supabase keys configured, cannot verify bearer credentials")
            return JSONResponse(
                status_code=500,
                content={"error": "Service credentials not configured"},
                headers=CORS_HEADERS
            )

        token = _bearer_token(request)
        if not token:
            return JSONResponse(
                status_code=401,
                content={"error": "Missing bearer credential"},
                headers=CORS_HEADERS
            )
        if token not in accepted:
            logger.warning(f"Rejected bearer credential on {request.url.path}")
            return JSONResponse(
                status_code=401,
                content={"error": "Invalid bearer credential"},
                headers=CORS_HEADERS
            )

    response = await call_next(request)
    return response
