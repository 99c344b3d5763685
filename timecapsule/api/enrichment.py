from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PayloadError
from starlette.concurrency import run_in_threadpool
import logging

from timecapsule.core.errors import ConfigurationError, ValidationError
from timecapsule.core.middleware import CORS_HEADERS
from timecapsule.core.models import EnrichmentRequest
from timecapsule.worker.enrichment import EnrichmentHandler

router = APIRouter()
logger = logging.getLogger(__name__)

ENRICHMENT_PATH = "/process-capsule-ai"

def get_enrichment_handler() -> EnrichmentHandler:
    """A fresh handler per request."""
    return EnrichmentHandler()

def _json(status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)

def _missing_fields() -> JSONResponse:
    return _json(400, {"error": "Missing required fields"})

@router.options(ENRICHMENT_PATH)
async def enrichment_preflight():
    """Answer cross-origin preflight requests."""
    return Response(status_code=200, headers=CORS_HEADERS)

@router.api_route(ENRICHMENT_PATH, methods=["GET", "PUT", "PATCH", "DELETE"])
async def enrichment_method_not_allowed():
    return _json(405, {"error": "Method not allowed"})

@router.post(ENRICHMENT_PATH)
async def process_capsule_ai(
    request: Request,
    handler: EnrichmentHandler = Depends(get_enrichment_handler)
):
    """
    Generate the AI summary and future-self reply for a capsule.

    Expects JSON {capsuleId, title, content}. Responds with both texts on
    success; nothing is written unless both generations succeed.
    """
    try:
        payload = await request.json()
    except ValueError:
        return _missing_fields()

    if not isinstance(payload, dict):
        return _missing_fields()

    try:
        enrichment_request = EnrichmentRequest.model_validate(payload)
    except PayloadError:
        return _missing_fields()

    try:
        result = await run_in_threadpool(handler.process, enrichment_request)
    except ValidationError:
        return _missing_fields()
    except ConfigurationError as e:
        logger.error(f"Enrichment misconfigured: {e}")
        return _json(500, {"error": str(e)})
    except Exception as e:
        logger.error(f"Error processing capsule AI: {e}")
        return _json(500, {
            "error": "Failed to process capsule with AI",
            "details": str(e) or "Unknown error"
        })

    return _json(200, result.model_dump())
