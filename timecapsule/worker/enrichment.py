"""
Enrichment handler.
Generates the summary and the future-self reply for one capsule and writes
both back. One handler instance serves one request.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from timecapsule.core.config import config
from timecapsule.core.errors import (
    ConfigurationError,
    EnrichmentError,
    ValidationError,
)
from timecapsule.core.models import EnrichmentRequest, EnrichmentResult
from timecapsule.service.gemini import GeminiModel
from timecapsule.worker.database import EnrichmentWriter

logger = logging.getLogger(__name__)

class EnrichmentStage(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    GENERATING_SUMMARY = "generating_summary"
    GENERATING_REPLY = "generating_reply"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"

def _default_writer() -> EnrichmentWriter:
    return EnrichmentWriter(config._get_supabase_client())

class EnrichmentHandler:
    """Runs RECEIVED → VALIDATING → GENERATING_SUMMARY → GENERATING_REPLY → PERSISTING → DONE."""

    def __init__(
        self,
        model_factory: Callable[[str], GeminiModel] = None,
        writer_factory: Callable[[], EnrichmentWriter] = None,
        api_key: Optional[str] = None
    ):
        """
        Initialize the handler.

        Args:
            model_factory: Builds the Gemini model from an API key
            writer_factory: Builds the service-role writer
            api_key: Gemini API key (defaults to config)
        """
        self.model_factory = model_factory or (lambda key: GeminiModel(api_key=key))
        self.writer_factory = writer_factory or _default_writer
        self.api_key = api_key if api_key is not None else config.gemini_api_key
        self.stage = EnrichmentStage.RECEIVED
        self.history: List[EnrichmentStage] = [EnrichmentStage.RECEIVED]

    def _advance(self, stage: EnrichmentStage, capsule_id: Optional[str]):
        self.stage = stage
        self.history.append(stage)
        logger.debug(f"Capsule {capsule_id}: {stage.value}")

    def process(self, request: EnrichmentRequest) -> EnrichmentResult:
        """
        Enrich one capsule.

        Args:
            request: Capsule id, title and content

        Returns:
            Both generated texts

        Raises:
            ValidationError: capsule id or content missing
            ConfigurationError: no Gemini API key configured
            EnrichmentError: a generation call or the write failed
        """
        capsule_id = request.capsule_id
        try:
            self._advance(EnrichmentStage.VALIDATING, capsule_id)
            if not request.is_complete():
                raise ValidationError("Missing required fields")
            if not self.api_key:
                raise ConfigurationError("Gemini API key not configured")

            title = request.title or ""
            model = self.model_factory(self.api_key)

            logger.info(f"🔄 Generating enrichment for capsule {capsule_id}")
            self._advance(EnrichmentStage.GENERATING_SUMMARY, capsule_id)
            ai_summary = model.generate_summary(title, request.content)

            self._advance(EnrichmentStage.GENERATING_REPLY, capsule_id)
            ai_future_reply = model.generate_future_reply(title, request.content)

            self._advance(EnrichmentStage.PERSISTING, capsule_id)
            self.writer_factory().write_enrichment(capsule_id, ai_summary, ai_future_reply)

            self._advance(EnrichmentStage.DONE, capsule_id)
            logger.info(f"✅ Enriched capsule {capsule_id}")
            return EnrichmentResult(ai_summary=ai_summary, ai_future_reply=ai_future_reply)

        except (ValidationError, ConfigurationError):
            failed_at = self.stage
            self._advance(EnrichmentStage.FAILED, capsule_id)
            logger.warning(f"Rejected enrichment request for capsule {capsule_id} at {failed_at.value}")
            raise

        except Exception as e:
            failed_at = self.stage
            self._advance(EnrichmentStage.FAILED, capsule_id)
            logger.error(f"❌ Error processing capsule {capsule_id} at {failed_at.value}: {e}")
            self._record_failure(capsule_id)
            if isinstance(e, EnrichmentError):
                e.stage = e.stage or failed_at.value
                raise
            raise EnrichmentError(str(e), stage=failed_at.value) from e

    def _record_failure(self, capsule_id: str):
        try:
            self.writer_factory().mark_failed(capsule_id)
        except Exception as e:
            logger.error(f"Could not record enrichment failure for capsule {capsule_id}: {e}")
