"""
Database operations for the enrichment handler.
The only writes made with service-role credentials: the AI fields and the
enrichment status of a capsule, addressed by id.
"""

import logging
from supabase import Client

from timecapsule.core.errors import PersistenceError
from timecapsule.core.models import EnrichmentStatus

logger = logging.getLogger(__name__)

class EnrichmentWriter:
    """Writes enrichment results onto capsule rows."""

    TABLE = "capsules"

    def __init__(self, supabase_client: Client):
        """
        Initialize the enrichment writer.

        Args:
            supabase_client: Supabase client with service-role credentials
        """
        self._client = supabase_client

    def write_enrichment(self, capsule_id: str, ai_summary: str, ai_future_reply: str):
        """
        Store both generated texts and mark the capsule as enriched.

        Args:
            capsule_id: ID of the capsule to update
            ai_summary: Generated summary
            ai_future_reply: Generated future-self reply

        Raises:
            PersistenceError: if the update fails or matches no capsule
        """
        try:
            result = self._client.table(self.TABLE).update({
                "ai_summary": ai_summary,
                "ai_future_reply": ai_future_reply,
                "ai_status": EnrichmentStatus.DONE.value
            }).eq("id", capsule_id).execute()
        except Exception as e:
            logger.error(f"Error writing enrichment for capsule {capsule_id}: {e}")
            raise PersistenceError(f"Database update failed: {e}")

        if not result.data:
            logger.error(f"Enrichment update matched no capsule {capsule_id}")
            raise PersistenceError(f"Database update failed: capsule {capsule_id} not found")

        logger.info(f"Stored enrichment for capsule {capsule_id}")

    def mark_failed(self, capsule_id: str) -> bool:
        """
        Record that enrichment failed. Best effort.

        Only a pending capsule is moved to failed; a finished enrichment is
        never overwritten.

        Returns:
            True if the status was updated, False otherwise
        """
        try:
            result = self._client.table(self.TABLE).update({
                "ai_status": EnrichmentStatus.FAILED.value
            }).eq("id", capsule_id).eq(
                "ai_status", EnrichmentStatus.PENDING.value
            ).execute()

            if result.data:
                logger.info(f"Marked capsule {capsule_id} enrichment as failed")
                return True
            logger.warning(f"Failed-status update matched no pending capsule {capsule_id}")
            return False

        except Exception as e:
            logger.error(f"Error marking capsule {capsule_id} enrichment as failed: {e}")
            return False
