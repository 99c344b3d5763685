"""
Capsule repository.
Translates create/list/get-one into Supabase operations on behalf of a signed-in
user and hands new capsules to the enrichment dispatcher.
"""

import logging
import uuid
from datetime import date, datetime, time, timezone
from typing import Callable, List, Optional, Union

from timecapsule.core.config import config
from timecapsule.core.errors import (
    AuthError,
    CapsuleError,
    PersistenceError,
    UploadError,
    ValidationError,
)
from timecapsule.core.lifecycle import earliest_release_date, utcnow
from timecapsule.core.models import (
    Capsule,
    CapsuleCreate,
    EnrichmentStatus,
    MediaFile,
    Session,
)
from timecapsule.core.result import Result
from timecapsule.service.gateway import SupabaseGateway
from timecapsule.service.storage import MediaStorage
from timecapsule.worker.dispatcher import EnrichmentDispatcher, EnrichmentJob

logger = logging.getLogger(__name__)

def _as_release_instant(release_at: Union[date, datetime]) -> datetime:
    """A bare date means midnight UTC of that day."""
    if isinstance(release_at, datetime):
        if release_at.tzinfo is None:
            return release_at.replace(tzinfo=timezone.utc)
        return release_at
    return datetime.combine(release_at, time.min, tzinfo=timezone.utc)

def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False

class CapsuleRepository:
    """Capsule operations scoped to the caller's session."""

    TABLE = "capsules"

    def __init__(
        self,
        gateway: SupabaseGateway,
        dispatcher: Optional[EnrichmentDispatcher] = None,
        max_media_bytes: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize the repository.

        Args:
            gateway: Source of user-scoped Supabase clients
            dispatcher: Enrichment dispatcher (the shared background one if None)
            max_media_bytes: Upload ceiling (defaults to config)
            clock: Source of the current instant
        """
        self.gateway = gateway
        self._dispatcher = dispatcher
        self.max_media_bytes = max_media_bytes or config.max_media_bytes
        self.clock = clock

    @property
    def dispatcher(self) -> EnrichmentDispatcher:
        if self._dispatcher is None:
            from timecapsule.worker.manager import get_dispatcher
            self._dispatcher = get_dispatcher()
        return self._dispatcher

    def list_capsules(self, session: Optional[Session]) -> Result[List[Capsule]]:
        """
        All capsules owned by the session's user, newest first.

        Args:
            session: Current session

        Returns:
            Result with the capsules, or with AuthError / PersistenceError
        """
        if session is None:
            logger.debug("No session, listing no capsules")
            return Result.fail(AuthError("User not authenticated"))

        try:
            result = self.gateway.for_session(session).table(self.TABLE).select("*").eq(
                "user_id", session.user_id
            ).order(
                "created_at", desc=True
            ).execute()

            capsules = [Capsule.from_record(row) for row in (result.data or [])]
            logger.info(f"Found {len(capsules)} capsules for user {session.user_id}")
            return Result.ok(capsules)

        except CapsuleError as e:
            logger.error(f"Error fetching capsules: {e}")
            return Result.fail(e)
        except Exception as e:
            logger.error(f"Error fetching capsules: {e}")
            return Result.fail(PersistenceError(f"Failed to fetch capsules: {e}"))

    def get_one(self, session: Optional[Session], capsule_id: str) -> Result[Optional[Capsule]]:
        """
        Fetch one capsule owned by the session's user.

        An id that does not exist, is malformed, or belongs to someone else is
        reported as not-found (``ok(None)``).

        Args:
            session: Current session
            capsule_id: ID of the capsule

        Returns:
            Result with the capsule or None, or with AuthError / PersistenceError
        """
        if session is None:
            return Result.fail(AuthError("User not authenticated"))

        if not capsule_id or not _is_uuid(capsule_id):
            return Result.ok(None)

        try:
            result = self.gateway.for_session(session).table(self.TABLE).select("*").eq(
                "id", capsule_id
            ).eq("user_id", session.user_id).execute()

            if not result.data:
                logger.info(f"Capsule {capsule_id} not found for user {session.user_id}")
                return Result.ok(None)

            return Result.ok(Capsule.from_record(result.data[0]))

        except CapsuleError as e:
            logger.error(f"Error fetching capsule {capsule_id}: {e}")
            return Result.fail(e)
        except Exception as e:
            logger.error(f"Error fetching capsule {capsule_id}: {e}")
            return Result.fail(PersistenceError(f"Failed to fetch capsule: {e}"))

    def validate(
        self,
        title: str,
        content: str,
        release_at: Union[date, datetime],
        media: Optional[MediaFile] = None
    ) -> datetime:
        """
        Check a create request without touching the network.

        Returns:
            The release instant

        Raises:
            ValidationError: empty title/content or a release date in the past
            UploadError: media larger than the ceiling
        """
        if not title or not title.strip():
            raise ValidationError("Title is required")
        if not content or not content.strip():
            raise ValidationError("Message is required")
        if release_at is None:
            raise ValidationError("Release date is required")

        release_instant = _as_release_instant(release_at)
        if release_instant.astimezone(timezone.utc).date() < earliest_release_date(self.clock()):
            raise ValidationError("Release date cannot be in the past")

        if media is not None and media.size > self.max_media_bytes:
            limit_mb = self.max_media_bytes // (1024 * 1024)
            raise UploadError(f"File size must be less than {limit_mb}MB")

        return release_instant

    def create(
        self,
        session: Optional[Session],
        title: str,
        content: str,
        release_at: Union[date, datetime],
        media: Optional[MediaFile] = None
    ) -> Capsule:
        """
        Create a capsule and submit it for enrichment.

        Media is uploaded and signed before the row is written, so a row never
        points at a missing object. Enrichment runs in the background; its
        outcome never affects the return value.

        Returns:
            The persisted capsule (AI fields absent)

        Raises:
            AuthError, ValidationError, UploadError, PersistenceError
        """
        if session is None:
            raise AuthError("User not authenticated")

        release_instant = self.validate(title, content, release_at, media)
        client = self.gateway.for_session(session)

        media_url = None
        media_type = None
        if media is not None:
            _, media_url = MediaStorage(client).upload(session.user_id, media)
            media_type = media.content_type

        new_capsule = CapsuleCreate(
            owner_id=session.user_id,
            title=title.strip(),
            content=content,
            release_at=release_instant,
            media_url=media_url,
            media_type=media_type
        )

        try:
            result = client.table(self.TABLE).insert(new_capsule.to_record()).execute()
        except Exception as e:
            logger.error(f"Error creating capsule: {e}")
            raise PersistenceError(f"Failed to create capsule: {e}")

        if not result.data:
            logger.error("Capsule insert returned no record")
            raise PersistenceError("Failed to create capsule record")

        capsule = Capsule.from_record(result.data[0])
        logger.info(f"✅ Created capsule {capsule.id} for user {session.user_id}")

        self._request_enrichment(session, capsule)
        return capsule

    def _request_enrichment(self, session: Session, capsule: Capsule):
        job = EnrichmentJob(
            capsule_id=capsule.id,
            title=capsule.title,
            content=capsule.content,
            on_failure=lambda: self.mark_enrichment_failed(session, capsule.id)
        )
        try:
            self.dispatcher.submit(job)
        except Exception as e:
            logger.error(f"AI processing could not be queued for capsule {capsule.id}: {e}")

    def mark_enrichment_failed(self, session: Session, capsule_id: str) -> bool:
        """
        Record a failed enrichment delivery on the caller's own capsule.

        Returns:
            True if the status was updated, False otherwise
        """
        try:
            result = self.gateway.for_session(session).table(self.TABLE).update({
                "ai_status": EnrichmentStatus.FAILED.value
            }).eq("id", capsule_id).eq("user_id", session.user_id).eq(
                "ai_status", EnrichmentStatus.PENDING.value
            ).execute()
            return bool(result.data)

        except Exception as e:
            logger.error(f"Error marking capsule {capsule_id} enrichment as failed: {e}")
            return False
