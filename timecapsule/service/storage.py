"""
Media storage for capsule attachments.
Uploads files to Supabase Storage and issues long-lived signed URLs.
"""

import logging
import uuid
from typing import Any, Tuple
from supabase import Client

from timecapsule.core.config import config
from timecapsule.core.errors import UploadError
from timecapsule.core.models import MediaFile

logger = logging.getLogger(__name__)

def _signed_url_from(result: Any) -> str:
    """The storage client has used both key spellings across releases."""
    if isinstance(result, dict):
        return result.get("signedURL") or result.get("signedUrl") or ""
    return getattr(result, "signed_url", "") or ""

class MediaStorage:
    """Storage operations for capsule media."""

    def __init__(self, supabase_client: Client, bucket_name: str = None, signed_url_ttl: int = None):
        """
        Initialize media storage operations.

        Args:
            supabase_client: Supabase client authenticated as the uploader
            bucket_name: Storage bucket (defaults to config)
            signed_url_ttl: Signed URL validity in seconds (defaults to config)
        """
        self.client = supabase_client
        self.bucket_name = bucket_name or config.media_bucket
        self.signed_url_ttl = signed_url_ttl or config.signed_url_ttl

    @staticmethod
    def build_path(owner_id: str, media: MediaFile) -> str:
        """Objects are namespaced by owner with a generated filename."""
        return f"{owner_id}/{uuid.uuid4()}.{media.extension}"

    def upload(self, owner_id: str, media: MediaFile) -> Tuple[str, str]:
        """
        Upload a media file and sign a URL for it.

        Args:
            owner_id: Owner of the capsule
            media: File to upload

        Returns:
            Tuple of (storage_path, signed_url)

        Raises:
            UploadError: if the upload or the signing fails
        """
        storage_path = self.build_path(owner_id, media)
        bucket = self.client.storage.from_(self.bucket_name)

        logger.info(f"🔄 Uploading {media.size} bytes to {self.bucket_name}/{storage_path}")
        try:
            bucket.upload(
                path=storage_path,
                file=media.data,
                file_options={"content-type": media.content_type}
            )
        except Exception as e:
            logger.error(f"Error uploading media to {storage_path}: {e}")
            raise UploadError(f"Failed to upload media: {e}")

        try:
            signed_url = _signed_url_from(bucket.create_signed_url(storage_path, self.signed_url_ttl))
        except Exception as e:
            logger.error(f"Error signing URL for {storage_path}: {e}")
            raise UploadError(f"Failed to generate signed URL for media file: {e}")

        if not signed_url:
            raise UploadError("Failed to generate signed URL for media file")

        logger.info(f"✅ Uploaded media to {storage_path}")
        return storage_path, signed_url
