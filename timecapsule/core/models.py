"""
Data models for the time capsule application.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EnrichmentStatus(str, Enum):
    """Observable outcome of the AI enrichment step."""
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class Capsule(BaseModel):
    """Capsule model representing the capsules table.

    Field names follow the domain; aliases follow the table columns so rows
    returned by Supabase validate directly.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner_id: str = Field(alias="user_id")
    title: str
    content: str
    release_at: datetime = Field(alias="release_date")
    created_at: datetime
    media_url: Optional[str] = Field(default=None, alias="file_url")
    media_type: Optional[str] = Field(default=None, alias="file_type")
    is_public: bool = False
    is_unlocked: bool = False
    ai_summary: Optional[str] = None
    ai_future_reply: Optional[str] = None
    ai_status: Optional[EnrichmentStatus] = None

    @field_validator("release_at", "created_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("is_public", "is_unlocked", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Capsule":
        """Build a capsule from a raw table row."""
        return cls.model_validate(record)

    @property
    def has_media(self) -> bool:
        return bool(self.media_url)

    @property
    def enrichment_status(self) -> EnrichmentStatus:
        """Enrichment status, inferred for rows written before ai_status existed."""
        if self.ai_status is not None:
            return self.ai_status
        if self.ai_summary or self.ai_future_reply:
            return EnrichmentStatus.DONE
        return EnrichmentStatus.PENDING


class CapsuleCreate(BaseModel):
    """Model for inserting a new capsule."""
    owner_id: str
    title: str
    content: str
    release_at: datetime
    media_url: Optional[str] = None
    media_type: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "user_id": self.owner_id,
            "title": self.title,
            "content": self.content,
            "release_date": _as_utc(self.release_at).isoformat(),
            "file_url": self.media_url,
            "file_type": self.media_type,
            "ai_status": EnrichmentStatus.PENDING.value
        }


class MediaFile(BaseModel):
    """An attachment selected in the create form."""
    filename: str
    content_type: str = "application/octet-stream"
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        if "." not in self.filename:
            return "bin"
        return self.filename.rsplit(".", 1)[-1].lower() or "bin"


class Session(BaseModel):
    """Authenticated end-user context passed to every repository call."""
    user_id: str
    email: Optional[str] = None
    access_token: str
    refresh_token: Optional[str] = None


class EnrichmentRequest(BaseModel):
    """Body of the enrichment endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    capsule_id: Optional[str] = Field(default=None, alias="capsuleId")
    title: Optional[str] = ""
    content: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.capsule_id) and bool(self.content)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "capsuleId": self.capsule_id,
            "title": self.title or "",
            "content": self.content
        }


class EnrichmentResult(BaseModel):
    """Successful enrichment response."""
    success: bool = True
    ai_summary: str
    ai_future_reply: str
