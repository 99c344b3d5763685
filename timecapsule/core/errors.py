"""
Error taxonomy for the time capsule application.
"""

from typing import Optional


class CapsuleError(Exception):
    """Base class for all capsule errors."""


class ValidationError(CapsuleError):
    """Bad or missing input the user can correct."""


class AuthError(CapsuleError):
    """No session, or the session was rejected."""


class UploadError(CapsuleError):
    """Media exceeded the size ceiling or the upload transport failed."""


class PersistenceError(CapsuleError):
    """A capsule record could not be read or written."""


class ConfigurationError(CapsuleError):
    """A required credential or setting is missing on the server."""


class EnrichmentError(CapsuleError):
    """The AI backend or the enrichment write failed."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage
