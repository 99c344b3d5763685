"""
Result wrapper for repository reads.

A failed read and an empty read are different outcomes; callers may still
choose to render both the same way.
"""

from typing import Generic, Optional, TypeVar

from timecapsule.core.errors import CapsuleError

T = TypeVar("T")


class Result(Generic[T]):
    """Either ``ok(value)`` or ``fail(error)``."""

    __slots__ = ("value", "error")

    def __init__(self, value: Optional[T] = None, error: Optional[CapsuleError] = None):
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: CapsuleError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        """Value on success, ``default`` on failure."""
        return self.value if self.is_ok else default

    def __repr__(self) -> str:
        if self.is_ok:
            return f"Result.ok({self.value!r})"
        return f"Result.fail({self.error!r})"
