"""
Lock status and countdown for capsules.

Nothing here is stored; everything is recomputed from the release timestamp,
the manual unlock flag and the instant passed in.
"""

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Tuple

from timecapsule.core.models import Capsule

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def earliest_release_date(now: Optional[datetime] = None) -> date:
    """First release date a new capsule may use: the current UTC calendar day."""
    now = now or utcnow()
    return now.astimezone(timezone.utc).date()


def is_locked(capsule: Capsule, now: Optional[datetime] = None) -> bool:
    """A capsule is locked until its release instant unless manually unlocked."""
    now = now or utcnow()
    return not capsule.is_unlocked and capsule.release_at > now


def time_remaining(capsule: Capsule, now: Optional[datetime] = None) -> Optional[str]:
    """
    Coarsest two units between now and release, or None once unlocked.

    Args:
        capsule: Capsule to evaluate
        now: Current instant (defaults to the wall clock)

    Returns:
        "D days, H hours", "H hours, M minutes" or "M minutes"
    """
    now = now or utcnow()
    if not is_locked(capsule, now):
        return None

    seconds = int((capsule.release_at - now).total_seconds())
    days = seconds // SECONDS_PER_DAY
    hours = (seconds // SECONDS_PER_HOUR) % 24
    minutes = (seconds // SECONDS_PER_MINUTE) % 60

    if days > 0:
        return f"{days} days, {hours} hours"
    if hours > 0:
        return f"{hours} hours, {minutes} minutes"
    return f"{minutes} minutes"


def countdown_label(capsule: Capsule, now: Optional[datetime] = None) -> Optional[str]:
    """Text shown under a locked capsule; refreshed every second by the detail view."""
    remaining = time_remaining(capsule, now)
    if remaining is None:
        return None
    return f"{remaining} remaining"


def partition(capsules: Iterable[Capsule], now: Optional[datetime] = None) -> Tuple[List[Capsule], List[Capsule]]:
    """Split capsules into (locked, unlocked), keeping their order."""
    now = now or utcnow()
    locked: List[Capsule] = []
    unlocked: List[Capsule] = []
    for capsule in capsules:
        (locked if is_locked(capsule, now) else unlocked).append(capsule)
    return locked, unlocked
