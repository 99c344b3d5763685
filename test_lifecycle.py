"""
Lock status and countdown tests.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import NOW
from timecapsule.core.display import capsule_card, countdown_badge
from timecapsule.core.lifecycle import (
    countdown_label,
    earliest_release_date,
    is_locked,
    partition,
    time_remaining,
)
from timecapsule.core.models import Capsule


def make_capsule(release_delta: timedelta, is_unlocked: bool = False, title: str = "Letter") -> Capsule:
    return Capsule(
        id="5b0c5a4e-3f43-4d7e-9a0b-0f0f0f0f0f0f",
        owner_id="alice",
        title=title,
        content="Hello future me",
        release_at=NOW + release_delta,
        created_at=NOW - timedelta(days=1),
        is_unlocked=is_unlocked,
    )


class TestIsLocked:

    @pytest.mark.parametrize("delta", [timedelta(days=-400), timedelta(0), timedelta(days=3650)])
    def test_manual_unlock_wins_over_release_date(self, delta):
        assert is_locked(make_capsule(delta, is_unlocked=True), NOW) is False

    def test_future_release_is_locked(self):
        assert is_locked(make_capsule(timedelta(seconds=1)), NOW) is True

    def test_past_release_is_unlocked(self):
        assert is_locked(make_capsule(timedelta(seconds=-1)), NOW) is False

    def test_unlocks_exactly_at_release(self):
        assert is_locked(make_capsule(timedelta(0)), NOW) is False


class TestTimeRemaining:

    def test_days_and_hours(self):
        capsule = make_capsule(timedelta(days=3, hours=5, minutes=59))
        assert time_remaining(capsule, NOW) == "3 days, 5 hours"

    def test_hours_and_minutes(self):
        capsule = make_capsule(timedelta(hours=2, minutes=7, seconds=30))
        assert time_remaining(capsule, NOW) == "2 hours, 7 minutes"

    def test_ninety_seconds_reports_minutes_only(self):
        capsule = make_capsule(timedelta(seconds=90))
        assert time_remaining(capsule, NOW) == "1 minutes"

    def test_under_a_minute_floors_to_zero_minutes(self):
        capsule = make_capsule(timedelta(seconds=59))
        assert time_remaining(capsule, NOW) == "0 minutes"

    def test_none_at_release(self):
        assert time_remaining(make_capsule(timedelta(0)), NOW) is None

    def test_none_when_manually_unlocked(self):
        assert time_remaining(make_capsule(timedelta(days=5), is_unlocked=True), NOW) is None

    def test_never_increases_as_time_passes(self):
        capsule = make_capsule(timedelta(days=1, hours=1, minutes=1))

        def total_minutes(label):
            if label is None:
                return 0
            parts = dict(
                (unit, int(value))
                for value, unit in (chunk.split() for chunk in label.split(", "))
            )
            return parts.get("days", 0) * 1440 + parts.get("hours", 0) * 60 + parts.get("minutes", 0)

        previous = None
        for step in range(0, 26 * 3600, 997):
            current = total_minutes(time_remaining(capsule, NOW + timedelta(seconds=step)))
            if previous is not None:
                assert current <= previous
            previous = current

    def test_countdown_label(self):
        assert countdown_label(make_capsule(timedelta(hours=1, minutes=1)), NOW) == "1 hours, 1 minutes remaining"
        assert countdown_label(make_capsule(timedelta(hours=-1)), NOW) is None


def test_partition_keeps_order():
    first = make_capsule(timedelta(days=1), title="first")
    second = make_capsule(timedelta(days=-1), title="second")
    third = make_capsule(timedelta(days=2), is_unlocked=True, title="third")
    fourth = make_capsule(timedelta(hours=1), title="fourth")

    locked, unlocked = partition([first, second, third, fourth], NOW)

    assert [c.title for c in locked] == ["first", "fourth"]
    assert [c.title for c in unlocked] == ["second", "third"]


class TestEarliestReleaseDate:

    def test_uses_utc_calendar_day(self):
        # 23:30 in New York is already the next day in UTC
        evening_behind_utc = datetime(2026, 10, 19, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert earliest_release_date(evening_behind_utc) == date(2026, 10, 20)

    def test_same_day_in_utc(self):
        assert earliest_release_date(NOW) == NOW.date()


class TestDisplay:

    def test_card_escapes_title(self):
        card = capsule_card(make_capsule(timedelta(days=2), title='<img src=x onerror="alert(1)">'), NOW)
        assert "<img" not in card
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in card

    def test_locked_card_shows_release_date(self):
        card = capsule_card(make_capsule(timedelta(days=2)), NOW)
        assert "capsule-locked" in card
        assert "🔒" in card
        assert f"Unlocks {NOW + timedelta(days=2):%b %d, %Y}" in card

    def test_unlocked_card_shows_creation_date(self):
        card = capsule_card(make_capsule(timedelta(days=-2)), NOW)
        assert "capsule-locked" not in card
        assert f"Created {NOW - timedelta(days=1):%b %d, %Y}" in card

    def test_countdown_badge(self):
        assert "1 days, 0 hours remaining" in countdown_badge(make_capsule(timedelta(days=1)), NOW)
        assert countdown_badge(make_capsule(timedelta(0)), NOW) is None
