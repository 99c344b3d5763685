"""
HTML fragments rendered by the Streamlit pages.
Capsule text is user-supplied and is escaped before it reaches markup.
"""

import html
from datetime import datetime
from typing import Optional

from timecapsule.core.lifecycle import countdown_label, is_locked, utcnow
from timecapsule.core.models import Capsule


def capsule_card(capsule: Capsule, now: Optional[datetime] = None) -> str:
    """Dashboard card: lock icon, title and the relevant date."""
    now = now or utcnow()
    if is_locked(capsule, now):
        icon, card_cls = "🔒", "capsule-card capsule-locked"
        when = f"Unlocks {capsule.release_at:%b %d, %Y}"
    else:
        icon, card_cls = "🔓", "capsule-card"
        when = f"Created {capsule.created_at:%b %d, %Y}"

    return (
        f'<div class="{card_cls}"><strong>{icon} {html.escape(capsule.title)}</strong>'
        f'<div class="capsule-meta">{when}</div></div>'
    )


def countdown_badge(capsule: Capsule, now: Optional[datetime] = None) -> Optional[str]:
    """Countdown line of the detail view, or None once the capsule is open."""
    label = countdown_label(capsule, now)
    if label is None:
        return None
    return f'<div class="countdown">⏱ {label}</div>'
