"""Human-relative timestamps ("3 minutes ago").

Thresholds follow the usual conventions of chat clients: under 45 seconds
is "a few seconds", under 45 minutes counts minutes, under 22 hours counts
hours, under 26 days counts days, under 11 months counts months.
"""

import math
from datetime import datetime, timezone


def _round(value: float) -> int:
    """Round half up (Python's round() rounds half to even)."""
    return int(math.floor(value + 0.5))


def _humanize(seconds: float) -> str:
    secs = _round(seconds)
    minutes = _round(seconds / 60)
    hours = _round(seconds / 3600)
    days = _round(seconds / 86400)
    months = _round(seconds / 86400 * 4800 / 146097)
    years = _round(seconds / 86400 * 400 / 146097)

    if secs <= 44:
        return "a few seconds"
    if minutes <= 1:
        return "a minute"
    if minutes < 45:
        return f"{minutes} minutes"
    if hours <= 1:
        return "an hour"
    if hours < 22:
        return f"{hours} hours"
    if days <= 1:
        return "a day"
    if days < 26:
        return f"{days} days"
    if months <= 1:
        return "a month"
    if months < 11:
        return f"{months} months"
    if years <= 1:
        return "a year"
    return f"{years} years"


def format_relative_age(created_at: datetime, now: datetime | None = None) -> str:
    """Describe ``created_at`` relative to ``now``.

    Args:
        created_at: Timestamp to describe (naive values are taken as UTC)
        now: Reference time, defaults to the current UTC time

    Returns:
        "a few seconds ago", "3 minutes ago", "in an hour", ...
    """
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    delta = (now - created_at).total_seconds()
    phrase = _humanize(abs(delta))
    return f"in {phrase}" if delta < 0 else f"{phrase} ago"
