"""Local date/hour resolution for subscribers' IANA time zones."""

import logging
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Returned by local_hour() when the zone cannot be resolved
UNRESOLVABLE_HOUR = -1


def resolve_zone(zone: str | None) -> ZoneInfo | None:
    """Return the ZoneInfo for an IANA name, or None if it cannot be resolved."""
    if not zone:
        return None
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.debug(f"Unresolvable time zone: {zone!r}")
        return None


def _as_utc(now: datetime) -> datetime:
    # Naive instants are taken to be UTC
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


def local_date(zone: str | None, now: datetime) -> str:
    """Calendar date (YYYY-MM-DD) in ``zone`` at ``now``.

    Falls back to the UTC date when the zone is empty or invalid.
    """
    tz = resolve_zone(zone) or UTC
    return _as_utc(now).astimezone(tz).date().isoformat()


def local_hour(zone: str | None, now: datetime) -> int:
    """Wall-clock hour (0-23) in ``zone`` at ``now``.

    Returns UNRESOLVABLE_HOUR when the zone is empty or invalid, so callers skip
    the subscriber instead of guessing.
    """
    tz = resolve_zone(zone)
    if tz is None:
        return UNRESOLVABLE_HOUR
    return _as_utc(now).astimezone(tz).hour
