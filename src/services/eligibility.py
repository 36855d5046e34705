"""Decides which subscribers should get a reminder at a given instant."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from src.config import REMINDER_HOUR
from src.services.base64url import b64url_decode
from src.services.push_encryption import AUTH_SECRET_LENGTH, PUBLIC_KEY_LENGTH
from src.services.reminder_store import SubscriptionRecord
from src.services.timezones import UNRESOLVABLE_HOUR, local_date, local_hour

logger = logging.getLogger(__name__)


class EntryLookup(Protocol):
    def logged_user_ids(self, local_date: str, user_ids: Iterable[int]) -> set[int]: ...


class EligibilityStatus(str, Enum):
    """How an eligibility pass ended."""

    NO_SUBSCRIPTIONS = "no_subscriptions"
    NONE_IN_REMINDER_HOUR = "none_in_reminder_hour"
    READY = "ready"


@dataclass(frozen=True)
class EligibleRecipient:
    """A subscriber who is in the reminder hour and has not logged today."""

    user_id: int
    endpoint: str
    client_public_key: bytes
    client_auth_secret: bytes
    local_date: str


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of one eligibility pass."""

    status: EligibilityStatus
    recipients: tuple[EligibleRecipient, ...] = ()


def _decode_keys(sub: SubscriptionRecord) -> tuple[bytes, bytes] | None:
    try:
        public_key = b64url_decode(sub.p256dh)
        auth_secret = b64url_decode(sub.auth)
    except ValueError:
        return None
    if len(public_key) != PUBLIC_KEY_LENGTH or len(auth_secret) != AUTH_SECRET_LENGTH:
        return None
    return public_key, auth_secret


def find_eligible_recipients(
    subscriptions: Sequence[SubscriptionRecord],
    entries: EntryLookup,
    now: datetime,
    reminder_hour: int = REMINDER_HOUR,
    default_timezone: str = "UTC",
) -> EligibilityResult:
    """Select subscribers whose local hour is ``reminder_hour`` and who have no entry today.

    Subscriptions without a stored zone use ``default_timezone``. Subscriptions whose zone
    cannot be resolved are never notified. Entries are checked with one query per distinct
    local date.
    """
    if not subscriptions:
        return EligibilityResult(EligibilityStatus.NO_SUBSCRIPTIONS)

    in_hour: list[tuple[SubscriptionRecord, str]] = []
    for sub in subscriptions:
        zone = sub.timezone or default_timezone
        hour = local_hour(zone, now)
        if hour == UNRESOLVABLE_HOUR:
            logger.warning(f"Skipping user {sub.user_id}: unresolvable time zone {zone!r}")
            continue
        if hour == reminder_hour:
            in_hour.append((sub, zone))

    if not in_hour:
        return EligibilityResult(EligibilityStatus.NONE_IN_REMINDER_HOUR)

    # Group by local date so each date needs a single entries query
    by_date: dict[str, list[tuple[SubscriptionRecord, bytes, bytes]]] = {}
    for sub, zone in in_hour:
        keys = _decode_keys(sub)
        if keys is None:
            logger.warning(f"Skipping user {sub.user_id}: malformed subscription keys")
            continue
        by_date.setdefault(local_date(zone, now), []).append((sub, *keys))

    recipients: list[EligibleRecipient] = []
    for day, group in by_date.items():
        logged = entries.logged_user_ids(day, [sub.user_id for sub, _, _ in group])
        for sub, public_key, auth_secret in group:
            if sub.user_id in logged:
                continue
            recipients.append(
                EligibleRecipient(
                    user_id=sub.user_id,
                    endpoint=sub.endpoint,
                    client_public_key=public_key,
                    client_auth_secret=auth_secret,
                    local_date=day,
                )
            )

    logger.info(
        f"{len(in_hour)} subscriptions in the reminder hour, "
        f"{len(recipients)} still need a reminder"
    )
    return EligibilityResult(EligibilityStatus.READY, tuple(recipients))
