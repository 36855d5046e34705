"""Read-only queries the reminder dispatcher runs against the database."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.models import DailyEntry, PushSubscription

logger = logging.getLogger(__name__)


class DataAccessError(RuntimeError):
    """Raised when subscriptions or entries cannot be read."""


@dataclass(frozen=True)
class SubscriptionRecord:
    """Detached copy of a push_subscriptions row."""

    user_id: int
    endpoint: str
    p256dh: str
    auth: str
    timezone: str | None = None


class ReminderStore:
    """Loads subscriptions and checks which users already logged a day."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_subscriptions(self) -> list[SubscriptionRecord]:
        """Return every push subscription."""
        try:
            rows = (
                self.db.query(
                    PushSubscription.user_id,
                    PushSubscription.endpoint,
                    PushSubscription.p256dh,
                    PushSubscription.auth,
                    PushSubscription.timezone,
                )
                .order_by(PushSubscription.user_id)
                .all()
            )
        except SQLAlchemyError as e:
            raise DataAccessError(f"Failed to load push subscriptions: {e}") from e

        return [
            SubscriptionRecord(
                user_id=row.user_id,
                endpoint=row.endpoint,
                p256dh=row.p256dh,
                auth=row.auth,
                timezone=row.timezone,
            )
            for row in rows
        ]

    def logged_user_ids(self, local_date: str, user_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``user_ids`` with an entry dated ``local_date``."""
        user_ids = list(user_ids)
        if not user_ids:
            return set()

        try:
            rows = (
                self.db.query(DailyEntry.user_id)
                .filter(
                    DailyEntry.date == date.fromisoformat(local_date),
                    DailyEntry.user_id.in_(user_ids),
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise DataAccessError(f"Failed to load entries for {local_date}: {e}") from e

        return {user_id for (user_id,) in rows}
