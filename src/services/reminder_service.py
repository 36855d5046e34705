"""One reminder run: load subscriptions, pick eligible users, deliver, summarize."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from src.config import DispatcherConfig
from src.services.eligibility import EligibilityStatus, find_eligible_recipients
from src.services.notification_service import DeliverySummary, NotificationService
from src.services.reminder_store import ReminderStore

logger = logging.getLogger(__name__)


def format_hour(hour: int) -> str:
    """Format a 0-23 hour as a 12-hour clock label, e.g. 19 -> "7 PM"."""
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12} {suffix}"


@dataclass(frozen=True)
class DispatchReport:
    """What a reminder run did, convertible to the trigger's response payload."""

    status: EligibilityStatus
    reminder_hour: int
    summary: DeliverySummary | None = None

    @property
    def sent(self) -> int:
        return self.summary.sent if self.summary else 0

    @property
    def attempted(self) -> int:
        return self.summary.attempted if self.summary else 0

    def to_response(self) -> dict:
        if self.status == EligibilityStatus.NO_SUBSCRIPTIONS:
            return {"message": "No subscriptions found"}
        if self.status == EligibilityStatus.NONE_IN_REMINDER_HOUR:
            return {"message": f"No users in the {format_hour(self.reminder_hour)} hour right now"}

        summary = self.summary or DeliverySummary()
        return {
            "message": summary.message,
            "results": [outcome.to_dict() for outcome in summary.outcomes],
        }


class ReminderDispatcher:
    """Runs the hourly reminder job against a database session.

    Data-access errors propagate so the caller can report the whole run as failed;
    per-recipient delivery errors are folded into the summary.
    """

    def __init__(
        self,
        config: DispatcherConfig,
        notification_service: NotificationService | None = None,
    ) -> None:
        self.config = config
        self.notifications = notification_service or NotificationService(config)

    async def run(self, db: Session, now: datetime | None = None) -> DispatchReport:
        now = now or datetime.now(UTC)
        store = ReminderStore(db)

        subscriptions = store.list_subscriptions()
        eligibility = find_eligible_recipients(
            subscriptions,
            store,
            now,
            reminder_hour=self.config.reminder_hour,
            default_timezone=self.config.default_timezone,
        )

        if eligibility.status != EligibilityStatus.READY:
            logger.info(f"No reminders to send ({eligibility.status.value})")
            return DispatchReport(eligibility.status, self.config.reminder_hour)

        logger.info(f"Sending reminders to {len(eligibility.recipients)} users")
        summary = await self.notifications.send_reminders(eligibility.recipients, now)
        return DispatchReport(eligibility.status, self.config.reminder_hour, summary)
