"""SQLAlchemy models."""

from src.models.entry import DailyEntry
from src.models.push_subscription import PushSubscription
from src.models.user import User

__all__ = [
    "User",
    "DailyEntry",
    "PushSubscription",
]
