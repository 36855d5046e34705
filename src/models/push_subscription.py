"""Push subscription model for web push notifications."""

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin, UserOwnedMixin


class PushSubscription(Base, UserOwnedMixin, TimestampMixin):
    """A user's browser push subscription.

    One row per user; the client upserts on ``user_id`` whenever it renews the
    subscription and deletes the row when reminders are disabled.
    """

    __tablename__ = "push_subscriptions"
    one_per_user = True

    id = Column(Integer, primary_key=True, index=True)
    endpoint = Column(Text, nullable=False)
    # base64url of the 65-byte uncompressed P-256 point
    p256dh = Column(String(200), nullable=False)
    # base64url of the 16-byte auth secret
    auth = Column(String(100), nullable=False)
    # IANA zone reported by the browser; NULL means UTC
    timezone = Column(String(64), nullable=True)

    # Relationships
    user = relationship("User", back_populates="push_subscription")
