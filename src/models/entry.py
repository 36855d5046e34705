"""Daily check-in entry model."""

from sqlalchemy import Boolean, Column, Date, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin, UserOwnedMixin


class DailyEntry(Base, UserOwnedMixin, TimestampMixin):
    """One check-in per user per local calendar day."""

    __tablename__ = "entries"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_entries_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)

    # Habit answers; NULL until answered
    exercise = Column(Boolean, nullable=True)
    healthy = Column(Boolean, nullable=True)
    outside = Column(Boolean, nullable=True)
    sleep = Column(Boolean, nullable=True)
    social = Column(Boolean, nullable=True)
    mood = Column(Integer, nullable=True)  # 1-5
    note = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="entries")
