"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Account that owns daily entries and a push subscription."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)

    # Relationships
    entries = relationship("DailyEntry", back_populates="user", cascade="all, delete-orphan")
    push_subscription = relationship(
        "PushSubscription",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
