"""Mixins for SQLAlchemy models."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import declared_attr


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UserOwnedMixin:
    """Mixin for rows that belong to exactly one user.

    Set ``one_per_user`` on the model when a user may own at most one row.
    """

    one_per_user = False

    @declared_attr
    def user_id(cls):
        return Column(
            Integer,
            ForeignKey("users.id"),
            nullable=False,
            unique=cls.one_per_user,
            index=True,
        )
