"""Database base class and imports."""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models."""

    pass


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    Uses timezone-aware datetime columns (TIMESTAMP WITH TIME ZONE in PostgreSQL)
    to match the timezone-aware default values from datetime.now(UTC).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class VersionedMixin:
    """Mixin for an optimistic concurrency counter.

    Writers update a row only ``WHERE version = <version they read>`` and
    bump it in the same statement, so a concurrent writer's update matches
    zero rows instead of silently overwriting.
    """

    version: Mapped[int] = mapped_column(default=1, nullable=False)


__all__ = ["Base", "TimestampMixin", "VersionedMixin"]
