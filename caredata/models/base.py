"""
Declarative base & shared mixins for the care-data models.

- `IntPrimaryKeyMixin`: integer `id` key (serial on Postgres).
- `TimestampMixin`: `created_at` / `updated_at` (UTC, auto-managed).
- `SegmentScopedMixin`: the nullable `segment_id` every tenant record
  carries (NULL = unscoped) plus the `created_by` staff user.
  `segment_filter` and `authorize_row` read this column.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base — all models inherit from this."""
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class IntPrimaryKeyMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class SegmentScopedMixin:
    """Segment ownership and authorship for clients, services, documents and notes."""

    segment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("segments.segment_id"),
        nullable=True,
        index=True,
    )
    created_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
