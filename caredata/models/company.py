from __future__ import annotations

"""
Company & Segment models — the two-level tenancy hierarchy.

A Company owns zero or more Segments.  A segment's `company_id` is set
at creation and never changes; only its name is editable.  Neither
table has a delete path.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caredata.models.base import Base


class Company(Base):
    __tablename__ = "companies"

    company_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_name: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)
    registered_address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    postal_address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    contact_person_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    contact_person_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    contact_person_email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    # No FK: users.company_id already references this table.
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ────────────────────────────────────────────────
    segments: Mapped[list["Segment"]] = relationship(
        back_populates="company",
        lazy="selectin",
        order_by="Segment.segment_id",
    )

    def __repr__(self) -> str:
        return f"<Company {self.company_name}>"


class Segment(Base):
    __tablename__ = "segments"

    segment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("companies.company_id"),
        nullable=False,
        index=True,
    )
    segment_name: Mapped[str] = mapped_column(String(256), nullable=False)
    created_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    company: Mapped["Company"] = relationship(back_populates="segments", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("company_id", "segment_name", name="uq_segments_company_name"),
    )

    def __repr__(self) -> str:
        return f"<Segment {self.segment_id} company={self.company_id}>"
