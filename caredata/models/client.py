from __future__ import annotations

"""
Client model (person info) — the care recipient.

Scoped by an optional `segment_id` exactly like client services and
documents.  `created_by` records the staff user who registered them.
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from caredata.models.base import Base, IntPrimaryKeyMixin, SegmentScopedMixin, TimestampMixin


class Client(Base, IntPrimaryKeyMixin, TimestampMixin, SegmentScopedMixin):
    __tablename__ = "clients"

    title: Mapped[str] = mapped_column(String(32), nullable=False)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    date_of_birth: Mapped[str] = mapped_column(String(10), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    home_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    mobile_phone: Mapped[str] = mapped_column(String(32), nullable=False)

    # ── Home address ─────────────────────────────────────────────────
    address_line1: Mapped[str] = mapped_column(String(256), nullable=False)
    address_line2: Mapped[str | None] = mapped_column(String(256), nullable=True)
    address_line3: Mapped[str | None] = mapped_column(String(256), nullable=True)
    post_code: Mapped[str] = mapped_column(String(16), nullable=False)

    # ── Mailing address ──────────────────────────────────────────────
    use_home_address: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    mailing_address_line1: Mapped[str | None] = mapped_column(String(256), nullable=True)
    mailing_address_line2: Mapped[str | None] = mapped_column(String(256), nullable=True)
    mailing_address_line3: Mapped[str | None] = mapped_column(String(256), nullable=True)
    mailing_post_code: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # ── Next of kin ──────────────────────────────────────────────────
    next_of_kin_name: Mapped[str] = mapped_column(String(256), nullable=False)
    next_of_kin_address: Mapped[str] = mapped_column(String(512), nullable=False)
    next_of_kin_email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    next_of_kin_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    next_of_kin_relationship: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # ── Home Care Package ────────────────────────────────────────────
    hcp_level: Mapped[str] = mapped_column(String(32), nullable=False)
    hcp_start_date: Mapped[str] = mapped_column(String(10), nullable=False)
    hcp_end_date: Mapped[str | None] = mapped_column(String(10), nullable=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="New")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Client {self.id} {self.full_name}>"
