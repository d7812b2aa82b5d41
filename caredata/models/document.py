from __future__ import annotations

"""
Document & ServiceCaseNote models.

Both carry `created_by` and an optional `segment_id` and are scoped
the same way as the client rows they hang off.  A document's bytes
live in the DocumentStore; only the relative `file_path` is stored.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from caredata.models.base import Base, IntPrimaryKeyMixin, SegmentScopedMixin, TimestampMixin


class Document(Base, IntPrimaryKeyMixin, SegmentScopedMixin):
    __tablename__ = "documents"

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_name: Mapped[str] = mapped_column(String(256), nullable=False)
    document_type: Mapped[str] = mapped_column(String(64), nullable=False)
    filename: Mapped[str] = mapped_column(String(256), nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Document {self.id} {self.filename}>"


class ServiceCaseNote(Base, IntPrimaryKeyMixin, TimestampMixin, SegmentScopedMixin):
    __tablename__ = "service_case_notes"

    service_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("client_services.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    note_text: Mapped[str] = mapped_column(Text, nullable=False)
    updated_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<ServiceCaseNote service={self.service_id}>"
