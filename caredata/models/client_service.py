from __future__ import annotations

"""
ClientService model — a client's assignment to a master-data service.

The (category, type, provider, segment_id) columns repeat the master
data combination by value rather than by FK; the consistency guard in
master_data_service keeps the two in step.  After creation the only
permitted mutation is a status change.
"""

import enum
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Date, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caredata.models.base import Base, IntPrimaryKeyMixin, SegmentScopedMixin, TimestampMixin

if TYPE_CHECKING:
    from caredata.models.client import Client


class ServiceStatus(str, enum.Enum):
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


class ClientService(Base, IntPrimaryKeyMixin, TimestampMixin, SegmentScopedMixin):
    __tablename__ = "client_services"

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_category: Mapped[str] = mapped_column(String(256), nullable=False)
    service_type: Mapped[str] = mapped_column(String(256), nullable=False)
    service_provider: Mapped[str] = mapped_column(String(256), nullable=False)
    service_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    service_days: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    service_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ServiceStatus] = mapped_column(
        Enum(
            ServiceStatus,
            name="service_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=ServiceStatus.PLANNED,
        nullable=False,
    )

    # ── Relationships ────────────────────────────────────────────────
    client: Mapped["Client"] = relationship(lazy="selectin")  # noqa: F821

    __table_args__ = (
        Index(
            "ix_client_services_combination",
            "service_category",
            "service_type",
            "service_provider",
            "segment_id",
        ),
    )

    def __repr__(self) -> str:
        return f"<ClientService {self.id} client={self.client_id} [{self.status.value}]>"
