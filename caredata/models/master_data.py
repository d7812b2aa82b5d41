from __future__ import annotations

"""
MasterData model — the service taxonomy.

A combination is identified by (category, type, provider, segment_id).
`segment_id` NULL means a global entry; the same string triple in two
segments (or one scoped, one global) are different combinations.

The unique constraint backs the application-level existence check.
Postgres treats NULLs as distinct, so global duplicates are only
prevented by that check.
"""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from caredata.models.base import Base, IntPrimaryKeyMixin, SegmentScopedMixin, TimestampMixin


class MasterData(Base, IntPrimaryKeyMixin, TimestampMixin, SegmentScopedMixin):
    __tablename__ = "master_data"

    service_category: Mapped[str] = mapped_column(String(256), nullable=False)
    service_type: Mapped[str] = mapped_column(String(256), nullable=False)
    service_provider: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint(
            "service_category",
            "service_type",
            "service_provider",
            "segment_id",
            name="uq_master_data_combination",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<MasterData {self.service_category}/{self.service_type}/"
            f"{self.service_provider} segment={self.segment_id}>"
        )
