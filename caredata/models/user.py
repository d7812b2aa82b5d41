from __future__ import annotations

"""
User model.

Design decisions:
- Two roles only (admin | user), stored as an ENUM.
- `company_id` is the tenancy anchor.  A non-admin user MUST have one;
  an admin without one is a *global admin* with cross-tenant access.
  The invariant is enforced in user_service, not by a DB constraint,
  because it depends on the role.
"""

import enum

from sqlalchemy import Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from typing import TYPE_CHECKING

from caredata.models.base import Base, IntPrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from caredata.models.company import Company


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base, IntPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    username: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.USER,
        nullable=False,
    )
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.company_id"),
        nullable=True,
        index=True,
    )

    # ── Relationships ────────────────────────────────────────────────
    company: Mapped["Company | None"] = relationship(  # noqa: F821
        foreign_keys=[company_id],
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User {self.username} [{self.role.value}]>"
