"""
Models package — import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for `create_all` / Alembic).
"""

from caredata.models.base import Base, IntPrimaryKeyMixin, SegmentScopedMixin, TimestampMixin
from caredata.models.user import User, UserRole
from caredata.models.company import Company, Segment
from caredata.models.master_data import MasterData
from caredata.models.client import Client
from caredata.models.client_service import ClientService, ServiceStatus
from caredata.models.document import Document, ServiceCaseNote

__all__ = [
    "Base",
    "IntPrimaryKeyMixin",
    "SegmentScopedMixin",
    "TimestampMixin",
    "User",
    "UserRole",
    "Company",
    "Segment",
    "MasterData",
    "Client",
    "ClientService",
    "ServiceStatus",
    "Document",
    "ServiceCaseNote",
]
