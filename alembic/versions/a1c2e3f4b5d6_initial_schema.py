"""initial schema: tenancy, taxonomy, clients, services, documents

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create every table of the care data schema."""
    op.create_table(
        "companies",
        sa.Column("company_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_name", sa.String(length=256), nullable=False),
        sa.Column("registered_address", sa.String(length=512), nullable=True),
        sa.Column("postal_address", sa.String(length=512), nullable=True),
        sa.Column("contact_person_name", sa.String(length=256), nullable=True),
        sa.Column("contact_person_phone", sa.String(length=64), nullable=True),
        sa.Column("contact_person_email", sa.String(length=256), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("company_id"),
        sa.UniqueConstraint("company_name"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("password_hash", sa.String(length=512), nullable=False),
        sa.Column(
            "role",
            sa.Enum("admin", "user", name="user_role"),
            nullable=False,
        ),
        sa.Column("company_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_company_id", "users", ["company_id"])

    op.create_table(
        "segments",
        sa.Column("segment_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("segment_name", sa.String(length=256), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["company_id"], ["companies.company_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("segment_id"),
        sa.UniqueConstraint("company_id", "segment_name", name="uq_segments_company_name"),
    )
    op.create_index("ix_segments_company_id", "segments", ["company_id"])

    op.create_table(
        "master_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("service_category", sa.String(length=256), nullable=False),
        sa.Column("service_type", sa.String(length=256), nullable=False),
        sa.Column("service_provider", sa.String(length=256), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["segment_id"], ["segments.segment_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "service_category",
            "service_type",
            "service_provider",
            "segment_id",
            name="uq_master_data_combination",
        ),
    )
    op.create_index("ix_master_data_segment_id", "master_data", ["segment_id"])

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=32), nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=False),
        sa.Column("middle_name", sa.String(length=128), nullable=True),
        sa.Column("last_name", sa.String(length=128), nullable=False),
        sa.Column("date_of_birth", sa.String(length=10), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=False),
        sa.Column("home_phone", sa.String(length=32), nullable=True),
        sa.Column("mobile_phone", sa.String(length=32), nullable=False),
        sa.Column("address_line1", sa.String(length=256), nullable=False),
        sa.Column("address_line2", sa.String(length=256), nullable=True),
        sa.Column("address_line3", sa.String(length=256), nullable=True),
        sa.Column("post_code", sa.String(length=16), nullable=False),
        sa.Column("use_home_address", sa.Boolean(), nullable=False),
        sa.Column("mailing_address_line1", sa.String(length=256), nullable=True),
        sa.Column("mailing_address_line2", sa.String(length=256), nullable=True),
        sa.Column("mailing_address_line3", sa.String(length=256), nullable=True),
        sa.Column("mailing_post_code", sa.String(length=16), nullable=True),
        sa.Column("next_of_kin_name", sa.String(length=256), nullable=False),
        sa.Column("next_of_kin_address", sa.String(length=512), nullable=False),
        sa.Column("next_of_kin_email", sa.String(length=256), nullable=True),
        sa.Column("next_of_kin_phone", sa.String(length=32), nullable=False),
        sa.Column("next_of_kin_relationship", sa.String(length=64), nullable=True),
        sa.Column("hcp_level", sa.String(length=32), nullable=False),
        sa.Column("hcp_start_date", sa.String(length=10), nullable=False),
        sa.Column("hcp_end_date", sa.String(length=10), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["segment_id"], ["segments.segment_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_segment_id", "clients", ["segment_id"])

    op.create_table(
        "client_services",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("service_category", sa.String(length=256), nullable=False),
        sa.Column("service_type", sa.String(length=256), nullable=False),
        sa.Column("service_provider", sa.String(length=256), nullable=False),
        sa.Column("service_start_date", sa.Date(), nullable=False),
        sa.Column("service_days", sa.JSON(), nullable=False),
        sa.Column("service_hours", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("Planned", "In Progress", "Closed", name="service_status"),
            nullable=False,
        ),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["segment_id"], ["segments.segment_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_client_services_client_id", "client_services", ["client_id"])
    op.create_index("ix_client_services_segment_id", "client_services", ["segment_id"])
    op.create_index(
        "ix_client_services_combination",
        "client_services",
        ["service_category", "service_type", "service_provider", "segment_id"],
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("document_name", sa.String(length=256), nullable=False),
        sa.Column("document_type", sa.String(length=64), nullable=False),
        sa.Column("filename", sa.String(length=256), nullable=False),
        sa.Column("file_path", sa.String(length=1024), nullable=False),
        sa.Column("content_type", sa.String(length=128), nullable=True),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["segment_id"], ["segments.segment_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_client_id", "documents", ["client_id"])
    op.create_index("ix_documents_segment_id", "documents", ["segment_id"])

    op.create_table(
        "service_case_notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("service_id", sa.Integer(), nullable=False),
        sa.Column("note_text", sa.Text(), nullable=False),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["service_id"], ["client_services.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["segment_id"], ["segments.segment_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("service_id"),
    )
    op.create_index("ix_service_case_notes_segment_id", "service_case_notes", ["segment_id"])


def downgrade() -> None:
    """Drop every table, dependants first."""
    op.drop_index("ix_service_case_notes_segment_id", table_name="service_case_notes")
    op.drop_table("service_case_notes")
    op.drop_index("ix_documents_segment_id", table_name="documents")
    op.drop_index("ix_documents_client_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_client_services_combination", table_name="client_services")
    op.drop_index("ix_client_services_segment_id", table_name="client_services")
    op.drop_index("ix_client_services_client_id", table_name="client_services")
    op.drop_table("client_services")
    op.drop_index("ix_clients_segment_id", table_name="clients")
    op.drop_table("clients")
    op.drop_index("ix_master_data_segment_id", table_name="master_data")
    op.drop_table("master_data")
    op.drop_index("ix_segments_company_id", table_name="segments")
    op.drop_table("segments")
    op.drop_index("ix_users_company_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    op.drop_table("companies")
    sa.Enum(name="service_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
