"""
Pydantic schemas for request / response serialization.

Kept in a single file for now — split per-domain when it grows.
Schemas are separate from the SQLAlchemy models.

The JSON surface is camelCase (`segmentId`, `serviceCategory`, ...);
Python attribute names stay snake_case and both spellings are accepted
on input.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from caredata.models.client_service import ServiceStatus
from caredata.models.user import UserRole

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Auth ─────────────────────────────────────────────────────────────
class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserSummary(CamelModel):
    id: int
    username: str
    role: str
    company_id: int | None = None


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserSummary


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class AccessTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


class AuthStatusResponse(CamelModel):
    authenticated: bool = True
    user: UserSummary


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


# ── User ─────────────────────────────────────────────────────────────
class CreateUserRequest(CamelModel):
    name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(min_length=8)
    role: UserRole = UserRole.USER
    company_id: int | None = None


class UpdateUserRequest(CamelModel):
    name: str | None = None
    role: UserRole | None = None
    company_id: int | None = None


class UserOut(CamelModel):
    id: int
    name: str
    username: str
    role: UserRole
    company_id: int | None = None
    created_at: datetime


# ── Company / Segment ────────────────────────────────────────────────
class CreateCompanyRequest(CamelModel):
    company_name: str = Field(min_length=1)
    registered_address: str | None = None
    postal_address: str | None = None
    contact_person_name: str | None = None
    contact_person_phone: str | None = None
    contact_person_email: EmailStr | None = None


class UpdateCompanyRequest(CamelModel):
    company_name: str | None = Field(default=None, min_length=1)
    registered_address: str | None = None
    postal_address: str | None = None
    contact_person_name: str | None = None
    contact_person_phone: str | None = None
    contact_person_email: EmailStr | None = None


class SegmentOut(CamelModel):
    # `id` mirrors segmentId for the front-end segment pickers
    id: int = Field(validation_alias="segment_id")
    segment_id: int
    company_id: int
    segment_name: str
    created_at: datetime


class CompanyOut(CamelModel):
    company_id: int
    company_name: str
    registered_address: str | None = None
    postal_address: str | None = None
    contact_person_name: str | None = None
    contact_person_phone: str | None = None
    contact_person_email: str | None = None
    created_at: datetime
    segments: list[SegmentOut] = []


class CreateSegmentRequest(CamelModel):
    segment_name: str = Field(min_length=1)


class UpdateSegmentRequest(CamelModel):
    segment_name: str = Field(min_length=1)


# ── Master data ──────────────────────────────────────────────────────
class MasterDataRequest(CamelModel):
    service_category: str = Field(min_length=1)
    service_type: str = Field(min_length=1)
    service_provider: str = ""
    active: bool = True
    segment_id: int | None = None


class MasterDataOut(CamelModel):
    id: int
    service_category: str
    service_type: str
    service_provider: str
    active: bool
    segment_id: int | None = None
    created_by: int | None = None
    created_at: datetime


class ClientAssignmentRequest(CamelModel):
    client_id: int
    care_category: str = Field(min_length=1)
    care_type: str = Field(min_length=1)
    segment_id: int | None = None


class ClientAssignmentOut(MasterDataOut):
    created: bool


class SuccessResponse(CamelModel):
    success: bool = True


# ── Client (person info) ─────────────────────────────────────────────
class ClientRequest(CamelModel):
    title: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    middle_name: str | None = None
    last_name: str = Field(min_length=1)
    date_of_birth: date
    email: EmailStr
    home_phone: str | None = None
    mobile_phone: str = Field(min_length=1)
    address_line1: str = Field(min_length=1)
    address_line2: str | None = None
    address_line3: str | None = None
    post_code: str = Field(min_length=1)
    use_home_address: bool = True
    mailing_address_line1: str | None = None
    mailing_address_line2: str | None = None
    mailing_address_line3: str | None = None
    mailing_post_code: str | None = None
    next_of_kin_name: str = Field(min_length=1)
    next_of_kin_address: str = Field(min_length=1)
    next_of_kin_email: EmailStr | None = None
    next_of_kin_phone: str = Field(min_length=1)
    next_of_kin_relationship: str | None = None
    hcp_level: str = Field(min_length=1)
    hcp_start_date: date
    hcp_end_date: date | None = None
    status: str = "New"
    segment_id: int | None = None

    @field_validator("next_of_kin_email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, v):
        return v or None


class ClientOut(CamelModel):
    id: int
    title: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    date_of_birth: str
    email: str
    home_phone: str | None = None
    mobile_phone: str
    address_line1: str
    address_line2: str | None = None
    address_line3: str | None = None
    post_code: str
    use_home_address: bool
    mailing_address_line1: str | None = None
    mailing_address_line2: str | None = None
    mailing_address_line3: str | None = None
    mailing_post_code: str | None = None
    next_of_kin_name: str
    next_of_kin_address: str
    next_of_kin_email: str | None = None
    next_of_kin_phone: str
    next_of_kin_relationship: str | None = None
    hcp_level: str
    hcp_start_date: str
    hcp_end_date: str | None = None
    status: str
    segment_id: int | None = None
    created_by: int | None = None
    created_at: datetime


# ── Client service (assignment) ──────────────────────────────────────
class ClientServiceRequest(CamelModel):
    client_id: int
    service_category: str = Field(min_length=1)
    service_type: str = Field(min_length=1)
    service_provider: str = Field(min_length=1)
    service_start_date: date
    service_days: list[str] = Field(min_length=1)
    service_hours: int = Field(ge=1, le=24)
    status: ServiceStatus = ServiceStatus.PLANNED
    segment_id: int | None = None

    @field_validator("service_days")
    @classmethod
    def _known_weekdays(cls, v: list[str]) -> list[str]:
        unknown = [d for d in v if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown service day(s): {', '.join(unknown)}")
        # De-duplicate, keep calendar order
        return [d for d in WEEKDAYS if d in v]


class UpdateServiceStatusRequest(CamelModel):
    status: ServiceStatus


class ClientServiceOut(CamelModel):
    id: int
    client_id: int
    service_category: str
    service_type: str
    service_provider: str
    service_start_date: date
    service_days: list[str]
    service_hours: int
    status: ServiceStatus
    segment_id: int | None = None
    created_by: int | None = None
    created_at: datetime


class ReferencingService(CamelModel):
    client_name: str
    status: ServiceStatus
    service_start_date: date


# ── Documents ────────────────────────────────────────────────────────
class DocumentOut(CamelModel):
    id: int
    client_id: int
    document_name: str
    document_type: str
    filename: str
    file_path: str
    content_type: str | None = None
    segment_id: int | None = None
    created_by: int | None = None
    uploaded_at: datetime


# ── Service case notes ───────────────────────────────────────────────
class CreateCaseNoteRequest(CamelModel):
    service_id: int
    note_text: str = Field(min_length=1)


class UpdateCaseNoteRequest(CamelModel):
    note_text: str = Field(min_length=1)


class CaseNoteOut(CamelModel):
    id: int
    service_id: int
    note_text: str
    segment_id: int | None = None
    created_by: int | None = None
    updated_by: int | None = None
    created_at: datetime
    updated_at: datetime


# ── Generic ──────────────────────────────────────────────────────────
class MessageResponse(CamelModel):
    message: str


class ErrorResponse(CamelModel):
    message: str
    code: str
    details: object | None = None


class ReferentialConflictResponse(ErrorResponse):
    conflict_type: Literal["FOREIGN_KEY_CONSTRAINT"] = "FOREIGN_KEY_CONSTRAINT"
    referencing_services: list[ReferencingService] = []
