from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum

from pydantic import field_validator, validate_email
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    """Aware UTC for TIMESTAMP WITH TIME ZONE columns."""
    return datetime.now(UTC)


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


# Bookings in these statuses no longer hold their slot.
RELEASED_STATUSES = ("cancelled",)


class ResourceKind(str, Enum):
    PRACTITIONER = "practitioner"
    BRANCH = "branch"


class BookingForm(SQLModel):
    """Booking request as submitted. Every field may be missing; the validator decides."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    service_id: str | None = None
    branch_id: str | None = None
    practitioner_id: str | None = None  # absent or blank means no preference
    selected_date: date | None = None
    slot: str | None = None

    @field_validator("name", "email", "phone", "service_id", "branch_id", "practitioner_id", "slot")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        _, normalized = validate_email(value)
        return normalized.lower()


class BookingDraft(SQLModel):
    """A validated booking request, ready for a single create call."""

    name: str
    email: str
    phone: str
    service_id: str
    service_name: str
    service_duration_minutes: int
    branch_id: str | None = None
    practitioner_id: str | None = None  # None means no preference
    resource_kind: ResourceKind
    resource_id: str
    resource_name: str
    selected_date: date
    date_key: str
    slot_label: str
    status: BookingStatus = BookingStatus.PENDING


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    email: str
    phone: str
    service_id: str = Field(foreign_key="services.id")
    service_name: str
    service_duration_minutes: int
    branch_id: str | None = Field(default=None, foreign_key="branches.id")
    practitioner_id: str | None = Field(default=None, foreign_key="practitioners.id")
    resource_kind: str
    resource_id: str
    resource_name: str
    selected_date: date
    # no unique constraint on (date_key, resource, slot): concurrent submissions may both land
    date_key: str = Field(index=True)
    slot_label: str
    status: str = Field(default=BookingStatus.PENDING.value, index=True)
    created_at: datetime = Field(
        default_factory=_utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class BookingPublic(SQLModel):
    id: int
    name: str
    email: str
    phone: str
    service_id: str
    service_name: str
    service_duration_minutes: int
    branch_id: str | None = None
    practitioner_id: str | None = None
    resource_kind: str
    resource_id: str
    resource_name: str
    selected_date: date
    date_key: str
    slot_label: str
    status: str
    created_at: datetime


@dataclass(frozen=True)
class BookedSlot:
    """Read projection of a Booking: which start label a resource has taken on a day."""

    date_key: str
    slot_label: str
    resource_kind: str
    resource_id: str
