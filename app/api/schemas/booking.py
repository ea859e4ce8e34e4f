from pydantic import BaseModel

from app.models.booking import BookingPublic
from app.services.availability_service import AvailabilityStatus


class ResourceInfo(BaseModel):
    kind: str  # "practitioner" or "branch"
    id: str
    name: str


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD as requested
    date_key: str | None = None
    status: AvailabilityStatus
    message: str | None = None
    resource: ResourceInfo | None = None
    slots: list[str]  # e.g. "09:00 AM"


class BookingCreatedResponse(BaseModel):
    booking: BookingPublic
    available_slots: AvailableSlotsResponse
