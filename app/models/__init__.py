from app.models.catalog import (
    Branch,
    BranchPublic,
    Practitioner,
    PractitionerPublic,
    Service,
    ServicePublic,
)
from app.models.booking import (
    BookedSlot,
    Booking,
    BookingDraft,
    BookingForm,
    BookingPublic,
    BookingStatus,
    ResourceKind,
)

__all__ = [
    "Branch",
    "BranchPublic",
    "Practitioner",
    "PractitionerPublic",
    "Service",
    "ServicePublic",
    "BookedSlot",
    "Booking",
    "BookingDraft",
    "BookingForm",
    "BookingPublic",
    "BookingStatus",
    "ResourceKind",
]
