import logging
from collections.abc import Sequence

from app.core.exceptions import BookingRejected, StoreUnavailable
from app.models.booking import Booking, BookingDraft, BookingForm, BookingStatus
from app.models.catalog import Service
from app.services.availability_service import (
    Availability,
    AvailabilityEngine,
    AvailabilityStatus,
    EffectiveResource,
    Selection,
    SpecificPractitioner,
    resource_from_id,
)
from app.services.slot_service import date_key_for
from app.services.store import BookingStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "phone", "service_id", "selected_date")


def missing_fields(form: BookingForm, chosen_slot: str | None) -> list[str]:
    missing = [f for f in REQUIRED_FIELDS if getattr(form, f) is None]
    if chosen_slot is None:
        missing.append("slot")
    return missing


def selection_from_form(form: BookingForm) -> Selection:
    return Selection(
        date=form.selected_date,
        service_id=form.service_id,
        branch_id=form.branch_id,
        resource=resource_from_id(form.practitioner_id),
        slot=form.slot,
    )


def validate_and_build(
    form: BookingForm,
    last_computed_slots: Sequence[str],
    chosen_slot: str | None,
    *,
    service: Service | None,
    resource: EffectiveResource | None,
) -> BookingDraft:
    """Check a booking request against the last computed slots and build the draft to store.

    Raises BookingRejected without touching storage when fields are missing or the
    chosen slot is not among ``last_computed_slots``.
    """
    missing = missing_fields(form, chosen_slot)
    if not missing and service is None:
        missing.append("service_id")
    if not missing and resource is None:
        missing.append("practitioner_id" if form.practitioner_id else "branch_id")
    if missing:
        raise BookingRejected(
            BookingRejected.INPUT_INCOMPLETE,
            "Please fill out all required fields.",
            missing=missing,
        )
    if chosen_slot not in last_computed_slots:
        raise BookingRejected(
            BookingRejected.STALE_SELECTION,
            "The selected time is no longer available. Please choose another slot.",
        )
    practitioner = resource_from_id(form.practitioner_id)
    return BookingDraft(
        name=form.name,
        email=form.email,
        phone=form.phone,
        service_id=service.id,
        service_name=service.name,
        service_duration_minutes=service.duration_minutes,
        branch_id=resource.branch_id,
        practitioner_id=practitioner.practitioner_id if isinstance(practitioner, SpecificPractitioner) else None,
        resource_kind=resource.kind,
        resource_id=resource.id,
        resource_name=resource.name,
        selected_date=form.selected_date,
        date_key=date_key_for(form.selected_date),
        slot_label=chosen_slot,
        status=BookingStatus.PENDING,
    )


class BookingService:
    """Server-side submission: re-check against fresh availability, then create once."""

    def __init__(self, store: BookingStore, engine: AvailabilityEngine) -> None:
        self._store = store
        self._engine = engine

    async def submit(self, form: BookingForm) -> tuple[Booking, Availability]:
        missing = missing_fields(form, form.slot)
        if missing:
            raise BookingRejected(
                BookingRejected.INPUT_INCOMPLETE,
                "Please fill out all required fields.",
                missing=missing,
            )
        selection = selection_from_form(form)
        availability = await self._engine.compute_availability(selection)
        if availability.status == AvailabilityStatus.UNAVAILABLE:
            raise StoreUnavailable(availability.message or "Availability could not be loaded.")
        draft = validate_and_build(
            form,
            availability.slots,
            form.slot,
            service=availability.service,
            resource=availability.resource,
        )
        booking = await self._store.create_booking(draft)
        logger.info(
            "Booking %s requested: %s %s with %s %s",
            booking.id,
            booking.date_key,
            booking.slot_label,
            booking.resource_kind,
            booking.resource_id,
        )
        refreshed = await self._engine.compute_availability(selection.with_changes(slot=None))
        return booking, refreshed
