from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from app.core.exceptions import BookingRejected, StoreUnavailable
from app.models.booking import BookingForm, BookingStatus, ResourceKind
from app.models.catalog import Service
from app.services.availability_service import AvailabilityEngine, EffectiveResource
from app.services.booking_service import BookingService, validate_and_build

MONDAY = date(2026, 1, 5)
CLEANING = Service(id="S2", name="Teeth Cleaning", duration_minutes=60)
BRANCH = EffectiveResource(
    kind=ResourceKind.BRANCH, id="B1", name="Main Clinic", start_hour=9, end_hour=17, branch_id="B1"
)
REED = EffectiveResource(
    kind=ResourceKind.PRACTITIONER, id="D1", name="Dr. Evelyn Reed", start_hour=9, end_hour=17, branch_id="B1"
)


def _form(**overrides) -> BookingForm:
    fields = {
        "name": "Ada Patient",
        "email": "Ada@Example.com",
        "phone": "555-0101",
        "service_id": "S2",
        "branch_id": "B1",
        "practitioner_id": None,
        "selected_date": MONDAY,
        "slot": "10:00 AM",
    }
    fields.update(overrides)
    return BookingForm(**fields)


def test_form_normalizes_blanks_and_email() -> None:
    form = _form(name="  ", email=" Ada@Example.com ", practitioner_id="")

    assert form.name is None
    assert form.email == "ada@example.com"
    assert form.practitioner_id is None


def test_form_rejects_malformed_email() -> None:
    with pytest.raises(ValidationError):
        _form(email="not-an-email")


def test_validate_and_build_creates_pending_draft_for_branch() -> None:
    draft = validate_and_build(_form(), ["09:00 AM", "10:00 AM"], "10:00 AM", service=CLEANING, resource=BRANCH)

    assert draft.status == BookingStatus.PENDING
    assert draft.service_name == "Teeth Cleaning"
    assert draft.service_duration_minutes == 60
    assert draft.resource_kind == ResourceKind.BRANCH
    assert draft.resource_id == "B1"
    assert draft.resource_name == "Main Clinic"
    assert draft.practitioner_id is None
    assert draft.date_key == "2026-01-05"
    assert draft.slot_label == "10:00 AM"


def test_validate_and_build_records_practitioner() -> None:
    draft = validate_and_build(
        _form(practitioner_id="D1"), ["10:00 AM"], "10:00 AM", service=CLEANING, resource=REED
    )

    assert draft.practitioner_id == "D1"
    assert draft.resource_kind == ResourceKind.PRACTITIONER
    assert draft.resource_name == "Dr. Evelyn Reed"


@pytest.mark.parametrize(
    ("overrides", "missing"),
    [
        ({"name": None}, ["name"]),
        ({"email": None, "phone": ""}, ["email", "phone"]),
        ({"service_id": None}, ["service_id"]),
        ({"selected_date": None}, ["selected_date"]),
    ],
)
def test_validate_and_build_lists_missing_fields(overrides: dict, missing: list[str]) -> None:
    with pytest.raises(BookingRejected) as exception_info:
        validate_and_build(_form(**overrides), ["10:00 AM"], "10:00 AM", service=CLEANING, resource=BRANCH)

    assert exception_info.value.kind == BookingRejected.INPUT_INCOMPLETE
    assert exception_info.value.missing == missing


def test_validate_and_build_requires_chosen_slot() -> None:
    with pytest.raises(BookingRejected) as exception_info:
        validate_and_build(_form(), ["10:00 AM"], None, service=CLEANING, resource=BRANCH)

    assert exception_info.value.missing == ["slot"]


def test_validate_and_build_requires_resolved_resource() -> None:
    with pytest.raises(BookingRejected) as exception_info:
        validate_and_build(_form(branch_id=None), ["10:00 AM"], "10:00 AM", service=CLEANING, resource=None)

    assert exception_info.value.kind == BookingRejected.INPUT_INCOMPLETE
    assert exception_info.value.missing == ["branch_id"]


def test_validate_and_build_rejects_slot_missing_from_last_computed_list() -> None:
    with pytest.raises(BookingRejected) as exception_info:
        validate_and_build(_form(), ["09:00 AM", "10:30 AM"], "10:00 AM", service=CLEANING, resource=BRANCH)

    assert exception_info.value.kind == BookingRejected.STALE_SELECTION


@pytest.mark.asyncio
async def test_submit_creates_booking_and_returns_reduced_availability(engine, store) -> None:
    service = BookingService(store, engine)

    booking, refreshed = await service.submit(_form())

    assert booking.id == 1
    assert booking.status == "pending"
    assert booking.resource_kind == "branch"
    assert booking.created_at is not None
    assert "10:00 AM" not in refreshed.slots
    assert refreshed.selection.slot is None
    assert len(store.bookings) == 1


@pytest.mark.asyncio
async def test_submit_rejects_incomplete_form_without_touching_store(counting_store, test_settings) -> None:
    engine = AvailabilityEngine(
        counting_store, clock=lambda: datetime(2026, 1, 2, 8, 0, tzinfo=UTC), app_settings=test_settings
    )
    service = BookingService(counting_store, engine)

    with pytest.raises(BookingRejected):
        await service.submit(_form(phone=None))

    assert counting_store.calls == []


@pytest.mark.asyncio
async def test_submit_rejects_slot_taken_since_listing(engine, store, book) -> None:
    book(store, "10:00 AM", "B1", resource_kind="branch")
    service = BookingService(store, engine)

    with pytest.raises(BookingRejected) as exception_info:
        await service.submit(_form())

    assert exception_info.value.kind == BookingRejected.STALE_SELECTION
    assert len(store.bookings) == 1


@pytest.mark.asyncio
async def test_submit_surfaces_store_failure(failing_store, test_settings) -> None:
    engine = AvailabilityEngine(
        failing_store, clock=lambda: datetime(2026, 1, 2, 8, 0, tzinfo=UTC), app_settings=test_settings
    )

    with pytest.raises(StoreUnavailable):
        await BookingService(failing_store, engine).submit(_form())

    assert failing_store.bookings == []
