from datetime import UTC, date, datetime

import pytest

from app.core.config import Settings
from app.core.exceptions import StoreUnavailable
from app.models.booking import BookedSlot, Booking, BookingStatus
from app.seed import build_demo_store
from app.services.availability_service import AvailabilityEngine
from app.services.slot_service import date_key_for
from app.services.store import MemoryBookingStore

# Friday; MONDAY below is comfortably in the future relative to it.
FIXED_NOW = datetime(2026, 1, 2, 8, 0, tzinfo=UTC)
MONDAY = date(2026, 1, 5)


class FailingStore(MemoryBookingStore):
    """Catalog reads work, booked-slot reads and creates fail like a dropped connection."""

    async def list_booked_slots(self, date_key: str) -> list[BookedSlot]:
        raise StoreUnavailable("connection reset")

    async def create_booking(self, draft):
        raise StoreUnavailable("connection reset")


class CountingStore(MemoryBookingStore):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.calls: list[str] = []

    async def list_booked_slots(self, date_key: str) -> list[BookedSlot]:
        self.calls.append("list_booked_slots")
        return await super().list_booked_slots(date_key)

    async def create_booking(self, draft):
        self.calls.append("create_booking")
        return await super().create_booking(draft)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        slot_granularity_minutes=30,
        booking_lead_minutes=30,
        closed_weekdays="5,6",
        clinic_timezone="UTC",
        store_provider="memory",
    )


@pytest.fixture
def store() -> MemoryBookingStore:
    return build_demo_store()


@pytest.fixture
def counting_store() -> CountingStore:
    demo = build_demo_store()
    return CountingStore(
        services=demo.services,
        practitioners=demo.practitioners,
        branches=demo.branches,
    )


@pytest.fixture
def failing_store() -> FailingStore:
    demo = build_demo_store()
    return FailingStore(
        services=demo.services,
        practitioners=demo.practitioners,
        branches=demo.branches,
    )


@pytest.fixture
def engine(store: MemoryBookingStore, test_settings: Settings) -> AvailabilityEngine:
    return AvailabilityEngine(store, clock=lambda: FIXED_NOW, app_settings=test_settings)


@pytest.fixture
def book():
    """Add an existing booking straight into a memory store."""

    def _book(
        target: MemoryBookingStore,
        slot_label: str,
        resource_id: str,
        resource_kind: str = "practitioner",
        on: date = MONDAY,
        status: str = BookingStatus.PENDING.value,
    ) -> Booking:
        booking = Booking(
            id=len(target.bookings) + 1,
            name="Existing Patient",
            email="existing@example.com",
            phone="555-0100",
            service_id="S1",
            service_name="Routine Check-up",
            service_duration_minutes=30,
            branch_id="B1",
            practitioner_id=resource_id if resource_kind == "practitioner" else None,
            resource_kind=resource_kind,
            resource_id=resource_id,
            resource_name=resource_id,
            selected_date=on,
            date_key=date_key_for(on),
            slot_label=slot_label,
            status=status,
        )
        target.bookings.append(booking)
        return booking

    return _book
