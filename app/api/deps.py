from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_session
from app.seed import build_demo_store
from app.services.availability_service import AvailabilityEngine, Clock, system_clock
from app.services.booking_service import BookingService
from app.services.store import BookingStore, MemoryBookingStore, SqlBookingStore

_memory_store: MemoryBookingStore | None = None


def get_memory_store() -> MemoryBookingStore:
    """Process-wide in-memory store, seeded with the demo catalog on first use."""
    global _memory_store
    if _memory_store is None:
        _memory_store = build_demo_store()
    return _memory_store


async def get_store(session: AsyncSession = Depends(get_session)) -> BookingStore:
    if settings.store_provider.lower() == "memory":
        return get_memory_store()
    return SqlBookingStore(session)


def get_clock() -> Clock:
    return system_clock(settings)


def get_engine(
    store: BookingStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> AvailabilityEngine:
    return AvailabilityEngine(store, clock=clock, app_settings=settings)


def get_booking_service(
    store: BookingStore = Depends(get_store),
    engine: AvailabilityEngine = Depends(get_engine),
) -> BookingService:
    return BookingService(store, engine)
