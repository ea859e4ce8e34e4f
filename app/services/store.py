from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StoreUnavailable
from app.models.booking import RELEASED_STATUSES, BookedSlot, Booking, BookingDraft
from app.models.catalog import Branch, Practitioner, Service

logger = logging.getLogger(__name__)


def _booking_from_draft(draft: BookingDraft) -> Booking:
    data = draft.model_dump()
    data["resource_kind"] = draft.resource_kind.value
    data["status"] = draft.status.value
    return Booking(**data)


class BookingStore(ABC):
    """Document store holding the clinic catalog and bookings."""

    @abstractmethod
    async def list_services(self) -> list[Service]:
        raise NotImplementedError

    @abstractmethod
    async def list_practitioners(self) -> list[Practitioner]:
        raise NotImplementedError

    @abstractmethod
    async def list_branches(self) -> list[Branch]:
        raise NotImplementedError

    @abstractmethod
    async def list_booked_slots(self, date_key: str) -> list[BookedSlot]:
        """Booked slots on a day, excluding bookings that released their slot."""
        raise NotImplementedError

    @abstractmethod
    async def create_booking(self, draft: BookingDraft) -> Booking:
        """Persist a draft in one operation; assigns id and created_at."""
        raise NotImplementedError


class SqlBookingStore(BookingStore):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _all(self, statement) -> list:
        try:
            result = await self._session.execute(statement)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"{type(exc).__name__}: {exc}") from exc
        return list(result.scalars().all())

    async def list_services(self) -> list[Service]:
        return await self._all(select(Service).order_by(Service.name))

    async def list_practitioners(self) -> list[Practitioner]:
        return await self._all(select(Practitioner).order_by(Practitioner.name))

    async def list_branches(self) -> list[Branch]:
        return await self._all(select(Branch).order_by(Branch.name))

    async def list_booked_slots(self, date_key: str) -> list[BookedSlot]:
        bookings = await self._all(
            select(Booking).where(
                Booking.date_key == date_key,
                Booking.status.not_in(RELEASED_STATUSES),
            )
        )
        return [
            BookedSlot(
                date_key=b.date_key,
                slot_label=b.slot_label,
                resource_kind=b.resource_kind,
                resource_id=b.resource_id,
            )
            for b in bookings
        ]

    async def create_booking(self, draft: BookingDraft) -> Booking:
        booking = _booking_from_draft(draft)
        try:
            self._session.add(booking)
            await self._session.flush()
            await self._session.refresh(booking)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StoreUnavailable(f"{type(exc).__name__}: {exc}") from exc
        return booking


class MemoryBookingStore(BookingStore):
    """In-process store for local runs and tests."""

    def __init__(
        self,
        services: list[Service] | None = None,
        practitioners: list[Practitioner] | None = None,
        branches: list[Branch] | None = None,
    ) -> None:
        self.services = list(services or [])
        self.practitioners = list(practitioners or [])
        self.branches = list(branches or [])
        self.bookings: list[Booking] = []

    async def list_services(self) -> list[Service]:
        return list(self.services)

    async def list_practitioners(self) -> list[Practitioner]:
        return list(self.practitioners)

    async def list_branches(self) -> list[Branch]:
        return list(self.branches)

    async def list_booked_slots(self, date_key: str) -> list[BookedSlot]:
        return [
            BookedSlot(
                date_key=b.date_key,
                slot_label=b.slot_label,
                resource_kind=b.resource_kind,
                resource_id=b.resource_id,
            )
            for b in self.bookings
            if b.date_key == date_key and b.status not in RELEASED_STATUSES
        ]

    async def create_booking(self, draft: BookingDraft) -> Booking:
        booking = _booking_from_draft(draft)
        booking.id = len(self.bookings) + 1
        booking.created_at = datetime.now(UTC)
        self.bookings.append(booking)
        logger.debug("Memory store booking created: id=%s", booking.id)
        return booking
