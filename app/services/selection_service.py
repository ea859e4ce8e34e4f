"""Interactive booking flow: selection changes, availability refreshes, submission.

A ``BookingFlow`` holds the customer's current ``Selection``. Every change
produces a new selection value that is published on a ``SelectionBus``; the
flow's availability refresher is one subscriber. Refreshes can complete out of
order, so each carries a request token and only the newest one whose selection
still matches the current one is applied.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from app.core.exceptions import BookingRejected
from app.models.booking import Booking, BookingForm
from app.services.availability_service import (
    Availability,
    AvailabilityEngine,
    AvailabilityStatus,
    Selection,
    SpecificPractitioner,
)
from app.services.booking_service import validate_and_build
from app.services.store import BookingStore

logger = logging.getLogger(__name__)

Subscriber = Callable[[Selection], Awaitable[object]]


class SelectionBus:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    async def publish(self, selection: Selection) -> None:
        for subscriber in list(self._subscribers):
            await subscriber(selection)


class BookingFlow:
    def __init__(
        self,
        engine: AvailabilityEngine,
        store: BookingStore,
        bus: SelectionBus | None = None,
    ) -> None:
        self._engine = engine
        self._store = store
        self._bus = bus or SelectionBus()
        self._selection = Selection()
        self._availability = Availability(
            selection=self._selection, status=AvailabilityStatus.NEEDS_SELECTION
        )
        self._token = 0
        self._bus.subscribe(self.refresh)

    @property
    def bus(self) -> SelectionBus:
        return self._bus

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def availability(self) -> Availability:
        return self._availability

    @property
    def slots(self) -> list[str]:
        return list(self._availability.slots)

    async def select(self, **changes) -> Selection:
        """Apply changes to date, service_id, branch_id or resource and refresh availability.

        Any such change clears the chosen slot.
        """
        if "slot" in changes:
            raise TypeError("use choose_slot() to pick a slot")
        updated = self._selection.with_changes(**changes)
        if updated == self._selection:
            return updated
        self._selection = updated
        await self._bus.publish(updated)
        return updated

    def choose_slot(self, slot: str | None) -> Selection:
        self._selection = self._selection.with_changes(slot=slot)
        return self._selection

    async def refresh(self, selection: Selection) -> Availability | None:
        """Compute availability for ``selection``; apply it only if it is still current."""
        self._token += 1
        token = self._token
        result = await self._engine.compute_availability(selection)
        if token != self._token or selection.signature() != self._selection.signature():
            logger.debug("Discarding stale availability (token %d, latest %d)", token, self._token)
            return None
        self._availability = result
        return result

    async def submit(self, name: str | None, email: str | None, phone: str | None) -> Booking:
        """Validate against the slots on screen and create the booking.

        Rejections raise BookingRejected before the store is contacted.
        """
        selection = self._selection
        resource = selection.resource
        try:
            form = BookingForm(
                name=name,
                email=email,
                phone=phone,
                service_id=selection.service_id,
                branch_id=selection.branch_id,
                practitioner_id=resource.practitioner_id if isinstance(resource, SpecificPractitioner) else None,
                selected_date=selection.date,
                slot=selection.slot,
            )
        except ValidationError as exc:
            invalid = [str(error["loc"][0]) for error in exc.errors() if error["loc"]]
            raise BookingRejected(
                BookingRejected.INPUT_INCOMPLETE,
                "Please correct the highlighted fields.",
                missing=invalid,
            ) from exc
        current = self._availability
        if current.selection.signature() != selection.signature():
            current = Availability(selection=selection, status=AvailabilityStatus.NEEDS_SELECTION)
        draft = validate_and_build(
            form,
            current.slots,
            selection.slot,
            service=current.service,
            resource=current.resource,
        )
        booking = await self._store.create_booking(draft)
        self._selection = selection.with_changes(slot=None)
        await self._bus.publish(self._selection)
        return booking
