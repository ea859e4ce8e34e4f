"""Availability engine: which start times can still be booked for a selection.

The engine composes the pure helpers in ``slot_service`` with the booking store.
Resolution problems (nothing selected yet, unknown ids, closed days) and store
failures are reported through ``Availability.status`` with an empty slot list;
nothing here raises past ``compute_availability``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import StoreUnavailable
from app.models.booking import ResourceKind
from app.models.catalog import Branch, Practitioner, Service
from app.services.slot_service import (
    date_key_for,
    filter_conflicts,
    guard_candidates,
    resolve_candidates,
)
from app.services.store import BookingStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock(app_settings: Settings = default_settings) -> Clock:
    tz = app_settings.timezone

    def now() -> datetime:
        return datetime.now(tz)

    return now


@dataclass(frozen=True)
class SpecificPractitioner:
    practitioner_id: str


@dataclass(frozen=True)
class NoPreference:
    pass


ResourceSelection = SpecificPractitioner | NoPreference
NO_PREFERENCE = NoPreference()


def resource_from_id(practitioner_id: str | None) -> ResourceSelection:
    """Map an optional practitioner id from a form or query string to a ResourceSelection."""
    if practitioner_id is None or not practitioner_id.strip():
        return NO_PREFERENCE
    return SpecificPractitioner(practitioner_id.strip())


@dataclass(frozen=True)
class Selection:
    """Everything the customer has picked so far. Changes produce a new value."""

    date: date | None = None
    service_id: str | None = None
    branch_id: str | None = None
    resource: ResourceSelection = NO_PREFERENCE
    slot: str | None = None

    def signature(self) -> tuple:
        """Inputs that determine availability; the chosen slot is not one of them."""
        return (self.date, self.service_id, self.branch_id, self.resource)

    def with_changes(self, **changes) -> Selection:
        updated = replace(self, **changes)
        if updated.signature() != self.signature() and "slot" not in changes:
            updated = replace(updated, slot=None)
        return updated


@dataclass(frozen=True)
class EffectiveResource:
    kind: ResourceKind
    id: str
    name: str
    start_hour: int
    end_hour: int
    branch_id: str | None


class AvailabilityStatus(str, Enum):
    OK = "ok"
    NEEDS_SELECTION = "needs_selection"
    CLOSED = "closed"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Availability:
    selection: Selection
    status: AvailabilityStatus
    slots: list[str] = field(default_factory=list)
    resource: EffectiveResource | None = None
    service: Service | None = None
    date_key: str | None = None
    message: str | None = None


def resolve_resource(
    selection: Selection,
    practitioners: list[Practitioner],
    branches: list[Branch],
) -> EffectiveResource | None:
    """Resource whose schedule the selection books against, or None if it cannot be resolved."""
    branch = next((b for b in branches if b.id == selection.branch_id), None)
    if selection.branch_id is not None and branch is None:
        return None
    if isinstance(selection.resource, SpecificPractitioner):
        practitioner = next(
            (p for p in practitioners if p.id == selection.resource.practitioner_id), None
        )
        if practitioner is None:
            return None
        if branch is not None and practitioner.branch_id not in (None, branch.id):
            return None
        return EffectiveResource(
            kind=ResourceKind.PRACTITIONER,
            id=practitioner.id,
            name=practitioner.name,
            start_hour=practitioner.start_hour,
            end_hour=practitioner.end_hour,
            branch_id=branch.id if branch is not None else practitioner.branch_id,
        )
    if branch is None:
        return None
    return EffectiveResource(
        kind=ResourceKind.BRANCH,
        id=branch.id,
        name=branch.name,
        start_hour=branch.start_hour,
        end_hour=branch.end_hour,
        branch_id=branch.id,
    )


def _has_usable_hours(resource: EffectiveResource) -> bool:
    return 0 <= resource.start_hour <= 24 and 0 <= resource.end_hour <= 24


class AvailabilityEngine:
    def __init__(
        self,
        store: BookingStore,
        clock: Clock | None = None,
        app_settings: Settings = default_settings,
    ) -> None:
        self._store = store
        self._settings = app_settings
        self._clock = clock or system_clock(app_settings)

    @property
    def granularity_minutes(self) -> int:
        return self._settings.slot_granularity_minutes

    async def compute_available_slots(self, selection: Selection) -> list[str]:
        return (await self.compute_availability(selection)).slots

    async def compute_availability(self, selection: Selection) -> Availability:
        if selection.date is None or selection.service_id is None:
            return Availability(
                selection=selection,
                status=AvailabilityStatus.NEEDS_SELECTION,
                message="Choose a date and a service.",
            )
        date_key = date_key_for(selection.date)
        try:
            services = await self._store.list_services()
            practitioners = await self._store.list_practitioners()
            branches = await self._store.list_branches()
            service = next((s for s in services if s.id == selection.service_id), None)
            resource = resolve_resource(selection, practitioners, branches)
            if service is None or resource is None:
                return Availability(
                    selection=selection,
                    status=AvailabilityStatus.NEEDS_SELECTION,
                    service=service,
                    resource=resource,
                    date_key=date_key,
                    message="Choose a branch or a practitioner.",
                )
            if service.duration_minutes < 1:
                logger.warning("Service %s has unusable duration %s", service.id, service.duration_minutes)
                return Availability(
                    selection=selection,
                    status=AvailabilityStatus.NEEDS_SELECTION,
                    service=service,
                    resource=resource,
                    date_key=date_key,
                    message="This service cannot be booked online.",
                )
            if not _has_usable_hours(resource):
                logger.warning(
                    "%s %s has unusable hours %s-%s",
                    resource.kind.value,
                    resource.id,
                    resource.start_hour,
                    resource.end_hour,
                )
                return Availability(
                    selection=selection,
                    status=AvailabilityStatus.CLOSED,
                    service=service,
                    resource=resource,
                    date_key=date_key,
                    message="No appointments can be booked with this schedule.",
                )
            now = self._clock()
            if selection.date < now.date() or selection.date.weekday() in self._settings.closed_weekdays_set:
                return Availability(
                    selection=selection,
                    status=AvailabilityStatus.CLOSED,
                    service=service,
                    resource=resource,
                    date_key=date_key,
                    message="No appointments can be booked on this date.",
                )
            candidates = resolve_candidates(
                resource.start_hour,
                resource.end_hour,
                service.duration_minutes,
                self.granularity_minutes,
            )
            booked = await self._store.list_booked_slots(date_key)
        except StoreUnavailable as exc:
            logger.warning("Availability lookup failed for %s: %s", date_key, exc)
            return Availability(
                selection=selection,
                status=AvailabilityStatus.UNAVAILABLE,
                date_key=date_key,
                message="Availability could not be loaded. Please try again.",
            )
        slots = filter_conflicts(candidates, booked, resource.kind, resource.id, date_key)
        slots = guard_candidates(
            slots,
            now,
            selection.date,
            self._settings.booking_lead_minutes,
            self.granularity_minutes,
            window_start_minute=resource.start_hour * 60,
        )
        return Availability(
            selection=selection,
            status=AvailabilityStatus.OK,
            slots=slots,
            service=service,
            resource=resource,
            date_key=date_key,
            message=None if slots else "No slots available for this selection.",
        )
