from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from app.models.booking import BookedSlot, ResourceKind

DATE_KEY_FORMAT = "%Y-%m-%d"
SLOT_LABEL_FORMAT = "%I:%M %p"


def date_key_for(d: date) -> str:
    """Calendar-day key used to group bookings, e.g. '2026-01-05'."""
    return d.strftime(DATE_KEY_FORMAT)


def format_slot_label(minute_of_day: int) -> str:
    t = time(minute_of_day // 60, minute_of_day % 60)
    return t.strftime(SLOT_LABEL_FORMAT)


def parse_slot_label(label: str) -> int:
    """Minutes since midnight for a label such as '04:30 PM'."""
    parsed = datetime.strptime(label, SLOT_LABEL_FORMAT)
    return parsed.hour * 60 + parsed.minute


def _slot_minutes_for_window(
    start_hour: int, end_hour: int, duration_minutes: int, granularity_minutes: int
) -> list[int]:
    """Start minutes (from midnight) of every slot whose full duration fits before end_hour:00."""
    if granularity_minutes <= 0:
        raise ValueError("granularity_minutes must be positive")
    if duration_minutes < 1:
        raise ValueError("duration_minutes must be at least 1")
    window_end = end_hour * 60
    current = start_hour * 60
    slots: list[int] = []
    while current < window_end:
        if current + duration_minutes > window_end:
            break
        slots.append(current)
        current += granularity_minutes
    return slots


def resolve_candidates(
    start_hour: int, end_hour: int, duration_minutes: int, granularity_minutes: int
) -> list[str]:
    """Chronological slot labels for a working window. Degenerate windows give []."""
    return [
        format_slot_label(m)
        for m in _slot_minutes_for_window(start_hour, end_hour, duration_minutes, granularity_minutes)
    ]


def filter_conflicts(
    candidates: Iterable[str],
    booked: Iterable[BookedSlot],
    resource_kind: ResourceKind | str,
    resource_id: str,
    date_key: str,
) -> list[str]:
    """Drop candidates already taken by the same resource on the same day.

    Booked slots of any other resource or day are ignored.
    """
    kind = ResourceKind(resource_kind).value
    taken = {
        b.slot_label
        for b in booked
        if b.date_key == date_key and b.resource_kind == kind and b.resource_id == resource_id
    }
    return [c for c in candidates if c not in taken]


def earliest_bookable_minute(
    now: datetime, lead_minutes: int, granularity_minutes: int, origin_minute: int = 0
) -> int | None:
    """Minute of now's day from which slots may be booked, or None if that falls past midnight.

    now + lead is rounded up to the next granularity boundary counted from
    ``origin_minute`` (the start of the working window); an instant that is
    already on a boundary is kept as is.
    """
    earliest = now + timedelta(minutes=lead_minutes)
    if earliest.date() != now.date():
        return None
    minute = earliest.hour * 60 + earliest.minute
    if earliest.second or earliest.microsecond:
        minute += 1
    offset = max(minute - origin_minute, 0)
    return origin_minute + -(-offset // granularity_minutes) * granularity_minutes


def guard_candidates(
    candidates: Iterable[str],
    now: datetime,
    candidate_date: date,
    lead_minutes: int,
    granularity_minutes: int,
    window_start_minute: int = 0,
) -> list[str]:
    """Remove slots on today's date that start before now + lead time."""
    candidates = list(candidates)
    if candidate_date != now.date():
        return candidates
    earliest = earliest_bookable_minute(now, lead_minutes, granularity_minutes, window_start_minute)
    if earliest is None:
        return []
    return [c for c in candidates if parse_slot_label(c) >= earliest]
