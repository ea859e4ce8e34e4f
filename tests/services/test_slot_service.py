from datetime import UTC, date, datetime

import pytest

from app.models.booking import BookedSlot
from app.services.slot_service import (
    date_key_for,
    earliest_bookable_minute,
    filter_conflicts,
    format_slot_label,
    guard_candidates,
    parse_slot_label,
    resolve_candidates,
)

MONDAY = date(2026, 1, 5)


def test_date_key_is_iso_calendar_day() -> None:
    assert date_key_for(date(2026, 1, 5)) == "2026-01-05"


@pytest.mark.parametrize(
    ("minute_of_day", "label"),
    [
        (0, "12:00 AM"),
        (9 * 60, "09:00 AM"),
        (12 * 60 + 30, "12:30 PM"),
        (16 * 60 + 30, "04:30 PM"),
    ],
)
def test_slot_labels_use_twelve_hour_clock(minute_of_day: int, label: str) -> None:
    assert format_slot_label(minute_of_day) == label
    assert parse_slot_label(label) == minute_of_day


def test_resolve_candidates_full_business_day() -> None:
    slots = resolve_candidates(9, 17, 30, 30)

    assert len(slots) == 16
    assert slots[0] == "09:00 AM"
    assert slots[-1] == "04:30 PM"


def test_resolve_candidates_excludes_starts_that_would_overrun_closing() -> None:
    slots = resolve_candidates(9, 17, 60, 30)

    assert slots[-1] == "04:00 PM"
    assert "04:30 PM" not in slots
    assert len(slots) == 15


def test_resolve_candidates_odd_duration_keeps_granularity() -> None:
    slots = resolve_candidates(8, 10, 45, 30)

    assert slots == ["08:00 AM", "08:30 AM", "09:00 AM"]


@pytest.mark.parametrize(
    ("start_hour", "end_hour", "duration"),
    [
        (17, 9, 30),
        (9, 9, 30),
        (9, 10, 90),
    ],
)
def test_resolve_candidates_degenerate_window_is_empty(start_hour: int, end_hour: int, duration: int) -> None:
    assert resolve_candidates(start_hour, end_hour, duration, 30) == []


def test_resolve_candidates_rejects_non_positive_granularity() -> None:
    with pytest.raises(ValueError):
        resolve_candidates(9, 17, 30, 0)


@pytest.mark.parametrize(
    ("start_hour", "end_hour", "duration"),
    [(0, 24, 15), (8, 16, 45), (9, 17, 60), (9, 12, 180), (13, 14, 25)],
)
def test_every_candidate_fits_inside_window(start_hour: int, end_hour: int, duration: int) -> None:
    for label in resolve_candidates(start_hour, end_hour, duration, 30):
        start = parse_slot_label(label)
        assert start >= start_hour * 60
        assert start + duration <= end_hour * 60
        assert start % 30 == 0


def test_filter_conflicts_removes_same_resource_same_day() -> None:
    candidates = resolve_candidates(8, 16, 30, 30)
    booked = [BookedSlot("2026-01-05", "10:00 AM", "practitioner", "D2")]

    remaining = filter_conflicts(candidates, booked, "practitioner", "D2", "2026-01-05")

    assert "10:00 AM" not in remaining
    assert remaining == [c for c in candidates if c != "10:00 AM"]


def test_filter_conflicts_ignores_other_resources_and_days() -> None:
    candidates = ["09:00 AM", "09:30 AM", "10:00 AM"]
    booked = [
        BookedSlot("2026-01-05", "09:00 AM", "practitioner", "D1"),
        BookedSlot("2026-01-06", "09:30 AM", "practitioner", "D2"),
        BookedSlot("2026-01-05", "10:00 AM", "branch", "D2"),
    ]

    assert filter_conflicts(candidates, booked, "practitioner", "D2", "2026-01-05") == candidates


def test_filter_conflicts_never_returns_a_booked_label() -> None:
    candidates = resolve_candidates(9, 17, 30, 30)
    booked = [BookedSlot("2026-01-05", label, "branch", "B1") for label in candidates[::3]]

    remaining = filter_conflicts(candidates, booked, "branch", "B1", "2026-01-05")

    assert not set(remaining) & {b.slot_label for b in booked}


def test_guard_passes_other_days_through_unchanged() -> None:
    candidates = ["09:00 AM", "09:30 AM"]
    now = datetime(2026, 1, 2, 16, 0, tzinfo=UTC)

    assert guard_candidates(candidates, now, MONDAY, 30, 30) == candidates


def test_guard_today_rounds_lead_time_up_to_next_boundary() -> None:
    candidates = resolve_candidates(9, 17, 30, 30)
    now = datetime(2026, 1, 5, 9, 15, tzinfo=UTC)

    remaining = guard_candidates(candidates, now, MONDAY, 30, 30)

    assert remaining[0] == "10:00 AM"
    assert "09:30 AM" not in remaining


def test_guard_today_keeps_slot_exactly_on_boundary() -> None:
    now = datetime(2026, 1, 5, 9, 30, tzinfo=UTC)

    assert guard_candidates(["09:30 AM", "10:00 AM"], now, MONDAY, 30, 30) == ["10:00 AM"]
    assert earliest_bookable_minute(now, 30, 30) == 10 * 60


def test_guard_today_counts_partial_minutes() -> None:
    now = datetime(2026, 1, 5, 9, 30, 1, tzinfo=UTC)

    assert earliest_bookable_minute(now, 30, 30) == 10 * 60 + 30


def test_guard_late_evening_leaves_nothing_for_today() -> None:
    now = datetime(2026, 1, 5, 23, 45, tzinfo=UTC)

    assert guard_candidates(["09:00 AM"], now, MONDAY, 30, 30) == []
    assert earliest_bookable_minute(now, 30, 30) is None


@pytest.mark.parametrize("hour,minute", [(7, 0), (9, 1), (11, 29), (14, 59)])
def test_guard_never_returns_slot_before_lead_time(hour: int, minute: int) -> None:
    now = datetime(2026, 1, 5, hour, minute, tzinfo=UTC)
    earliest = earliest_bookable_minute(now, 30, 30)

    for label in guard_candidates(resolve_candidates(8, 18, 30, 30), now, MONDAY, 30, 30):
        assert parse_slot_label(label) >= earliest
        assert parse_slot_label(label) >= hour * 60 + minute + 30


def test_guard_rounds_on_grid_counted_from_window_start() -> None:
    now = datetime(2026, 1, 5, 8, 15, tzinfo=UTC)
    candidates = resolve_candidates(8, 12, 45, 45)

    remaining = guard_candidates(candidates, now, MONDAY, 30, 45, window_start_minute=8 * 60)

    assert earliest_bookable_minute(now, 30, 45, 8 * 60) == 8 * 60 + 45
    assert remaining == ["08:45 AM", "09:30 AM", "10:15 AM", "11:00 AM"]
