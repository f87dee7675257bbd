from datetime import date, datetime, timedelta

import pytest

from carbook.services.slots import (
    BookingConfig,
    DaySchedule,
    ExistingBooking,
    calculate_service_availability,
    compute_available_slots,
    find_slot_conflict,
    overlaps,
)
from carbook.services.slots.config import day_of_week, time_str_to_minutes

# 2026-03-02 is a Monday, 2026-03-01 a Sunday
MONDAY = date(2026, 3, 2)
SUNDAY = date(2026, 3, 1)

WEEKDAY_HOURS = [
    DaySchedule(dow, "09:00", "17:00", "13:00", "14:00") for dow in range(1, 6)
]


def booking(start: str, duration: int = 30, status: str = "confirmed", on: date = MONDAY):
    return ExistingBooking(date=on, start_time=start, duration_minutes=duration, status=status)


def grid(start: str, end: str, step: int = 15) -> list[str]:
    """Inclusive HH:MM range."""
    t = time_str_to_minutes(start)
    stop = time_str_to_minutes(end)
    out = []
    while t <= stop:
        out.append(f"{t // 60:02d}:{t % 60:02d}")
        t += step
    return out


def test_day_of_week_starts_on_sunday():
    assert day_of_week(SUNDAY) == 0
    assert day_of_week(MONDAY) == 1
    assert day_of_week(MONDAY + timedelta(days=5)) == 6


def test_overlaps_is_half_open():
    assert overlaps(600, 630, 615, 645)
    assert not overlaps(600, 630, 630, 660)
    assert not overlaps(630, 660, 600, 630)


def test_example_day_with_lunch_and_one_booking():
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [booking("10:00")])

    # 09:45 would run into the 10:00 booking
    expected = ["09:00", "09:15", "09:30"] + grid("10:30", "12:30") + grid("14:00", "16:30")
    assert slots == expected
    assert "16:45" not in slots
    assert "12:45" not in slots


def test_closed_day_returns_empty():
    assert compute_available_slots(SUNDAY, WEEKDAY_HOURS, 30, []) == []


def test_empty_schedule_returns_empty():
    assert compute_available_slots(MONDAY, [], 30, []) == []


def test_duration_longer_than_open_window():
    hours = [DaySchedule(1, "09:00", "10:00")]
    assert compute_available_slots(MONDAY, hours, 90, []) == []


def test_non_positive_duration_returns_empty():
    assert compute_available_slots(MONDAY, WEEKDAY_HOURS, 0, []) == []


@pytest.mark.parametrize("duration", [15, 30, 45, 60, 120])
def test_no_slot_crosses_closing_or_lunch(duration):
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, duration, [])

    assert slots
    for s in slots:
        start = time_str_to_minutes(s)
        end = start + duration
        assert end <= time_str_to_minutes("17:00")
        assert not overlaps(start, end, 13 * 60, 14 * 60)


def test_no_slot_overlaps_existing_bookings():
    existing = [booking("09:30", 45), booking("11:00", 60), booking("15:15", 15)]
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, existing)

    for s in slots:
        start = time_str_to_minutes(s)
        for b in existing:
            assert not overlaps(start, start + 30, *b.interval)


def test_back_to_back_bookings_allowed():
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [booking("10:00")])

    # ends exactly at 10:00, starts exactly at 10:30
    assert "09:30" in slots
    assert "10:30" in slots


def test_slots_are_ascending_on_fixed_grid():
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 45, [])

    assert slots == sorted(slots)
    assert all(time_str_to_minutes(s) % 15 == 0 for s in slots)


def test_grid_step_is_configurable():
    slots = compute_available_slots(
        MONDAY, WEEKDAY_HOURS, 30, [], config=BookingConfig(slot_step_minutes=60)
    )
    assert slots == ["09:00", "10:00", "11:00", "12:00", "14:00", "15:00", "16:00"]


def test_invalid_grid_step_rejected():
    with pytest.raises(ValueError):
        BookingConfig(slot_step_minutes=20)


@pytest.mark.parametrize("status", ["cancelled_by_user", "cancelled_by_store", "no_show"])
def test_cancelled_bookings_free_their_slot(status):
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [booking("10:00", status=status)])
    assert "10:00" in slots


@pytest.mark.parametrize("status", ["pending", "confirmed", "completed"])
def test_occupying_statuses_block_their_slot(status):
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [booking("10:00", status=status)])
    assert "10:00" not in slots


def test_bookings_on_other_dates_ignored():
    other_day = booking("10:00", on=MONDAY + timedelta(days=1))
    slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [other_day])
    assert "10:00" in slots


def test_day_without_break():
    hours = [DaySchedule(1, "09:00", "11:00")]
    slots = compute_available_slots(MONDAY, hours, 60, [])
    assert slots == ["09:00", "09:15", "09:30", "09:45", "10:00"]


def test_half_configured_break_is_ignored():
    hours = [DaySchedule(1, "09:00", "10:00", break_start="09:15")]
    assert compute_available_slots(MONDAY, hours, 30, []) == ["09:00", "09:15", "09:30"]


def test_service_days_restrict_weekdays():
    # Tuesday and Wednesday only
    assert compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [], service_days=[2, 3]) == []
    assert compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [], service_days=[1])
    assert compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [], service_days=[])


class TestFindSlotConflict:
    def test_free_slot(self):
        assert find_slot_conflict(WEEKDAY_HOURS, MONDAY, "10:30", 30, [booking("10:00")]) is None

    def test_closed_day(self):
        assert find_slot_conflict(WEEKDAY_HOURS, SUNDAY, "10:00", 30, []).reason == "closed"

    def test_outside_hours(self):
        assert find_slot_conflict(WEEKDAY_HOURS, MONDAY, "08:45", 30, []).reason == "outside_hours"
        assert find_slot_conflict(WEEKDAY_HOURS, MONDAY, "16:45", 30, []).reason == "outside_hours"

    def test_lunch_break(self):
        assert find_slot_conflict(WEEKDAY_HOURS, MONDAY, "12:45", 30, []).reason == "lunch_break"

    def test_booked_reports_conflicting_booking(self):
        existing = booking("10:00")
        conflict = find_slot_conflict(WEEKDAY_HOURS, MONDAY, "09:45", 30, [existing])

        assert conflict.reason == "booked"
        assert conflict.booking == existing

    def test_service_unavailable(self):
        conflict = find_slot_conflict(WEEKDAY_HOURS, MONDAY, "10:00", 30, [], service_days=[6])
        assert conflict.reason == "service_unavailable"

    def test_off_grid_start_accepted(self):
        assert find_slot_conflict(WEEKDAY_HOURS, MONDAY, "10:07", 30, []) is None

    def test_agrees_with_calculator(self):
        existing = [booking("09:30", 45), booking("15:00", 60, status="pending")]
        slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 45, existing)

        for s in grid("09:00", "16:15"):
            free = find_slot_conflict(WEEKDAY_HOURS, MONDAY, s, 45, existing) is None
            assert free == (s in slots), s


class TestElapsedTimes:
    def test_times_already_started_are_dropped(self):
        now = datetime(2026, 3, 2, 10, 20)
        slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [], now=now)

        assert slots[0] == "10:30"
        assert "10:15" not in slots

    def test_current_minute_is_dropped(self):
        now = datetime(2026, 3, 2, 10, 30)
        slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [], now=now)
        assert slots[0] == "10:45"

    def test_other_days_unaffected(self):
        evening_before = datetime(2026, 3, 1, 20, 0)
        slots = compute_available_slots(MONDAY, WEEKDAY_HOURS, 30, [], now=evening_before)
        assert slots[0] == "09:00"

    def test_agrees_with_commit_time_check(self, db, store):
        now = datetime(2026, 3, 2, 11, 5)
        result = calculate_service_availability(db, store.id, store.oil_change, MONDAY, now=now)

        assert result["available_times"][0] == "11:15"
