# backend/carbook/services/slots/calculator.py
"""
Availability calculation (advisory phase).

Pure functions, no I/O. Given a weekly schedule, a service duration and the
bookings already on the calendar, produce the start times ("HH:MM") a customer
may pick on a given date.

Intervals are half-open [start, end) in minutes since midnight and two
intervals overlap when max(start) < min(end), so a slot that ends exactly when
a booking starts is still free.

The same rules back the commit guard (find_slot_conflict), which re-checks a
single slot against freshly read bookings at write time.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from .config import (
    OCCUPYING_STATUSES,
    BookingConfig,
    day_of_week,
    get_booking_config,
    minutes_to_time_str,
    time_str_to_minutes,
)


@dataclass(frozen=True)
class DaySchedule:
    """Opening hours for one weekday (0 = Sunday)."""
    day_of_week: int
    open_time: str
    close_time: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @property
    def open_min(self) -> int:
        return time_str_to_minutes(self.open_time)

    @property
    def close_min(self) -> int:
        return time_str_to_minutes(self.close_time)

    @property
    def break_interval(self) -> Optional[tuple[int, int]]:
        # Half-configured breaks are ignored
        if not self.break_start or not self.break_end:
            return None
        return time_str_to_minutes(self.break_start), time_str_to_minutes(self.break_end)


@dataclass(frozen=True)
class ExistingBooking:
    """A booking already on the calendar."""
    date: date
    start_time: str
    duration_minutes: int
    status: str = "pending"

    @property
    def occupies_calendar(self) -> bool:
        return self.status in OCCUPYING_STATUSES

    @property
    def interval(self) -> tuple[int, int]:
        start = time_str_to_minutes(self.start_time)
        return start, start + self.duration_minutes


@dataclass(frozen=True)
class SlotConflict:
    """
    Why a slot cannot be booked.

    reason: "closed" | "service_unavailable" | "outside_hours" | "lunch_break" | "booked"
    booking: the conflicting booking when reason == "booked"
    """
    reason: str
    booking: Optional[ExistingBooking] = None


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval intersection test."""
    return max(a_start, b_start) < min(a_end, b_end)


def find_day_schedule(
    weekly_schedule: Iterable[DaySchedule],
    target_date: date,
) -> Optional[DaySchedule]:
    """Return the schedule entry for target_date's weekday, None if closed."""
    weekday = day_of_week(target_date)
    for day in weekly_schedule:
        if day.day_of_week == weekday:
            return day
    return None


def compute_available_slots(
    target_date: date,
    weekly_schedule: Iterable[DaySchedule],
    service_duration_min: int,
    existing_bookings: Iterable[ExistingBooking],
    config: BookingConfig | None = None,
    service_days: Iterable[int] | None = None,
    now: datetime | None = None,
) -> list[str]:
    """
    Calculate bookable start times for a service on a date.

    Returns:
        Ascending list of "HH:MM" strings. Empty list = nothing bookable
        (closed day, duration longer than the open window, fully booked).
        When now falls on target_date, start times at or before the current
        minute are dropped.
    """
    config = config or get_booking_config()

    # Step 1: Resolve the day
    day = find_day_schedule(weekly_schedule, target_date)
    if day is None or service_duration_min <= 0:
        return []
    if not _service_runs_on(service_days, target_date):
        return []

    busy = _busy_intervals(existing_bookings, target_date)
    lunch = day.break_interval
    close_min = day.close_min
    elapsed_min = now.hour * 60 + now.minute if now and now.date() == target_date else -1

    # Step 2: Walk the grid from opening time
    step = config.slot_step_minutes
    slots: list[str] = []

    t = day.open_min
    while t + service_duration_min <= close_min:
        end = t + service_duration_min

        # Already started
        if t <= elapsed_min:
            t += step
            continue

        # Step 3: Lunch break
        if lunch and overlaps(t, end, *lunch):
            t += step
            continue

        # Step 4: Existing bookings
        if any(overlaps(t, end, b_start, b_end) for b_start, b_end, _ in busy):
            t += step
            continue

        slots.append(minutes_to_time_str(t))
        t += step

    return slots


def find_slot_conflict(
    weekly_schedule: Iterable[DaySchedule],
    target_date: date,
    start_time: str,
    duration_min: int,
    existing_bookings: Iterable[ExistingBooking],
    service_days: Iterable[int] | None = None,
) -> Optional[SlotConflict]:
    """
    Check a single requested slot.

    Returns:
        None if the slot is bookable, otherwise the first reason it is not.
    """
    day = find_day_schedule(weekly_schedule, target_date)
    if day is None:
        return SlotConflict("closed")
    if not _service_runs_on(service_days, target_date):
        return SlotConflict("service_unavailable")

    start = time_str_to_minutes(start_time)
    end = start + duration_min

    if start < day.open_min or end > day.close_min:
        return SlotConflict("outside_hours")

    lunch = day.break_interval
    if lunch and overlaps(start, end, *lunch):
        return SlotConflict("lunch_break")

    for b_start, b_end, booking in _busy_intervals(existing_bookings, target_date):
        if overlaps(start, end, b_start, b_end):
            return SlotConflict("booked", booking)

    return None


# ── Helpers ──────────────────────────────────────────────────────────────


def _service_runs_on(service_days: Iterable[int] | None, target_date: date) -> bool:
    """Empty or missing restriction means the service runs every open day."""
    days = set(service_days or ())
    return not days or day_of_week(target_date) in days


def _busy_intervals(
    bookings: Iterable[ExistingBooking],
    target_date: date,
) -> list[tuple[int, int, ExistingBooking]]:
    """Intervals occupied on target_date, sorted by start."""
    busy = []
    for booking in bookings:
        if booking.date != target_date or not booking.occupies_calendar:
            continue
        start, end = booking.interval
        busy.append((start, end, booking))
    busy.sort(key=lambda item: item[0])
    return busy
