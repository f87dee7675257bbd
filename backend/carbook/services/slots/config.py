# backend/carbook/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from datetime import date
from functools import lru_cache


# Statuses that keep their time on the calendar. Cancelled and no-show
# bookings free their slot.
OCCUPYING_STATUSES = frozenset({"pending", "confirmed", "completed"})


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        slot_step_minutes: Grid step for candidate start times (15/30/60).
            Fixed policy, not derived from the service duration.
        horizon_days: How many days ahead a booking may be placed
    """
    slot_step_minutes: int = 15
    horizon_days: int = 60

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be >= 1, got {self.horizon_days}")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton)."""
    return BookingConfig()


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(target_date: date) -> int:
    """Weekday number with 0 = Sunday .. 6 = Saturday."""
    return (target_date.weekday() + 1) % 7
