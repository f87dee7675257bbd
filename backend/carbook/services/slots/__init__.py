# backend/carbook/services/slots/__init__.py
"""
Slots calculation module.

Advisory phase of booking: which start times can a customer pick.
The authoritative re-check lives in services.bookings.commit_guard.
"""

from .config import BookingConfig, get_booking_config
from .calculator import (
    DaySchedule,
    ExistingBooking,
    SlotConflict,
    compute_available_slots,
    find_slot_conflict,
    overlaps,
)
from .availability import calculate_service_availability

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "DaySchedule",
    "ExistingBooking",
    "SlotConflict",
    "compute_available_slots",
    "find_slot_conflict",
    "overlaps",
    "calculate_service_availability",
]
