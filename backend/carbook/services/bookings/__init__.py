"""
Booking commit and lifecycle.
"""

from .commit_guard import BookingRequest, submit_booking
from .errors import (
    BookingConflictError,
    BookingError,
    BookingForbiddenError,
    BookingNotFoundError,
    BookingPersistenceError,
    BookingValidationError,
    InvalidStatusTransitionError,
)
from .status import ALLOWED_TRANSITIONS, BOOKING_STATUSES, update_booking_status

__all__ = [
    "BookingRequest",
    "submit_booking",
    "update_booking_status",
    "ALLOWED_TRANSITIONS",
    "BOOKING_STATUSES",
    "BookingError",
    "BookingValidationError",
    "BookingConflictError",
    "BookingPersistenceError",
    "BookingNotFoundError",
    "BookingForbiddenError",
    "InvalidStatusTransitionError",
]
