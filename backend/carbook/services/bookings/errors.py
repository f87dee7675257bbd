"""
Booking error taxonomy.

Callers branch on the exception class, never on the message text.
Every operation of the commit guard raises at most one of these per call.
"""


class BookingError(Exception):
    """Base class for booking failures."""


class BookingValidationError(BookingError):
    """Malformed or unknown input. Never retried; the caller must fix it."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class BookingConflictError(BookingError):
    """
    Requested slot is not bookable at commit time.

    Expected outcome of two customers racing for the same time: show
    "please pick another time" and refresh the slot list.
    """

    def __init__(
        self,
        booking_date: str,
        booking_time: str,
        reason: str,
        conflicting_time: str | None = None,
    ):
        message = f"Slot {booking_date} {booking_time} is not available ({reason})"
        if conflicting_time:
            message += f", overlaps booking at {conflicting_time}"
        super().__init__(message)
        self.booking_date = booking_date
        self.booking_time = booking_time
        self.reason = reason
        self.conflicting_time = conflicting_time


class BookingPersistenceError(BookingError):
    """The transactional read/write failed (connection, lock, schema)."""


class BookingNotFoundError(BookingError):
    """No booking with the given id."""


class BookingForbiddenError(BookingError):
    """Actor is not allowed to perform the change."""


class InvalidStatusTransitionError(BookingError):
    """Status change not allowed by the transition table."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change booking status from {current} to {requested}")
        self.current = current
        self.requested = requested
