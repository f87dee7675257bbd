"""
Booking status transitions.

A transition is a single-row update. It never re-runs conflict detection:
confirming or cancelling a booking cannot create an overlap.
"""

import logging
from datetime import datetime

from redis import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.generated import Bookings, Stores
from ..events import emit_event
from ..pending_counter import decrement_pending
from .errors import (
    BookingForbiddenError,
    BookingNotFoundError,
    BookingPersistenceError,
    BookingValidationError,
    InvalidStatusTransitionError,
)

logger = logging.getLogger(__name__)

BOOKING_STATUSES = (
    "pending",
    "confirmed",
    "completed",
    "cancelled_by_user",
    "cancelled_by_store",
    "no_show",
)

# Anything not listed as a key is terminal
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "cancelled_by_user", "cancelled_by_store"}),
    "confirmed": frozenset({"completed", "cancelled_by_user", "cancelled_by_store", "no_show"}),
}

# Who may set which status
STORE_STATUSES = frozenset({"confirmed", "cancelled_by_store", "completed", "no_show"})
CUSTOMER_STATUSES = frozenset({"cancelled_by_user"})


def can_transition(current: str, new_status: str) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(current, frozenset())


def update_booking_status(
    db: Session,
    booking_id: str,
    new_status: str,
    actor_id: str,
    *,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> Bookings:
    """
    Move a booking to new_status on behalf of actor_id.

    Raises:
        BookingValidationError: unknown status value
        BookingNotFoundError: no such booking
        BookingForbiddenError: actor is neither the owner (store statuses)
            nor the customer (self-cancellation)
        InvalidStatusTransitionError: not allowed from the current status
        BookingPersistenceError: update failed
    """
    if new_status not in BOOKING_STATUSES:
        raise BookingValidationError(f"Unknown status: {new_status}", field="status")

    now = now or datetime.now()

    try:
        # Row lock: concurrent transitions of one booking run one after another
        booking = (
            db.query(Bookings)
            .filter(Bookings.id == booking_id)
            .with_for_update()
            .first()
        )
        if not booking:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

        store = db.get(Stores, booking.store_id)
        owner_id = store.owner_id if store else None
        _check_actor(booking, owner_id, new_status, actor_id)

        previous = booking.status
        if not can_transition(previous, new_status):
            raise InvalidStatusTransitionError(previous, new_status)

        booking.status = new_status
        booking.updated_at = now.isoformat(timespec="seconds")
        db.commit()
        db.refresh(booking)

    except (BookingNotFoundError, BookingForbiddenError, InvalidStatusTransitionError):
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Status update failed: booking={booking_id}, status={new_status}")
        raise BookingPersistenceError("Booking status could not be updated") from e

    logger.info(f"Booking {booking_id} status: {previous} → {new_status} (actor={actor_id})")

    if previous == "pending" and owner_id:
        decrement_pending(owner_id, redis=redis)

    emit_event("booking_status_changed", {
        "booking_id": booking.id,
        "store_id": booking.store_id,
        "owner_id": owner_id,
        "user_id": booking.user_id,
        "old_status": previous,
        "new_status": new_status,
        "initiated_by": {"user_id": actor_id},
    }, redis=redis)

    return booking


def _check_actor(booking: Bookings, owner_id: str | None, new_status: str, actor_id: str) -> None:
    if new_status in STORE_STATUSES and actor_id != owner_id:
        raise BookingForbiddenError("Only the store owner can set this status")
    if new_status in CUSTOMER_STATUSES and actor_id != booking.user_id:
        raise BookingForbiddenError("Only the customer can cancel their booking")
    if new_status not in STORE_STATUSES | CUSTOMER_STATUSES:
        # "pending" can never be set explicitly
        raise InvalidStatusTransitionError(booking.status, new_status)
