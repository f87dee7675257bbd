"""
Booking commit guard (authoritative phase).

The slot list shown to a customer is computed from a snapshot and can be
stale by the time they submit. This module is the only place that decides
whether a booking is written:

1. Validate the candidate shape (no DB access)
2. Open a write transaction serialized per store
3. Re-read the occupying bookings for store + date inside it
4. Re-run the slot check; conflict → nothing is written
5. Insert with status "pending", commit
6. Best-effort side channels (pending counter, event)
"""

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from redis import Redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.generated import Bookings, Services, Stores
from ..events import emit_event
from ..pending_counter import increment_pending
from ..slots.availability import (
    get_active_bookings,
    load_weekly_schedule,
    parse_service_days,
    to_existing_booking,
)
from ..slots.calculator import find_slot_conflict
from ..slots.config import BookingConfig, get_booking_config, time_str_to_minutes
from .errors import (
    BookingConflictError,
    BookingPersistenceError,
    BookingValidationError,
)

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
MAX_NOTES_LENGTH = 500


@dataclass(frozen=True)
class BookingRequest:
    """Candidate booking as submitted by a customer."""
    store_id: str
    service_id: str
    booking_date: str  # YYYY-MM-DD
    booking_time: str  # HH:MM
    user_id: str
    user_name: str
    user_email: str
    notes: Optional[str] = None


def submit_booking(
    db: Session,
    candidate: BookingRequest,
    *,
    redis: Redis | None = None,
    now: datetime | None = None,
    config: BookingConfig | None = None,
) -> Bookings:
    """
    Validate, re-check and persist a booking.

    Raises:
        BookingValidationError: malformed candidate, unknown store/service
        BookingConflictError: slot outside hours, in the lunch break or
            overlapping an existing booking
        BookingPersistenceError: the transaction itself failed
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    # Step 1: Shape validation, before any persistence access
    target_date = validate_candidate(candidate, now, config)

    slot = f"{candidate.booking_date} {candidate.booking_time}"
    logger.info(
        f"Booking submission: store={candidate.store_id}, "
        f"service={candidate.service_id}, slot={slot}, user={candidate.user_id}"
    )

    try:
        # Step 2: Lock the store row (SQLite: the transaction itself is
        # BEGIN IMMEDIATE, FOR UPDATE is not rendered)
        store = (
            db.query(Stores)
            .filter(Stores.id == candidate.store_id)
            .with_for_update()
            .first()
        )
        if not store or not store.is_active:
            raise BookingValidationError("Store not found or inactive", field="store_id")

        service = db.get(Services, candidate.service_id)
        _validate_service(service, store.id)

        # Step 3: Authoritative re-read
        schedule = load_weekly_schedule(db, store.id)
        existing = [to_existing_booking(b) for b in get_active_bookings(db, store.id, target_date)]

        # Step 4: Same rules as the advisory calculation
        conflict = find_slot_conflict(
            schedule,
            target_date,
            candidate.booking_time,
            service.duration_minutes,
            existing,
            service_days=parse_service_days(service.available_days),
        )
        if conflict:
            raise BookingConflictError(
                candidate.booking_date,
                candidate.booking_time,
                conflict.reason,
                conflicting_time=conflict.booking.start_time if conflict.booking else None,
            )

        # Step 5: Write
        owner_id = store.owner_id
        booking = Bookings(
            id=uuid.uuid4().hex,
            store_id=store.id,
            store_name=store.name,
            user_id=candidate.user_id,
            user_name=candidate.user_name.strip(),
            user_email=candidate.user_email.strip(),
            service_id=service.id,
            service_name=service.name,
            service_duration_minutes=service.duration_minutes,
            service_price=service.price,
            booking_date=candidate.booking_date,
            booking_time=candidate.booking_time,
            status="pending",
            created_at=now.isoformat(timespec="seconds"),
            notes=candidate.notes or None,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)

    except (BookingValidationError, BookingConflictError) as e:
        db.rollback()
        logger.info(f"Booking rejected: store={candidate.store_id}, slot={slot}: {e}")
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(
            f"Booking persistence failed: store={candidate.store_id}, "
            f"date={candidate.booking_date}, time={candidate.booking_time}"
        )
        raise BookingPersistenceError("Booking could not be saved") from e

    logger.info(
        f"Booking created: booking_id={booking.id}, store={booking.store_id}, "
        f"service={booking.service_name}, slot={slot}"
    )

    # Step 6: Side channels, never roll back the booking
    increment_pending(owner_id, redis=redis)
    emit_event("booking_created", {
        "booking_id": booking.id,
        "store_id": booking.store_id,
        "owner_id": owner_id,
        "initiated_by": {
            "user_id": booking.user_id,
            "role": "client",
        },
    }, redis=redis)

    return booking


def validate_candidate(
    candidate: BookingRequest,
    now: datetime,
    config: BookingConfig,
) -> date:
    """
    Check the candidate without touching the database.

    Returns:
        Parsed booking date.
    """
    for field in ("store_id", "service_id", "user_id", "user_name", "user_email"):
        value = getattr(candidate, field)
        if not isinstance(value, str) or not value.strip():
            raise BookingValidationError(f"{field} is required", field=field)

    if not DATE_RE.match(candidate.booking_date or ""):
        raise BookingValidationError("Date must be in YYYY-MM-DD format", field="booking_date")
    try:
        target_date = date.fromisoformat(candidate.booking_date)
    except ValueError:
        raise BookingValidationError("Date must be in YYYY-MM-DD format", field="booking_date") from None

    if not TIME_RE.match(candidate.booking_time or ""):
        raise BookingValidationError("Time must be in HH:MM format", field="booking_time")

    if candidate.notes and len(candidate.notes) > MAX_NOTES_LENGTH:
        raise BookingValidationError(
            f"Notes cannot be longer than {MAX_NOTES_LENGTH} characters", field="notes"
        )

    today = now.date()
    if target_date < today:
        raise BookingValidationError("Date cannot be in the past", field="booking_date")
    if target_date == today and time_str_to_minutes(candidate.booking_time) <= now.hour * 60 + now.minute:
        raise BookingValidationError("Time cannot be in the past", field="booking_time")
    if target_date > today + timedelta(days=config.horizon_days):
        raise BookingValidationError(
            f"Date cannot be more than {config.horizon_days} days ahead", field="booking_date"
        )

    return target_date


def _validate_service(service: Services | None, store_id: str) -> None:
    """Service must exist, belong to the store and have sane duration/price."""
    if not service or not service.is_active or service.store_id != store_id:
        raise BookingValidationError("Service not found or inactive", field="service_id")
    if not service.duration_minutes or service.duration_minutes <= 0:
        raise BookingValidationError("Service duration must be positive", field="service_id")
    if service.price is None or service.price < 0:
        raise BookingValidationError("Service price must be non-negative", field="service_id")
