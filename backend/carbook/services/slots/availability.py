# backend/carbook/services/slots/availability.py
"""
Service availability for a store day (advisory read).

Loads the store's weekly schedule, the service and the bookings that occupy
the calendar on the target date, then runs the pure calculator.

The result can go stale as soon as it is returned; the commit guard re-checks
the chosen slot inside the write transaction.
"""

import json
import logging
from datetime import date, datetime

from sqlalchemy.orm import Session

from .config import OCCUPYING_STATUSES, BookingConfig, get_booking_config
from .calculator import DaySchedule, ExistingBooking, compute_available_slots

logger = logging.getLogger(__name__)


def calculate_service_availability(
    db: Session,
    store_id: str,
    service_id: str,
    target_date: date,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Calculate available start times for a service.

    Returns:
        Dict with available times (for SlotsDayResponse).
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    result = {
        "store_id": store_id,
        "service_id": service_id,
        "date": target_date.isoformat(),
        "service_duration_min": 0,
        "slot_step_minutes": config.slot_step_minutes,
        "available_times": [],
    }

    # Step 1: Service (must belong to the store)
    service = _get_service(db, store_id, service_id)
    if not service:
        return result
    result["service_duration_min"] = service.duration_minutes

    # Step 2: Weekly schedule
    schedule = load_weekly_schedule(db, store_id)
    if not schedule:
        return result

    # Step 3: Bookings on that day
    bookings = [to_existing_booking(b) for b in get_active_bookings(db, store_id, target_date)]

    result["available_times"] = compute_available_slots(
        target_date,
        schedule,
        service.duration_minutes,
        bookings,
        config=config,
        service_days=parse_service_days(service.available_days),
        now=now,
    )
    return result


# ── Row → domain converters ──────────────────────────────────────────────


def to_day_schedule(row) -> DaySchedule:
    return DaySchedule(
        day_of_week=row.day_of_week,
        open_time=row.open_time,
        close_time=row.close_time,
        break_start=row.break_start or None,
        break_end=row.break_end or None,
    )


def to_existing_booking(row) -> ExistingBooking:
    return ExistingBooking(
        date=date.fromisoformat(row.booking_date),
        start_time=row.booking_time,
        duration_minutes=row.service_duration_minutes,
        status=row.status,
    )


def parse_service_days(raw: str | None) -> list[int]:
    """Parse the JSON list of weekdays stored on a service."""
    try:
        days = json.loads(raw) if raw else []
    except json.JSONDecodeError:
        logger.warning(f"Invalid available_days value: {raw!r}")
        return []
    if not isinstance(days, list):
        return []
    return [d for d in days if isinstance(d, int)]


# ── Database helpers ─────────────────────────────────────────────────────


def load_weekly_schedule(db: Session, store_id: str) -> list[DaySchedule]:
    """Get the store's schedule entries."""
    from ...models.generated import StoreHours

    rows = (
        db.query(StoreHours)
        .filter(StoreHours.store_id == store_id)
        .order_by(StoreHours.day_of_week)
        .all()
    )
    return [to_day_schedule(r) for r in rows]


def get_active_bookings(db: Session, store_id: str, target_date: date) -> list:
    """Get bookings that occupy the store calendar on date."""
    from ...models.generated import Bookings

    return (
        db.query(Bookings)
        .filter(
            Bookings.store_id == store_id,
            Bookings.booking_date == target_date.isoformat(),
            Bookings.status.in_(sorted(OCCUPYING_STATUSES)),
        )
        .order_by(Bookings.booking_time)
        .all()
    )


def _get_service(db: Session, store_id: str, service_id: str):
    """Get active service of the store."""
    from ...models.generated import Services

    return db.query(Services).filter(
        Services.id == service_id,
        Services.store_id == store_id,
        Services.is_active == 1,
    ).first()
