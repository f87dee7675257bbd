from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from carbook.models import Bookings, Services
from carbook.services.bookings import (
    BookingConflictError,
    BookingPersistenceError,
    BookingRequest,
    BookingValidationError,
    submit_booking,
)

from conftest import MONDAY, NOW


def make_request(store, service_id=None, booking_date=MONDAY, booking_time="10:00", **overrides):
    fields = dict(
        store_id=store.id,
        service_id=service_id or store.oil_change,
        booking_date=booking_date.isoformat() if hasattr(booking_date, "isoformat") else booking_date,
        booking_time=booking_time,
        user_id="user-1",
        user_name="Alex Driver",
        user_email="alex@example.com",
    )
    fields.update(overrides)
    return BookingRequest(**fields)


def add_booking(db, store, booking_time, duration=30, status="confirmed", booking_date=MONDAY):
    row = Bookings(
        id=f"existing-{booking_time}-{status}",
        store_id=store.id,
        store_name="Demo Garage",
        user_id="someone-else",
        user_name="Someone",
        user_email="someone@example.com",
        service_id=store.oil_change,
        service_name="Oil change",
        service_duration_minutes=duration,
        service_price=45.0,
        booking_date=booking_date.isoformat(),
        booking_time=booking_time,
        status=status,
        created_at=NOW.isoformat(),
    )
    db.add(row)
    db.commit()
    return row


def test_free_slot_is_committed_as_pending(db, store, redis_mock):
    booking = submit_booking(db, make_request(store), redis=redis_mock, now=NOW)

    assert booking.status == "pending"
    assert booking.booking_date == "2026-03-02"
    assert booking.booking_time == "10:00"
    assert booking.service_duration_minutes == 30
    assert booking.service_price == 45.0
    assert booking.store_name == "Demo Garage"
    assert booking.created_at == "2026-03-02T08:00:00"
    assert db.query(Bookings).count() == 1


def test_side_channels_after_commit(db, store, redis_mock):
    submit_booking(db, make_request(store), redis=redis_mock, now=NOW)

    assert redis_mock.data[f"owner:pending:{store.owner_id}"] == 1
    assert len(redis_mock.data["events:p2p"]) == 1
    assert '"type": "booking_created"' in redis_mock.data["events:p2p"][0]


def test_overlapping_booking_rejected(db, store, redis_mock):
    add_booking(db, store, "10:00")

    with pytest.raises(BookingConflictError) as exc:
        submit_booking(db, make_request(store, booking_time="09:45"), redis=redis_mock, now=NOW)

    assert exc.value.reason == "booked"
    assert exc.value.booking_date == "2026-03-02"
    assert exc.value.booking_time == "09:45"
    assert exc.value.conflicting_time == "10:00"
    assert db.query(Bookings).count() == 1
    redis_mock.incr.assert_not_called()


def test_back_to_back_allowed(db, store, redis_mock):
    add_booking(db, store, "10:00")

    booking = submit_booking(db, make_request(store, booking_time="10:30"), redis=redis_mock, now=NOW)
    assert booking.booking_time == "10:30"


def test_duration_comes_from_service_record(db, store, redis_mock):
    add_booking(db, store, "11:00")

    # 45 minute tyre swap at 10:30 runs into 11:00
    with pytest.raises(BookingConflictError):
        submit_booking(
            db,
            make_request(store, service_id=store.tyre_swap, booking_time="10:30"),
            redis=redis_mock,
            now=NOW,
        )


@pytest.mark.parametrize("status", ["cancelled_by_user", "cancelled_by_store", "no_show"])
def test_cancelled_booking_frees_slot(db, store, redis_mock, status):
    add_booking(db, store, "10:00", status=status)

    booking = submit_booking(db, make_request(store), redis=redis_mock, now=NOW)
    assert booking.status == "pending"


@pytest.mark.parametrize(
    "booking_time, reason",
    [
        ("08:30", "outside_hours"),
        ("16:45", "outside_hours"),
        ("12:45", "lunch_break"),
        ("13:30", "lunch_break"),
    ],
)
def test_schedule_conflicts(db, store, redis_mock, booking_time, reason):
    with pytest.raises(BookingConflictError) as exc:
        submit_booking(db, make_request(store, booking_time=booking_time), redis=redis_mock, now=NOW)
    assert exc.value.reason == reason


def test_closed_day_is_conflict(db, store, redis_mock):
    sunday = MONDAY + timedelta(days=6)
    with pytest.raises(BookingConflictError) as exc:
        submit_booking(db, make_request(store, booking_date=sunday), redis=redis_mock, now=NOW)
    assert exc.value.reason == "closed"


def test_service_not_offered_on_saturday(db, store, redis_mock):
    saturday = MONDAY + timedelta(days=5)
    with pytest.raises(BookingConflictError) as exc:
        submit_booking(
            db,
            make_request(store, service_id=store.full_service, booking_date=saturday, booking_time="09:00"),
            redis=redis_mock,
            now=NOW,
        )
    assert exc.value.reason == "service_unavailable"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"booking_date": "02-03-2026"}, "booking_date"),
        ({"booking_date": "2026-02-30"}, "booking_date"),
        ({"booking_time": "24:00"}, "booking_time"),
        ({"booking_time": "9:00"}, "booking_time"),
        ({"store_id": ""}, "store_id"),
        ({"service_id": "  "}, "service_id"),
        ({"user_id": ""}, "user_id"),
        ({"notes": "x" * 501}, "notes"),
    ],
)
def test_malformed_candidate(db, store, redis_mock, overrides, field):
    with pytest.raises(BookingValidationError) as exc:
        submit_booking(db, make_request(store, **overrides), redis=redis_mock, now=NOW)
    assert exc.value.field == field


def test_validation_happens_before_db_access(redis_mock):
    db = MagicMock()
    candidate = BookingRequest(
        store_id="s", service_id="svc", booking_date="bad", booking_time="10:00",
        user_id="u", user_name="n", user_email="e",
    )
    with pytest.raises(BookingValidationError):
        submit_booking(db, candidate, redis=redis_mock, now=NOW)
    db.query.assert_not_called()


def test_past_date_rejected(db, store, redis_mock):
    with pytest.raises(BookingValidationError) as exc:
        submit_booking(db, make_request(store, booking_date=MONDAY - timedelta(days=7)), redis=redis_mock, now=NOW)
    assert exc.value.field == "booking_date"


def test_earlier_time_today_rejected(db, store, redis_mock):
    later_today = NOW.replace(hour=11)
    with pytest.raises(BookingValidationError) as exc:
        submit_booking(db, make_request(store, booking_time="10:00"), redis=redis_mock, now=later_today)
    assert exc.value.field == "booking_time"


def test_beyond_horizon_rejected(db, store, redis_mock):
    far = MONDAY + timedelta(days=63)
    with pytest.raises(BookingValidationError):
        submit_booking(db, make_request(store, booking_date=far), redis=redis_mock, now=NOW)


def test_unknown_store_and_service(db, store, redis_mock):
    with pytest.raises(BookingValidationError) as exc:
        submit_booking(db, make_request(store, store_id="nope"), redis=redis_mock, now=NOW)
    assert exc.value.field == "store_id"

    with pytest.raises(BookingValidationError) as exc:
        submit_booking(db, make_request(store, service_id="nope"), redis=redis_mock, now=NOW)
    assert exc.value.field == "service_id"


def test_inactive_service_rejected(db, store, redis_mock):
    db.get(Services, store.oil_change).is_active = 0
    db.commit()

    with pytest.raises(BookingValidationError):
        submit_booking(db, make_request(store), redis=redis_mock, now=NOW)


def test_persistence_failure_on_read(redis_mock, store):
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

    with pytest.raises(BookingPersistenceError):
        submit_booking(db, make_request(store), redis=redis_mock, now=NOW)

    db.rollback.assert_called_once()
    redis_mock.incr.assert_not_called()


def test_persistence_failure_on_commit_writes_nothing(db, store, redis_mock, monkeypatch):
    monkeypatch.setattr(db, "commit", MagicMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))))

    with pytest.raises(BookingPersistenceError):
        submit_booking(db, make_request(store), redis=redis_mock, now=NOW)

    monkeypatch.undo()
    assert db.query(Bookings).count() == 0


def test_counter_failure_does_not_roll_back(db, store, redis_mock):
    redis_mock.incr.side_effect = RedisConnectionError("redis down")
    redis_mock.rpush.side_effect = RedisConnectionError("redis down")

    booking = submit_booking(db, make_request(store), redis=redis_mock, now=NOW)

    assert db.get(Bookings, booking.id) is not None
