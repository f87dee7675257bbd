# backend/carbook/routers/bookings.py
# PATCH = status only, DELETE = 405 (bookings are cancelled, never removed)

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..middleware.auth import get_actor_id
from ..middleware.rate_limit import booking_rate_limit
from ..models.generated import Bookings as DBBookings, Stores as DBStores
from ..redis_client import get_redis
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    PendingCountRead,
)
from ..services.bookings import (
    BookingConflictError,
    BookingForbiddenError,
    BookingNotFoundError,
    BookingPersistenceError,
    BookingRequest,
    BookingValidationError,
    InvalidStatusTransitionError,
    submit_booking,
    update_booking_status,
)
from ..services.pending_counter import get_pending

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "/",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_rate_limit)],
)
def create_booking(
    data: BookingCreate,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    candidate = BookingRequest(
        store_id=data.store_id,
        service_id=data.service_id,
        booking_date=data.booking_date,
        booking_time=data.booking_time,
        user_id=actor_id,
        user_name=data.user_name,
        user_email=data.user_email,
        notes=data.notes,
    )

    try:
        return submit_booking(db, candidate, redis=redis)
    except BookingValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "field": e.field},
        ) from None
    except BookingConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "This time is no longer available, please pick another time.",
                "reason": e.reason,
                "booking_date": e.booking_date,
                "booking_time": e.booking_time,
            },
        ) from None
    except BookingPersistenceError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Booking could not be saved. Please try again.",
        ) from None


@router.get("/user/{user_id}", response_model=list[BookingRead])
def list_user_bookings(
    user_id: str,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    if actor_id != user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return (
        db.query(DBBookings)
        .filter(DBBookings.user_id == user_id)
        .order_by(DBBookings.booking_date.desc(), DBBookings.booking_time.asc())
        .all()
    )


@router.get("/owner/{owner_id}", response_model=list[BookingRead])
def list_owner_bookings(
    owner_id: str,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """Bookings of every store the owner runs (dashboard)."""
    if actor_id != owner_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return (
        db.query(DBBookings)
        .join(DBStores, DBStores.id == DBBookings.store_id)
        .filter(DBStores.owner_id == owner_id)
        .order_by(DBBookings.booking_date.desc(), DBBookings.booking_time.asc())
        .all()
    )


@router.get("/owner/{owner_id}/pending_count", response_model=PendingCountRead)
def get_owner_pending_count(
    owner_id: str,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    if actor_id != owner_id:
        raise HTTPException(status_code=403, detail="Forbidden")

    pending = get_pending(owner_id, redis=redis)
    if pending is None:
        # Counter unavailable, count from the database
        pending = (
            db.query(DBBookings)
            .join(DBStores, DBStores.id == DBBookings.store_id)
            .filter(DBStores.owner_id == owner_id, DBBookings.status == "pending")
            .count()
        )
    return PendingCountRead(owner_id=owner_id, pending=pending)


@router.get("/{id}", response_model=BookingRead)
def get_booking(
    id: str,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    if actor_id not in (obj.user_id, obj.store.owner_id):
        raise HTTPException(status_code=403, detail="Forbidden")
    return obj


@router.patch("/{id}/status", response_model=BookingRead)
def change_booking_status(
    id: str,
    data: BookingStatusUpdate,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    try:
        return update_booking_status(db, id, data.status, actor_id, redis=redis)
    except BookingNotFoundError:
        raise HTTPException(status_code=404, detail="Not found") from None
    except BookingForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e)) from None
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except BookingValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except BookingPersistenceError:
        raise HTTPException(
            status_code=503,
            detail="Booking status could not be updated. Please try again.",
        ) from None


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
