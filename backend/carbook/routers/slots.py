# backend/carbook/routers/slots.py
"""
Slots API endpoints.

GET /slots/day - Advisory start times for a service on a day.
The list may be stale by submission time; POST /bookings re-checks.
"""

from datetime import date, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Services as DBServices, Stores as DBStores
from ..schemas.slots import SlotsDayResponse
from ..services.slots import calculate_service_availability, get_booking_config


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    store_id: str,
    service_id: str,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get available start times for a service on a specific day."""
    config = get_booking_config()

    today = date.today()
    max_date = today + timedelta(days=config.horizon_days)

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    if target_date > max_date:
        raise HTTPException(status_code=400, detail=f"Date cannot be more than {config.horizon_days} days ahead")

    store = db.get(DBStores, store_id)
    if not store or not store.is_active:
        raise HTTPException(status_code=404, detail="Store not found")

    service = db.get(DBServices, service_id)
    if not service or not service.is_active or service.store_id != store_id:
        raise HTTPException(status_code=404, detail="Service not found")

    result = calculate_service_availability(
        db=db,
        store_id=store_id,
        service_id=service_id,
        target_date=target_date,
        config=config,
    )

    return SlotsDayResponse(**result)
