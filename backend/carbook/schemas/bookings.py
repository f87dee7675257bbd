# backend/carbook/schemas/bookings.py

from typing import Literal, Optional
from pydantic import BaseModel, Field

BookingStatus = Literal[
    "pending",
    "confirmed",
    "completed",
    "cancelled_by_user",
    "cancelled_by_store",
    "no_show",
]


class BookingCreate(BaseModel):
    # Format checks are repeated by the commit guard; this only shapes the body
    store_id: str
    service_id: str
    booking_date: str = Field(description="Date in YYYY-MM-DD format")
    booking_time: str = Field(description="Time in HH:MM format")
    user_name: str
    user_email: str
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: str

    store_id: str
    store_name: str
    user_id: str
    user_name: str
    user_email: str
    service_id: str
    service_name: str
    service_duration_minutes: int
    service_price: float

    booking_date: str
    booking_time: str

    status: str
    notes: Optional[str] = None

    created_at: str
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class PendingCountRead(BaseModel):
    owner_id: str
    pending: int
