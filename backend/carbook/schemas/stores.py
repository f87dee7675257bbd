# backend/carbook/schemas/stores.py

import json
import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def _check_time(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if not isinstance(v, str) or not TIME_RE.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v


class DayScheduleBase(BaseModel):
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    open_time: str
    close_time: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @field_validator("open_time", "close_time", "break_start", "break_end", mode="before")
    @classmethod
    def check_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)

    @model_validator(mode="after")
    def check_order(self):
        if not self.open_time < self.close_time:
            raise ValueError("open_time must be before close_time")
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("break_start and break_end must be set together")
        if self.break_start is not None:
            if not (self.open_time <= self.break_start < self.break_end <= self.close_time):
                raise ValueError("Break must lie within opening hours")
        return self

    model_config = {"from_attributes": True}


class DayScheduleRead(DayScheduleBase):
    pass


class ScheduleUpdate(BaseModel):
    days: list[DayScheduleBase]

    @field_validator("days")
    @classmethod
    def unique_days(cls, v: list[DayScheduleBase]) -> list[DayScheduleBase]:
        seen = [d.day_of_week for d in v]
        if len(seen) != len(set(seen)):
            raise ValueError("Each day_of_week may appear only once")
        return v


class ServiceCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    duration_minutes: int = Field(gt=0)
    price: float = Field(ge=0)
    available_days: list[int] = []

    @field_validator("available_days")
    @classmethod
    def check_days(cls, v: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("available_days must contain values 0-6")
        return sorted(set(v))

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    price: Optional[float] = Field(default=None, ge=0)
    available_days: Optional[list[int]] = None

    @field_validator("is_active", "name", "duration_minutes", "price", mode="before")
    @classmethod
    def not_null(cls, v):
        # Omit the field to keep the current value
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("available_days")
    @classmethod
    def check_days(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        if v is None:
            return v
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("available_days must contain values 0-6")
        return sorted(set(v))

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: str
    store_id: str
    name: str
    description: Optional[str] = None
    duration_minutes: int
    price: float
    available_days: list[int] = []
    is_active: bool

    @field_validator("available_days", mode="before")
    @classmethod
    def parse_days(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v) or []
            except json.JSONDecodeError:
                return []
        return v or []

    model_config = {"from_attributes": True}


class StoreCreate(BaseModel):
    id: Optional[str] = None
    owner_id: str = Field(min_length=1)
    name: str = Field(min_length=3)
    address: Optional[str] = None
    schedule: list[DayScheduleBase] = []
    services: list[ServiceCreate] = []

    @field_validator("schedule")
    @classmethod
    def unique_days(cls, v: list[DayScheduleBase]) -> list[DayScheduleBase]:
        seen = [d.day_of_week for d in v]
        if len(seen) != len(set(seen)):
            raise ValueError("Each day_of_week may appear only once")
        return v

    model_config = {"from_attributes": True}


class StoreRead(BaseModel):
    id: str
    owner_id: str
    name: str
    address: Optional[str] = None
    is_active: bool
    schedule: list[DayScheduleRead] = Field(default=[], validation_alias="hours")
    services: list[ServiceRead] = []

    model_config = {"from_attributes": True}
