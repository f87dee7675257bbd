"""
Pydantic schemas for slots API.
"""

from pydantic import BaseModel, Field


class SlotsDayResponse(BaseModel):
    """Advisory start times for a service on a day."""
    store_id: str
    service_id: str
    date: str = Field(description="YYYY-MM-DD")
    service_duration_min: int
    slot_step_minutes: int = Field(description="Grid step in minutes")
    available_times: list[str] = Field(description='Ascending "HH:MM" start times')

    model_config = {"from_attributes": True}
