"""
Demo data for local development and tests.

Store open Monday to Saturday, 09:00 to 17:00 with a 13:00 to 14:00 lunch break
(Saturday until 14:00, no break), closed Sunday.
"""

import logging

from sqlalchemy.orm import Session

from ..models.generated import Services, StoreHours, Stores

logger = logging.getLogger(__name__)

DEMO_STORE_ID = "demo-garage"
DEMO_OWNER_ID = "owner-1"

DEMO_HOURS = [
    # (day_of_week, open, close, break_start, break_end); 0 = Sunday
    (1, "09:00", "17:00", "13:00", "14:00"),
    (2, "09:00", "17:00", "13:00", "14:00"),
    (3, "09:00", "17:00", "13:00", "14:00"),
    (4, "09:00", "17:00", "13:00", "14:00"),
    (5, "09:00", "17:00", "13:00", "14:00"),
    (6, "09:00", "14:00", None, None),
]

DEMO_SERVICES = [
    # (id, name, duration_minutes, price, available_days)
    ("oil-change", "Oil change", 30, 45.0, "[]"),
    ("tyre-swap", "Tyre swap", 45, 60.0, "[]"),
    ("full-service", "Full service", 120, 220.0, "[1, 2, 3, 4, 5]"),
]


def seed_demo_store(
    db: Session,
    store_id: str = DEMO_STORE_ID,
    owner_id: str = DEMO_OWNER_ID,
) -> Stores:
    """Create the demo store if missing. Idempotent."""
    store = db.get(Stores, store_id)
    if store:
        logger.info(f"Demo store already exists: {store_id}")
        return store

    store = Stores(id=store_id, owner_id=owner_id, name="Demo Garage", is_active=1)
    store.hours = [
        StoreHours(
            day_of_week=dow,
            open_time=open_time,
            close_time=close_time,
            break_start=break_start,
            break_end=break_end,
        )
        for dow, open_time, close_time, break_start, break_end in DEMO_HOURS
    ]
    store.services = [
        Services(
            id=f"{store_id}-{service_id}",
            name=name,
            duration_minutes=duration,
            price=price,
            available_days=days,
            is_active=1,
        )
        for service_id, name, duration, price, days in DEMO_SERVICES
    ]
    db.add(store)
    db.commit()
    db.refresh(store)

    logger.info(f"Demo store created: {store_id} (owner={owner_id})")
    return store
