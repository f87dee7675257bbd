# backend/carbook/routers/stores.py
# PATCH = 405, DELETE = 405 (stores are deactivated, not removed)

import json
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..middleware.auth import get_actor_id
from ..models.generated import (
    Services as DBServices,
    StoreHours as DBStoreHours,
    Stores as DBStores,
)
from ..schemas.stores import (
    ScheduleUpdate,
    ServiceCreate,
    ServiceRead,
    StoreCreate,
    StoreRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stores", tags=["stores"])


@router.get("/", response_model=list[StoreRead])
def list_stores(db: Session = Depends(get_db)):
    return (
        db.query(DBStores)
        .filter(DBStores.is_active == 1)
        .all()
    )


@router.get("/{id}", response_model=StoreRead)
def get_store(id: str, db: Session = Depends(get_db)):
    obj = db.get(DBStores, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=StoreRead, status_code=status.HTTP_201_CREATED)
def create_store(
    data: StoreCreate,
    db: Session = Depends(get_db),
):
    store_id = data.id or uuid.uuid4().hex
    if db.get(DBStores, store_id):
        raise HTTPException(status_code=409, detail="Store already exists")

    obj = DBStores(
        id=store_id,
        owner_id=data.owner_id,
        name=data.name,
        address=data.address,
        is_active=1,
    )
    obj.hours = [DBStoreHours(**day.model_dump()) for day in data.schedule]
    obj.services = [_build_service(svc) for svc in data.services]

    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Store created: store_id={obj.id}, owner={obj.owner_id}")
    return obj


@router.put("/{id}/schedule", response_model=StoreRead)
def replace_schedule(
    id: str,
    data: ScheduleUpdate,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    """Replace the whole weekly schedule. Missing days become closed."""
    obj = _get_owned_store(db, id, actor_id)

    obj.hours.clear()
    db.flush()
    obj.hours.extend(DBStoreHours(**day.model_dump()) for day in data.days)

    db.commit()
    db.refresh(obj)

    logger.info(f"Schedule replaced: store_id={id}, days={[d.day_of_week for d in data.days]}")
    return obj


@router.post(
    "/{id}/services", response_model=ServiceRead, status_code=status.HTTP_201_CREATED
)
def add_service(
    id: str,
    data: ServiceCreate,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    store = _get_owned_store(db, id, actor_id)

    service = _build_service(data)
    if db.get(DBServices, service.id):
        raise HTTPException(status_code=409, detail="Service already exists")

    store.services.append(service)
    db.commit()
    db.refresh(service)
    return service


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


def _build_service(data: ServiceCreate) -> DBServices:
    payload = data.model_dump(exclude={"id", "available_days"})
    return DBServices(
        id=data.id or uuid.uuid4().hex,
        available_days=json.dumps(data.available_days),
        is_active=1,
        **payload,
    )


def _get_owned_store(db: Session, store_id: str, actor_id: str) -> DBStores:
    obj = db.get(DBStores, store_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    if obj.owner_id != actor_id:
        raise HTTPException(status_code=403, detail="Only the store owner can change the store")
    return obj
