# backend/carbook/routers/services.py
# PATCH = ALLOWED (owner), DELETE = soft-delete (is_active)

import json

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..middleware.auth import get_actor_id
from ..models.generated import Services as DBServices
from ..schemas.stores import ServiceRead, ServiceUpdate

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/{id}", response_model=ServiceRead)
def get_service(id: str, db: Session = Depends(get_db)):
    obj = db.get(DBServices, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.patch("/{id}", response_model=ServiceRead)
def update_service(
    id: str,
    data: ServiceUpdate,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    obj = _get_owned_service(db, id, actor_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "available_days":
            value = json.dumps(value or [])
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    id: str,
    actor_id: str = Depends(get_actor_id),
    db: Session = Depends(get_db),
):
    obj = _get_owned_service(db, id, actor_id)
    obj.is_active = 0
    db.commit()


def _get_owned_service(db: Session, service_id: str, actor_id: str) -> DBServices:
    obj = db.get(DBServices, service_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    if obj.store.owner_id != actor_id:
        raise HTTPException(status_code=403, detail="Only the store owner can change services")
    return obj
