"""Store management: create, list, fetch (with latest sample), update, soft delete."""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from footfall.core.auth import get_current_account
from footfall.core.errors import ValidationError
from footfall.db.session import get_db
from footfall.services.footfall import get_latest_sample, sample_to_dict
from footfall.services.store_service import (
    create_store,
    deactivate_store,
    get_owned_store,
    list_stores,
    store_to_dict,
    update_store,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class Coordinates(BaseModel):
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class Location(BaseModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    coordinates: Coordinates | None = None


class OperatingHours(BaseModel):
    open: str | None = Field(None, pattern=_HHMM)
    close: str | None = Field(None, pattern=_HHMM)


class EntryPoint(BaseModel):
    name: str
    location: str | None = None


class StoreConfiguration(BaseModel):
    till_count: int | None = Field(None, ge=1)
    operating_hours: OperatingHours | None = None
    capacity: int | None = Field(None, ge=1)
    entry_points: list[EntryPoint] | None = None


class CreateStoreBody(BaseModel):
    store_id: str = Field(..., min_length=1, max_length=64)
    store_name: str = Field(..., min_length=1, max_length=255)
    till_count: int | None = Field(None, ge=1, description="Shortcut for configuration.till_count")
    location: Location | None = None
    configuration: StoreConfiguration | None = None


class UpdateStoreBody(BaseModel):
    store_name: str | None = Field(None, min_length=1, max_length=255)
    location: Location | None = None
    configuration: StoreConfiguration | None = None


def _config_fields(config: StoreConfiguration | None) -> dict[str, Any]:
    if config is None:
        return {}
    hours = config.operating_hours
    return {
        "till_count": config.till_count,
        "capacity": config.capacity,
        "operating_open": hours.open if hours else None,
        "operating_close": hours.close if hours else None,
        "entry_points": [p.model_dump() for p in config.entry_points] if config.entry_points is not None else None,
    }


@router.post("", status_code=201)
def create(
    body: CreateStoreBody,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Create a store. till_count is required, either top-level or in configuration."""
    fields = _config_fields(body.configuration)
    config_tills = fields.pop("till_count", None)
    till_count = body.till_count if body.till_count is not None else config_tills
    if till_count is None:
        raise ValidationError("Till count must be at least 1")
    row = create_store(
        db,
        owner_id,
        store_id=body.store_id,
        store_name=body.store_name,
        till_count=till_count,
        location=body.location.model_dump() if body.location else None,
        **fields,
    )
    return {"success": True, "message": "Store created successfully", "store": store_to_dict(row)}


@router.get("")
def list_all(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Active stores for the caller, newest first."""
    rows = list_stores(db, owner_id)
    return {"success": True, "count": len(rows), "stores": [store_to_dict(r) for r in rows]}


@router.get("/{store_id}")
def get_one(
    store_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Store plus its latest realtime sample (null when nothing ingested yet)."""
    row = get_owned_store(db, owner_id, store_id)
    latest = get_latest_sample(db, owner_id, store_id)
    return {
        "success": True,
        "store": store_to_dict(row),
        "latest_footfall_data": sample_to_dict(latest) if latest else None,
    }


@router.put("/{store_id}")
def update(
    store_id: str,
    body: UpdateStoreBody,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Update name, location or configuration. Omitted fields are left as they are."""
    updates = _config_fields(body.configuration)
    updates["store_name"] = body.store_name
    if body.location is not None:
        updates["location"] = body.location.model_dump()
    row = update_store(db, owner_id, store_id, updates)
    return {"success": True, "message": "Store updated successfully", "store": store_to_dict(row)}


@router.delete("/{store_id}")
def delete(
    store_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Soft delete: the store disappears from lists, its samples and alerts are kept."""
    deactivate_store(db, owner_id, store_id)
    return {"success": True, "message": "Store deleted successfully"}
