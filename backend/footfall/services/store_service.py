"""
Stores owned by an account. Soft delete only: is_active=false keeps samples and alerts
pointing at a real row. get_owned_store is the ownership check every footfall route uses.
"""
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from footfall.core.constants import DEFAULT_STORE_CAPACITY
from footfall.core.errors import MSG_STORE_NOT_FOUND, NotFoundOrDenied, ValidationError
from footfall.core.timeutil import as_utc
from footfall.models.store import Store

logger = logging.getLogger(__name__)

# Fields update_store may change; everything else (owner, store_id, is_active) is fixed
UPDATABLE_FIELDS = (
    "store_name",
    "location",
    "till_count",
    "operating_open",
    "operating_close",
    "capacity",
    "entry_points",
)


def _check_config(till_count: int | None, capacity: int | None) -> None:
    if till_count is not None and till_count < 1:
        raise ValidationError("Till count must be at least 1")
    if capacity is not None and capacity < 1:
        raise ValidationError("Capacity must be at least 1")


def create_store(
    db: Session,
    owner_id: str,
    *,
    store_id: str,
    store_name: str,
    till_count: int,
    location: dict | None = None,
    operating_open: str | None = None,
    operating_close: str | None = None,
    capacity: int | None = None,
    entry_points: list[dict] | None = None,
) -> Store:
    """Create a store. The id must be new for this owner, including soft-deleted stores."""
    store_id = (store_id or "").strip()
    store_name = (store_name or "").strip()
    if not store_id:
        raise ValidationError("Store ID is required")
    if not store_name:
        raise ValidationError("Store name is required")
    _check_config(till_count, capacity)
    existing = db.query(Store.id).filter(Store.owner_id == owner_id, Store.store_id == store_id).first()
    if existing:
        raise ValidationError("Store with this ID already exists")
    row = Store(
        owner_id=owner_id,
        store_id=store_id,
        store_name=store_name,
        till_count=till_count,
        location=location,
        operating_open=operating_open,
        operating_close=operating_close,
        capacity=capacity or DEFAULT_STORE_CAPACITY,
        entry_points=entry_points or [],
        is_active=True,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent create of the same id
        db.rollback()
        raise ValidationError("Store with this ID already exists") from e
    db.refresh(row)
    logger.info("Created store %s for owner %s", store_id, owner_id)
    return row


def list_stores(db: Session, owner_id: str) -> list[Store]:
    """Active stores, newest first."""
    return (
        db.query(Store)
        .filter(Store.owner_id == owner_id, Store.is_active.is_(True))
        .order_by(Store.created_at.desc(), Store.id.desc())
        .all()
    )


def get_owned_store(db: Session, owner_id: str, store_id: str) -> Store:
    """Active store owned by owner_id. Absent, inactive and foreign stores all raise NotFoundOrDenied."""
    row = (
        db.query(Store)
        .filter(Store.owner_id == owner_id, Store.store_id == store_id, Store.is_active.is_(True))
        .first()
    )
    if not row:
        raise NotFoundOrDenied(MSG_STORE_NOT_FOUND)
    return row


def _get_any_owned(db: Session, owner_id: str, store_id: str) -> Store:
    row = db.query(Store).filter(Store.owner_id == owner_id, Store.store_id == store_id).first()
    if not row:
        raise NotFoundOrDenied("Store not found")
    return row


def update_store(db: Session, owner_id: str, store_id: str, updates: dict[str, Any]) -> Store:
    """Apply allowed fields from updates (None values are skipped)."""
    row = _get_any_owned(db, owner_id, store_id)
    changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
    if "store_name" in changes:
        changes["store_name"] = changes["store_name"].strip()
        if not changes["store_name"]:
            raise ValidationError("Store name cannot be empty")
    _check_config(changes.get("till_count"), changes.get("capacity"))
    for k, v in changes.items():
        setattr(row, k, v)
    db.commit()
    db.refresh(row)
    return row


def deactivate_store(db: Session, owner_id: str, store_id: str) -> None:
    """Soft delete."""
    row = _get_any_owned(db, owner_id, store_id)
    row.is_active = False
    db.commit()
    logger.info("Deactivated store %s for owner %s", store_id, owner_id)


def store_to_dict(s: Store) -> dict:
    return {
        "id": s.id,
        "store_id": s.store_id,
        "store_name": s.store_name,
        "location": s.location or {},
        "configuration": {
            "till_count": s.till_count,
            "operating_hours": {"open": s.operating_open, "close": s.operating_close},
            "capacity": s.capacity,
            "entry_points": s.entry_points or [],
        },
        "is_active": s.is_active,
        "created_at": as_utc(s.created_at).isoformat() if s.created_at else None,
        "updated_at": as_utc(s.updated_at).isoformat() if s.updated_at else None,
    }
