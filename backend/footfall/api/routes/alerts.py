"""
Alerts API: list, stats, fetch, acknowledge, resolve.

Alerts are created only by ingestion. Status moves open -> acknowledged -> resolved
(or open -> resolved); an illegal move answers 409.
"""
import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from footfall.core.auth import get_current_account
from footfall.core.constants import ALERTS_DEFAULT_LIMIT, ALERTS_MAX_LIMIT
from footfall.db.session import get_db
from footfall.services.alerts import (
    acknowledge_alert,
    alert_to_dict,
    get_alert,
    get_alert_stats,
    list_alerts,
    resolve_alert,
)
from footfall.services.store_service import get_owned_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_all(
    store_id: str | None = Query(None),
    status: Literal["open", "acknowledged", "resolved"] | None = Query(None),
    severity: Literal["low", "medium", "high", "critical"] | None = Query(None),
    alert_type: Literal["staffing", "queue_length"] | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(ALERTS_DEFAULT_LIMIT, ge=1, le=ALERTS_MAX_LIMIT),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Caller's alerts, most recently raised or refreshed first."""
    result = list_alerts(
        db,
        owner_id,
        store_id=store_id,
        status=status,
        severity=severity,
        alert_type=alert_type,
        page=page,
        limit=limit,
    )
    return {"success": True, **result}


@router.get("/stats/{store_id}")
def stats(
    store_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    get_owned_store(db, owner_id, store_id)
    return {"success": True, "data": get_alert_stats(db, owner_id, store_id)}


@router.get("/{alert_id}")
def get_one(
    alert_id: int,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    return {"success": True, "alert": alert_to_dict(get_alert(db, owner_id, alert_id))}


@router.put("/{alert_id}/acknowledge")
def acknowledge(
    alert_id: int,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """open -> acknowledged. Ingestion may then open a fresh alert for the same scope."""
    row = acknowledge_alert(db, owner_id, alert_id)
    return {"success": True, "message": "Alert acknowledged", "alert": alert_to_dict(row)}


@router.put("/{alert_id}/resolve")
def resolve(
    alert_id: int,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """open or acknowledged -> resolved."""
    row = resolve_alert(db, owner_id, alert_id)
    return {"success": True, "message": "Alert resolved", "alert": alert_to_dict(row)}
