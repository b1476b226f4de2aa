"""
Footfall API: ingest samples, latest sample, sliding window, history, bucketed analytics.

Mounted under /api/footfall. Every route checks that the store is active and owned by the
caller before touching samples; absent and foreign stores both answer 404.
"""
import logging
from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from footfall.core.auth import get_current_account
from footfall.core.constants import DEFAULT_WINDOW_MINUTES, HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from footfall.db.session import get_db
from footfall.services.footfall import (
    get_bucketed_analytics,
    get_history,
    get_latest_sample,
    get_window_stats,
    ingest_result_to_dict,
    ingest_sample,
    recompute_occupancy,
    sample_queue_metrics,
    sample_to_dict,
)
from footfall.services.footfall.types import SamplePayload
from footfall.services.store_service import get_owned_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/ingest", status_code=201)
def ingest(
    body: SamplePayload,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """
    Ingest one sample (entry/exit counts, POS rate, optional queue data per till).
    Occupancy is derived from earlier samples; staffing and per-till queue alerts are
    raised or refreshed best-effort and never fail the request.
    """
    store = get_owned_store(db, owner_id, body.store_id)
    result = ingest_sample(db, owner_id, store, body)
    return {
        "success": True,
        "message": "Footfall data ingested successfully",
        "data": ingest_result_to_dict(result),
    }


@router.get("/latest/{store_id}")
def latest(
    store_id: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Latest realtime sample with its queue metrics."""
    get_owned_store(db, owner_id, store_id)
    row = get_latest_sample(db, owner_id, store_id)
    if row is None:
        return {"success": True, "data": None}
    return {
        "success": True,
        "data": {**sample_to_dict(row), "queue_metrics": sample_queue_metrics(row).to_dict()},
    }


@router.get("/window/{store_id}")
def window(
    store_id: str,
    minutes: int = Query(DEFAULT_WINDOW_MINUTES, ge=1, le=60 * 24 * 31),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Stats over the last N minutes of realtime samples (all zeros when there are none)."""
    get_owned_store(db, owner_id, store_id)
    return {"success": True, "data": get_window_stats(db, owner_id, store_id, minutes)}


@router.get("/history/{store_id}")
def history(
    store_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(HISTORY_DEFAULT_LIMIT, ge=1, le=HISTORY_MAX_LIMIT),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    data_type: Literal["realtime", "hourly", "daily"] = Query("realtime"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Paginated samples, newest first. start_date/end_date are ISO 8601 and inclusive."""
    get_owned_store(db, owner_id, store_id)
    result = get_history(
        db,
        owner_id,
        store_id,
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        data_type=data_type,
    )
    return {"success": True, **result}


@router.get("/analytics/{store_id}")
def analytics(
    store_id: str,
    period: Literal["today", "week", "month"] = Query("today"),
    group_by: Literal["hour", "day"] = Query("hour"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Hourly or daily buckets for today, the trailing week, or this month."""
    get_owned_store(db, owner_id, store_id)
    return {"success": True, "data": get_bucketed_analytics(db, owner_id, store_id, period, group_by)}


@router.post("/recompute/{store_id}")
def recompute(
    store_id: str,
    since: datetime | None = Query(None, description="Only re-derive samples at or after this time"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_account),
) -> dict[str, Any]:
    """Re-derive occupancy in timestamp order, e.g. after backfilling older samples."""
    get_owned_store(db, owner_id, store_id)
    changed = recompute_occupancy(db, owner_id, store_id, since=since)
    return {"success": True, "store_id": store_id, "updated": changed}
