"""
footfall_samples storage: insert, latest lookups, paginated history, and the JSON shape
returned by the API. Every query is scoped to (owner_id, store_id).
"""
import logging
import math
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from footfall.core.constants import DATA_TYPE_REALTIME, HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from footfall.core.errors import PersistenceFailure
from footfall.core.timeutil import as_utc
from footfall.models.footfall_sample import FootfallSample
from footfall.services.footfall.types import QueueMetrics, SamplePayload

logger = logging.getLogger(__name__)


def _store_filter(owner_id: str, store_id: str) -> tuple:
    return (FootfallSample.owner_id == owner_id, FootfallSample.store_id == store_id)


def insert_sample(
    db: Session,
    owner_id: str,
    payload: SamplePayload,
    *,
    timestamp: datetime,
    current_occupancy: int,
    computed_queue: QueueMetrics,
) -> FootfallSample:
    """Write one sample with its already-derived occupancy. Raises PersistenceFailure on DB errors."""
    queue = payload.queue_data
    till_queues = [t.model_dump() for t in queue.till_queues] if queue else []
    total_queue = queue.total_queue if queue and queue.total_queue is not None else computed_queue.total_queue
    avg_wait = queue.avg_wait_time if queue and queue.avg_wait_time is not None else computed_queue.avg_wait_time
    row = FootfallSample(
        owner_id=owner_id,
        store_id=payload.store_id,
        timestamp=timestamp,
        entry_count=payload.entry_count,
        exit_count=payload.exit_count,
        current_occupancy=current_occupancy,
        pos_rate=payload.pos_rate,
        total_queue=total_queue,
        avg_wait_time=avg_wait,
        till_queues=till_queues,
        entry_details=[d.model_dump(mode="json") for d in payload.entry_details] if payload.entry_details else None,
        exit_details=[d.model_dump(mode="json") for d in payload.exit_details] if payload.exit_details else None,
        data_type=payload.data_type,
        weather=payload.weather.model_dump() if payload.weather else None,
        special_events=list(payload.special_events) if payload.special_events else None,
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Sample write failed for store %s: %s", payload.store_id, e)
        raise PersistenceFailure() from e
    return row


def get_latest_sample(db: Session, owner_id: str, store_id: str) -> FootfallSample | None:
    """Latest realtime sample for the store, or None."""
    return (
        db.query(FootfallSample)
        .filter(*_store_filter(owner_id, store_id), FootfallSample.data_type == DATA_TYPE_REALTIME)
        .order_by(FootfallSample.timestamp.desc(), FootfallSample.id.desc())
        .first()
    )


def get_history(
    db: Session,
    owner_id: str,
    store_id: str,
    *,
    page: int = 1,
    limit: int = HISTORY_DEFAULT_LIMIT,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    data_type: str = DATA_TYPE_REALTIME,
) -> dict:
    """Newest-first page of samples. start_date and end_date are both inclusive."""
    page = max(1, page)
    limit = max(1, min(limit, HISTORY_MAX_LIMIT))
    q = db.query(FootfallSample).filter(*_store_filter(owner_id, store_id), FootfallSample.data_type == data_type)
    if start_date is not None:
        q = q.filter(FootfallSample.timestamp >= as_utc(start_date))
    if end_date is not None:
        q = q.filter(FootfallSample.timestamp <= as_utc(end_date))
    total = q.count()
    rows = (
        q.order_by(FootfallSample.timestamp.desc(), FootfallSample.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "data": [sample_to_dict(r) for r in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


def sample_to_dict(r: FootfallSample) -> dict:
    return {
        "id": r.id,
        "store_id": r.store_id,
        "timestamp": as_utc(r.timestamp).isoformat() if r.timestamp else None,
        "entry_count": r.entry_count,
        "exit_count": r.exit_count,
        "current_occupancy": r.current_occupancy,
        "pos_rate": r.pos_rate,
        "queue_data": {
            "total_queue": r.total_queue,
            "avg_wait_time": r.avg_wait_time,
            "till_queues": r.till_queues or [],
        },
        "entry_details": r.entry_details or [],
        "exit_details": r.exit_details or [],
        "data_type": r.data_type,
        "weather": r.weather,
        "special_events": r.special_events or [],
        "created_at": as_utc(r.created_at).isoformat() if r.created_at else None,
    }
