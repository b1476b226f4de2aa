"""
Turn derived metrics into alerts. Two policies run after every ingested sample:

- staffing (one per store): total queue, weighted wait and occupancy ratio
- queue_length (one per till): the till's line length and its wait contribution

Each policy maps metrics to an escalation level 0..3 using the bands in alert_config;
level 0 writes nothing (an open alert is never auto-resolved here). Levels 1..3 go through
upsert_open_alert, a single INSERT .. ON CONFLICT against the partial unique index on open
alerts, so concurrent ingests refresh one open alert instead of racing to create two.
"""
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from footfall.core.alert_config import AlertThresholds, get_alert_thresholds
from footfall.core.constants import (
    ALERT_STATUS_OPEN,
    ALERT_TYPE_QUEUE_LENGTH,
    ALERT_TYPE_STAFFING,
    LEVEL_TO_SEVERITY,
    STORE_SCOPE_KEY,
)
from footfall.core.errors import AlertSynthesisFailure
from footfall.core.timeutil import utcnow
from footfall.models.alert import OPEN_ALERT_PREDICATE, OPEN_SCOPE_COLUMNS, Alert

logger = logging.getLogger(__name__)


def _band_level(value: float, bands: tuple, first_level: int = 1) -> int:
    """Highest level whose threshold value reaches; bands ascending, bands[0] -> first_level."""
    level = 0
    for i, threshold in enumerate(bands):
        if value >= threshold:
            level = first_level + i
    return level


def staffing_level(
    total_queue: int,
    avg_wait_time: float,
    current_occupancy: int,
    capacity: int,
    thresholds: AlertThresholds | None = None,
) -> int:
    t = thresholds or get_alert_thresholds()
    level = max(_band_level(total_queue, t.staffing_queue), _band_level(avg_wait_time, t.staffing_wait))
    ratio = current_occupancy / capacity if capacity else 0.0
    if level >= 1 and ratio >= t.occupancy_escalate_ratio:
        level = min(3, level + 1)
    elif level == 0 and ratio >= t.occupancy_crowded_ratio:
        level = 1
    return level


def till_level(queue_length: int, wait_time: float, thresholds: AlertThresholds | None = None) -> int:
    """Queue length triggers; wait time only escalates a till that already has a long line."""
    t = thresholds or get_alert_thresholds()
    level = _band_level(queue_length, t.till_queue)
    if level == 0:
        return 0
    return max(level, _band_level(wait_time, t.till_wait, first_level=4 - len(t.till_wait)))


def _insert_for(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


def upsert_open_alert(
    db: Session,
    *,
    owner_id: str,
    store_id: str,
    alert_type: str,
    scope_key: str,
    severity: str,
    title: str,
    message: str,
    till_number: int | None = None,
    data: dict[str, Any] | None = None,
) -> Alert:
    """
    Create the open alert for this scope, or refresh the one already open (severity, text,
    data, occurrences). One statement, so the duplicate window is bounded by the index.
    Raises AlertSynthesisFailure on DB errors after rolling back.
    """
    now = utcnow()
    insert = _insert_for(db)
    stmt = insert(Alert).values(
        owner_id=owner_id,
        store_id=store_id,
        alert_type=alert_type,
        scope_key=scope_key,
        severity=severity,
        title=title,
        message=message,
        till_number=till_number,
        status=ALERT_STATUS_OPEN,
        data=data,
        occurrences=1,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=list(OPEN_SCOPE_COLUMNS),
        index_where=text(OPEN_ALERT_PREDICATE),
        set_={
            "severity": stmt.excluded.severity,
            "title": stmt.excluded.title,
            "message": stmt.excluded.message,
            "data": stmt.excluded.data,
            "updated_at": stmt.excluded.updated_at,
            "occurrences": Alert.occurrences + 1,
        },
    ).returning(Alert.id, Alert.occurrences)
    try:
        alert_id, occurrences = db.execute(stmt).one()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise AlertSynthesisFailure(f"{alert_type} alert upsert failed for {store_id}/{scope_key}: {e}") from e
    logger.info(
        "%s %s alert %s for %s/%s (severity=%s)",
        "Created" if occurrences == 1 else "Refreshed",
        alert_type,
        alert_id,
        store_id,
        scope_key,
        severity,
    )
    return db.get(Alert, alert_id)


def synthesize_staffing_alert(
    db: Session,
    owner_id: str,
    store_id: str,
    *,
    total_queue: int,
    avg_wait_time: float,
    current_occupancy: int,
    pos_rate: float,
    capacity: int,
    thresholds: AlertThresholds | None = None,
) -> Alert | None:
    """Store-wide staffing alert. Returns the open alert written, or None when conditions are fine."""
    level = staffing_level(total_queue, avg_wait_time, current_occupancy, capacity, thresholds)
    if level == 0:
        return None
    severity = LEVEL_TO_SEVERITY[level]
    ratio = current_occupancy / capacity if capacity else 0.0
    message = (
        f"{total_queue} customers queuing with an average wait of {avg_wait_time:.1f} min. "
        f"Occupancy {current_occupancy}/{capacity} ({ratio:.0%}), POS rate {pos_rate:.1f}/min. "
        "Consider opening more tills."
    )
    return upsert_open_alert(
        db,
        owner_id=owner_id,
        store_id=store_id,
        alert_type=ALERT_TYPE_STAFFING,
        scope_key=STORE_SCOPE_KEY,
        severity=severity,
        title=f"Staffing needed at {store_id}",
        message=message,
        data={
            "total_queue": total_queue,
            "avg_wait_time": avg_wait_time,
            "current_occupancy": current_occupancy,
            "capacity": capacity,
            "pos_rate": pos_rate,
        },
    )


def synthesize_queue_alert(
    db: Session,
    owner_id: str,
    store_id: str,
    *,
    till_number: int,
    queue_length: int,
    avg_wait_time: float,
    thresholds: AlertThresholds | None = None,
) -> Alert | None:
    """Till-scoped queue alert. avg_wait_time is that till's queue_length x avg_service_time."""
    level = till_level(queue_length, avg_wait_time, thresholds)
    if level == 0:
        return None
    return upsert_open_alert(
        db,
        owner_id=owner_id,
        store_id=store_id,
        alert_type=ALERT_TYPE_QUEUE_LENGTH,
        scope_key=f"till:{till_number}",
        severity=LEVEL_TO_SEVERITY[level],
        title=f"Long queue at till {till_number}",
        message=f"Till {till_number} has {queue_length} customers waiting (about {avg_wait_time:.1f} min).",
        till_number=till_number,
        data={"queue_length": queue_length, "avg_wait_time": avg_wait_time},
    )
