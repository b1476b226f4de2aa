"""
Alert lifecycle: open -> acknowledged -> resolved, or open -> resolved directly.

Transitions are conditional UPDATEs on the current status, so two callers racing on the same
alert cannot both win; the loser gets InvalidAlertTransition. Also listing and per-store stats.
"""
import logging
import math

from sqlalchemy import func
from sqlalchemy.orm import Session

from footfall.core.constants import (
    ALERT_STATUS_ACKNOWLEDGED,
    ALERT_STATUS_OPEN,
    ALERT_STATUS_RESOLVED,
    ALERT_STATUSES,
    ALERTS_DEFAULT_LIMIT,
    ALERTS_MAX_LIMIT,
)
from footfall.core.errors import MSG_ALERT_NOT_FOUND, InvalidAlertTransition, NotFoundOrDenied
from footfall.core.timeutil import as_utc, utcnow
from footfall.models.alert import Alert

logger = logging.getLogger(__name__)

# target status -> (allowed source statuses, timestamp column stamped on entry)
TRANSITIONS = {
    ALERT_STATUS_ACKNOWLEDGED: ((ALERT_STATUS_OPEN,), "acknowledged_at"),
    ALERT_STATUS_RESOLVED: ((ALERT_STATUS_OPEN, ALERT_STATUS_ACKNOWLEDGED), "resolved_at"),
}


def get_alert(db: Session, owner_id: str, alert_id: int) -> Alert:
    row = db.query(Alert).filter(Alert.id == alert_id, Alert.owner_id == owner_id).first()
    if not row:
        raise NotFoundOrDenied(MSG_ALERT_NOT_FOUND)
    return row


def _transition(db: Session, owner_id: str, alert_id: int, to_status: str) -> Alert:
    from_statuses, stamp = TRANSITIONS[to_status]
    now = utcnow()
    updated = (
        db.query(Alert)
        .filter(Alert.id == alert_id, Alert.owner_id == owner_id, Alert.status.in_(from_statuses))
        .update(
            {Alert.status: to_status, getattr(Alert, stamp): now, Alert.updated_at: now},
            synchronize_session=False,
        )
    )
    db.commit()
    if not updated:
        current = get_alert(db, owner_id, alert_id)
        raise InvalidAlertTransition(f"Alert {alert_id} is {current.status}; cannot move to {to_status}")
    logger.info("Alert %s -> %s", alert_id, to_status)
    return get_alert(db, owner_id, alert_id)


def acknowledge_alert(db: Session, owner_id: str, alert_id: int) -> Alert:
    """open -> acknowledged."""
    return _transition(db, owner_id, alert_id, ALERT_STATUS_ACKNOWLEDGED)


def resolve_alert(db: Session, owner_id: str, alert_id: int) -> Alert:
    """open | acknowledged -> resolved. Terminal; a later breach opens a fresh alert."""
    return _transition(db, owner_id, alert_id, ALERT_STATUS_RESOLVED)


def list_alerts(
    db: Session,
    owner_id: str,
    *,
    store_id: str | None = None,
    status: str | None = None,
    severity: str | None = None,
    alert_type: str | None = None,
    page: int = 1,
    limit: int = ALERTS_DEFAULT_LIMIT,
) -> dict:
    """Newest first, filtered and paginated."""
    page = max(1, page)
    limit = max(1, min(limit, ALERTS_MAX_LIMIT))
    q = db.query(Alert).filter(Alert.owner_id == owner_id)
    if store_id:
        q = q.filter(Alert.store_id == store_id)
    if status:
        q = q.filter(Alert.status == status)
    if severity:
        q = q.filter(Alert.severity == severity)
    if alert_type:
        q = q.filter(Alert.alert_type == alert_type)
    total = q.count()
    rows = q.order_by(Alert.updated_at.desc(), Alert.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "alerts": [alert_to_dict(r) for r in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


def get_alert_stats(db: Session, owner_id: str, store_id: str) -> dict:
    """Counts per status, plus open alerts broken down by severity and by type."""
    base = (Alert.owner_id == owner_id, Alert.store_id == store_id)
    by_status = dict(
        db.query(Alert.status, func.count(Alert.id)).filter(*base).group_by(Alert.status).all()
    )
    open_filter = (*base, Alert.status == ALERT_STATUS_OPEN)
    by_severity = dict(
        db.query(Alert.severity, func.count(Alert.id)).filter(*open_filter).group_by(Alert.severity).all()
    )
    by_type = dict(
        db.query(Alert.alert_type, func.count(Alert.id)).filter(*open_filter).group_by(Alert.alert_type).all()
    )
    return {
        "store_id": store_id,
        "total": sum(by_status.values()),
        **{s: by_status.get(s, 0) for s in ALERT_STATUSES},
        "open_by_severity": by_severity,
        "open_by_type": by_type,
    }


def alert_to_dict(r: Alert) -> dict:
    return {
        "id": r.id,
        "store_id": r.store_id,
        "alert_type": r.alert_type,
        "severity": r.severity,
        "title": r.title,
        "message": r.message,
        "till_number": r.till_number,
        "status": r.status,
        "is_acknowledged": r.is_acknowledged,
        "is_resolved": r.is_resolved,
        "occurrences": r.occurrences,
        "data": r.data or {},
        "acknowledged_at": as_utc(r.acknowledged_at).isoformat() if r.acknowledged_at else None,
        "resolved_at": as_utc(r.resolved_at).isoformat() if r.resolved_at else None,
        "created_at": as_utc(r.created_at).isoformat() if r.created_at else None,
        "updated_at": as_utc(r.updated_at).isoformat() if r.updated_at else None,
    }
