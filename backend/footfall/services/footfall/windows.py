"""
Window and calendar rollups over realtime samples.

- get_window_stats: trailing N minutes, summed/averaged in SQL. Empty window -> all zeros.
- get_bucketed_analytics: today/week/month resolved to [start, end), grouped by local
  hour or day. Grouping happens in Python so bucket boundaries follow ANALYTICS_TIMEZONE
  on every database; empty buckets are omitted.
"""
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func
from sqlalchemy.orm import Session

from footfall.config import settings
from footfall.core.constants import (
    ANALYTICS_GROUP_BY,
    ANALYTICS_PERIODS,
    DATA_TYPE_REALTIME,
    DEFAULT_WINDOW_MINUTES,
)
from footfall.core.errors import ValidationError
from footfall.core.timeutil import as_utc, utcnow
from footfall.models.footfall_sample import FootfallSample

logger = logging.getLogger(__name__)


def _realtime_filter(owner_id: str, store_id: str) -> tuple:
    return (
        FootfallSample.owner_id == owner_id,
        FootfallSample.store_id == store_id,
        FootfallSample.data_type == DATA_TYPE_REALTIME,
    )


def _round(v: float | None) -> float:
    return round(float(v), 2) if v is not None else 0.0


def get_window_stats(
    db: Session, owner_id: str, store_id: str, minutes: int = DEFAULT_WINDOW_MINUTES, now: datetime | None = None
) -> dict:
    """Totals, means and max over realtime samples with timestamp >= now - minutes."""
    if minutes < 1:
        raise ValidationError("minutes must be a positive integer")
    window_start = as_utc(now or utcnow()) - timedelta(minutes=minutes)
    filters = (*_realtime_filter(owner_id, store_id), FootfallSample.timestamp >= window_start)

    entries, exits, avg_pos, avg_occ, max_occ, points = (
        db.query(
            func.sum(FootfallSample.entry_count),
            func.sum(FootfallSample.exit_count),
            func.avg(FootfallSample.pos_rate),
            func.avg(FootfallSample.current_occupancy),
            func.max(FootfallSample.current_occupancy),
            func.count(FootfallSample.id),
        )
        .filter(*filters)
        .one()
    )
    latest = None
    if points:
        latest = (
            db.query(FootfallSample.current_occupancy)
            .filter(*filters)
            .order_by(FootfallSample.timestamp.desc(), FootfallSample.id.desc())
            .first()
        )
    return {
        "window_minutes": minutes,
        "total_entries": int(entries or 0),
        "total_exits": int(exits or 0),
        "avg_pos_rate": _round(avg_pos),
        "avg_occupancy": _round(avg_occ),
        "max_occupancy": int(max_occ or 0),
        "data_points": int(points or 0),
        "latest_occupancy": latest[0] if latest else 0,
    }


def _zone(tz: str | None) -> ZoneInfo:
    name = tz or settings.analytics_timezone or "UTC"
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown analytics timezone %r; falling back to UTC", name)
        return ZoneInfo("UTC")


def resolve_period(period: str, now: datetime | None = None, tz: str | None = None) -> tuple[datetime, datetime]:
    """
    [start, end) in UTC for a named period.
    today: local midnight to next local midnight; week: trailing 7x24h;
    month: first of the local month to first of the next.
    """
    zone = _zone(tz)
    now_utc = as_utc(now or utcnow())
    local = now_utc.astimezone(zone)
    if period == "today":
        start = datetime(local.year, local.month, local.day, tzinfo=zone)
        next_day = local.date() + timedelta(days=1)
        end = datetime(next_day.year, next_day.month, next_day.day, tzinfo=zone)
    elif period == "week":
        start, end = now_utc - timedelta(days=7), now_utc
    elif period == "month":
        start = datetime(local.year, local.month, 1, tzinfo=zone)
        if local.month == 12:
            end = datetime(local.year + 1, 1, 1, tzinfo=zone)
        else:
            end = datetime(local.year, local.month + 1, 1, tzinfo=zone)
    else:
        raise ValidationError(f"period must be one of {', '.join(ANALYTICS_PERIODS)}")
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def get_bucketed_analytics(
    db: Session,
    owner_id: str,
    store_id: str,
    period: str = "today",
    group_by: str = "hour",
    now: datetime | None = None,
    tz: str | None = None,
) -> dict:
    """Per-bucket sums/means/max for the period, oldest bucket first."""
    if group_by not in ANALYTICS_GROUP_BY:
        raise ValidationError(f"group_by must be one of {', '.join(ANALYTICS_GROUP_BY)}")
    zone = _zone(tz)
    start, end = resolve_period(period, now=now, tz=zone.key)
    rows = (
        db.query(
            FootfallSample.timestamp,
            FootfallSample.entry_count,
            FootfallSample.exit_count,
            FootfallSample.pos_rate,
            FootfallSample.current_occupancy,
            FootfallSample.total_queue,
        )
        .filter(
            *_realtime_filter(owner_id, store_id),
            FootfallSample.timestamp >= start,
            FootfallSample.timestamp < end,
        )
        .all()
    )

    # key -> [entries, exits, pos_sum, occ_sum, occ_max, queue_sum, count]
    buckets: dict[tuple[int, ...], list] = defaultdict(lambda: [0, 0, 0.0, 0, 0, 0, 0])
    for ts, entry_count, exit_count, pos_rate, occupancy, total_queue in rows:
        local = as_utc(ts).astimezone(zone)
        key = (local.year, local.month, local.day)
        if group_by == "hour":
            key += (local.hour,)
        b = buckets[key]
        b[0] += entry_count or 0
        b[1] += exit_count or 0
        b[2] += pos_rate or 0.0
        b[3] += occupancy or 0
        b[4] = max(b[4], occupancy or 0)
        b[5] += total_queue or 0
        b[6] += 1

    analytics = []
    for key in sorted(buckets):
        entries, exits, pos_sum, occ_sum, occ_max, queue_sum, count = buckets[key]
        item = {"year": key[0], "month": key[1], "day": key[2]}
        if group_by == "hour":
            item["hour"] = key[3]
        item.update({
            "bucket_start": datetime(*key, tzinfo=zone).isoformat(),
            "total_entries": entries,
            "total_exits": exits,
            "avg_pos_rate": _round(pos_sum / count),
            "avg_occupancy": _round(occ_sum / count),
            "max_occupancy": occ_max,
            "avg_queue_length": _round(queue_sum / count),
            "data_points": count,
        })
        analytics.append(item)
    return {
        "period": period,
        "group_by": group_by,
        "timezone": zone.key,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "analytics": analytics,
    }
