"""
Running occupancy per store.

A sample's occupancy = max(0, prior + entries - exits), where prior is the occupancy of the
latest sample of the same store with a strictly earlier timestamp (0 if none). It is derived
once, before the sample is written. Backfilled samples leave later rows stale until
recompute_occupancy re-derives them in timestamp order.
"""
import logging
from datetime import datetime
from itertools import groupby

from sqlalchemy.orm import Session

from footfall.core.timeutil import as_utc
from footfall.models.footfall_sample import FootfallSample

logger = logging.getLogger(__name__)


def compute_occupancy(prior: int, entry_count: int, exit_count: int) -> int:
    return max(0, prior + entry_count - exit_count)


def prior_occupancy(db: Session, owner_id: str, store_id: str, before: datetime) -> int:
    """Occupancy of the latest sample strictly before `before`; ties on timestamp resolve to the newest row."""
    row = (
        db.query(FootfallSample.current_occupancy)
        .filter(
            FootfallSample.owner_id == owner_id,
            FootfallSample.store_id == store_id,
            FootfallSample.timestamp < as_utc(before),
        )
        .order_by(FootfallSample.timestamp.desc(), FootfallSample.id.desc())
        .first()
    )
    return row[0] if row else 0


def derive_occupancy(
    db: Session, owner_id: str, store_id: str, timestamp: datetime, entry_count: int, exit_count: int
) -> int:
    """Occupancy for a new sample at `timestamp`. Reads only earlier samples."""
    return compute_occupancy(prior_occupancy(db, owner_id, store_id, timestamp), entry_count, exit_count)


def recompute_occupancy(db: Session, owner_id: str, store_id: str, since: datetime | None = None) -> int:
    """
    Re-derive occupancy for every sample at or after `since` (all samples when None), oldest first.
    Samples sharing a timestamp all derive from the same strictly-earlier sample.
    Idempotent. Returns the number of rows whose occupancy changed.
    """
    prior = prior_occupancy(db, owner_id, store_id, since) if since is not None else 0
    q = db.query(FootfallSample).filter(
        FootfallSample.owner_id == owner_id,
        FootfallSample.store_id == store_id,
    )
    if since is not None:
        q = q.filter(FootfallSample.timestamp >= as_utc(since))
    rows = q.order_by(FootfallSample.timestamp.asc(), FootfallSample.id.asc()).all()

    changed = 0
    for _, group in groupby(rows, key=lambda r: r.timestamp):
        last = prior
        for row in group:
            value = compute_occupancy(prior, row.entry_count, row.exit_count)
            if row.current_occupancy != value:
                row.current_occupancy = value
                changed += 1
            last = value
        # Next timestamp group sees the newest row of this one, same as prior_occupancy
        prior = last
    db.commit()
    logger.info("Recomputed occupancy for %s/%s: %s of %s samples changed", owner_id, store_id, changed, len(rows))
    return changed
