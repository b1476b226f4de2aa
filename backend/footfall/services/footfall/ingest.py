"""
Ingest one footfall sample. Steps, each its own failure domain:

1. derive occupancy from earlier samples and persist the sample (failure aborts the request)
2. queue metrics from the stored record
3. store-wide staffing alert (best effort: logged, never raised)
4. per-till queue alerts (best effort, each till independent)
"""
import logging

from sqlalchemy.orm import Session

from footfall.core.errors import AlertSynthesisFailure
from footfall.core.timeutil import as_utc, utcnow
from footfall.models.store import Store
from footfall.services.alerts.synthesizer import synthesize_queue_alert, synthesize_staffing_alert
from footfall.services.footfall.occupancy import derive_occupancy
from footfall.services.footfall.queue_metrics import calculate_queue_metrics, sample_queue_metrics
from footfall.services.footfall.records import insert_sample, sample_to_dict
from footfall.services.footfall.types import IngestResult, SamplePayload

logger = logging.getLogger(__name__)


def _best_effort(db: Session, label: str, fn, *args, **kwargs):
    """Run one alert write; on any failure roll back that write only and log."""
    try:
        return fn(db, *args, **kwargs)
    except AlertSynthesisFailure as e:
        logger.warning("%s: %s", label, e, exc_info=True)
    except Exception as e:
        db.rollback()
        logger.exception("%s failed unexpectedly: %s", label, e)
    return None


def ingest_sample(db: Session, owner_id: str, store: Store, payload: SamplePayload) -> IngestResult:
    """
    `store` must already be verified as active and owned by owner_id.
    Raises PersistenceFailure only when the sample itself cannot be written.
    """
    # Read before any alert step: a failed alert rolls back and expires store and sample
    store_id, capacity = store.store_id, store.capacity
    timestamp = as_utc(payload.timestamp) if payload.timestamp else utcnow()
    occupancy = derive_occupancy(db, owner_id, store_id, timestamp, payload.entry_count, payload.exit_count)
    tills = payload.queue_data.till_queues if payload.queue_data else []
    sample = insert_sample(
        db,
        owner_id,
        payload,
        timestamp=timestamp,
        current_occupancy=occupancy,
        computed_queue=calculate_queue_metrics(tills),
    )
    logger.debug("Stored sample %s for %s (occupancy=%s)", sample.id, store_id, occupancy)

    metrics = sample_queue_metrics(sample)
    result = IngestResult(sample=sample, sample_data=sample_to_dict(sample), queue_metrics=metrics)

    staffing = _best_effort(
        db,
        f"Staffing alert for {store_id}",
        synthesize_staffing_alert,
        owner_id,
        store_id,
        total_queue=metrics.total_queue,
        avg_wait_time=metrics.avg_wait_time,
        current_occupancy=result.sample_data["current_occupancy"],
        pos_rate=result.sample_data["pos_rate"],
        capacity=capacity,
    )
    if staffing is not None:
        result.alert_ids.append(staffing.id)

    for till in tills:
        alert = _best_effort(
            db,
            f"Queue alert for {store_id} till {till.till_number}",
            synthesize_queue_alert,
            owner_id,
            store_id,
            till_number=till.till_number,
            queue_length=till.queue_length,
            avg_wait_time=till.avg_service_time * till.queue_length,
        )
        if alert is not None:
            result.alert_ids.append(alert.id)
    return result


def ingest_result_to_dict(result: IngestResult) -> dict:
    return {
        **result.sample_data,
        "queue_metrics": result.queue_metrics.to_dict(),
        "alert_ids": result.alert_ids,
    }
