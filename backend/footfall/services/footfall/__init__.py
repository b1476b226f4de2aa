"""
Footfall samples: ingestion, occupancy, queue metrics and rollups.
- ingest: per-sample orchestration (persist -> metrics -> alerts).
- occupancy / queue_metrics: pure derivations (+ recompute after backfill).
- records: sample storage and API shape; windows: sliding window and calendar buckets.
"""
from footfall.services.footfall.ingest import ingest_result_to_dict, ingest_sample
from footfall.services.footfall.occupancy import compute_occupancy, derive_occupancy, recompute_occupancy
from footfall.services.footfall.queue_metrics import calculate_queue_metrics, sample_queue_metrics
from footfall.services.footfall.records import get_history, get_latest_sample, sample_to_dict
from footfall.services.footfall.windows import get_bucketed_analytics, get_window_stats, resolve_period

__all__ = [
    "calculate_queue_metrics",
    "compute_occupancy",
    "derive_occupancy",
    "get_bucketed_analytics",
    "get_history",
    "get_latest_sample",
    "get_window_stats",
    "ingest_result_to_dict",
    "ingest_sample",
    "recompute_occupancy",
    "resolve_period",
    "sample_queue_metrics",
    "sample_to_dict",
]
