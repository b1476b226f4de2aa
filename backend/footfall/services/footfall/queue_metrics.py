"""Queue metrics from per-till queue states. Pure; works on payload models and stored JSON rows alike."""
from typing import Any, Iterable

from footfall.core.constants import TILL_STATUS_ACTIVE
from footfall.services.footfall.types import QueueMetrics


def _get(till: Any, name: str, default: Any = None) -> Any:
    if isinstance(till, dict):
        return till.get(name, default)
    return getattr(till, name, default)


def calculate_queue_metrics(till_queues: Iterable[Any] | None) -> QueueMetrics:
    """
    total_queue: people waiting at active tills.
    avg_wait_time: sum(queue_length * avg_service_time) over active tills / number of active tills,
    rounded to 2 decimals; 0 when no till is active.
    """
    active = [t for t in (till_queues or []) if (_get(t, "status") or TILL_STATUS_ACTIVE) == TILL_STATUS_ACTIVE]
    if not active:
        return QueueMetrics()
    total_queue = sum(int(_get(t, "queue_length") or 0) for t in active)
    weighted = sum(float(_get(t, "avg_service_time") or 0) * int(_get(t, "queue_length") or 0) for t in active)
    return QueueMetrics(
        total_queue=total_queue,
        avg_wait_time=round(weighted / len(active), 2),
        active_tills=len(active),
    )


def sample_queue_metrics(sample) -> QueueMetrics:
    """Queue metrics for a stored FootfallSample."""
    return calculate_queue_metrics(sample.till_queues)
