"""
Alert threshold config. .env is the source of truth; these defaults apply only when
the env var is unset. All values read at import time.

Env vars: STAFFING_QUEUE_MEDIUM, STAFFING_QUEUE_HIGH, STAFFING_QUEUE_CRITICAL,
STAFFING_WAIT_MEDIUM, STAFFING_WAIT_HIGH, STAFFING_WAIT_CRITICAL,
STAFFING_OCCUPANCY_ESCALATE_RATIO, STAFFING_OCCUPANCY_CROWDED_RATIO,
TILL_QUEUE_MEDIUM, TILL_QUEUE_HIGH, TILL_QUEUE_CRITICAL,
TILL_WAIT_HIGH, TILL_WAIT_CRITICAL.

Queue thresholds are people in line; wait thresholds are minutes
(queue_length x avg_service_time). Each (medium, high, critical) triple must be
non-decreasing; a misordered triple falls back to the defaults.

Every band is an inclusive lower bound: a value equal to a threshold reaches that level.
Till wait bands never raise an alert on their own; they only escalate a till whose
queue length already reached TILL_QUEUE_MEDIUM.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load backend/.env so thresholds see env vars regardless of entry point
_backend_dir = Path(__file__).resolve().parent.parent.parent
load_dotenv(_backend_dir / ".env", override=False)  # load_dotenv no-ops if file missing

_log = logging.getLogger(__name__)


def _int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = int(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


def _float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = float(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


def _bands(keys: tuple[str, ...], defaults: tuple[float, ...], cast=_float) -> tuple:
    values = tuple(cast(k, d, min_val=0) for k, d in zip(keys, defaults))
    if any(a > b for a, b in zip(values, values[1:])):
        _log.warning("Alert bands %s are not ascending (%s); using defaults %s", keys, values, defaults)
        return defaults
    return values


# -----------------------------------------------------------------------------
# Staffing (store-wide): total queue, weighted wait, occupancy ratio
# -----------------------------------------------------------------------------
STAFFING_QUEUE_BANDS = _bands(
    ("STAFFING_QUEUE_MEDIUM", "STAFFING_QUEUE_HIGH", "STAFFING_QUEUE_CRITICAL"), (6, 10, 15), cast=_int
)
STAFFING_WAIT_BANDS = _bands(
    ("STAFFING_WAIT_MEDIUM", "STAFFING_WAIT_HIGH", "STAFFING_WAIT_CRITICAL"), (4.0, 6.0, 10.0)
)
# Busy store: any queue problem escalates one level
STAFFING_OCCUPANCY_ESCALATE_RATIO = _float("STAFFING_OCCUPANCY_ESCALATE_RATIO", 0.85, min_val=0.1, max_val=5.0)
# Near capacity with no queue problem still raises a medium alert
STAFFING_OCCUPANCY_CROWDED_RATIO = _float("STAFFING_OCCUPANCY_CROWDED_RATIO", 0.95, min_val=0.1, max_val=5.0)

# -----------------------------------------------------------------------------
# Per-till queue length
# -----------------------------------------------------------------------------
TILL_QUEUE_BANDS = _bands(("TILL_QUEUE_MEDIUM", "TILL_QUEUE_HIGH", "TILL_QUEUE_CRITICAL"), (5, 8, 12), cast=_int)
# Escalation only, and no medium band: a long wait on a short line is a slow cashier, not a queue
TILL_WAIT_BANDS = _bands(("TILL_WAIT_HIGH", "TILL_WAIT_CRITICAL"), (15.0, 30.0))

_log.info(
    "Alert config (from env): staffing_queue=%s staffing_wait=%s escalate_ratio=%s crowded_ratio=%s "
    "till_queue=%s till_wait=%s",
    STAFFING_QUEUE_BANDS,
    STAFFING_WAIT_BANDS,
    STAFFING_OCCUPANCY_ESCALATE_RATIO,
    STAFFING_OCCUPANCY_CROWDED_RATIO,
    TILL_QUEUE_BANDS,
    TILL_WAIT_BANDS,
)


@dataclass(frozen=True)
class AlertThresholds:
    """Snapshot of alert thresholds for passing around (e.g. tests)."""
    staffing_queue: tuple[int, int, int]
    staffing_wait: tuple[float, float, float]
    occupancy_escalate_ratio: float
    occupancy_crowded_ratio: float
    till_queue: tuple[int, int, int]
    till_wait: tuple[float, float]


def get_alert_thresholds() -> AlertThresholds:
    return AlertThresholds(
        staffing_queue=STAFFING_QUEUE_BANDS,
        staffing_wait=STAFFING_WAIT_BANDS,
        occupancy_escalate_ratio=STAFFING_OCCUPANCY_ESCALATE_RATIO,
        occupancy_crowded_ratio=STAFFING_OCCUPANCY_CROWDED_RATIO,
        till_queue=TILL_QUEUE_BANDS,
        till_wait=TILL_WAIT_BANDS,
    )
