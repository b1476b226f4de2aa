"""
Alerts raised from footfall samples.
- synthesizer: staffing / per-till queue policies and the atomic open-alert upsert.
- lifecycle: acknowledge / resolve state machine, listing, stats.
"""
from footfall.services.alerts.lifecycle import (
    acknowledge_alert,
    alert_to_dict,
    get_alert,
    get_alert_stats,
    list_alerts,
    resolve_alert,
)
from footfall.services.alerts.synthesizer import (
    synthesize_queue_alert,
    synthesize_staffing_alert,
    upsert_open_alert,
)

__all__ = [
    "acknowledge_alert",
    "alert_to_dict",
    "get_alert",
    "get_alert_stats",
    "list_alerts",
    "resolve_alert",
    "synthesize_queue_alert",
    "synthesize_staffing_alert",
    "upsert_open_alert",
]
