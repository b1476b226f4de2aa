"""
Centralized constants for footfall reads and alerting (Encapsulate What Changes).

Change limits, defaults and enum values here instead of scattering literals across
routes and services. Alert thresholds come from alert_config (env-driven).
"""

# Sample data types (footfall_samples.data_type)
DATA_TYPE_REALTIME = "realtime"
DATA_TYPE_HOURLY = "hourly"
DATA_TYPE_DAILY = "daily"
DATA_TYPES = (DATA_TYPE_REALTIME, DATA_TYPE_HOURLY, DATA_TYPE_DAILY)

# Till states inside a sample's queue data; only active tills count toward queue metrics
TILL_STATUS_ACTIVE = "active"
TILL_STATUSES = ("active", "inactive", "maintenance")

# Sliding window default when ?minutes= is not given
DEFAULT_WINDOW_MINUTES = 60

# History pagination: hard cap so response size stays bounded
HISTORY_DEFAULT_LIMIT = 20
HISTORY_MAX_LIMIT = 100
ALERTS_DEFAULT_LIMIT = 50
ALERTS_MAX_LIMIT = 100

# Bucketed analytics
ANALYTICS_PERIODS = ("today", "week", "month")
ANALYTICS_GROUP_BY = ("hour", "day")

# Alerts
ALERT_TYPE_STAFFING = "staffing"
ALERT_TYPE_QUEUE_LENGTH = "queue_length"
ALERT_TYPES = (ALERT_TYPE_STAFFING, ALERT_TYPE_QUEUE_LENGTH)

SEVERITIES = ("low", "medium", "high", "critical")
# Escalation level (1..3) -> severity; level 0 raises nothing
LEVEL_TO_SEVERITY = {1: "medium", 2: "high", 3: "critical"}

ALERT_STATUS_OPEN = "open"
ALERT_STATUS_ACKNOWLEDGED = "acknowledged"
ALERT_STATUS_RESOLVED = "resolved"
ALERT_STATUSES = (ALERT_STATUS_OPEN, ALERT_STATUS_ACKNOWLEDGED, ALERT_STATUS_RESOLVED)

# Store-wide alerts share this scope key; till alerts use "till:<n>"
STORE_SCOPE_KEY = "store"

# Default store capacity when configuration omits it
DEFAULT_STORE_CAPACITY = 100
