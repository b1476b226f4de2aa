"""Staffing / queue alerts raised during ingestion.

status is a small state machine: open -> acknowledged -> resolved, or open -> resolved.
At most one open alert per (owner, store, alert_type, scope_key): enforced by a partial
unique index so ingestion can upsert with a single INSERT .. ON CONFLICT.
"""
from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from footfall.db.base import Base

# Shared by the index and the upsert's conflict target; both must match exactly
OPEN_ALERT_PREDICATE = "status = 'open'"
OPEN_SCOPE_COLUMNS = ("owner_id", "store_id", "alert_type", "scope_key")


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    store_id = Column(String(64), nullable=False, index=True)
    alert_type = Column(String(32), nullable=False)  # staffing | queue_length
    severity = Column(String(16), nullable=False)    # low | medium | high | critical
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    till_number = Column(Integer, nullable=True)     # set for till-scoped alerts
    scope_key = Column(String(32), nullable=False, default="store")  # "store" | "till:<n>"
    status = Column(String(16), nullable=False, default="open")
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)  # metrics that triggered it
    occurrences = Column(Integer, nullable=False, default=1)
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index(
            "uq_alerts_open_scope",
            *OPEN_SCOPE_COLUMNS,
            unique=True,
            postgresql_where=text(OPEN_ALERT_PREDICATE),
            sqlite_where=text(OPEN_ALERT_PREDICATE),
        ),
    )

    @property
    def is_acknowledged(self) -> bool:
        return self.acknowledged_at is not None

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None
