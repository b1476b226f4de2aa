"""One occupancy sample per ingest: entries/exits, POS rate, queue state per till.

Append-only. current_occupancy is derived before insert from the latest strictly-earlier
sample of the same store; the only later write is explicit recomputation after a backfill.
"""
from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from footfall.db.base import Base

_JSON = JSON().with_variant(JSONB(), "postgresql")


class FootfallSample(Base):
    __tablename__ = "footfall_samples"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False)
    store_id = Column(String(64), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)  # UTC
    entry_count = Column(Integer, nullable=False, default=0)
    exit_count = Column(Integer, nullable=False, default=0)
    current_occupancy = Column(Integer, nullable=False, default=0)
    pos_rate = Column(Float, nullable=False, default=0.0)  # transactions per minute

    # Queue summary as stored; defaults to computed metrics when the caller omits it
    total_queue = Column(Integer, nullable=False, default=0)
    avg_wait_time = Column(Float, nullable=False, default=0.0)
    till_queues = Column(_JSON, nullable=False, default=list)  # [{till_number, queue_length, avg_service_time, status}]

    entry_details = Column(_JSON, nullable=True)  # [{entry_point, count, timestamp}]
    exit_details = Column(_JSON, nullable=True)   # [{exit_point, count, timestamp}]
    data_type = Column(String(16), nullable=False, default="realtime")  # realtime | hourly | daily
    weather = Column(_JSON, nullable=True)  # {condition, temperature}
    special_events = Column(_JSON, nullable=True)  # [str]
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_footfall_samples_store_ts", "owner_id", "store_id", "timestamp"),
        Index("ix_footfall_samples_store_type_ts", "owner_id", "store_id", "data_type", "timestamp"),
    )
