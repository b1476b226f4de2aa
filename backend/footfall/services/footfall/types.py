"""
Typed shapes for footfall ingestion and derived metrics.

Request payloads are validated here at the boundary (non-negative counts, known till
states, unique till numbers) so the services below only ever see well-formed data.
Fields accept snake_case or the dashboard's camelCase (storeId, tillQueues, ...).
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TillQueue(_Payload):
    """Queue state at one till when the sample was taken."""
    till_number: int = Field(..., ge=0)
    queue_length: int = Field(0, ge=0)
    avg_service_time: float = Field(0.0, ge=0)  # minutes per customer
    status: Literal["active", "inactive", "maintenance"] = "active"


class QueueData(_Payload):
    total_queue: int | None = Field(None, ge=0)  # defaults to the computed total when omitted
    avg_wait_time: float | None = Field(None, ge=0)
    till_queues: list[TillQueue] = Field(default_factory=list, max_length=200)

    @field_validator("till_queues")
    @classmethod
    def unique_tills(cls, v: list[TillQueue]) -> list[TillQueue]:
        numbers = [t.till_number for t in v]
        if len(numbers) != len(set(numbers)):
            raise ValueError("till_number must be unique within a sample")
        return v


class EntryDetail(_Payload):
    entry_point: str | None = Field(None, max_length=128)
    count: int = Field(0, ge=0)
    timestamp: datetime | None = None


class ExitDetail(_Payload):
    exit_point: str | None = Field(None, max_length=128)
    count: int = Field(0, ge=0)
    timestamp: datetime | None = None


class Weather(_Payload):
    condition: str | None = Field(None, max_length=64)
    temperature: float | None = None


class SamplePayload(_Payload):
    """One ingested sample. Ownership of store_id is checked before this reaches the core."""
    store_id: str = Field(..., min_length=1, max_length=64)
    timestamp: datetime | None = None  # defaults to ingestion time; set it to backfill
    entry_count: int = Field(..., ge=0)
    exit_count: int = Field(..., ge=0)
    pos_rate: float = Field(..., ge=0)  # transactions per minute
    queue_data: QueueData | None = None
    entry_details: list[EntryDetail] | None = None
    exit_details: list[ExitDetail] | None = None
    data_type: Literal["realtime", "hourly", "daily"] = "realtime"
    weather: Weather | None = None
    special_events: list[str] | None = None

    @field_validator("store_id")
    @classmethod
    def strip_store_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("store_id is required")
        return v


@dataclass(frozen=True)
class QueueMetrics:
    """Derived from a sample's active tills."""
    total_queue: int = 0
    avg_wait_time: float = 0.0
    active_tills: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_queue": self.total_queue,
            "avg_wait_time": self.avg_wait_time,
            "active_tills": self.active_tills,
        }


@dataclass
class IngestResult:
    """What ingestion hands back: the stored sample, its queue metrics, alerts raised or refreshed.

    sample_data is the API shape of the sample, captured right after the write so the
    response never reloads from the database (an alert rollback expires `sample`).
    """
    sample: Any  # FootfallSample
    sample_data: dict[str, Any]
    queue_metrics: QueueMetrics
    alert_ids: list[int] = field(default_factory=list)
