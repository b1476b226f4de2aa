"""Retail store owned by one account. Soft-deleted (is_active=false) so samples and alerts keep their reference."""
from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from footfall.db.base import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    store_id = Column(String(64), nullable=False)  # caller-facing id, unique per owner
    store_name = Column(String(255), nullable=False)
    location = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)  # address, city, state, zip_code, coordinates
    till_count = Column(Integer, nullable=False, default=1)
    operating_open = Column(String(5), nullable=True)   # "HH:MM"
    operating_close = Column(String(5), nullable=True)
    capacity = Column(Integer, nullable=False, default=100)
    entry_points = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)  # [{name, location}]
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "store_id", name="uq_stores_owner_store"),)
