"""stores, footfall_samples, alerts (+ partial unique index: one open alert per scope)."""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("store_id", sa.String(64), nullable=False),
        sa.Column("store_name", sa.String(255), nullable=False),
        sa.Column("location", _JSON, nullable=True),
        sa.Column("till_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("operating_open", sa.String(5), nullable=True),
        sa.Column("operating_close", sa.String(5), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("entry_points", _JSON, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "store_id", name="uq_stores_owner_store"),
    )
    op.create_index("ix_stores_owner_id", "stores", ["owner_id"])
    op.create_index("ix_stores_is_active", "stores", ["is_active"])

    op.create_table(
        "footfall_samples",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("store_id", sa.String(64), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("entry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("exit_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_occupancy", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pos_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_queue", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("avg_wait_time", sa.Float(), nullable=False, server_default="0"),
        sa.Column("till_queues", _JSON, nullable=False),
        sa.Column("entry_details", _JSON, nullable=True),
        sa.Column("exit_details", _JSON, nullable=True),
        sa.Column("data_type", sa.String(16), nullable=False, server_default="realtime"),
        sa.Column("weather", _JSON, nullable=True),
        sa.Column("special_events", _JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_footfall_samples_store_ts", "footfall_samples", ["owner_id", "store_id", "timestamp"])
    op.create_index(
        "ix_footfall_samples_store_type_ts", "footfall_samples", ["owner_id", "store_id", "data_type", "timestamp"]
    )

    op.create_table(
        "alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("store_id", sa.String(64), nullable=False),
        sa.Column("alert_type", sa.String(32), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("till_number", sa.Integer(), nullable=True),
        sa.Column("scope_key", sa.String(32), nullable=False, server_default="store"),
        sa.Column("status", sa.String(16), nullable=False, server_default="open"),
        sa.Column("data", _JSON, nullable=True),
        sa.Column("occurrences", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_alerts_owner_id", "alerts", ["owner_id"])
    op.create_index("ix_alerts_store_id", "alerts", ["store_id"])
    # At most one open alert per scope; ingestion upserts against this index.
    op.create_index(
        "uq_alerts_open_scope",
        "alerts",
        ["owner_id", "store_id", "alert_type", "scope_key"],
        unique=True,
        postgresql_where=sa.text("status = 'open'"),
        sqlite_where=sa.text("status = 'open'"),
    )


def downgrade() -> None:
    op.drop_index("uq_alerts_open_scope", table_name="alerts")
    op.drop_index("ix_alerts_store_id", table_name="alerts")
    op.drop_index("ix_alerts_owner_id", table_name="alerts")
    op.drop_table("alerts")
    op.drop_index("ix_footfall_samples_store_type_ts", table_name="footfall_samples")
    op.drop_index("ix_footfall_samples_store_ts", table_name="footfall_samples")
    op.drop_table("footfall_samples")
    op.drop_index("ix_stores_is_active", table_name="stores")
    op.drop_index("ix_stores_owner_id", table_name="stores")
    op.drop_table("stores")
