"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE).
"""
# All tables that exist in the DB. Must match models and migration 001.
ALL_TABLE_NAMES = (
    "stores",
    "footfall_samples",
    "alerts",
)

# Tables cleared when resetting a dev database. Stores last so history is dropped first.
RESETTABLE_TABLE_NAMES = (
    "alerts",
    "footfall_samples",
    "stores",
)
