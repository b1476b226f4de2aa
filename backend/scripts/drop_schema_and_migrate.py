#!/usr/bin/env python3
"""
Rebuild the footfall schema from scratch: drop stores, samples and alerts, then run migrations.
On PostgreSQL the public schema is dropped (CASCADE); on SQLite the known tables and
alembic_version are dropped.

Run from backend dir:
  python scripts/drop_schema_and_migrate.py
"""
import subprocess
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy import text

from footfall.db.session import engine
from footfall.db.tables import RESETTABLE_TABLE_NAMES


def _drop_all(conn) -> None:
    if engine.dialect.name == "postgresql":
        conn.execute(text("DROP SCHEMA IF EXISTS public CASCADE"))
        conn.execute(text("CREATE SCHEMA public"))
        conn.execute(text("GRANT ALL ON SCHEMA public TO public"))
        return
    for table in (*RESETTABLE_TABLE_NAMES, "alembic_version"):
        conn.execute(text(f"DROP TABLE IF EXISTS {table}"))


def main():
    print(f"Dropping footfall tables ({engine.dialect.name})...")
    with engine.connect() as conn:
        _drop_all(conn)
        conn.commit()
    print("Schema cleared. Running migrations...")
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
    )
    if result.returncode != 0:
        sys.exit(result.returncode)
    print("Done. stores, footfall_samples and alerts created.")


if __name__ == "__main__":
    main()
