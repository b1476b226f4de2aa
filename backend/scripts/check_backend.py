#!/usr/bin/env python3
"""
Quick checks so the footfall backend can start. Run from repo root or backend/:
  python backend/scripts/check_backend.py
  cd backend && python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

START_HINT = "cd backend && uvicorn footfall.main:app --reload --port 8000"


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Copy from backend/.env.example and set DATABASE_URL and JWT_SECRET.")
    else:
        print("OK  .env exists")

    # 2) DB connection and migrated tables
    try:
        from sqlalchemy import inspect, text

        from footfall.db.session import engine
        from footfall.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = sorted(set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names()))
        if missing:
            errors.append(f"Tables missing: {', '.join(missing)}. Run: cd backend && alembic upgrade head")
            print("FAIL Tables missing:", ", ".join(missing))
        else:
            print("OK  Tables present:", ", ".join(ALL_TABLE_NAMES))
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 3) Settings that silently break auth or analytics
    from footfall.config import settings

    if settings.jwt_secret in ("", "change-me"):
        errors.append("JWT_SECRET is unset; tokens from the account service will not verify.")
        print("FAIL JWT_SECRET not configured")
    try:
        from zoneinfo import ZoneInfo

        ZoneInfo(settings.analytics_timezone or "UTC")
        print("OK  ANALYTICS_TIMEZONE", settings.analytics_timezone or "UTC")
    except Exception as e:
        errors.append(f"ANALYTICS_TIMEZONE: {e}")
        print("FAIL ANALYTICS_TIMEZONE:", e)

    # 4) App import (catches missing deps, bad imports) and alert thresholds
    try:
        from footfall.core.alert_config import get_alert_thresholds
        from footfall.main import app  # noqa: F401

        print("OK  App import (footfall.main)")
        print("OK  Alert thresholds:", get_alert_thresholds())
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)
        print("\nFix the above, then run:")
        print(" ", START_HINT)
        return 1

    # 5) Port 8000
    try:
        import socket
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 8000))
        print("OK  Port 8000 is free")
    except OSError:
        errors.append("Port 8000 is in use. Stop the other process or use another port (e.g. --port 8001).")
        print("FAIL Port 8000 is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        print("\nThen start backend:", START_HINT)
        return 1

    print("\nAll checks passed. Start with:", START_HINT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
