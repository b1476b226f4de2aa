#!/usr/bin/env python3
"""Clear stores, samples and alerts (all accounts, or one with an owner id argument).
Run from backend: python scripts/clear_footfall_db.py [owner_id]
"""
import sys
from pathlib import Path

# Ensure backend is on path when run as script
backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from footfall.db.session import SessionLocal
from footfall.services.admin_service import clear_footfall_db


def main():
    owner_id = sys.argv[1] if len(sys.argv) > 1 else None
    db = SessionLocal()
    try:
        deleted = clear_footfall_db(db, owner_id)
        print("Database cleared. Rows deleted:")
        for table, count in deleted.items():
            print(f"  {table}: {count}")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
