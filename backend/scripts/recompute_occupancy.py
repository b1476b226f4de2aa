#!/usr/bin/env python3
"""
Re-derive running occupancy for one store after backfilling older samples.
Run: cd backend && python scripts/recompute_occupancy.py <owner_id> <store_id> [since ISO 8601]
"""
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from footfall.db.session import SessionLocal
from footfall.services.footfall import recompute_occupancy


def main():
    if len(sys.argv) < 3:
        print(__doc__.strip(), file=sys.stderr)
        sys.exit(2)
    owner_id, store_id = sys.argv[1], sys.argv[2]
    since = datetime.fromisoformat(sys.argv[3]) if len(sys.argv) > 3 else None
    print(f"Recomputing occupancy for {owner_id}/{store_id} (since={since or 'start'})...")
    db = SessionLocal()
    try:
        changed = recompute_occupancy(db, owner_id, store_id, since=since)
        print(f"Done. {changed} samples updated.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
