"""Tests for running occupancy: derivation on ingest, clamping, and recompute after backfill."""

from datetime import timedelta

from footfall.models.footfall_sample import FootfallSample
from footfall.services.footfall import compute_occupancy, ingest_sample, recompute_occupancy

from conftest import NOW, OWNER_ID, STORE_ID


def _occupancies(db) -> list[int]:
    rows = (
        db.query(FootfallSample.current_occupancy)
        .filter(FootfallSample.owner_id == OWNER_ID, FootfallSample.store_id == STORE_ID)
        .order_by(FootfallSample.timestamp.asc(), FootfallSample.id.asc())
        .all()
    )
    return [r[0] for r in rows]


class TestComputeOccupancy:
    def test_adds_entries_and_subtracts_exits(self):
        assert compute_occupancy(10, 5, 3) == 12

    def test_never_negative(self):
        assert compute_occupancy(2, 0, 9) == 0
        assert compute_occupancy(0, 0, 0) == 0


class TestIngestOccupancy:
    def test_first_sample_starts_from_zero(self, db, store, make_payload):
        result = ingest_sample(db, OWNER_ID, store, make_payload(entry_count=10, exit_count=0, timestamp=NOW))
        assert result.sample.current_occupancy == 10

    def test_in_order_sequence(self, db, store, make_payload):
        counts = [(10, 0), (5, 8), (0, 20), (3, 1)]
        for i, (entries, exits) in enumerate(counts):
            ingest_sample(
                db,
                OWNER_ID,
                store,
                make_payload(entry_count=entries, exit_count=exits, timestamp=NOW + timedelta(minutes=i)),
            )
        # 10, 7, clamped to 0, then 2
        assert _occupancies(db) == [10, 7, 0, 2]

    def test_same_timestamp_derives_from_strictly_earlier(self, db, store, make_payload):
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=4, timestamp=NOW))
        later = NOW + timedelta(minutes=1)
        a = ingest_sample(db, OWNER_ID, store, make_payload(entry_count=3, timestamp=later))
        b = ingest_sample(db, OWNER_ID, store, make_payload(entry_count=1, timestamp=later))
        assert a.sample.current_occupancy == 7
        assert b.sample.current_occupancy == 5

    def test_stores_are_independent(self, db, store, make_payload):
        from footfall.services.store_service import create_store

        other = create_store(db, OWNER_ID, store_id="S2", store_name="Second", till_count=2)
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=10, timestamp=NOW))
        result = ingest_sample(
            db,
            OWNER_ID,
            other,
            make_payload(entry_count=3, timestamp=NOW + timedelta(minutes=1), store_id="S2"),
        )
        assert result.sample.current_occupancy == 3


class TestRecomputeOccupancy:
    def test_backfill_then_recompute_matches_in_order(self, db, store, make_payload):
        t1, t2, t3 = NOW, NOW + timedelta(minutes=5), NOW + timedelta(minutes=10)
        # Arrive out of order: t2, t3, then t1 backfilled
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=5, exit_count=2, timestamp=t2))
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=1, exit_count=0, timestamp=t3))
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=10, exit_count=0, timestamp=t1))
        assert _occupancies(db) == [10, 3, 4]

        changed = recompute_occupancy(db, OWNER_ID, STORE_ID)
        assert changed == 2
        assert _occupancies(db) == [10, 13, 14]

    def test_recompute_is_idempotent(self, db, store, make_payload):
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=6, timestamp=NOW + timedelta(minutes=1)))
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=2, timestamp=NOW))
        assert recompute_occupancy(db, OWNER_ID, STORE_ID) == 1
        assert recompute_occupancy(db, OWNER_ID, STORE_ID) == 0
        assert _occupancies(db) == [2, 8]

    def test_recompute_since_keeps_earlier_rows(self, db, store, make_payload):
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=5, timestamp=NOW))
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=5, timestamp=NOW + timedelta(minutes=10)))
        # Backfill between the two
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=1, timestamp=NOW + timedelta(minutes=5)))
        changed = recompute_occupancy(db, OWNER_ID, STORE_ID, since=NOW + timedelta(minutes=5))
        assert changed == 1
        assert _occupancies(db) == [5, 6, 11]

    def test_tied_timestamps_share_prior(self, db, store, make_payload):
        later = NOW + timedelta(minutes=1)
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=3, timestamp=later))
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=1, timestamp=later))
        ingest_sample(db, OWNER_ID, store, make_payload(entry_count=4, timestamp=NOW))
        recompute_occupancy(db, OWNER_ID, STORE_ID)
        assert _occupancies(db) == [4, 7, 5]
