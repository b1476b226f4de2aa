"""API tests: auth, store CRUD, footfall routes and alert routes."""

from datetime import datetime, timedelta, timezone

from conftest import STORE_ID

INGEST_BODY = {
    "storeId": STORE_ID,
    "entryCount": 20,
    "exitCount": 5,
    "posRate": 3,
    "queueData": {"tillQueues": [{"tillNumber": 1, "queueLength": 12, "avgServiceTime": 3, "status": "active"}]},
}


def _create_store(client, headers, store_id=STORE_ID, **extra):
    body = {"store_id": store_id, "store_name": "Main Street", "till_count": 4, **extra}
    return client.post("/api/stores", json=body, headers=headers)


# ============== Auth ==============

class TestAuth:
    def test_missing_token(self, client):
        r = client.get("/api/stores")
        assert r.status_code == 401
        assert r.json()["detail"] == "Access denied. No token provided."

    def test_bad_token(self, client):
        r = client.get("/api/stores", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid token. Authentication failed."

    def test_wrong_secret(self, client):
        import jwt

        token = jwt.encode({"userId": "owner-1"}, "another-secret", algorithm="HS256")
        r = client.get("/api/stores", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401

    def test_sub_claim_accepted(self, client):
        import jwt

        from footfall.config import settings

        token = jwt.encode({"sub": "owner-3"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        r = client.get("/api/stores", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
        assert r.json()["count"] == 0

    def test_health_is_public(self, client):
        assert client.get("/health").json() == {"status": "ok"}


# ============== Stores ==============

class TestStores:
    def test_create_and_list(self, client, auth_headers):
        r = _create_store(client, auth_headers, configuration={"capacity": 250, "operating_hours": {"open": "08:00"}})
        assert r.status_code == 201
        store = r.json()["store"]
        assert store["configuration"]["till_count"] == 4
        assert store["configuration"]["capacity"] == 250
        assert store["configuration"]["operating_hours"]["open"] == "08:00"

        listing = client.get("/api/stores", headers=auth_headers).json()
        assert listing["count"] == 1
        assert listing["stores"][0]["store_id"] == STORE_ID

    def test_till_count_required(self, client, auth_headers):
        r = client.post("/api/stores", json={"store_id": "S9", "store_name": "X"}, headers=auth_headers)
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_duplicate_store_id(self, client, auth_headers):
        _create_store(client, auth_headers)
        r = _create_store(client, auth_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Store with this ID already exists"

    def test_same_store_id_for_another_owner(self, client, auth_headers, other_headers):
        _create_store(client, auth_headers)
        assert _create_store(client, other_headers).status_code == 201

    def test_get_includes_latest_sample(self, client, auth_headers):
        _create_store(client, auth_headers)
        r = client.get(f"/api/stores/{STORE_ID}", headers=auth_headers)
        assert r.json()["latest_footfall_data"] is None
        client.post("/api/footfall/ingest", json=INGEST_BODY, headers=auth_headers)
        r = client.get(f"/api/stores/{STORE_ID}", headers=auth_headers)
        assert r.json()["latest_footfall_data"]["current_occupancy"] == 15

    def test_update(self, client, auth_headers):
        _create_store(client, auth_headers)
        r = client.put(
            f"/api/stores/{STORE_ID}",
            json={"store_name": "Renamed", "configuration": {"till_count": 6}},
            headers=auth_headers,
        )
        assert r.status_code == 200
        store = r.json()["store"]
        assert store["store_name"] == "Renamed"
        assert store["configuration"]["till_count"] == 6
        assert store["configuration"]["capacity"] == 100

    def test_soft_delete_hides_store(self, client, auth_headers):
        _create_store(client, auth_headers)
        assert client.delete(f"/api/stores/{STORE_ID}", headers=auth_headers).status_code == 200
        assert client.get("/api/stores", headers=auth_headers).json()["count"] == 0
        assert client.get(f"/api/stores/{STORE_ID}", headers=auth_headers).status_code == 404
        r = client.post("/api/footfall/ingest", json=INGEST_BODY, headers=auth_headers)
        assert r.status_code == 404


# ============== Footfall ==============

class TestFootfallRoutes:
    def test_ingest(self, client, auth_headers):
        _create_store(client, auth_headers)
        r = client.post("/api/footfall/ingest", json=INGEST_BODY, headers=auth_headers)
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["current_occupancy"] == 15
        assert data["queue_metrics"]["total_queue"] == 12
        assert data["queue_metrics"]["avg_wait_time"] == 36.0
        assert len(data["alert_ids"]) == 2

    def test_foreign_store_is_not_found(self, client, auth_headers, other_headers):
        _create_store(client, auth_headers)
        r = client.post("/api/footfall/ingest", json=INGEST_BODY, headers=other_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Store not found or access denied"
        assert client.get(f"/api/footfall/window/{STORE_ID}", headers=other_headers).status_code == 404

    def test_invalid_payload(self, client, auth_headers):
        _create_store(client, auth_headers)
        r = client.post("/api/footfall/ingest", json={**INGEST_BODY, "entryCount": -3}, headers=auth_headers)
        assert r.status_code == 422

    def test_latest_and_window(self, client, auth_headers):
        _create_store(client, auth_headers)
        assert client.get(f"/api/footfall/latest/{STORE_ID}", headers=auth_headers).json()["data"] is None
        window = client.get(f"/api/footfall/window/{STORE_ID}", headers=auth_headers).json()["data"]
        assert window["data_points"] == 0

        client.post("/api/footfall/ingest", json=INGEST_BODY, headers=auth_headers)
        latest = client.get(f"/api/footfall/latest/{STORE_ID}", headers=auth_headers).json()["data"]
        assert latest["current_occupancy"] == 15
        assert latest["queue_metrics"]["active_tills"] == 1
        window = client.get(f"/api/footfall/window/{STORE_ID}?minutes=30", headers=auth_headers).json()["data"]
        assert window["window_minutes"] == 30
        assert window["data_points"] == 1
        assert window["total_entries"] == 20

    def test_history_paginates_newest_first(self, client, auth_headers):
        _create_store(client, auth_headers)
        start = datetime.now(timezone.utc) - timedelta(hours=1)
        for i in range(3):
            body = {"storeId": STORE_ID, "entryCount": i + 1, "exitCount": 0, "posRate": 1,
                    "timestamp": (start + timedelta(minutes=i)).isoformat()}
            client.post("/api/footfall/ingest", json=body, headers=auth_headers)
        r = client.get(f"/api/footfall/history/{STORE_ID}?limit=2", headers=auth_headers).json()
        assert r["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        assert [d["entry_count"] for d in r["data"]] == [3, 2]

    def test_analytics(self, client, auth_headers):
        _create_store(client, auth_headers)
        client.post("/api/footfall/ingest", json=INGEST_BODY, headers=auth_headers)
        r = client.get(f"/api/footfall/analytics/{STORE_ID}?period=week&group_by=day", headers=auth_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["group_by"] == "day"
        assert sum(b["total_entries"] for b in data["analytics"]) == 20

    def test_analytics_rejects_unknown_period(self, client, auth_headers):
        _create_store(client, auth_headers)
        r = client.get(f"/api/footfall/analytics/{STORE_ID}?period=year", headers=auth_headers)
        assert r.status_code == 422

    def test_recompute_after_backfill(self, client, auth_headers):
        _create_store(client, auth_headers)
        now = datetime.now(timezone.utc)
        late = {"storeId": STORE_ID, "entryCount": 2, "exitCount": 0, "posRate": 1, "timestamp": now.isoformat()}
        early = {**late, "entryCount": 5, "timestamp": (now - timedelta(minutes=5)).isoformat()}
        client.post("/api/footfall/ingest", json=late, headers=auth_headers)
        client.post("/api/footfall/ingest", json=early, headers=auth_headers)
        r = client.post(f"/api/footfall/recompute/{STORE_ID}", headers=auth_headers)
        assert r.json()["updated"] == 1
        latest = client.get(f"/api/footfall/latest/{STORE_ID}", headers=auth_headers).json()["data"]
        assert latest["current_occupancy"] == 7


# ============== Alerts ==============

class TestAlertRoutes:
    def _raise_alerts(self, client, headers):
        _create_store(client, headers)
        client.post("/api/footfall/ingest", json=INGEST_BODY, headers=headers)
        return client.get("/api/alerts", headers=headers).json()["alerts"]

    def test_list_and_filter(self, client, auth_headers):
        alerts = self._raise_alerts(client, auth_headers)
        assert {a["alert_type"] for a in alerts} == {"staffing", "queue_length"}
        r = client.get("/api/alerts?alert_type=queue_length", headers=auth_headers).json()
        assert r["pagination"]["total"] == 1
        assert r["alerts"][0]["till_number"] == 1

    def test_acknowledge_resolve_and_conflict(self, client, auth_headers):
        alert_id = self._raise_alerts(client, auth_headers)[0]["id"]
        r = client.put(f"/api/alerts/{alert_id}/acknowledge", headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["alert"]["status"] == "acknowledged"

        r = client.put(f"/api/alerts/{alert_id}/acknowledge", headers=auth_headers)
        assert r.status_code == 409
        assert r.json()["success"] is False

        r = client.put(f"/api/alerts/{alert_id}/resolve", headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["alert"]["is_resolved"] is True
        assert client.put(f"/api/alerts/{alert_id}/resolve", headers=auth_headers).status_code == 409

    def test_foreign_alert(self, client, auth_headers, other_headers):
        alert_id = self._raise_alerts(client, auth_headers)[0]["id"]
        assert client.get(f"/api/alerts/{alert_id}", headers=other_headers).status_code == 404
        assert client.put(f"/api/alerts/{alert_id}/resolve", headers=other_headers).status_code == 404
        assert client.get("/api/alerts", headers=other_headers).json()["alerts"] == []

    def test_stats(self, client, auth_headers):
        self._raise_alerts(client, auth_headers)
        data = client.get(f"/api/alerts/stats/{STORE_ID}", headers=auth_headers).json()["data"]
        assert data["open"] == 2
        assert data["open_by_severity"] == {"critical": 2}

    def test_repeat_ingest_refreshes_alerts(self, client, auth_headers):
        self._raise_alerts(client, auth_headers)
        client.post("/api/footfall/ingest", json=INGEST_BODY, headers=auth_headers)
        alerts = client.get("/api/alerts?status=open", headers=auth_headers).json()["alerts"]
        assert len(alerts) == 2
        assert all(a["occurrences"] == 2 for a in alerts)

