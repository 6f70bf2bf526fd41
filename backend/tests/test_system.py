"""
Health endpoint tests.
"""

from app.extensions import db


class TestHealth:

    def test_healthy(self, client, db_session, stall):
        resp = client.get("/api/health")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "healthy"
        assert body["civil_timezone"] == "Asia/Manila"
        assert len(body["civil_date"]) == 10
        assert body["timestamp"].endswith("Z")
        assert body["checks"]["database"]["details"]["stalls"] == 1
        assert body["checks"]["identity_provider"] == {"configured": True}

    def test_database_failure(self, client, db_session, monkeypatch):
        def broken_query(*args, **kwargs):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(db.session, "query", broken_query)

        resp = client.get("/api/health")

        assert resp.status_code == 503
        body = resp.get_json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["database"]["error"] == "Database error"
        assert "locked" not in resp.get_data(as_text=True)

    def test_no_auth_required(self, client, db_session):
        assert client.get("/api/health").status_code == 200
