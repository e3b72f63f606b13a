import routers.categories
from core.config import settings


def test_health_reports_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["database"] == "Connected"
    assert body["timestamp"]


def test_health_degraded_when_database_unreachable(client, database, monkeypatch):
    monkeypatch.setattr(database, "ping", lambda: False)

    response = client.get("/api/health")

    assert response.status_code == 503
    assert response.json() == {
        "status": "ERROR",
        "timestamp": response.json()["timestamp"],
        "database": "Disconnected",
    }


def test_responses_carry_request_id_and_security_headers(client):
    response = client.get("/api/health", headers={"X-Request-ID": "trace-123"})

    assert response.headers["X-Request-ID"] == "trace-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_unexpected_errors_hide_details_unless_debug(client, monkeypatch):

    def broken(db):
        raise RuntimeError("connection string leaked")

    monkeypatch.setattr(routers.categories, "list_categories", broken)

    response = client.get("/api/categories")
    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
    assert "details" not in response.json()

    monkeypatch.setattr(settings, "DEBUG", True)
    response = client.get("/api/categories")
    assert response.json()["details"] == "connection string leaked"
