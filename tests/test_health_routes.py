from fastapi.testclient import TestClient

from supportbot.routes import create_app
from tests.utils import StubProvider, UnavailableRedis, build_test_context


def test_health_reports_connected_store_and_session_count():
    context = build_test_context(
        providers=[StubProvider("openai"), StubProvider("gemini")],
        APP_VERSION="2.3.0",
        APP_ENV="staging",
    )
    client = TestClient(create_app(context=context))

    client.post("/api/v1/chat/session", json={"userId": "alice"})
    client.post("/api/v1/chat/session", json={"userId": "bob"})
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["version"] == "2.3.0"
    assert body["environment"] == "staging"
    assert body["services"] == {
        "redis": "connected",
        "openai": "configured",
        "gemini": "configured",
        "activeSessions": 2,
    }


def test_health_stays_200_when_store_is_down():
    context = build_test_context(redis=UnavailableRedis(), providers=[])
    client = TestClient(create_app(context=context))

    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    services = resp.json()["services"]
    assert services["redis"] == "disconnected"
    assert services["activeSessions"] == 0
    assert services["openai"] == "not configured"
    assert services["gemini"] == "not configured"
