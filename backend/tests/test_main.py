"""Tests for app-level routes, middleware and error handling."""

from loguru import logger

from services.topic_service import TopicService


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "CivicLens API is running"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["environment"] == "test"
    assert body["timestamp"].endswith("Z")


def test_security_headers(client):
    response = client.get("/health")

    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "SAMEORIGIN"
    assert response.headers["cache-control"] == "no-store, max-age=0"
    # HSTS is production only
    assert "strict-transport-security" not in response.headers
    assert response.headers["x-response-time"].endswith("s")


def test_correlation_id_is_echoed(client):
    response = client.get("/api/v1/posts/9999", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["x-correlation-id"] == "abc-123"
    assert response.json()["correlation_id"] == "abc-123"


def test_correlation_id_is_generated(client):
    response = client.get("/")
    assert len(response.headers["x-correlation-id"]) > 0


def test_unhandled_exception_returns_generic_500(client, monkeypatch):
    def boom(db):
        raise RuntimeError("database exploded {with braces}")

    monkeypatch.setattr(TopicService, "list_topics", staticmethod(boom))

    response = client.get("/api/v1/topics")

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"
    assert response.json()["correlation_id"]


def test_unhandled_exception_is_logged_by_request_middleware(client, monkeypatch):
    def boom(db):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(TopicService, "list_topics", staticmethod(boom))
    messages = []
    sink_id = logger.add(lambda message: messages.append(str(message)), level="INFO")
    try:
        response = client.get("/api/v1/topics")
    finally:
        logger.remove(sink_id)

    assert response.status_code == 500
    assert any(
        "GET /api/v1/topics -> unhandled error" in message for message in messages
    )


def test_unknown_route(client):
    assert client.get("/api/v1/nothing-here").status_code == 404


def test_cors_preflight(client):
    response = client.options(
        "/api/v1/posts",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-credentials"] == "true"
