from __future__ import annotations

import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from ai_news_ingest.api.app import create_app
from ai_news_ingest.api.rate_limit import IpRateLimiter
from ai_news_ingest.core.config import ServerSettings
from ai_news_ingest.core.errors import DuplicateSubscriberError, IngestionInProgressError, StorageError

ADMIN_KEY = "secret-admin-key"
ORIGIN = "https://news.example.com"


class _FakeService:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[bool] = []

    def run(self, *, self_test: bool = False, metrics=None) -> dict:
        self.calls.append(self_test)
        if self.error is not None:
            raise self.error
        return {"success": True, "message": "Upserted 1 news articles", "count": 1, "articles": [{"id": "a"}], "debug": {}}

    def debug_info(self, metrics) -> dict:
        return {"supabaseProjectRef": "ref", **metrics.as_dict()}


class _FakeSubscribers:
    def __init__(self, error: Exception | None = None, count: int = 7) -> None:
        self.error = error
        self.count = count
        self.subscribed: list[tuple[str, str | None]] = []

    def subscribe(self, email: str, source: str | None) -> dict:
        if self.error is not None:
            raise self.error
        self.subscribed.append((email, source))
        return {"id": "sub-1", "created_at": "2024-01-01T00:00:00Z"}

    def subscriber_count(self) -> int:
        if self.error is not None:
            raise self.error
        return self.count


def _settings() -> ServerSettings:
    return ServerSettings(
        supabase_url="https://abcd.supabase.co",
        supabase_service_key="service",
        admin_api_key=ADMIN_KEY,
        allowed_origins=(ORIGIN,),
        openrouter_api_key="or-key",
    )


def _client(service=None, subscribers=None, admin_max: int = 100, newsletter_max: int = 100) -> TestClient:
    app = create_app(
        settings=_settings(),
        service=service or _FakeService(),
        subscriber_store=subscribers or _FakeSubscribers(),
        admin_limiter=IpRateLimiter(window_sec=60, max_requests=admin_max),
        newsletter_limiter=IpRateLimiter(
            window_sec=300, max_requests=newsletter_max, error_message="Please wait before trying again."
        ),
    )
    return TestClient(app)


def test_healthz() -> None:
    resp = _client().get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_fetch_news_requires_admin_key() -> None:
    service = _FakeService()
    client = _client(service)

    assert client.post("/api/fetch-news").status_code == 401
    resp = client.post("/api/fetch-news", headers={"x-api-key": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}
    assert service.calls == []


def test_fetch_news_success_and_self_test_header() -> None:
    service = _FakeService()
    client = _client(service)

    resp = client.post("/api/fetch-news", headers={"x-api-key": ADMIN_KEY, "x-self-test": "true"})
    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    client.post("/api/fetch-news", headers={"x-api-key": ADMIN_KEY})
    assert service.calls == [True, False]


def test_fetch_news_conflict_and_failure() -> None:
    busy = _client(_FakeService(IngestionInProgressError("News ingestion is already running.")))
    resp = busy.post("/api/fetch-news", headers={"x-api-key": ADMIN_KEY})
    assert resp.status_code == 409
    assert resp.json()["error"] == "News ingestion is already running."
    assert resp.json()["debug"]["supabaseProjectRef"] == "ref"

    broken = _client(_FakeService(StorageError("upsert failed")))
    resp = broken.post("/api/fetch-news", headers={"x-api-key": ADMIN_KEY})
    assert resp.status_code == 500
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "upsert failed"
    assert resp.json()["debug"]["upsertedCount"] == 0


def test_admin_rate_limit_applies_before_auth() -> None:
    client = _client(admin_max=2)
    assert client.post("/api/admin/authenticate", headers={"x-api-key": ADMIN_KEY}).json() == {"success": True}
    assert client.post("/api/admin/authenticate").status_code == 401
    resp = client.post("/api/admin/authenticate", headers={"x-api-key": ADMIN_KEY})
    assert resp.status_code == 429
    assert resp.json()["success"] is False


def test_subscribe_success_normalizes_input() -> None:
    subscribers = _FakeSubscribers()
    resp = _client(subscribers=subscribers).post(
        "/api/newsletter/subscribe",
        json={"email": "  Reader@Example.COM ", "source": "footer\n<form>"},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "data": {"id": "sub-1", "created_at": "2024-01-01T00:00:00Z"},
        "message": "Thanks for subscribing!",
    }
    assert subscribers.subscribed == [("reader@example.com", "footer form")]


def test_subscribe_validation_errors() -> None:
    client = _client()
    assert client.post("/api/newsletter/subscribe", json={}).json()["error"] == "Email is required."
    assert client.post("/api/newsletter/subscribe", json={"email": 42}).json()["error"] == "Email is required."
    resp = client.post("/api/newsletter/subscribe", json={"email": "not-an-email"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please provide a valid email address."


def test_subscribe_duplicate_and_storage_failure() -> None:
    dup = _client(subscribers=_FakeSubscribers(DuplicateSubscriberError("dup")))
    resp = dup.post("/api/newsletter/subscribe", json={"email": "a@example.com"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "Looks like you are already subscribed."

    down = _client(subscribers=_FakeSubscribers(StorageError("down")))
    resp = down.post("/api/newsletter/subscribe", json={"email": "a@example.com"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Unable to complete subscription right now. Please try again later."


def test_subscribe_rate_limited() -> None:
    client = _client(newsletter_max=1)
    assert client.post("/api/newsletter/subscribe", json={"email": "a@example.com"}).status_code == 200
    resp = client.post("/api/newsletter/subscribe", json={"email": "b@example.com"})
    assert resp.status_code == 429
    assert resp.json()["error"] == "Please wait before trying again."


def test_newsletter_stats() -> None:
    client = _client(subscribers=_FakeSubscribers(count=12))
    resp = client.get("/api/admin/newsletter/stats", headers={"x-api-key": ADMIN_KEY})
    assert resp.json() == {"success": True, "data": {"subscriberCount": 12}}

    broken = _client(subscribers=_FakeSubscribers(StorageError("down")))
    resp = broken.get("/api/admin/newsletter/stats", headers={"x-api-key": ADMIN_KEY})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Unable to fetch stats right now."


def test_disallowed_origin_rejected() -> None:
    client = _client()
    resp = client.get("/healthz", headers={"Origin": "https://evil.example.com"})
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "error": "Origin not allowed"}

    ok = client.get("/healthz", headers={"Origin": ORIGIN})
    assert ok.status_code == 200
    assert ok.headers["access-control-allow-origin"] == ORIGIN


def test_unknown_route_uses_error_envelope() -> None:
    resp = _client().get("/nope")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
