"""
HTTP tests for POST /, GET /, GET /stats.
"""
import asyncio
import json

from fastapi.testclient import TestClient

from main import app
from urlpool_app.config import settings
from urlpool_app.dependencies import get_store
from urlpool_app.exceptions import StoreError
from urlpool_app.services.shard_counter import shard_prefix
from urlpool_app.store.strategies import InMemoryKVStore


class TestSubmitURL:
    """POST /"""

    def test_submit_returns_201(self, client: TestClient, store):
        response = client.post("/", content="https://www.python.org/")

        assert response.status_code == 201
        assert response.content == b""
        keys = asyncio.run(store.list_keys(shard_prefix(0)))
        assert len(keys) == 1
        assert asyncio.run(store.get(keys[0])) == "https://www.python.org/"

    def test_rejects_ftp(self, client: TestClient, store):
        response = client.post("/", content="ftp://example.com")

        assert response.status_code == 400
        assert len(store) == 0

    def test_rejects_not_a_url(self, client: TestClient, store):
        response = client.post("/", content="not a url")

        assert response.status_code == 400
        assert len(store) == 0

    def test_rejects_empty_body(self, client: TestClient):
        assert client.post("/").status_code == 400

    def test_rejects_non_utf8_body(self, client: TestClient):
        assert client.post("/", content=b"http://\xff\xfe").status_code == 400

    def test_counter_advances(self, client: TestClient):
        for i in range(3):
            client.post("/", content=f"https://example.com/{i}")

        stats = client.get("/stats").json()
        assert stats == {"urlCount": 3, "urlPrefix": 0}


class TestSecret:
    """Shared-secret gate on POST / and GET /stats"""

    def test_missing_header_is_401(self, client: TestClient, store, secret):
        response = client.post("/", content="https://example.com/")

        assert response.status_code == 401
        assert len(store) == 0

    def test_wrong_secret_is_401(self, client: TestClient, secret):
        response = client.post(
            "/", content="https://example.com/", headers={"Authorization": "Secret nope"}
        )
        assert response.status_code == 401

    def test_wrong_scheme_is_401(self, client: TestClient, secret):
        response = client.post(
            "/", content="https://example.com/", headers={"Authorization": f"Bearer {secret}"}
        )
        assert response.status_code == 401

    def test_auth_checked_before_validation(self, client: TestClient, secret):
        assert client.post("/", content="ftp://example.com").status_code == 401

    def test_correct_secret_is_accepted(self, client: TestClient, secret):
        response = client.post(
            "/", content="https://example.com/", headers={"Authorization": f"Secret {secret}"}
        )
        assert response.status_code == 201

    def test_stats_gated(self, client: TestClient, secret):
        assert client.get("/stats").status_code == 401
        response = client.get("/stats", headers={"Authorization": f"Secret {secret}"})
        assert response.status_code == 200

    def test_random_url_not_gated(self, client: TestClient, secret):
        assert client.get("/").status_code == 204

    def test_no_secret_configured_means_open(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "secret", None)
        assert client.post("/", content="https://example.com/").status_code == 201
        assert client.get("/stats").status_code == 200


class TestRandomURL:
    """GET /"""

    def test_empty_pool_is_204(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == settings.allowed_origin

    def test_returns_submitted_url_verbatim(self, client: TestClient):
        url = "https://Example.com/Some/Path?x=%7E#Top"
        client.post("/", content=url)

        response = client.get("/")

        assert response.status_code == 200
        assert response.text == url
        assert response.headers["content-type"].startswith("text/plain")

    def test_allowed_origin_header(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "allowed_origin", "https://app.example.com")
        client.post("/", content="https://example.com/")

        response = client.get("/")

        assert response.headers["access-control-allow-origin"] == "https://app.example.com"

    def test_draws_from_pool(self, client: TestClient):
        urls = {f"https://example.com/{i}" for i in range(10)}
        for url in sorted(urls):
            client.post("/", content=url)

        drawn = {client.get("/").text for _ in range(50)}

        assert drawn <= urls


class TestStats:
    """GET /stats"""

    def test_empty_store(self, client: TestClient):
        response = client.get("/stats")

        assert response.status_code == 200
        assert response.json() == {"urlCount": 0, "urlPrefix": 0}

    def test_pretty_printed(self, client: TestClient, store):
        asyncio.run(store.put("urlCount", "500"))
        asyncio.run(store.put("urlPrefix", "2"))

        response = client.get("/stats")

        assert response.text == json.dumps({"urlCount": 500, "urlPrefix": 2}, indent=4)


class TestMethodsAndErrors:
    """Method routing and store failures"""

    def test_other_methods_are_405(self, client: TestClient):
        assert client.put("/", content="x").status_code == 405
        assert client.delete("/").status_code == 405
        assert client.patch("/", content="x").status_code == 405
        assert client.post("/stats").status_code == 405

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_store_failure_is_503(self):
        class BrokenStore(InMemoryKVStore):
            async def get(self, key):
                raise StoreError("connection refused")

        app.dependency_overrides[get_store] = lambda: BrokenStore()
        try:
            with TestClient(app) as client:
                assert client.get("/").status_code == 503
                response = client.post("/", content="https://example.com/")
                assert response.status_code == 503
                assert response.json() == {"detail": "Storage backend unavailable"}
        finally:
            app.dependency_overrides.clear()
