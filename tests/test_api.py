"""
API tests through FastAPI's TestClient against the fake Gist API.
"""

import logging
import re

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import StoreInitializationError
from app.core.rate_limit import limiter
from app.core.setting import Settings
from app.main import create_app
from fakes import make_link


class TestShorten:

    def test_shorten_random_slug(self, client, fake_gist):
        response = client.post("/shorten", json={"originalUrl": "https://example.com"})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "URL shortened successfully"
        assert body["meta"]["server"] == "NVSURL"
        data = body["data"]
        assert re.fullmatch(r"[A-Za-z0-9_-]{5,8}", data["slug"])
        assert data["clicks"] == 0
        assert data["shortUrl"] == f"http://sho.rt/r/{data['slug']}"
        assert data["metadata"]["userAgent"] == "testclient"
        assert data["slug"] in fake_gist.table()["links"]

    def test_shorten_invalid_url(self, client):
        response = client.post("/shorten", json={"originalUrl": "not-a-url"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "valid URL" in body["message"]
        assert body["errors"] == ["originalUrl must be a valid URL"]

    def test_shorten_missing_url(self, client):
        response = client.post("/shorten", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "originalUrl is required"

    def test_shorten_malformed_body(self, client):
        response = client.post("/shorten", content="nope", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_shorten_custom_slug_conflict(self, client, fake_gist):
        fake_gist.seed({"docs": make_link("docs")})

        response = client.post("/shorten", json={"originalUrl": "https://example.com", "customSlug": "docs"})

        assert response.status_code == 409
        assert response.json()["message"] == "Slug already exists"

    def test_shorten_bad_custom_slug(self, client):
        response = client.post("/shorten", json={"originalUrl": "https://example.com", "customSlug": "a b"})

        assert response.status_code == 400
        assert "customSlug" in response.json()["message"]

    def test_shorten_rejects_slug_with_trailing_newline(self, client, fake_gist):
        response = client.post("/shorten", json={"originalUrl": "https://example.com", "customSlug": "abc\n"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert fake_gist.table()["links"] == {}

    def test_shorten_store_failure(self, client, fake_gist):
        fake_gist.fail_writes = True

        response = client.post("/shorten", json={"originalUrl": "https://example.com", "customSlug": "docs"})

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to shorten URL"


class TestRedirect:

    def test_redirect_counts_clicks(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", url="https://target.example.com")})

        first = client.get("/r/abc", follow_redirects=False)
        second = client.get("/r/abc", follow_redirects=False)

        assert first.status_code == 301
        assert first.headers["location"] == "https://target.example.com"
        assert second.status_code == 301
        assert fake_gist.table()["links"]["abc"]["clicks"] == 2

    def test_redirect_after_shorten(self, client, fake_gist):
        slug = client.post("/shorten", json={"originalUrl": "https://example.com/x"}).json()["data"]["slug"]

        response = client.get(f"/r/{slug}", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com/x"
        assert fake_gist.table()["links"][slug]["clicks"] == 1

    def test_failed_background_click_keeps_redirect(self, client, fake_gist, caplog):
        fake_gist.seed({"abc": make_link("abc", url="https://target.example.com")})
        client.get("/r/abc", follow_redirects=False)
        fake_gist.fail_writes = True

        with caplog.at_level(logging.ERROR, logger="app.services.background_tasks"):
            response = client.get("/r/abc", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://target.example.com"
        assert "Failed to increment click count for abc" in caplog.text
        assert fake_gist.table()["links"]["abc"]["clicks"] == 1

    def test_redirect_unknown_slug(self, client):
        response = client.get("/r/missing", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/?error=link-not-found"


class TestStats:

    def test_link_stats(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", clicks=3)})

        response = client.get("/stats/abc")

        assert response.status_code == 200
        assert response.json()["data"]["clicks"] == 3
        assert response.json()["message"] == "Link statistics"

    def test_link_stats_missing(self, client):
        response = client.get("/stats/missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Link not found"

    def test_global_stats(self, client, fake_gist):
        fake_gist.seed({"a1": make_link("a1", clicks=1), "b2": make_link("b2", clicks=2)})

        data = client.get("/stats").json()["data"]

        assert data["totalLinks"] == 2
        assert data["totalClicks"] == 3
        assert re.fullmatch(r"\d+h \d+m", data["server"]["uptime"])
        assert set(data["server"]["cache"]) == {"memoryCache", "gistCache"}
        assert data["rateLimit"]["maxPerHour"] == 35
        assert set(data["server"]["memory"]) == {"peakRss"}


class TestHealth:

    def test_healthy(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", clicks=4)})

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "healthy"
        assert data["gist"] == {"connected": True, "totalLinks": 1, "totalClicks": 4}

    def test_unhealthy_when_store_unreachable(self, client, fake_gist):
        fake_gist.fail_reads = True

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["code"] == "SERVICE_UNHEALTHY"


class TestDelete:

    def test_form_without_slug(self, client):
        response = client.get("/delete.html")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]

    def test_confirmation_page(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", url="https://target.example.com")})

        response = client.get("/delete.html", params={"slug": "abc"})

        assert response.status_code == 200
        assert "https://target.example.com" in response.text
        assert "abc" in fake_gist.table()["links"]

    def test_delete_json(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", url="https://target.example.com")})
        client.get("/r/abc", follow_redirects=False)

        response = client.post("/delete.html?slug=abc", json={})

        assert response.status_code == 200
        assert response.json()["data"] == {"deletedSlug": "abc", "originalUrl": "https://target.example.com"}
        assert "abc" not in fake_gist.table()["links"]

        # neither cache layer still serves the link
        redirect = client.get("/r/abc", follow_redirects=False)
        assert redirect.headers["location"] == "/?error=link-not-found"
        assert client.get("/stats/abc").status_code == 404

    def test_delete_json_missing(self, client):
        response = client.post("/delete.html?slug=missing", json={})

        assert response.status_code == 404
        assert response.json()["message"] == "Link not found"

    def test_delete_form(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc")})

        response = client.post("/delete.html?slug=abc")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Deleted" in response.text
        assert "abc" not in fake_gist.table()["links"]


class TestAdmin:

    def test_clear_cache_requires_key(self, client):
        assert client.get("/clear-cache").status_code == 401
        response = client.get("/clear-cache", params={"adminKey": "wrong"})

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_clear_cache_bypasses_stale_entries(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", url="https://old.example.com")})
        client.get("/stats/abc")

        table = fake_gist.table()
        table["links"]["abc"]["originalUrl"] = "https://new.example.com"
        fake_gist.seed(table["links"])
        assert client.get("/stats/abc").json()["data"]["originalUrl"] == "https://old.example.com"

        response = client.get("/clear-cache", params={"adminKey": "s3cret"})

        assert response.status_code == 200
        assert "clearedAt" in response.json()["data"]
        assert client.get("/stats/abc").json()["data"]["originalUrl"] == "https://new.example.com"

    def test_link_data(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc"), "xyz": make_link("xyz")})

        assert client.get("/linkdata", params={"adminKey": "nope"}).status_code == 401
        data = client.get("/linkdata", params={"adminKey": "s3cret"}).json()["data"]

        assert set(data["links"]) == {"abc", "xyz"}
        assert data["metadata"]["totalLinks"] == 2
        assert data["stats"]["totalLinks"] == 2

    def test_link_data_paginated(self, client, fake_gist):
        links = {}
        for i in range(3):
            links[f"s{i}"] = make_link(f"s{i}")
            links[f"s{i}"]["createdAt"] = f"2026-01-0{i + 1}T00:00:00.000Z"
        fake_gist.seed(links)

        body = client.get("/linkdata", params={"adminKey": "s3cret", "page": 1, "limit": 2}).json()

        assert [link["slug"] for link in body["data"]] == ["s2", "s1"]
        assert body["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "totalPages": 2,
            "hasNext": True,
            "hasPrev": False,
        }


class TestPages:

    def test_home(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc", clicks=7)})

        response = client.get("/")

        assert response.status_code == 200
        assert "7 clicks" in response.text

    def test_home_degrades_when_store_unreachable(self, client, fake_gist):
        fake_gist.fail_reads = True

        response = client.get("/")

        assert response.status_code == 200
        assert "Failed to load statistics" in response.text

    def test_home_error_banner(self, client):
        response = client.get("/", params={"error": "link-not-found"})

        assert "That short link does not exist." in response.text

    def test_unknown_route(self, client):
        response = client.get("/no/such/page")

        assert response.status_code == 404
        assert "404 Not Found" in response.text


class TestRateLimits:

    def test_create_limit(self, client):
        for i in range(10):
            response = client.post("/shorten", json={"originalUrl": f"https://example.com/{i}"})
            assert response.status_code == 201

        response = client.post("/shorten", json={"originalUrl": "https://example.com/11"})

        assert response.status_code == 429
        assert response.json()["message"] == "Too many link creation attempts. Please wait 15 minutes."
        assert response.json()["code"] == "RATE_LIMITED"

    def test_api_limit_shared_across_routes(self, client):
        for _ in range(20):
            assert client.get("/stats").status_code == 200
        for _ in range(15):
            assert client.get("/health").status_code == 200

        response = client.get("/stats/anything")

        assert response.status_code == 429
        assert response.json()["message"] == "Too many requests. Maximum 35 requests per hour."

    def test_limits_follow_app_settings(self, fake_gist, test_settings):
        limiter.reset()
        settings = test_settings.model_copy(update={"MAX_REQUESTS_PER_HOUR": 3})

        with TestClient(create_app(settings, transport=fake_gist.transport)) as client:
            for _ in range(3):
                assert client.get("/stats").status_code == 200
            response = client.get("/stats")

        assert response.status_code == 429
        assert response.json()["message"] == "Too many requests. Maximum 3 requests per hour."

    def test_create_limit_follows_app_settings(self, fake_gist, test_settings):
        limiter.reset()
        settings = test_settings.model_copy(update={"CREATE_LINK_LIMIT": "1/15 minutes"})

        with TestClient(create_app(settings, transport=fake_gist.transport)) as client:
            first = client.post("/shorten", json={"originalUrl": "https://example.com/1"})
            second = client.post("/shorten", json={"originalUrl": "https://example.com/2"})

        assert first.status_code == 201
        assert second.status_code == 429
        assert second.json()["message"] == "Too many link creation attempts. Please wait 15 minutes."

    def test_limits_can_be_disabled(self, fake_gist, test_settings):
        limiter.reset()
        settings = test_settings.model_copy(update={"RATE_LIMIT_ENABLED": False, "MAX_REQUESTS_PER_HOUR": 1})

        with TestClient(create_app(settings, transport=fake_gist.transport)) as client:
            for _ in range(5):
                assert client.get("/stats").status_code == 200

    def test_redirects_not_limited(self, client, fake_gist):
        fake_gist.seed({"abc": make_link("abc")})

        for _ in range(40):
            assert client.get("/r/abc", follow_redirects=False).status_code == 301


class TestStartup:

    def test_creates_gist_when_unconfigured(self, fake_gist):
        limiter.reset()
        settings = Settings(_env_file=None, GIST_ID=None, ADMIN_KEY="k")
        app = create_app(settings, transport=fake_gist.transport)

        with TestClient(app):
            new_id = app.state.link_store.backend.document_id

        assert new_id.startswith("created")
        assert fake_gist.table(new_id)["links"] == {}

    def test_refuses_to_start_without_store(self, fake_gist):
        fake_gist.fail_creates = True
        settings = Settings(_env_file=None, GIST_ID="missing")
        app = create_app(settings, transport=fake_gist.transport)

        with pytest.raises(StoreInitializationError):
            with TestClient(app):
                pass
