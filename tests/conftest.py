"""
Shared fixtures.

The remote store is replaced by FakeGistAPI (see fakes.py).
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.rate_limit import limiter
from app.core.setting import Settings
from app.db.gist_adapter import GistAdapter
from app.main import create_app
from app.services.link_store import LinkStore
from app.services.url_service import LinkService
from fakes import API_URL, GIST_ID, GIST_NAME, FakeClock, FakeGistAPI


@pytest.fixture
def fake_gist() -> FakeGistAPI:
    api = FakeGistAPI()
    api.seed()
    return api


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(fake_gist, clock) -> LinkStore:
    client = httpx.AsyncClient(base_url=API_URL, transport=fake_gist.transport)
    backend = GistAdapter(client, gist_id=GIST_ID, file_name=GIST_NAME)
    return LinkStore(backend, cache_ttl_seconds=120, clock=clock)


@pytest.fixture
def link_service(store, clock) -> LinkService:
    return LinkService(store, domain="http://sho.rt", cache_ttl_seconds=300, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        GIST_ID=GIST_ID,
        GIST_NAME=GIST_NAME,
        GITHUB_API_URL=API_URL,
        GITHUB_TOKEN="test-token",
        ADMIN_KEY="s3cret",
        APP_DOMAIN="http://sho.rt",
    )


@pytest.fixture
def client(fake_gist, test_settings):
    limiter.reset()
    app = create_app(test_settings, transport=fake_gist.transport)
    with TestClient(app) as test_client:
        yield test_client
