"""Pytest configuration and fixtures for the marketplace API.

The app is built with create_app() after test settings are put in the
environment. ASGITransport does not run the lifespan, so the api_app
fixture puts the cache and in-memory upstream fakes on app.state the way
app.core.lifespan does with the real clients.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("GEOCODING_INTERVAL_SECONDS", "0")

from app.application.services.data_access import DataAccess  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.infrastructure.cache import LoadingIndicator, QueryCache  # noqa: E402
from app.main import create_app  # noqa: E402
from tests.fakes import (  # noqa: E402
    ADMIN,
    OWNER,
    SEEKER,
    TOKENS,
    FakeAuth,
    FakeClock,
    FakeDataApi,
    FakeEmailSender,
    FakeGeocoder,
    FakePayments,
    FakeStorage,
    ManualTimers,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def cache(clock: FakeClock) -> QueryCache:
    return QueryCache(default_ttl=600.0, clock=clock)


@pytest.fixture
def data_api() -> FakeDataApi:
    """Two listings (one owned by OWNER) and a profile per test user."""
    return FakeDataApi(
        {
            "properties": [
                {
                    "id": "p1",
                    "title": "Harbour View Apartment",
                    "location": "Auckland CBD",
                    "address": "1 Queen Street, Auckland",
                    "price": 650,
                    "bedrooms": 2,
                    "status": "available",
                    "owner_id": OWNER.id,
                    "images": ["front.jpg"],
                    "created_at": "2024-01-02T00:00:00+00:00",
                },
                {
                    "id": "p2",
                    "title": "Garden Cottage",
                    "location": "Hamilton East",
                    "address": "5 Grey Street, Hamilton",
                    "price": 420,
                    "bedrooms": 1,
                    "status": "available",
                    "owner_id": "someone-else",
                    "latitude": -37.79,
                    "longitude": 175.29,
                    "created_at": "2024-01-01T00:00:00+00:00",
                },
            ],
            "profiles": [
                {"id": OWNER.id, "email": OWNER.email, "role": "property_owner"},
                {"id": SEEKER.id, "email": SEEKER.email, "role": "property_seeker"},
                {"id": ADMIN.id, "email": ADMIN.email, "role": "admin"},
            ],
            "rental_applications": [],
            "viewing_requests": [],
        }
    )


@pytest.fixture
def data_access(cache: QueryCache, data_api: FakeDataApi) -> DataAccess:
    return DataAccess(cache, data_api)


@pytest.fixture
def api_app(data_api: FakeDataApi, timers: ManualTimers):
    """App with infrastructure on app.state backed by fakes; rate limits off."""
    get_settings.cache_clear()
    app = create_app()
    cache = QueryCache(default_ttl=600.0)
    indicator = LoadingIndicator(call_later=timers)
    cache.add_listener(indicator.set_loading)
    app.state.query_cache = cache
    app.state.loading_indicator = indicator
    app.state.data_api = data_api
    app.state.data_access = DataAccess(cache, data_api)
    app.state.auth_client = FakeAuth(dict(TOKENS))
    app.state.storage = FakeStorage()
    app.state.geocoder = FakeGeocoder()
    app.state.email_sender = FakeEmailSender()
    app.state.payments = FakePayments()
    limiter.enabled = False
    yield app
    limiter.enabled = True


@pytest.fixture
async def client(api_app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
