"""Settings validation and lifespan wiring."""

import pytest
from fastapi import FastAPI
from pydantic import ValidationError

from app.core.config import Settings
from app.core.exception_handlers import status_for
from app.core.lifespan import create_lifespan
from app.domain.exceptions import (
    AuthRequiredException,
    DuplicateApplicationException,
    NotFoundException,
    PermissionDeniedException,
    UpstreamFailureException,
)
from app.infrastructure.cache import LoadingIndicator, QueryCache


def test_settings_require_backend_url_and_key() -> None:
    with pytest.raises(ValidationError, match="SUPABASE_URL"):
        Settings(_env_file=None, supabase_url="", supabase_service_key="k")
    with pytest.raises(ValidationError, match="http"):
        Settings(_env_file=None, supabase_url="project.supabase.co", supabase_service_key="k")
    with pytest.raises(ValidationError, match="SUPABASE_SERVICE_KEY"):
        Settings(_env_file=None, supabase_url="https://p.supabase.co", supabase_service_key="")


def test_settings_derived_urls() -> None:
    settings = Settings(
        _env_file=None,
        supabase_url="https://p.supabase.co/",
        supabase_service_key="k",
        public_app_url="https://app.example.com",
    )
    assert settings.rest_url == "https://p.supabase.co/rest/v1"
    assert settings.storage_url == "https://p.supabase.co/storage/v1"
    assert settings.stripe_return_url == "https://app.example.com/dashboard?tab=banking&success=true"


async def test_lifespan_wires_state_and_cleans_up() -> None:
    app = FastAPI()
    async with create_lifespan(app):
        cache = app.state.query_cache
        assert isinstance(cache, QueryCache)
        assert isinstance(app.state.loading_indicator, LoadingIndicator)
        assert app.state.data_access.cache is cache
        assert app.state.data_api.base_url.endswith("/rest/v1")

        async def loader():
            return ["row"]

        await cache.fetch("warm", loader)
        assert len(cache) == 1
    assert len(cache) == 0
    assert app.state.http_client is None


def test_error_status_follows_kind_with_code_overrides() -> None:
    assert status_for(NotFoundException("property", "p1")) == 404
    assert status_for(DuplicateApplicationException("p1")) == 400
    assert status_for(UpstreamFailureException("stripe", "down")) == 502
    assert status_for(AuthRequiredException()) == 401
    assert status_for(PermissionDeniedException("property:p1", "modify")) == 403


def test_cors_origins_are_split_and_trimmed() -> None:
    settings = Settings(
        _env_file=None,
        supabase_url="https://p.supabase.co",
        supabase_service_key="k",
        allowed_origins="https://a.example.com, https://b.example.com,",
    )
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]
