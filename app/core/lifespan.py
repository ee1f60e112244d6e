"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure: one shared HTTP
client, the application-lifetime query cache and loading indicator, and
the clients for every upstream service. Request-scoped services are
built from these in app.api.v1.dependencies.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI
from pydantic import SecretStr

from app.application.services.data_access import DataAccess
from app.core.config import Settings, get_settings
from app.infrastructure.cache import LoadingIndicator, QueryCache
from app.infrastructure.external.data_api import AuthClient, DataApiClient
from app.infrastructure.external.email import LogOnlyEmailSender, SmtpEmailSender
from app.infrastructure.external.geocoding import Geocoder
from app.infrastructure.external.payments import StripeConnectClient
from app.infrastructure.external.storage import SupabaseStorage
from app.shared.telemetry.telemetry import get_telemetry

logger = logging.getLogger(__name__)


def _secret(value: SecretStr | None) -> str:
    return value.get_secret_value() if value is not None else ""


def build_email_sender(settings: Settings) -> SmtpEmailSender | LogOnlyEmailSender:
    """SMTP relay when SMTP_HOST is set; otherwise emails are only logged."""
    if not settings.smtp_host:
        logger.info("SMTP_HOST not set; emails will be logged, not sent")
        return LogOnlyEmailSender()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        from_address=settings.email_from,
        username=settings.smtp_username,
        password=_secret(settings.smtp_password),
        use_tls=settings.smtp_use_tls,
        timeout=settings.http_timeout_seconds,
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: HTTP client, query cache + loading indicator, upstream
    clients. Shutdown order: detach indicator, clear cache (session end),
    close HTTP client, flush telemetry.
    """
    settings = get_settings()
    service_key = settings.supabase_service_key.get_secret_value()

    # ---- Startup ----
    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    app.state.http_client = http_client

    cache = QueryCache(default_ttl=settings.cache_ttl_seconds)
    indicator = LoadingIndicator(
        show_delay=settings.loading_show_delay_ms / 1000,
        hide_delay=settings.loading_hide_delay_ms / 1000,
        quick_load=settings.loading_quick_load_ms / 1000,
        max_visible=settings.loading_max_visible_ms / 1000,
    )
    cache.add_listener(indicator.set_loading)
    app.state.query_cache = cache
    app.state.loading_indicator = indicator

    data_api = DataApiClient(settings.rest_url, service_key, http_client=http_client)
    app.state.data_api = data_api
    app.state.data_access = DataAccess(cache, data_api)
    app.state.auth_client = AuthClient(
        settings.auth_url,
        _secret(settings.supabase_anon_key) or service_key,
        http_client,
    )
    app.state.storage = SupabaseStorage(
        settings.storage_url,
        service_key,
        http_client,
        signed_url_expiry=settings.signed_url_expiry_seconds,
    )
    app.state.geocoder = Geocoder(
        http_client,
        url=settings.geocoding_url,
        user_agent=settings.geocoding_user_agent,
        country=settings.geocoding_country,
        country_codes=settings.geocoding_country_codes,
    )
    app.state.email_sender = build_email_sender(settings)
    app.state.payments = StripeConnectClient(
        _secret(settings.stripe_secret_key) or None,
        http_client,
        api_base=settings.stripe_api_base,
        country=settings.stripe_connect_country,
    )
    if not app.state.payments.configured:
        logger.info("STRIPE_SECRET_KEY not set; payment onboarding is unavailable")
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    cache.remove_listener(indicator.set_loading)
    indicator.reset()
    cache.clear()
    await http_client.aclose()
    app.state.http_client = None
    logger.info("HTTP client closed")
    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.shutdown()
