"""Tracing: setup switches, spans around cache loads and upstream calls."""

import logging

import httpx
import pytest
from fastapi import FastAPI
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
from pydantic import ValidationError

from app.core.config import Settings
from app.domain.exceptions import UpstreamFailureException
from app.domain.value_objects import QueryDescriptor
from app.infrastructure.cache import QueryCache
from app.infrastructure.external.http import request
from app.shared.telemetry import RequestContextFilter, TelemetryConfig, TracedOperation
from app.shared.telemetry.telemetry import setup_telemetry


@pytest.fixture(scope="module")
def spans() -> InMemorySpanExporter:
    """Install a tracer provider once for this module and collect its spans in memory."""
    provider = TelemetryConfig("gdc-properties-test", "1.0.0").setup_telemetry(exporter_type="none")
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


@pytest.fixture(autouse=True)
def _fresh_spans(spans: InMemorySpanExporter) -> None:
    spans.clear()


def _settings(**overrides) -> Settings:
    return Settings(
        _env_file=None, supabase_url="https://p.supabase.co", supabase_service_key="k", **overrides
    )


def test_disabled_telemetry_installs_nothing() -> None:
    assert TelemetryConfig("svc", "1", enabled=False).setup_telemetry() is None
    assert setup_telemetry(FastAPI(), _settings(telemetry_enabled=False)) is None


def test_exporter_settings_are_validated() -> None:
    with pytest.raises(ValidationError, match="TELEMETRY_EXPORTER"):
        _settings(telemetry_exporter="jaeger")
    with pytest.raises(ValidationError, match="sample_rate"):
        _settings(telemetry_sample_rate=1.5)
    with pytest.raises(ValueError, match="OTLP_ENDPOINT"):
        TelemetryConfig("svc", "1")._exporter("otlp", None)


async def test_cache_load_runs_in_a_span(spans: InMemorySpanExporter) -> None:
    cache = QueryCache()

    async def loader():
        return ["row"]

    await cache.fetch(QueryDescriptor(table="properties"), loader)
    await cache.fetch(QueryDescriptor(table="properties"), loader)

    loads = [s for s in spans.get_finished_spans() if s.name == "cache.load"]
    assert len(loads) == 1
    assert loads[0].attributes["cache.target"] == "properties"


async def test_failed_upstream_call_marks_span_as_error(spans: InMemorySpanExporter) -> None:
    transport = httpx.MockTransport(lambda r: httpx.Response(503, json={"message": "down"}))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(UpstreamFailureException):
            await request(client, "storage", "GET", "https://storage.test/object")

    (span,) = [s for s in spans.get_finished_spans() if s.name == "upstream.storage"]
    assert span.attributes["http.method"] == "GET"
    assert span.status.status_code == StatusCode.ERROR


def test_log_records_carry_trace_id_inside_a_span() -> None:
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    with TracedOperation("unit.op"):
        RequestContextFilter().filter(record)
    assert len(record.trace_id) == 32

    outside = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    RequestContextFilter().filter(outside)
    assert outside.trace_id == "-"
