"""
Tests for logging redaction and callback operation spans.
"""

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from signed_callbacks.observability.logging import drop_secrets
from signed_callbacks.observability.tracing import trace_operation

ADMIN_HEADERS = {"X-API-Key": "test-admin-api-key"}


@pytest.fixture(scope="module")
def span_exporter():
    """Record finished spans in memory."""
    provider = trace.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        provider = TracerProvider()
        trace.set_tracer_provider(provider)

    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


@pytest.fixture
def spans(span_exporter):
    span_exporter.clear()
    yield span_exporter
    span_exporter.clear()


def _spans_named(exporter, name: str):
    return [span for span in exporter.get_finished_spans() if span.name == name]


class TestDropSecrets:
    """Tests for the secret-dropping log processor."""

    def test_secret_fields_removed(self):
        event = {
            "event": "callback_signature_rejected",
            "signature": "a" * 64,
            "app_key": "s3cr3t",
            "x_api_key": "admin",
            "provider": "google_play",
        }

        result = drop_secrets(None, "warning", event)

        assert result == {"event": "callback_signature_rejected", "provider": "google_play"}

    def test_plain_event_unchanged(self):
        event = {"event": "callback_url_generated", "signed": True}
        assert drop_secrets(None, "info", dict(event)) == event


class TestTraceOperation:
    """Tests for trace_operation."""

    def test_attributes_recorded(self, spans):
        with trace_operation("callback.generate_url", provider="app_store", signed=False):
            pass

        (span,) = _spans_named(spans, "callback.generate_url")
        assert span.attributes["provider"] == "app_store"
        assert span.attributes["signed"] is False

    def test_none_attributes_skipped(self, spans):
        with trace_operation("callback.verify_signature", provider=None, strategy="manual"):
            pass

        (span,) = _spans_named(spans, "callback.verify_signature")
        assert "provider" not in span.attributes
        assert span.attributes["strategy"] == "manual"

    def test_exception_propagates_and_is_recorded(self, spans):
        with pytest.raises(ValueError, match="boom"):
            with trace_operation("callback.generate_url"):
                raise ValueError("boom")

        (span,) = _spans_named(spans, "callback.generate_url")
        assert not span.status.is_ok
        assert any(event.name == "exception" for event in span.events)


class TestRequestSpans:
    """Spans emitted while serving requests."""

    def test_generate_and_verify_spans(self, client, spans):
        response = client.get(
            "/v1/notifications/url", params={"provider": "google_play"}, headers=ADMIN_HEADERS
        )
        client.get(response.json()["url"])

        (generated,) = _spans_named(spans, "callback.generate_url")
        assert generated.attributes["provider"] == "google_play"
        assert generated.attributes["signed"] is True

        (verified,) = _spans_named(spans, "callback.verify_signature")
        assert verified.attributes["strategy"] == "manual"
        assert verified.attributes["callback.valid"] is True
        assert "signature" not in verified.attributes
