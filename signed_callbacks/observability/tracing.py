"""
Distributed Tracing with OpenTelemetry.

Spans emitted by this service, besides the per-request FastAPI spans:
- callback.generate_url: provider, signed
- callback.verify_signature: strategy, provider, callback.valid

Keys and signatures are never set as span attributes.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Tracer

from signed_callbacks.config import settings


def setup_tracing() -> None:
    """
    Export spans to the OTLP collector at OTLP_ENDPOINT.

    No-op unless TRACING_ENABLED; spans are then created on the no-op tracer.
    """
    if not settings.tracing_enabled:
        return

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": settings.api_version,
        }
    )

    provider = TracerProvider(resource=resource)
    otlp_exporter = OTLPSpanExporter(
        endpoint=settings.otlp_endpoint,
        insecure=settings.otlp_insecure,
    )
    provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)


def instrument_fastapi(app: Any) -> None:
    """Add a server span per request, including callback route hits."""
    if not settings.tracing_enabled:
        return

    FastAPIInstrumentor.instrument_app(app)


def get_tracer(name: str) -> Tracer:
    return trace.get_tracer(name)


def add_span_attributes(span: Span, **attributes: Any) -> None:
    """Set attributes, skipping None and stringifying non-primitive values."""
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            span.set_attribute(key, value)
        else:
            span.set_attribute(key, str(value))


class trace_operation:
    """
    Context manager for a callback operation span.

    Exceptions raised inside are recorded on the span and propagate.

    Usage:
        with trace_operation("callback.verify_signature", strategy="manual") as span:
            span.set_attribute("callback.valid", valid)
    """

    def __init__(self, operation_name: str, **attributes: Any) -> None:
        self.operation_name = operation_name
        self.attributes = attributes
        self._span_cm: Any = None

    def __enter__(self) -> Span:
        """Start span and make it current."""
        tracer = get_tracer("signed_callbacks.operations")
        self._span_cm = tracer.start_as_current_span(self.operation_name)
        span = self._span_cm.__enter__()
        add_span_attributes(span, **self.attributes)
        return span

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """End span."""
        self._span_cm.__exit__(exc_type, exc_val, exc_tb)
