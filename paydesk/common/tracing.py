"""OpenTelemetry wiring for the order server.

Off by default; `TRACING_ENABLED=true` exports `POST /create-order` spans
(and the gateway call made inside them) over OTLP HTTP.
"""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from paydesk.common.config import ServerSettings, settings


def setup_tracing(cfg: ServerSettings = settings) -> TracerProvider:
    """Register a tracer provider that ships order-server spans to the collector."""

    resource = Resource.create({"service.name": cfg.service_name, "service.port": cfg.port})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=cfg.otel_exporter_otlp_endpoint)))
    trace.set_tracer_provider(provider)
    return provider


def instrument_app(app: FastAPI) -> FastAPI:
    """Attach request spans; metrics and health probes are left untraced."""

    FastAPIInstrumentor.instrument_app(app, excluded_urls="/health,/metrics")
    return app
