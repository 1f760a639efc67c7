"""Prometheus metric definitions for the order server."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


order_requests_total = Counter("order_requests_total", "Total order creation requests", ["service"])
order_failures_total = Counter(
    "order_failures_total",
    "Order creation requests rejected by the gateway",
    ["service", "error_type"],
)
gateway_latency_seconds = Histogram("gateway_latency_seconds", "Gateway order create latency seconds", ["service"])
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
