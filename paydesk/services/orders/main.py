"""HTTP surface for order creation.

The browser-facing checkout calls `POST /create-order` once per "Pay" click;
the gateway secret never leaves this process.
"""

from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paydesk.common.config import settings
from paydesk.common.logging import configure_logging, logger, trace_id_ctx
from paydesk.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from paydesk.common.schemas import Order, OrderCreateRequest
from paydesk.common.startup import log_startup_config
from paydesk.common.tracing import instrument_app, setup_tracing
from paydesk.services.orders.gateway import RazorpayGateway
from paydesk.services.orders.service import OrderCreationError, OrderService


def create_app(service: OrderService | None = None) -> FastAPI:
    """Build the order API; tests pass an `OrderService` with a fake gateway."""

    if service is None:
        service = OrderService(
            RazorpayGateway.from_settings(settings),
            key_id=settings.razorpay_key_id,
            receipt_prefix=settings.receipt_prefix,
            service_name=settings.service_name,
        )

    app = FastAPI(title="PayDesk Orders")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.tracing_enabled:
        instrument_app(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency for every HTTP call."""

        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.post("/create-order", response_model=Order)
    def create_order(req: OrderCreateRequest, x_correlation_id: str | None = Header(default=None)):
        """Create one gateway order; gateway errors are forwarded with a 500."""

        trace_id_ctx.set(x_correlation_id or str(uuid4()))
        try:
            return service.create_order(req.amount, req.currency, notes=req.notes)
        except OrderCreationError as exc:
            return JSONResponse(status_code=500, content=exc.body)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    app.state.order_service = service
    return app


configure_logging()
if settings.tracing_enabled:
    setup_tracing(settings)
log_startup_config(
    settings.service_name,
    ["SERVICE_NAME", "PORT", "RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET", "CORS_ORIGINS"],
)
if not settings.razorpay_key_id:
    logger.warning("RAZORPAY_KEY_ID is not set; gateway calls will be rejected")
app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
