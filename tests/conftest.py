"""Shared fakes for the gateway, the hosted widget and the order endpoint."""

import httpx
import pytest

from paydesk.client.loader import CheckoutLoader
from paydesk.client.session import PaymentSessionController
from paydesk.client.widget import WidgetHost
from paydesk.common.config import CheckoutSettings

SCRIPT_URL = "https://checkout.test/v1/checkout.js"
API_BASE_URL = "http://orders.test"

ORDER_PAYLOAD = {
    "id": "order_abc",
    "entity": "order",
    "amount": 10000,
    "currency": "INR",
    "receipt": "receipt_order_1700000000000",
    "status": "created",
    "key_id": "rzp_test_x",
}


class FakeGateway:
    """Records order payloads and answers like the Orders API."""

    def __init__(self, error: Exception | None = None) -> None:
        self.payloads: list[dict] = []
        self.error = error

    def create_order(self, payload: dict) -> dict:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return {
            "id": f"order_{len(self.payloads)}",
            "entity": "order",
            "amount": payload["amount"],
            "amount_paid": 0,
            "currency": payload["currency"],
            "receipt": payload["receipt"],
            "status": "created",
            "notes": payload.get("notes", []),
        }


class FakeWidget:
    """Checkout widget whose outcome is triggered by the test."""

    def __init__(self, options: dict) -> None:
        self.options = options
        self.listeners: dict[str, list] = {}
        self.opened = False

    def on(self, event: str, callback) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def open(self) -> None:
        self.opened = True

    def succeed(self, payment_id: str) -> None:
        self.options["handler"]({"razorpay_payment_id": payment_id, "razorpay_order_id": self.options["order_id"]})

    def fail(self, description: str | None) -> None:
        error = {"code": "BAD_REQUEST_ERROR"}
        if description is not None:
            error["description"] = description
        for callback in self.listeners.get("payment.failed", []):
            callback({"error": error})

    def dismiss(self) -> None:
        self.options["modal"]["ondismiss"]()


class FakeWidgetFactory:
    """Widget factory that keeps every widget it built."""

    def __init__(self) -> None:
        self.created: list[FakeWidget] = []

    def __call__(self, options: dict) -> FakeWidget:
        widget = FakeWidget(options)
        self.created.append(widget)
        return widget

    @property
    def last(self) -> FakeWidget:
        return self.created[-1]


def order_ok(calls: list):
    """MockTransport handler that records request bodies and returns `ORDER_PAYLOAD`."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=ORDER_PAYLOAD)

    return handler


def build_controller(handler, factory, host: WidgetHost | None = None) -> PaymentSessionController:
    """Controller wired to a mocked order endpoint and a pre-loaded widget host."""

    if host is None:
        host = WidgetHost(factory)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    loader = CheckoutLoader(host, SCRIPT_URL, factory, http_client=client)
    return PaymentSessionController(loader, CheckoutSettings(api_base_url=API_BASE_URL), http_client=client)


@pytest.fixture
def widgets() -> FakeWidgetFactory:
    return FakeWidgetFactory()
