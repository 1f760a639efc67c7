"""RazorpayGateway: SDK errors become GatewayError with a forwardable body."""

import pytest
from razorpay.errors import BadRequestError, GatewayError as UpstreamGatewayError, ServerError

from paydesk.common.config import ServerSettings
from paydesk.services.orders.gateway import GatewayError, RazorpayGateway


def gateway_raising(monkeypatch, exc: Exception) -> RazorpayGateway:
    gateway = RazorpayGateway("rzp_test_x", "secret")

    def create(data=None, **kwargs):
        raise exc

    monkeypatch.setattr(gateway.client.order, "create", create)
    return gateway


def test_successful_create_returns_sdk_payload(monkeypatch):
    """The SDK's order dict is passed through untouched."""

    gateway = RazorpayGateway("rzp_test_x", "secret")
    seen = []

    def create(data=None, **kwargs):
        seen.append(data)
        return {"id": "order_abc", "amount": data["amount"]}

    monkeypatch.setattr(gateway.client.order, "create", create)

    assert gateway.create_order({"amount": 10000, "currency": "INR", "receipt": "r1"}) == {
        "id": "order_abc",
        "amount": 10000,
    }
    assert seen == [{"amount": 10000, "currency": "INR", "receipt": "r1"}]


@pytest.mark.parametrize(
    "exc, code, status_code",
    [
        (BadRequestError("Authentication failed"), "BAD_REQUEST_ERROR", 400),
        (ServerError("upstream exploded"), "SERVER_ERROR", 500),
        (UpstreamGatewayError("gateway timeout"), "GATEWAY_ERROR", 502),
        (ConnectionError("connection reset"), "NETWORK_ERROR", None),
    ],
)
def test_sdk_errors_are_mapped(monkeypatch, exc, code, status_code):
    """Each SDK failure maps to a code and a forwardable error body."""

    gateway = gateway_raising(monkeypatch, exc)

    with pytest.raises(GatewayError) as excinfo:
        gateway.create_order({"amount": 100, "currency": "INR", "receipt": "r1"})

    assert excinfo.value.code == code
    assert excinfo.value.status_code == status_code
    assert excinfo.value.body == {"error": {"code": code, "description": str(exc), "source": "gateway"}}
    assert excinfo.value.__cause__ is exc


def test_from_settings_uses_secret_value():
    """The client authenticates with the unwrapped secret."""

    cfg = ServerSettings(razorpay_key_id="rzp_test_x", razorpay_key_secret="s3cret")
    gateway = RazorpayGateway.from_settings(cfg)

    assert gateway.client.auth == ("rzp_test_x", "s3cret")
