"""Razorpay Orders API adapter.

Wraps the official SDK so the order service sees one call and one error type.
"""

import razorpay
from razorpay.errors import BadRequestError, ServerError
from razorpay.errors import GatewayError as UpstreamGatewayError

from paydesk.common.config import ServerSettings


class GatewayError(Exception):
    """Gateway rejected or failed an order create call.

    `body` mirrors the gateway's error payload so it can be forwarded as-is.
    """

    def __init__(self, description: str, code: str = "GATEWAY_ERROR", status_code: int | None = None) -> None:
        super().__init__(description)
        self.description = description
        self.code = code
        self.status_code = status_code

    @property
    def body(self) -> dict:
        return {"error": {"code": self.code, "description": self.description, "source": "gateway"}}


class RazorpayGateway:
    """Creates orders through `razorpay.Client` using the server-side secret."""

    def __init__(self, key_id: str, key_secret: str) -> None:
        self.client = razorpay.Client(auth=(key_id, key_secret))

    @classmethod
    def from_settings(cls, cfg: ServerSettings) -> "RazorpayGateway":
        return cls(cfg.razorpay_key_id, cfg.razorpay_key_secret.get_secret_value())

    def create_order(self, payload: dict) -> dict:
        try:
            return self.client.order.create(data=payload)
        except BadRequestError as exc:
            raise GatewayError(str(exc), code="BAD_REQUEST_ERROR", status_code=400) from exc
        except ServerError as exc:
            raise GatewayError(str(exc), code="SERVER_ERROR", status_code=500) from exc
        except UpstreamGatewayError as exc:
            raise GatewayError(str(exc), code="GATEWAY_ERROR", status_code=502) from exc
        except Exception as exc:
            # Transport failures (DNS, TLS, timeouts) surface from the SDK's HTTP layer.
            raise GatewayError(str(exc), code="NETWORK_ERROR") from exc
