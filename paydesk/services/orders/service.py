"""Order creation against the payment gateway.

One gateway call per request, no retries: every call may create a billable
order, so callers re-run the whole flow instead.
"""

import math
import threading
import time
from decimal import ROUND_HALF_UP, Decimal

from paydesk.common.logging import logger, order_id_ctx, receipt_ctx
from paydesk.common.metrics import gateway_latency_seconds, order_failures_total, order_requests_total
from paydesk.common.schemas import Order
from paydesk.services.orders.gateway import GatewayError


class OrderCreationError(Exception):
    """Order could not be created; `body` is the forwarded gateway error."""

    def __init__(self, body: dict) -> None:
        super().__init__(body.get("error", {}).get("description", "order creation failed"))
        self.body = body


class OrderService:
    """Creates gateway orders and stamps them with a strictly increasing receipt."""

    def __init__(
        self,
        gateway,
        key_id: str,
        receipt_prefix: str = "receipt_order_",
        clock=time.time,
        service_name: str = "orders",
    ) -> None:
        self.gateway = gateway
        self.key_id = key_id
        self.receipt_prefix = receipt_prefix
        self.clock = clock
        self.service_name = service_name
        self._receipt_lock = threading.Lock()
        self._last_stamp_ms = 0

    def next_receipt(self) -> str:
        """Return `<prefix><epoch-ms>`, bumping the stamp if the clock has not moved."""

        with self._receipt_lock:
            stamp = int(self.clock() * 1000)
            if stamp <= self._last_stamp_ms:
                stamp = self._last_stamp_ms + 1
            self._last_stamp_ms = stamp
        return f"{self.receipt_prefix}{stamp}"

    @staticmethod
    def _minor_units(amount_major_units: float) -> int:
        return int((Decimal(str(amount_major_units)) * 100).to_integral_value(rounding=ROUND_HALF_UP))

    def create_order(self, amount_major_units: float, currency: str, notes: dict | None = None) -> Order:
        """Create one gateway order and merge in the publishable key id."""

        if not math.isfinite(amount_major_units) or amount_major_units <= 0:
            raise ValueError("amount must be positive")
        if len(currency) != 3:
            raise ValueError("invalid currency")

        receipt = self.next_receipt()
        receipt_ctx.set(receipt)
        payload = {
            "amount": self._minor_units(amount_major_units),
            "currency": currency.upper(),
            "receipt": receipt,
        }
        if notes:
            payload["notes"] = notes

        order_requests_total.labels(service=self.service_name).inc()
        try:
            with gateway_latency_seconds.labels(service=self.service_name).time():
                created = self.gateway.create_order(payload)
        except GatewayError as exc:
            order_failures_total.labels(service=self.service_name, error_type=exc.code).inc()
            logger.error("order_create_failed receipt=%s code=%s error=%s", receipt, exc.code, exc.description)
            raise OrderCreationError(exc.body) from exc

        order = Order(**{**created, "key_id": self.key_id})
        order_id_ctx.set(order.id)
        logger.info(
            "order_created receipt=%s order_id=%s amount=%s currency=%s",
            receipt,
            order.id,
            order.amount,
            order.currency,
        )
        return order
