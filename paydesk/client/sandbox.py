"""In-process stand-in for the hosted checkout.

Simulates the widget the way a buyer would drive it: after a short delay each
opened checkout ends in success, a decline or a dismiss. Prefill names
starting with `force-decline` / `force-dismiss` pin the outcome.
"""

import asyncio
import random
from uuid import uuid4

from paydesk.common.logging import logger


class SandboxCheckout:
    """Implements the `CheckoutWidget` contract on the running event loop."""

    def __init__(self, options: dict, delay_seconds: float = 0.2) -> None:
        self.options = options
        self.delay_seconds = delay_seconds
        self.listeners: dict[str, list] = {}
        self.opened = False

    def on(self, event: str, callback) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def open(self) -> None:
        self.opened = True
        logger.info(
            "sandbox_checkout_opened order_id=%s amount=%s",
            self.options.get("order_id"),
            self.options.get("amount"),
        )
        asyncio.get_running_loop().call_later(self.delay_seconds, self._resolve)

    def _pick_outcome(self) -> str:
        name = str(self.options.get("prefill", {}).get("name", "")).lower()
        if name.startswith("force-decline"):
            return "DECLINE"
        if name.startswith("force-dismiss"):
            return "DISMISS"
        return random.choices(
            population=["SUCCESS", "DECLINE", "DISMISS"],
            weights=[0.70, 0.20, 0.10],
            k=1,
        )[0]

    def _resolve(self) -> None:
        outcome = self._pick_outcome()
        if outcome == "SUCCESS":
            self.options["handler"](
                {
                    "razorpay_payment_id": f"pay_{uuid4().hex[:14]}",
                    "razorpay_order_id": self.options.get("order_id"),
                }
            )
        elif outcome == "DECLINE":
            payload = {
                "error": {
                    "code": "BAD_REQUEST_ERROR",
                    "description": "Your payment has been declined by the bank (sandbox).",
                    "reason": "payment_failed",
                    "metadata": {"order_id": self.options.get("order_id")},
                }
            }
            for callback in self.listeners.get("payment.failed", []):
                callback(payload)
        else:
            self.options.get("modal", {}).get("ondismiss", lambda: None)()


def sandbox_factory(delay_seconds: float = 0.2):
    """Widget factory suitable for `WidgetHost.install`."""

    def create(options: dict) -> SandboxCheckout:
        return SandboxCheckout(options, delay_seconds=delay_seconds)

    return create
