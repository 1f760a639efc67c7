"""Run one full checkout session against a running order server.

The hosted widget is replaced by the in-process sandbox, so this exercises
order creation and the session state machine end to end.
"""

import argparse
import asyncio

import httpx

from paydesk.client.loader import CheckoutLoader
from paydesk.client.sandbox import sandbox_factory
from paydesk.client.session import PaymentSessionController
from paydesk.client.widget import WidgetHost
from paydesk.common.config import CheckoutSettings
from paydesk.common.logging import configure_logging
from paydesk.common.state_machine import IN_FLIGHT


async def run(amount: str, base_url: str, buyer: str, timeout_seconds: float) -> int:
    """Mount, submit, and wait for the widget to resolve the session."""

    cfg = CheckoutSettings(api_base_url=base_url, prefill_name=buyer)
    done = asyncio.Event()

    async with httpx.AsyncClient(timeout=cfg.request_timeout_seconds) as client:
        loader = CheckoutLoader(WidgetHost(), cfg.script_url, sandbox_factory(), http_client=client)
        controller = PaymentSessionController(loader, cfg, http_client=client)
        controller.subscribe(lambda session: None if session.status in IN_FLIGHT else done.set())

        if not await controller.mount():
            print(f"error={controller.session.error}")
            return 1
        await controller.submit(amount)
        try:
            await asyncio.wait_for(done.wait(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            print("checkout did not resolve in time")
        controller.close()

    session = controller.session
    print(f"status={session.status.value} outcome={session.outcome and session.outcome.value}")
    if session.order is not None:
        print(f"order_id={session.order.id} receipt={session.order.receipt} amount={session.order.amount}")
    if session.payment_status:
        print(session.payment_status)
    if session.error:
        print(f"error={session.error}")
    return 0 if session.error is None else 1


def main() -> None:
    """Parse CLI args and run one sandbox checkout."""

    parser = argparse.ArgumentParser(description="Run a sandbox checkout session.")
    parser.add_argument("--amount", required=True, help="Amount as typed by the buyer, in rupees")
    parser.add_argument("--base-url", default="http://localhost:5000")
    parser.add_argument("--buyer", default="Demo User", help="Prefill name; force-decline/force-dismiss pin the outcome")
    parser.add_argument("--timeout-seconds", type=float, default=30.0)
    args = parser.parse_args()

    configure_logging()
    raise SystemExit(asyncio.run(run(args.amount, args.base_url, args.buyer, args.timeout_seconds)))


if __name__ == "__main__":
    main()
