"""Client-side payment session orchestration.

A `PaymentSessionController` drives one checkout attempt at a time:

    submit -> POST /create-order -> widget.open() -> handler / payment.failed / ondismiss

Every change to the session goes through `dispatch(event)`, so widget
callbacks and tests feed the same transition function. Callbacks a widget
fires from inside `open()` are held and replayed once the session is
awaiting them. Success is taken from
the widget's `handler` callback alone; the payment signature is not verified
server-side.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, ClassVar

import httpx

from paydesk.client.loader import CheckoutLoader
from paydesk.common.amount import normalize, to_major_units
from paydesk.common.config import CheckoutSettings
from paydesk.common.logging import logger
from paydesk.common.schemas import Order
from paydesk.common.state_machine import IN_FLIGHT, InvalidTransition, SessionStatus, validate_transition

SCRIPT_LOAD_FAILED_MESSAGE = "Razorpay SDK failed to load. Payment cannot proceed."
ORDER_UNREACHABLE_MESSAGE = "Could not reach the payment server. Please try again."
ORDER_REQUEST_INVALID_MESSAGE = "Could not prepare the order request. Please check the amount and try again."
INVALID_ORDER_MESSAGE = "Received an invalid order from the payment server. Please try again."
CHECKOUT_OPEN_FAILED_MESSAGE = "Could not open the checkout. Please try again."
PAYMENT_FAILED_MESSAGE = "Payment failed. Please try again."


@dataclass(frozen=True)
class PaymentSession:
    """Snapshot of one checkout attempt as shown to the buyer."""

    status: SessionStatus = SessionStatus.IDLE
    amount: int | None = None
    order: Order | None = None
    payment_id: str | None = None
    error: str | None = None
    payment_status: str = ""
    outcome: SessionStatus | None = None

    @property
    def loading(self) -> bool:
        return self.status in IN_FLIGHT


@dataclass(frozen=True)
class Submit:
    target: ClassVar[SessionStatus] = SessionStatus.LOADING
    amount: int


@dataclass(frozen=True)
class OrderCreated:
    target: ClassVar[SessionStatus] = SessionStatus.AWAITING_RESULT
    order: Order


@dataclass(frozen=True)
class OrderRequestFailed:
    target: ClassVar[SessionStatus] = SessionStatus.FAILED
    message: str


@dataclass(frozen=True)
class CheckoutOpenFailed:
    target: ClassVar[SessionStatus] = SessionStatus.FAILED
    message: str = CHECKOUT_OPEN_FAILED_MESSAGE


@dataclass(frozen=True)
class ScriptLoadFailed:
    target: ClassVar[SessionStatus] = SessionStatus.FAILED
    message: str = SCRIPT_LOAD_FAILED_MESSAGE


@dataclass(frozen=True)
class HandlerInvoked:
    target: ClassVar[SessionStatus] = SessionStatus.SUCCEEDED
    payment_id: str | None
    response: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentFailed:
    target: ClassVar[SessionStatus] = SessionStatus.FAILED
    description: str | None
    error: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Dismissed:
    target: ClassVar[SessionStatus] = SessionStatus.IDLE


def apply_event(session: PaymentSession, event) -> PaymentSession:
    """Pure transition function; raises `InvalidTransition` on illegal edges."""

    validate_transition(session.status, event.target)

    if isinstance(event, Submit):
        # A new attempt starts from a clean slate.
        return PaymentSession(status=SessionStatus.LOADING, amount=event.amount)
    if isinstance(event, OrderCreated):
        return replace(session, status=SessionStatus.AWAITING_RESULT, order=event.order)
    if isinstance(event, (OrderRequestFailed, CheckoutOpenFailed, ScriptLoadFailed)):
        return replace(
            session,
            status=SessionStatus.FAILED,
            outcome=SessionStatus.FAILED,
            error=event.message,
            payment_status="",
        )
    if isinstance(event, HandlerInvoked):
        message = "Payment successful!"
        if event.payment_id:
            message = f"Payment successful! Payment ID: {event.payment_id}"
        return replace(
            session,
            status=SessionStatus.SUCCEEDED,
            outcome=SessionStatus.SUCCEEDED,
            payment_id=event.payment_id,
            error=None,
            payment_status=message,
        )
    if isinstance(event, PaymentFailed):
        return replace(
            session,
            status=SessionStatus.FAILED,
            outcome=SessionStatus.FAILED,
            error=event.description or PAYMENT_FAILED_MESSAGE,
            payment_status="",
        )
    if isinstance(event, Dismissed):
        return replace(
            session,
            status=SessionStatus.IDLE,
            outcome=SessionStatus.DISMISSED,
            error=None,
            payment_status="",
        )
    raise TypeError(f"unknown session event: {event!r}")


class OrderRequestError(Exception):
    """Order endpoint was unreachable, rejected the request or sent garbage."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PaymentSessionController:
    """Owns one `PaymentSession` and reconciles widget callbacks into it."""

    def __init__(
        self,
        loader: CheckoutLoader,
        checkout_settings: CheckoutSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.loader = loader
        self.settings = checkout_settings or CheckoutSettings()
        self.http_client = http_client
        self.session = PaymentSession()
        self.widget = None
        self._ready = False
        self._closed = False
        self._attempt = 0
        self._opening = False
        self._deferred: list[tuple[Callable[..., None], tuple]] = []
        self._listeners: list[Callable[[PaymentSession], Any]] = []

    @property
    def ready(self) -> bool:
        return self._ready and not self._closed

    def subscribe(self, listener: Callable[[PaymentSession], Any]) -> Callable[[], None]:
        """Call `listener` with every new session; returns an unsubscribe function."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def mount(self) -> bool:
        """Wait for the checkout script; a load failure blocks all payments."""

        self._ready = await self.loader.ensure_ready()
        if not self._ready:
            self.dispatch(ScriptLoadFailed())
        return self._ready

    def close(self) -> None:
        """Detach from the page; late widget callbacks are dropped from now on."""

        self._closed = True
        self._listeners.clear()
        logger.info("checkout_session_closed attempt=%s status=%s", self._attempt, self.session.status.value)

    def dispatch(self, event) -> PaymentSession:
        """Apply one event; illegal transitions are logged and ignored."""

        try:
            updated = apply_event(self.session, event)
        except InvalidTransition as exc:
            logger.warning("session_event_ignored event=%s error=%s", type(event).__name__, exc)
            return self.session
        logger.info(
            "session_transition event=%s from=%s to=%s",
            type(event).__name__,
            self.session.status.value,
            updated.status.value,
        )
        self.session = updated
        for listener in list(self._listeners):
            try:
                listener(updated)
            except Exception:
                logger.exception("session_listener_failed event=%s", type(event).__name__)
        return updated

    async def submit(self, raw_amount) -> PaymentSession:
        """Start one payment attempt for a user-entered amount.

        Ignored while an attempt is in flight, before `mount()` succeeded, or
        for an empty amount. Never raises; failures end up in `session.error`.
        """

        if raw_amount is None or (isinstance(raw_amount, str) and not raw_amount.strip()):
            return self.session
        if not self.ready:
            logger.warning("submit_ignored reason=checkout_not_ready")
            return self.session
        if self.session.status in IN_FLIGHT:
            logger.info("submit_ignored reason=in_flight status=%s", self.session.status.value)
            return self.session

        amount = normalize(raw_amount)
        self._attempt += 1
        attempt = self._attempt
        self.widget = None
        self.dispatch(Submit(amount))

        try:
            order = await self._request_order(amount)
        except OrderRequestError as exc:
            if self._is_current(attempt):
                self.dispatch(OrderRequestFailed(exc.message))
            return self.session
        if not self._is_current(attempt):
            return self.session

        # Callbacks fired from inside open() are held until the session awaits them.
        self._opening = True
        self._deferred = []
        try:
            widget = self.loader.host.create(self.widget_options(order, attempt))
            widget.on("payment.failed", self._bind(attempt, self._on_payment_failed))
            widget.open()
        except Exception as exc:
            logger.error("checkout_open_failed order_id=%s error=%s", order.id, exc)
            self._deferred = []
            self.dispatch(CheckoutOpenFailed())
            return self.session
        finally:
            self._opening = False

        self.widget = widget
        self.dispatch(OrderCreated(order))
        deferred, self._deferred = self._deferred, []
        for handler, args in deferred:
            handler(*args)
        return self.session

    def widget_options(self, order: Order, attempt: int) -> dict:
        """Checkout configuration for `order`, with callbacks bound to `attempt`."""

        s = self.settings
        return {
            "key": order.key_id,
            "amount": order.amount,
            "currency": order.currency,
            "name": s.merchant_name,
            "description": s.description,
            "order_id": order.id,
            "handler": self._bind(attempt, self._on_success),
            "prefill": {
                "name": s.prefill_name,
                "email": s.prefill_email,
                "contact": s.prefill_contact,
            },
            "notes": {"receipt": order.receipt},
            "theme": {"color": s.theme_color},
            "modal": {"ondismiss": self._bind(attempt, self._on_dismiss)},
        }

    async def _post_order(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        url = f"{self.settings.api_base_url.rstrip('/')}/create-order"
        return await client.post(url, json=payload)

    async def _request_order(self, amount: int) -> Order:
        try:
            payload = {"amount": to_major_units(amount), "currency": self.settings.currency}
            if self.http_client is not None:
                resp = await self._post_order(self.http_client, payload)
            else:
                async with httpx.AsyncClient(timeout=self.settings.request_timeout_seconds) as client:
                    resp = await self._post_order(client, payload)
        except httpx.HTTPError as exc:
            logger.error("order_request_failed error=%s", exc)
            raise OrderRequestError(ORDER_UNREACHABLE_MESSAGE) from exc
        except ValueError as exc:
            # Body could not be encoded (e.g. integer too long to serialize).
            logger.error("order_request_unencodable error=%s", exc)
            raise OrderRequestError(ORDER_REQUEST_INVALID_MESSAGE) from exc

        if resp.status_code >= 400:
            logger.error("order_request_rejected status=%s body=%s", resp.status_code, resp.text)
            raise OrderRequestError(
                f"Could not create the order (HTTP {resp.status_code}). Please try again."
            )
        try:
            return Order.model_validate(resp.json())
        except ValueError as exc:
            logger.error("order_response_invalid error=%s", exc)
            raise OrderRequestError(INVALID_ORDER_MESSAGE) from exc

    def _is_current(self, attempt: int) -> bool:
        return not self._closed and attempt == self._attempt

    def _bind(self, attempt: int, handler: Callable[..., None]) -> Callable[..., None]:
        """Wrap a widget callback so it only acts on the attempt that created it."""

        def callback(*args) -> None:
            if not self._is_current(attempt):
                logger.info("stale_callback_dropped attempt=%s current=%s", attempt, self._attempt)
                return
            if self._opening:
                self._deferred.append((handler, args))
                return
            handler(*args)

        return callback

    def _on_success(self, response: dict) -> None:
        self.dispatch(HandlerInvoked(payment_id=response.get("razorpay_payment_id"), response=response))

    def _on_payment_failed(self, response: dict) -> None:
        error = response.get("error") or {}
        self.dispatch(PaymentFailed(description=error.get("description"), error=error))

    def _on_dismiss(self) -> None:
        self.dispatch(Dismissed())
