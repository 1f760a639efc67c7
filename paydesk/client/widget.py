"""Checkout widget contract and the host environment that exposes it.

A `WidgetHost` plays the part of the page: it holds the widget factory once
the checkout script has been loaded into it. Controllers only reach the
factory after `CheckoutLoader.ensure_ready()` says it is there.
"""

from typing import Any, Callable, Protocol


class CheckoutWidget(Protocol):
    """Surface of an opened hosted checkout (`new Razorpay(options)`)."""

    def on(self, event: str, callback: Callable[[dict], Any]) -> None: ...

    def open(self) -> None: ...


WidgetFactory = Callable[[dict], CheckoutWidget]


class WidgetUnavailable(RuntimeError):
    """Raised when a widget is requested before the checkout script is loaded."""


class WidgetHost:
    """Process-wide holder of the checkout widget factory."""

    def __init__(self, factory: WidgetFactory | None = None) -> None:
        self.factory = factory
        self.scripts: list[str] = []

    @property
    def ready(self) -> bool:
        return self.factory is not None

    def install(self, script_url: str, factory: WidgetFactory) -> None:
        """Record the injected script and expose its widget factory."""

        self.scripts.append(script_url)
        self.factory = factory

    def create(self, options: dict) -> CheckoutWidget:
        if self.factory is None:
            raise WidgetUnavailable("checkout script not loaded")
        return self.factory(options)
