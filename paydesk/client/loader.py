"""Loads the hosted checkout script into a widget host at most once."""

import asyncio

import httpx

from paydesk.client.widget import WidgetFactory, WidgetHost
from paydesk.common.logging import logger


class CheckoutLoader:
    """Makes the checkout widget available; `ensure_ready` never raises."""

    def __init__(
        self,
        host: WidgetHost,
        script_url: str,
        widget_factory: WidgetFactory,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.host = host
        self.script_url = script_url
        self.widget_factory = widget_factory
        self.http_client = http_client
        self.timeout_seconds = timeout_seconds
        self._pending: asyncio.Task | None = None

    async def ensure_ready(self) -> bool:
        """Resolve True once the widget factory is installed, False on load failure.

        Concurrent callers share a single in-flight fetch.
        """

        if self.host.ready:
            return True
        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._inject())
        return await asyncio.shield(self._pending)

    async def _fetch(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.get(self.script_url)

    async def _inject(self) -> bool:
        try:
            if self.http_client is not None:
                resp = await self._fetch(self.http_client)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    resp = await self._fetch(client)
        except httpx.HTTPError as exc:
            logger.warning("checkout_script_load_failed url=%s error=%s", self.script_url, exc)
            return False
        if resp.status_code >= 400:
            logger.warning("checkout_script_load_failed url=%s status=%s", self.script_url, resp.status_code)
            return False
        # Another loader sharing this host may have finished first.
        if not self.host.ready:
            self.host.install(self.script_url, self.widget_factory)
        logger.info("checkout_script_loaded url=%s", self.script_url)
        return True
