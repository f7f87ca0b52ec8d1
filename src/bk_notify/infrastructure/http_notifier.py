"""Receipt notifiers.

HttpReceiptNotifier posts receipts to a mail relay over HTTP. It owns one
httpx.AsyncClient for the life of the process: call start() at startup and
close() at shutdown.

LoggingReceiptNotifier is used when no relay is configured.
"""

import logging

import httpx

from src.bk_notify.domain.receipt import Receipt

logger = logging.getLogger(__name__)


class HttpReceiptNotifier:
    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        self._client = httpx.AsyncClient(
            timeout=self._timeout, headers=headers, transport=self._transport
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, receipt: Receipt) -> None:
        if self._client is None:
            raise RuntimeError("HttpReceiptNotifier.start() was not called")
        response = await self._client.post(self._url, json=receipt.to_payload())
        response.raise_for_status()
        logger.info(
            "Receipt %s sent for order %s to %s",
            receipt.template, receipt.order_number, receipt.email,
        )


class LoggingReceiptNotifier:
    """Writes receipts to the log instead of sending them."""

    async def start(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def send(self, receipt: Receipt) -> None:
        logger.info(
            "Receipt %s for order %s (to=%s, total=%s) not sent: no relay configured",
            receipt.template, receipt.order_number, receipt.email, receipt.total,
        )
