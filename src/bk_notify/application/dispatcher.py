"""ReceiptDispatcher — fire-and-forget receipt delivery after commit.

A failed receipt never fails the order: every error is logged and dropped
here. Task references are kept until completion so they are not garbage
collected mid-flight, and drain() waits for them at shutdown.
"""

import asyncio
import logging

from src.bk_notify.domain.receipt import ReceiptNotifierProtocol, build_receipt
from src.bk_order.domain.models import Order

logger = logging.getLogger(__name__)


class ReceiptDispatcher:
    def __init__(self, notifier: ReceiptNotifierProtocol) -> None:
        self._notifier = notifier
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, order: Order) -> asyncio.Task[None]:
        task = asyncio.create_task(self._send(order), name=f"receipt-{order.order_number}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send(self, order: Order) -> None:
        try:
            receipt = build_receipt(order)
            await self._notifier.send(receipt)
        except Exception:
            logger.exception(
                "Failed to send %s receipt for order %s", order.payment_type, order.order_number
            )

    async def drain(self, timeout: float = 10.0) -> None:
        if not self._tasks:
            return
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d receipt task(s) at shutdown", len(still_running))
