"""Tests for receipt building, the HTTP relay notifier and the dispatcher."""

import asyncio
import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.bk_common.errors import IncompleteReceiptError
from src.bk_notify.application.dispatcher import ReceiptDispatcher
from src.bk_notify.domain.receipt import build_receipt
from src.bk_notify.infrastructure.http_notifier import HttpReceiptNotifier, LoggingReceiptNotifier
from tests.helpers import make_order


class TestBuildReceipt:
    def test_deposit_receipt_has_balance_due(self) -> None:
        receipt = build_receipt(make_order(payment_type="deposit", payment_id="sq_1"))
        assert receipt.template == "deposit_receipt"
        assert receipt.deposit_amount == Decimal("57.4875")
        assert receipt.balance_due == Decimal("57.4875")
        assert receipt.name == "Marie Tremblay"
        assert receipt.lines[0].product_name == "Croissant box"

    def test_full_receipt_has_no_deposit(self) -> None:
        receipt = build_receipt(make_order(payment_type="full", payment_id="sq_1"))
        assert receipt.template == "full_payment_receipt"
        assert receipt.deposit_amount is None
        assert receipt.balance_due is None

    def test_invoice_needs_no_payment_id(self) -> None:
        receipt = build_receipt(
            make_order(payment_type="invoice", invoice_url="https://pay.example/inv/1")
        )
        assert receipt.template == "invoice_order_confirmation"
        assert receipt.to_payload()["invoice_url"] == "https://pay.example/inv/1"

    @pytest.mark.parametrize("payment_type", ["full", "deposit"])
    def test_paid_receipts_need_payment_id(self, payment_type: str) -> None:
        with pytest.raises(IncompleteReceiptError) as exc_info:
            build_receipt(make_order(payment_type=payment_type))
        assert exc_info.value.details["missing"] == ["payment_id"]

    def test_payload_keeps_exact_amounts(self) -> None:
        payload = build_receipt(make_order(payment_id="sq_1")).to_payload()
        assert payload["total"] == "114.975"
        assert payload["total_display"] == "$114.98"
        assert payload["balance_due"] == "57.4875"
        assert payload["to"] == "marie@example.com"
        json.dumps(payload)


class TestHttpReceiptNotifier:
    async def test_posts_payload_with_api_key(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(202)

        notifier = HttpReceiptNotifier(
            "https://mail.example/receipts",
            api_key="k3y",
            transport=httpx.MockTransport(handler),
        )
        await notifier.start()
        try:
            await notifier.send(build_receipt(make_order(payment_id="sq_1")))
        finally:
            await notifier.close()

        assert len(seen) == 1
        assert seen[0].headers["Authorization"] == "Bearer k3y"
        assert json.loads(seen[0].content)["template"] == "deposit_receipt"

    async def test_relay_error_raises(self) -> None:
        notifier = HttpReceiptNotifier(
            "https://mail.example/receipts",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )
        await notifier.start()
        with pytest.raises(httpx.HTTPStatusError):
            await notifier.send(build_receipt(make_order(payment_id="sq_1")))
        await notifier.close()

    async def test_send_before_start_fails(self) -> None:
        with pytest.raises(RuntimeError):
            await HttpReceiptNotifier("https://mail.example").send(
                build_receipt(make_order(payment_id="sq_1"))
            )

    async def test_logging_notifier_accepts_anything(self) -> None:
        notifier = LoggingReceiptNotifier()
        await notifier.start()
        await notifier.send(build_receipt(make_order(payment_type="invoice")))
        await notifier.close()


class TestReceiptDispatcher:
    async def test_dispatch_sends_in_background(self) -> None:
        notifier = MagicMock()
        notifier.send = AsyncMock()
        dispatcher = ReceiptDispatcher(notifier)

        task = dispatcher.dispatch(make_order(payment_id="sq_1"))
        await task

        notifier.send.assert_awaited_once()
        assert dispatcher.pending == 0

    async def test_notifier_failure_is_logged_not_raised(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        notifier = MagicMock()
        notifier.send = AsyncMock(side_effect=ConnectionError("smtp down"))
        dispatcher = ReceiptDispatcher(notifier)

        await dispatcher.dispatch(make_order(payment_id="sq_1"))

        assert "Failed to send deposit receipt" in caplog.text

    async def test_incomplete_receipt_is_logged_not_sent(self) -> None:
        notifier = MagicMock()
        notifier.send = AsyncMock()
        dispatcher = ReceiptDispatcher(notifier)

        await dispatcher.dispatch(make_order(payment_type="full"))

        notifier.send.assert_not_awaited()

    async def test_drain_waits_for_outstanding_tasks(self) -> None:
        release = asyncio.Event()
        notifier = MagicMock()

        async def slow_send(receipt: object) -> None:
            await release.wait()

        notifier.send = slow_send
        dispatcher = ReceiptDispatcher(notifier)
        dispatcher.dispatch(make_order(payment_id="sq_1"))
        assert dispatcher.pending == 1

        asyncio.get_running_loop().call_soon(release.set)
        await dispatcher.drain(timeout=1)
        assert dispatcher.pending == 0

    async def test_drain_cancels_stuck_tasks(self) -> None:
        notifier = MagicMock()

        async def never(receipt: object) -> None:
            await asyncio.Event().wait()

        notifier.send = never
        dispatcher = ReceiptDispatcher(notifier)
        task = dispatcher.dispatch(make_order(payment_id="sq_1"))

        await dispatcher.drain(timeout=0.01)
        with pytest.raises(asyncio.CancelledError):
            await task
        assert task.cancelled()
