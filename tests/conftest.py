"""Shared test fixtures.

No database or Redis is needed: repositories are in-memory fakes or mocks and
the HTTP tests override the FastAPI dependencies that would reach them.
"""

import os
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.bk_common.database import get_db_session  # noqa: E402
from src.bk_common.errors import InvalidTokenError  # noqa: E402
from src.bk_delivery.infrastructure.zone_table import StaticZoneResolver  # noqa: E402
from src.bk_gateway.auth.dependencies import get_current_actor  # noqa: E402
from src.bk_gateway.auth.gate import Actor  # noqa: E402
from src.bk_order.api.dependencies import get_order_service  # noqa: E402
from src.bk_order.application.service import OrderApplicationService  # noqa: E402
from src.main import app  # noqa: E402
from tests.helpers import CUSTOMER, InMemoryOrderRepository, SequentialOrderNumbers  # noqa: E402


@pytest.fixture
def mock_db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def order_repo() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def dispatcher() -> MagicMock:
    return MagicMock()


@pytest.fixture
def order_service(
    order_repo: InMemoryOrderRepository, dispatcher: MagicMock
) -> OrderApplicationService:
    return OrderApplicationService(
        resolver=StaticZoneResolver(),
        numbers=SequentialOrderNumbers(),
        dispatcher=dispatcher,
        repo=order_repo,
    )


class ActorSwitch:
    """Stands in for the identity provider: tests pick who is calling."""

    def __init__(self) -> None:
        self.actor: Actor | None = CUSTOMER


@pytest.fixture
def actor_switch() -> ActorSwitch:
    return ActorSwitch()


@pytest.fixture
async def client(
    order_service: OrderApplicationService, actor_switch: ActorSwitch
) -> AsyncIterator[AsyncClient]:
    """HTTP client against the real app with storage and identity overridden."""

    def _current_actor() -> Actor:
        if actor_switch.actor is None:
            raise InvalidTokenError()
        return actor_switch.actor

    app.dependency_overrides[get_db_session] = lambda: AsyncMock()
    app.dependency_overrides[get_current_actor] = _current_actor
    app.dependency_overrides[get_order_service] = lambda: order_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
