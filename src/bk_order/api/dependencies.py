from fastapi import Request

from src.bk_order.application.service import OrderApplicationService


def get_order_service(request: Request) -> OrderApplicationService:
    """The service is built in the app lifespan; see src/main.py."""
    return request.app.state.order_service
