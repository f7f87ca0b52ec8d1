# src/bk_order/api/router.py
"""Order API.

All endpoints return ApiResponse. The delivery endpoints are public; every
other route needs a Bearer token.
"""
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.database import get_db_session
from src.bk_common.enums import DeliveryType, OrderStatus, PaymentStatus
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import get_current_actor
from src.bk_gateway.auth.gate import Actor
from src.bk_order.api.dependencies import get_order_service
from src.bk_order.application.schemas import (
    CreateOrderRequest,
    UpdateOrderRequest,
    ValidateDeliveryRequest,
)
from src.bk_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

ServiceDep = Annotated[OrderApplicationService, Depends(get_order_service)]
ActorDep = Annotated[Actor, Depends(get_current_actor)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]


def _wrap(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/delivery-zones", response_model=ApiResponse, summary="Delivery zone table")
async def list_delivery_zones(request: Request, service: ServiceDep) -> ApiResponse:
    zones = await service.list_delivery_zones()
    return _wrap(request, [z.model_dump(mode="json") for z in zones])


@router.post("/validate-delivery", response_model=ApiResponse, summary="Check a postal code and cart subtotal")
async def validate_delivery(
    request: Request, body: ValidateDeliveryRequest, service: ServiceDep
) -> ApiResponse:
    data = await service.validate_delivery(body.postal_code, body.subtotal)
    return _wrap(request, data.model_dump(mode="json"))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Place an order",
)
async def create_order(
    request: Request,
    body: CreateOrderRequest,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    data = await service.create_order(db, body, actor)
    return _wrap(request, data.model_dump(mode="json"), "Order created successfully")


@router.get("", response_model=ApiResponse, summary="List orders")
async def list_orders(
    request: Request,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100, description="Defaults to DEFAULT_PAGE_SIZE"),
    order_status: OrderStatus | None = Query(None, alias="status"),
    delivery_type: DeliveryType | None = Query(None),
    payment_status: PaymentStatus | None = Query(None),
    from_date: datetime | None = Query(None, description="Created at or after (ISO 8601)"),
    to_date: datetime | None = Query(None, description="Created at or before (ISO 8601)"),
) -> ApiResponse:
    data = await service.list_orders(
        db,
        actor,
        page=page,
        limit=limit,
        status=order_status.value if order_status else None,
        delivery_type=delivery_type.value if delivery_type else None,
        payment_status=payment_status.value if payment_status else None,
        from_date=from_date,
        to_date=to_date,
    )
    return _wrap(request, data.model_dump(mode="json"))


@router.get("/{order_id}", response_model=ApiResponse, summary="Order by id")
async def get_order(
    request: Request, order_id: str, actor: ActorDep, db: DbDep, service: ServiceDep
) -> ApiResponse:
    data = await service.get_order(db, order_id, actor)
    return _wrap(request, data.model_dump(mode="json"))


@router.patch("/{order_id}", response_model=ApiResponse, summary="Update status, payment flags or notes")
async def update_order(
    request: Request,
    order_id: str,
    body: UpdateOrderRequest,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    data = await service.update_order(db, order_id, body, actor)
    return _wrap(request, data.model_dump(mode="json"), "Order updated successfully")


@router.delete("/{order_id}", response_model=ApiResponse, summary="Delete an order (admin)")
async def delete_order(
    request: Request, order_id: str, actor: ActorDep, db: DbDep, service: ServiceDep
) -> ApiResponse:
    await service.delete_order(db, order_id, actor)
    return _wrap(request, None, "Order deleted successfully")
