"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings
from src.bk_common.database import Database
from src.bk_common.errors import AppError, InternalError, InvalidPayloadError
from src.bk_common.logging_config import configure_logging
from src.bk_common.redis_client import close_redis, create_redis
from src.bk_common.response import error_response
from src.bk_delivery.infrastructure.zone_table import StaticZoneResolver
from src.bk_gateway.api.router import router as user_router
from src.bk_gateway.middleware.request_log import RequestLogMiddleware
from src.bk_notify.application.dispatcher import ReceiptDispatcher
from src.bk_notify.infrastructure.http_notifier import (
    HttpReceiptNotifier,
    LoggingReceiptNotifier,
)
from src.bk_order.api.router import router as order_router
from src.bk_order.application.service import OrderApplicationService
from src.bk_order.infrastructure.order_number import RedisOrderNumberGenerator

logger = logging.getLogger(__name__)


def _build_notifier(settings: Settings) -> HttpReceiptNotifier | LoggingReceiptNotifier:
    if settings.RECEIPT_WEBHOOK_URL:
        return HttpReceiptNotifier(
            settings.RECEIPT_WEBHOOK_URL,
            api_key=settings.RECEIPT_API_KEY,
            timeout=settings.RECEIPT_TIMEOUT_SECONDS,
        )
    return LoggingReceiptNotifier()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build DB, Redis, notifier and services. Shutdown: drain and dispose."""
    settings: Settings = app.state.settings

    database = Database(settings)
    await database.ping()
    redis = create_redis(settings)
    await redis.ping()
    notifier = _build_notifier(settings)
    await notifier.start()
    dispatcher = ReceiptDispatcher(notifier)

    app.state.database = database
    app.state.redis = redis
    app.state.dispatcher = dispatcher
    app.state.order_service = OrderApplicationService(
        resolver=StaticZoneResolver(),
        numbers=RedisOrderNumberGenerator(redis, settings.ORDER_NUMBER_PREFIX),
        dispatcher=dispatcher,
        strict_transitions=settings.ORDER_STRICT_STATUS_TRANSITIONS,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
    )
    logger.info(
        "%s started (strict transitions=%s, receipts=%s)",
        settings.APP_NAME,
        settings.ORDER_STRICT_STATUS_TRANSITIONS,
        type(notifier).__name__,
    )
    yield
    await dispatcher.drain()
    await notifier.close()
    await close_redis(redis)
    await database.dispose()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.kind, exc.details)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == 401 else None
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return await app_error_handler(request, InvalidPayloadError("Invalid request payload", errors))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await app_error_handler(request, InternalError())


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(order_router, prefix="/api/v1")
    app.include_router(user_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app()
