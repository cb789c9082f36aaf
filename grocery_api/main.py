"""Grocery Store API application factory.

Usage:
    uvicorn grocery_api.main:create_app --factory --host 0.0.0.0 --port 8000
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .cache import GroceryCache
from .config import Settings, load_settings
from .database import Database
from .errors import ApiError
from .routers import groceries, orders, users
from .utils.logging import add_context, clear_context, configure_logging
from .worker import OrderNotifier, configure_celery

logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts) or "Invalid request."


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.message, exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error."})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.environment, settings.log_level)

    app = FastAPI(title="Grocery Store API")
    app.state.settings = settings
    app.state.db = Database(settings.database_url)
    app.state.cache = GroceryCache.from_url(settings.redis_url, settings.cache_ttl)
    app.state.notifier = OrderNotifier(enabled=bool(settings.broker_url))
    if settings.broker_url:
        configure_celery(settings.broker_url)

    @app.on_event("startup")
    async def startup():
        await app.state.db.create_all()
        logger.info("app_started", environment=settings.environment)

    @app.on_event("shutdown")
    async def shutdown():
        await app.state.db.dispose()

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        clear_context()
        add_context(method=request.method, path=request.url.path)
        return await call_next(request)

    register_exception_handlers(app)

    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(groceries.router, prefix=API_PREFIX)
    app.include_router(orders.router, prefix=API_PREFIX)
    return app
