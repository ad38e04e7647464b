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
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.mc_admin.api.router import router as admin_router
from src.mc_boost.api.router import ledger as boost_ledger
from src.mc_boost.api.router import router as boost_router
from src.mc_boost.application.sweeper import ExpirySweeper
from src.mc_common.database import engine
from src.mc_common.errors import (
    GENERIC_HTTP_ERROR_CODE,
    HTTP_STATUS_ERROR_CODES,
    AppError,
    InternalError,
    ValidationFailedError,
)
from src.mc_common.logging_config import configure_logging
from src.mc_common.redis_client import close_redis, get_redis
from src.mc_common.response import error_response
from src.mc_gateway.api.router import router as auth_router
from src.mc_gateway.middleware.request_log import RequestLogMiddleware
from src.mc_listing.api.router import router as listing_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, start the expiry sweeper. Shutdown: reverse."""
    configure_logging()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    sweeper = ExpirySweeper(boost_ledger)
    sweeper.start()
    app.state.sweeper = sweeper
    yield
    await sweeper.stop()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _envelope(
    request: Request,
    status_code: int,
    code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    resp = error_response(code, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=status_code, content=resp.model_dump(), headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(request, exc.http_status, exc.code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_STATUS_ERROR_CODES.get(exc.status_code, GENERIC_HTTP_ERROR_CODE)
    return _envelope(
        request, exc.status_code, code, str(exc.detail), exc.headers
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = f"{field}: {first.get('msg', 'invalid request')}" if field else first.get(
        "msg", "invalid request"
    )
    err = ValidationFailedError(detail)
    return _envelope(request, err.http_status, err.code, err.message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = InternalError()
    return _envelope(request, err.http_status, err.code, err.message)


app.include_router(auth_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(boost_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
