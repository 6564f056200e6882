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
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.logging_config import configure_logging
from config.settings import settings
from src.ft_auth.api.router import router as auth_router
from src.ft_auth.middleware.request_log import RequestLogMiddleware
from src.ft_budget.api.router import router as budget_router
from src.ft_category.api.router import router as category_router
from src.ft_common.database import engine
from src.ft_common.errors import AppError, BadRequestError
from src.ft_common.response import error_response
from src.ft_ledger.api.expense_router import router as expense_router
from src.ft_ledger.api.router import router as income_router

configure_logging()
logger = logging.getLogger("ft.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB connection. Shutdown: dispose the pool."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("%s started", settings.APP_NAME)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    # Browsers only let clients read these if they are exposed
    expose_headers=["X-Token", "X-Refresh-Token"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"Invalid request: {location} {first.get('msg', '')}".strip()
    err = BadRequestError(detail)
    resp = error_response(err.code, err.message)
    return JSONResponse(status_code=err.http_status, content=resp.model_dump())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(category_router, prefix="/api/v1")
app.include_router(income_router, prefix="/api/v1")
app.include_router(expense_router, prefix="/api/v1")
app.include_router(budget_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
