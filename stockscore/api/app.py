"""API application factory."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from stockscore.cache import (
    RateLimiter,
    ResponseCache,
    create_rate_limiter,
    create_response_cache,
)
from stockscore.core.config import Settings, get_settings
from stockscore.core.exceptions import register_exception_handlers
from stockscore.core.logging import get_logger, request_id_var
from stockscore.schemas.common import ErrorResponse
from stockscore.scoring import ScoringEngine
from stockscore.services.perplexity import PerplexityClient, TextGenerator
from stockscore.services.stock_data import StockDataService

from .routes import health, stocks


logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the upstream connection pool on shutdown."""
    logger.info(
        "Starting API",
        extra={
            "cache_max_entries": app.state.cache.max_entries,
            "rate_limit": app.state.rate_limiter.max_requests,
            "rate_limit_window_ms": app.state.rate_limiter.window_ms,
        },
    )

    yield

    close = getattr(app.state.text_client, "close", None)
    if close is not None:
        await close()
    logger.info("API stopped", extra={"cache": app.state.cache.stats()})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests for tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status and duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.monotonic()

        response = await call_next(request)

        duration = time.monotonic() - start_time

        # Log path only (search queries stay out of logs)
        path = request.url.path

        logger.info(
            f"{request.method} {path} -> {response.status_code} ({duration:.3f}s)",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": int(duration * 1000),
            },
        )

        return response


def create_api_app(
    settings: Optional[Settings] = None,
    text_client: Optional[TextGenerator] = None,
    cache: Optional[ResponseCache] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """
    Create and configure the API application.

    The cache, rate limiter and text client are process-wide but explicit:
    they are built here (or passed in) and stored on `app.state`, so each
    app instance, and each test, gets its own.
    """
    # Empty stores are falsy, so only None means "build one"
    if settings is None:
        settings = get_settings()
    if text_client is None:
        text_client = PerplexityClient(settings)
    if cache is None:
        cache = create_response_cache(settings)
    if rate_limiter is None:
        rate_limiter = create_rate_limiter(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Stock data and AI investment scoring API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        responses={
            400: {"model": ErrorResponse, "description": "Bad Request"},
            429: {"model": ErrorResponse, "description": "Rate Limit Exceeded"},
            500: {"model": ErrorResponse, "description": "Internal Server Error"},
            502: {"model": ErrorResponse, "description": "Malformed Upstream Response"},
            503: {"model": ErrorResponse, "description": "Upstream Unavailable"},
            504: {"model": ErrorResponse, "description": "Upstream Timeout"},
        },
    )

    app.state.settings = settings
    app.state.cache = cache
    app.state.rate_limiter = rate_limiter
    app.state.text_client = text_client
    app.state.stock_data = StockDataService(text_client, cache, settings)
    app.state.scoring_engine = ScoringEngine(text_client, cache, settings)

    # First added is innermost, so the request ID exists before logging runs
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Read-only API: GET only, Retry-After visible to browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=600,
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(stocks.router, tags=["Stocks"])

    return app
