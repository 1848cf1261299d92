"""FastAPI dependencies.

Shared stores live on `app.state` and are created by the application
factory; these accessors hand them to route handlers.
"""

from __future__ import annotations

from fastapi import Depends, Path, Request

from stockscore.cache import ResponseCache, RateLimiter, enforce_rate_limit
from stockscore.core.client_identity import get_client_ip
from stockscore.core.config import Settings
from stockscore.core.sanitize import sanitize_ticker
from stockscore.scoring import ScoringEngine
from stockscore.services.stock_data import StockDataService


__all__ = [
    "get_app_settings",
    "get_cache",
    "get_rate_limiter",
    "get_scoring_engine",
    "get_stock_data_service",
    "rate_limit_api",
    "valid_ticker",
]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_stock_data_service(request: Request) -> StockDataService:
    return request.app.state.stock_data


def get_scoring_engine(request: Request) -> ScoringEngine:
    return request.app.state.scoring_engine


async def rate_limit_api(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    """Apply the fixed-window limit per client address.

    Raises:
        RateLimitError: 429 with a Retry-After header
    """
    if not settings.rate_limit_enabled:
        return
    enforce_rate_limit(limiter, get_client_ip(request))


def valid_ticker(ticker: str = Path(..., description="Ticker symbol, e.g. RELIANCE")) -> str:
    """Sanitized ticker path parameter.

    Raises:
        InvalidTickerError: 400 for empty, oversized or malformed symbols
    """
    return sanitize_ticker(ticker)
