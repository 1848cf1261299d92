"""Health check endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from stockscore.api.dependencies import get_app_settings, get_cache
from stockscore.cache import ResponseCache
from stockscore.core.config import Settings
from stockscore.schemas.common import HealthResponse


router = APIRouter(prefix="/health")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    cache: ResponseCache = Depends(get_cache),
) -> HealthResponse:
    """
    Report service health.

    The service is "degraded" when no Perplexity key is configured: cached
    responses still serve, but every miss will fail upstream.
    """
    checks = {
        "cache": True,
        "perplexity_configured": bool(settings.perplexity_api_key),
    }
    status = "healthy" if all(checks.values()) else "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        timestamp=datetime.now(UTC),
        cache_size=len(cache),
        checks=checks,
    )
