"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Callable, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from helpers import FakeClock, FakeTextClient
from stockscore.cache import RateLimiter, ResponseCache
from stockscore.core.config import Settings


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        perplexity_api_key="test-key",
        rate_limit_max_requests=100,
        rate_limit_window_ms=60_000,
        log_format="text",
    )


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(max_entries=100, clock=clock)


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def make_client(test_settings: Settings) -> Generator[Callable[..., TestClient], None, None]:
    """Build a TestClient around a fresh app with the given fakes."""
    clients: List[TestClient] = []

    def _make(
        text_client: FakeTextClient,
        settings: Optional[Settings] = None,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ResponseCache] = None,
    ) -> TestClient:
        from stockscore.api.app import create_api_app

        app = create_api_app(
            settings=settings or test_settings,
            text_client=text_client,
            cache=cache,
            rate_limiter=rate_limiter,
        )
        test_client = TestClient(app, raise_server_exceptions=False)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
