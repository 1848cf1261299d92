"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from stockscore.core.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(perplexity_api_key="")
        assert settings.rate_limit_max_requests == 30
        assert settings.rate_limit_window_ms == 60_000
        assert settings.cache_ttl_overview == 300
        assert settings.cache_ttl_financials == 3600
        assert settings.cache_ttl_ai_score == 1800
        assert settings.cache_ttl_search == 60

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-env")
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
        settings = Settings()
        assert settings.perplexity_api_key == "pplx-env"
        assert settings.rate_limit_max_requests == 5

    def test_cors_origins_from_comma_list(self):
        settings = Settings(cors_origins="https://a.example, https://b.example,")
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"log_level": "chatty"},
            {"log_format": "xml"},
            {"rate_limit_max_requests": 0},
            {"external_api_timeout": 1},
            {"cache_ttl_overview": 0},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            Settings(**kwargs)

    def test_cors_origins_from_environment(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
        assert Settings().cors_origins == ["https://a.example", "https://b.example"]

    def test_api_key_is_trimmed(self):
        assert Settings(perplexity_api_key="  pplx-abc \n").perplexity_api_key == "pplx-abc"
