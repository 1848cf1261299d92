"""Tests for the Perplexity client error mapping."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
from openai import APIConnectionError, APIStatusError, APITimeoutError

from stockscore.core.config import Settings
from stockscore.core.exceptions import ExternalServiceError, UpstreamTimeoutError
from stockscore.services.perplexity import PerplexityClient


REQUEST = httpx.Request("POST", "https://api.perplexity.ai/chat/completions")


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client_with(test_settings: Settings, create: AsyncMock) -> PerplexityClient:
    client = PerplexityClient(test_settings)
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client


class TestPerplexityClient:
    @pytest.mark.asyncio
    async def test_returns_first_choice_text(self, test_settings):
        create = AsyncMock(return_value=_completion('{"ok": true}'))
        client = _client_with(test_settings, create)

        text = await client.query("prompt", "system")

        assert text == '{"ok": true}'
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == test_settings.perplexity_model
        assert kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "prompt"},
        ]

    @pytest.mark.asyncio
    async def test_without_system_prompt(self, test_settings):
        create = AsyncMock(return_value=_completion("text"))
        await _client_with(test_settings, create).query("prompt")
        assert create.await_args.kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_timeout(self, test_settings):
        create = AsyncMock(side_effect=APITimeoutError(request=REQUEST))
        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await _client_with(test_settings, create).query("prompt")
        assert exc_info.value.status_code == 504
        assert "30s" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_error_status(self, test_settings):
        error = APIStatusError(
            "server exploded",
            response=httpx.Response(500, request=REQUEST),
            body=None,
        )
        create = AsyncMock(side_effect=error)
        with pytest.raises(ExternalServiceError) as exc_info:
            await _client_with(test_settings, create).query("prompt")
        assert exc_info.value.status_code == 503
        assert exc_info.value.details == {"status": 500}

    @pytest.mark.asyncio
    async def test_connection_error(self, test_settings):
        create = AsyncMock(side_effect=APIConnectionError(request=REQUEST))
        with pytest.raises(ExternalServiceError, match="unreachable"):
            await _client_with(test_settings, create).query("prompt")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   \n"])
    async def test_empty_content(self, test_settings, content):
        create = AsyncMock(return_value=_completion(content))
        with pytest.raises(ExternalServiceError, match="empty content"):
            await _client_with(test_settings, create).query("prompt")

    @pytest.mark.asyncio
    async def test_no_choices(self, test_settings):
        create = AsyncMock(return_value=SimpleNamespace(choices=[]))
        with pytest.raises(ExternalServiceError, match="no choices"):
            await _client_with(test_settings, create).query("prompt")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = PerplexityClient(Settings(perplexity_api_key=""))
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.query("prompt")
        assert exc_info.value.error_code == "UPSTREAM_NOT_CONFIGURED"

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, test_settings):
        client = PerplexityClient(test_settings)
        await client._get_client()
        await client.close()
        await client.close()
        assert client._client is None
