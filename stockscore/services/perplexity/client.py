"""
Perplexity chat-completions client.

Perplexity exposes an OpenAI-compatible API, so the OpenAI async SDK is used
with a pooled httpx client and a fixed request timeout. Every failure mode
surfaces as an exception; callers never receive an empty string.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, OpenAIError

from stockscore.core.config import Settings
from stockscore.core.exceptions import ExternalServiceError, UpstreamTimeoutError
from stockscore.core.logging import get_logger


logger = get_logger("perplexity.client")

DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 4096


class TextGenerator(Protocol):
    """Anything that turns a prompt into raw model text."""

    async def query(self, prompt: str, system_prompt: str | None = None) -> str:
        ...


class PerplexityClient:
    """
    Lazily-initialized Perplexity client.

    Usage:
        client = PerplexityClient(settings)
        text = await client.query("Return JSON for ...", SYSTEM_PROMPT)
        await client.close()
    """

    def __init__(self, settings: Settings, max_connections: int = 10):
        self._settings = settings
        self._max_connections = max_connections
        self._client: AsyncOpenAI | None = None
        self._http_client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    @property
    def timeout(self) -> int:
        return self._settings.external_api_timeout

    async def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is not None:
                return self._client

            if not self._settings.perplexity_api_key:
                raise ExternalServiceError(
                    "Perplexity API key not configured",
                    error_code="UPSTREAM_NOT_CONFIGURED",
                )

            self._http_client = httpx.AsyncClient(
                limits=httpx.Limits(
                    max_connections=self._max_connections,
                    max_keepalive_connections=self._max_connections // 2,
                ),
                timeout=httpx.Timeout(float(self.timeout), connect=10.0),
            )
            self._client = AsyncOpenAI(
                api_key=self._settings.perplexity_api_key,
                base_url=self._settings.perplexity_base_url,
                http_client=self._http_client,
                timeout=float(self.timeout),
                max_retries=0,
            )
            logger.debug("Created Perplexity client")
            return self._client

    async def query(self, prompt: str, system_prompt: str | None = None) -> str:
        """
        Send one prompt and return the raw text of the first choice.

        Raises:
            UpstreamTimeoutError: the request exceeded the configured timeout
            ExternalServiceError: network error, non-success status, or empty content
        """
        client = await self._get_client()

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await client.chat.completions.create(
                model=self._settings.perplexity_model,
                messages=messages,
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=DEFAULT_MAX_TOKENS,
            )
        except APITimeoutError as e:
            logger.warning(f"Perplexity request timed out after {self.timeout}s")
            raise UpstreamTimeoutError(
                f"Perplexity API request timed out after {self.timeout}s"
            ) from e
        except APIStatusError as e:
            logger.error(f"Perplexity API error ({e.status_code}): {e.message}")
            raise ExternalServiceError(
                f"Perplexity API error ({e.status_code})",
                details={"status": e.status_code},
            ) from e
        except APIConnectionError as e:
            logger.error(f"Perplexity connection failed: {e}")
            raise ExternalServiceError("Perplexity API unreachable") from e
        except OpenAIError as e:
            logger.error(f"Perplexity request failed: {e}")
            raise ExternalServiceError("Perplexity request failed") from e

        if not response.choices:
            raise ExternalServiceError("Perplexity API returned no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ExternalServiceError("Perplexity API returned empty content")

        return content

    async def close(self) -> None:
        """Release the pooled HTTP connections."""
        async with self._lock:
            if self._http_client is not None:
                await self._http_client.aclose()
            self._http_client = None
            self._client = None
