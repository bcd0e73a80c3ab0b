"""Thin chat-completion client for the coaching language model."""

from __future__ import annotations

import logging

import httpx

from speechcoach.config.settings import LlmConfig
from speechcoach.errors import (
    ConfigurationError,
    ProviderBillingRequired,
    ProviderError,
    ProviderRateLimited,
)

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """Invoke an OpenAI-compatible `/chat/completions` endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float = 0.7,
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("API keys not configured")
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._model = model
        self._temperature = temperature
        self._timeout = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(cls, config: LlmConfig) -> "ChatCompletionClient":
        api_key = config.api_key.get_secret_value() if config.api_key else ""
        return cls(
            api_key=api_key,
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            timeout_seconds=config.timeout_seconds,
        )

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        """Run one completion and return the first choice's message content."""

        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(self._url, json=body, headers=headers)
            except httpx.RequestError as exc:
                raise ProviderError(f"AI analysis failed: {exc}") from exc

        if response.is_error:
            status = response.status_code
            logger.error("AI analysis error: %s %s", status, response.text[:500])
            if status == 429:
                raise ProviderRateLimited(
                    "Rate limit exceeded. Please try again later.",
                    upstream_status=status,
                )
            if status == 402:
                raise ProviderBillingRequired(
                    "Payment required. Please add credits to your workspace.",
                    upstream_status=status,
                )
            raise ProviderError(
                f"AI analysis failed: {status} - {response.text}",
                upstream_status=status,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(
                "AI analysis failed: completion payload had no message content",
                upstream_status=response.status_code,
            ) from exc

        if not isinstance(content, str):
            raise ProviderError(
                "AI analysis failed: completion content was not text",
                upstream_status=response.status_code,
            )
        return content


__all__ = ["ChatCompletionClient"]
