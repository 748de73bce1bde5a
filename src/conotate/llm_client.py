"""Async chat-completion client: direct OpenAI-compatible API, proxy, or Anthropic."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from conotate.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ModelError(RuntimeError):
    """Raised when the model backend cannot produce a usable completion."""


class ModelClient:
    """Single-call chat client over the transport selected by ``settings.ai_mode``.

    ``direct`` talks to an OpenAI-compatible endpoint (Groq by default),
    ``proxy`` posts the same body to an intermediary with a bearer token, and
    ``anthropic`` uses the Anthropic messages API. Every failure surfaces as
    :class:`ModelError`.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._openai_client: AsyncOpenAI | None = None
        self._anthropic_client: AsyncAnthropic | None = None

    @property
    def mode(self) -> str:
        return self._settings.ai_mode

    @property
    def model_name(self) -> str:
        if self._settings.ai_mode == "anthropic":
            return self._settings.anthropic_model
        return self._settings.model

    @property
    def is_configured(self) -> bool:
        """True when the selected transport has the credentials it needs."""
        s = self._settings
        if s.ai_mode == "direct":
            return bool(s.api_key)
        if s.ai_mode == "proxy":
            return bool(s.proxy_url and s.proxy_token)
        return bool(s.anthropic_api_key)

    @property
    def openai_client(self) -> AsyncOpenAI | None:
        """Lazy-load the OpenAI-compatible client (None if no API key)."""
        if self._openai_client is None and self._settings.api_key:
            self._openai_client = AsyncOpenAI(
                api_key=self._settings.api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.ai_timeout_seconds,
                max_retries=0,
            )
        return self._openai_client

    @property
    def anthropic_client(self) -> AsyncAnthropic | None:
        """Lazy-load Anthropic client (None if no API key)."""
        if self._anthropic_client is None and self._settings.anthropic_api_key:
            self._anthropic_client = AsyncAnthropic(
                api_key=self._settings.anthropic_api_key,
                timeout=self._settings.ai_timeout_seconds,
                max_retries=0,
            )
        return self._anthropic_client

    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int = 150,
        temperature: float = 0.1,
        model: str | None = None,
    ) -> str:
        """Send one chat completion and return the assistant's text.

        The whole round trip is bounded by ``ai_timeout_seconds``.
        """
        if not self.is_configured:
            raise ModelError(f"Model backend '{self.mode}' is not configured")

        model = model or self.model_name
        start = time.perf_counter()
        try:
            async with asyncio.timeout(self._settings.ai_timeout_seconds):
                if self.mode == "direct":
                    content = await self._chat_direct(messages, model, max_tokens, temperature)
                elif self.mode == "proxy":
                    content = await self._chat_proxy(messages, model, max_tokens, temperature)
                else:
                    content = await self._chat_anthropic(
                        messages, model, max_tokens, temperature
                    )
        except ModelError:
            logger.warning("%s call failed after %.0fms", self.mode, _elapsed_ms(start))
            raise
        except TimeoutError as e:
            logger.warning("%s call timed out after %.0fms", self.mode, _elapsed_ms(start))
            raise ModelError(f"{self.mode} request timed out") from e
        except Exception as e:
            logger.warning("%s call failed", self.mode, exc_info=True)
            raise ModelError(f"{self.mode} request failed: {e}") from e

        logger.info("%s (%s) responded in %.0fms", self.mode, model, _elapsed_ms(start))
        return content

    async def _chat_direct(
        self, messages: list[dict[str, str]], model: str, max_tokens: int, temperature: float
    ) -> str:
        client = self.openai_client
        if client is None:
            raise ModelError("No API key for direct mode")
        oai_messages: list[ChatCompletionMessageParam] = [
            {"role": m["role"], "content": m["content"]}  # type: ignore[misc]
            for m in messages
        ]
        response = await client.chat.completions.create(
            model=model,
            messages=oai_messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not response.choices:
            raise ModelError("Completion had no choices")
        return response.choices[0].message.content or ""

    async def _chat_proxy(
        self, messages: list[dict[str, str]], model: str, max_tokens: int, temperature: float
    ) -> str:
        if not self._settings.proxy_url:
            raise ModelError("No proxy URL for proxy mode")
        body = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        async with httpx.AsyncClient(timeout=self._settings.ai_timeout_seconds) as client:
            response = await client.post(
                self._settings.proxy_url,
                headers={
                    "Authorization": f"Bearer {self._settings.proxy_token}",
                    "Content-Type": "application/json",
                },
                json=body,
            )
        if response.status_code != 200:
            raise ModelError(f"Proxy returned HTTP {response.status_code}: {response.text[:200]}")
        return _completion_text(response.json())

    async def _chat_anthropic(
        self, messages: list[dict[str, str]], model: str, max_tokens: int, temperature: float
    ) -> str:
        client = self.anthropic_client
        if client is None:
            raise ModelError("No Anthropic API key")
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [
            {"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"
        ]
        kwargs: dict[str, Any] = {}
        if system:
            kwargs["system"] = system
        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=turns,  # type: ignore[arg-type]
            **kwargs,
        )
        if not response.content:
            raise ModelError("Anthropic response had no content")
        return response.content[0].text  # type: ignore[union-attr]

    async def aclose(self) -> None:
        if self._openai_client is not None:
            await self._openai_client.close()
            self._openai_client = None
        if self._anthropic_client is not None:
            await self._anthropic_client.close()
            self._anthropic_client = None


def _completion_text(data: Any) -> str:
    """Read ``choices[0].message.content`` from a chat-completions body."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ModelError("Malformed chat-completions response") from e
    if content is None:
        return ""
    if not isinstance(content, str):
        raise ModelError("Completion content is not a string")
    return content


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
