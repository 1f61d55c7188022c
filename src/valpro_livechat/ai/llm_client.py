"""Transporte LLM via SDK openai apontado para o endpoint compatível da Groq.

Uma chamada por invocação, sem retry (max_retries=0). Erros do SDK são
traduzidos para a taxonomia do core: NetworkError, RemoteError, ParseError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import (
    APIConnectionError,
    APIError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
)

from valpro_livechat.config.settings import DEFAULT_LLM_MODEL, GROQ_API_BASE_URL
from valpro_livechat.domain.errors import NetworkError, ParseError, RemoteError
from valpro_livechat.domain.protocols.llm_transport import LLMTransport
from valpro_livechat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class GroqChatTransport(LLMTransport):
    """Chat completions na Groq (llama-3.3-70b-versatile por padrão)."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = GROQ_API_BASE_URL,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout_seconds: float = 30.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(
            api_key=api_key or "",
            base_url=base_url,
            max_retries=0,
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
        )
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Any) -> GroqChatTransport:
        return cls(
            settings.groq_api_key,
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    async def call(self, messages: list[dict[str, str]]) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except (APIConnectionError, APITimeoutError) as e:
            # APITimeoutError herda de APIConnectionError; ambos são rede
            logger.warning("llm_network_error", extra={"error_type": type(e).__name__})
            raise NetworkError(f"LLM request failed: {e}") from e
        except APIStatusError as e:
            logger.warning(
                "llm_remote_error",
                extra={"status_code": e.status_code, "error_type": type(e).__name__},
            )
            raise RemoteError(str(e), status_code=e.status_code) from e
        except APIResponseValidationError as e:
            logger.warning("llm_parse_error", extra={"error_type": type(e).__name__})
            raise ParseError(f"unexpected LLM response: {e}") from e
        except APIError as e:
            logger.warning("llm_remote_error", extra={"error_type": type(e).__name__})
            raise RemoteError(str(e)) from e

        if not response.choices:
            raise ParseError("no choices in response")

        content = response.choices[0].message.content
        if content is None:
            raise ParseError("empty message content")
        return content
