"""Testes do GroqChatTransport com o cliente openai mockado."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import (
    APIConnectionError,
    APIError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
)

from valpro_livechat.ai.llm_client import GroqChatTransport
from valpro_livechat.config.settings import Settings
from valpro_livechat.domain.errors import NetworkError, ParseError, RemoteError

_REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
MESSAGES = [{"role": "system", "content": "s"}, {"role": "user", "content": "halo"}]


def _completion(content: str | None) -> MagicMock:
    completion = MagicMock()
    choice = MagicMock()
    choice.message.content = content
    completion.choices = [choice]
    return completion


def _transport(create: AsyncMock) -> GroqChatTransport:
    client = MagicMock()
    client.chat.completions.create = create
    return GroqChatTransport(model="llama-test", temperature=0.5, max_tokens=42, client=client)


class TestCall:
    @pytest.mark.asyncio
    async def test_returns_content_and_passes_parameters(self) -> None:
        create = AsyncMock(return_value=_completion("Halo!"))

        reply = await _transport(create).call(MESSAGES)

        assert reply == "Halo!"
        create.assert_awaited_once_with(
            model="llama-test",
            messages=MESSAGES,
            temperature=0.5,
            max_tokens=42,
        )

    @pytest.mark.asyncio
    async def test_connection_error_is_network(self) -> None:
        create = AsyncMock(side_effect=APIConnectionError(request=_REQUEST))
        with pytest.raises(NetworkError):
            await _transport(create).call(MESSAGES)

    @pytest.mark.asyncio
    async def test_timeout_is_network(self) -> None:
        create = AsyncMock(side_effect=APITimeoutError(request=_REQUEST))
        with pytest.raises(NetworkError):
            await _transport(create).call(MESSAGES)

    @pytest.mark.asyncio
    async def test_status_error_is_remote(self) -> None:
        response = httpx.Response(429, request=_REQUEST)
        create = AsyncMock(
            side_effect=APIStatusError("rate limited", response=response, body=None)
        )
        with pytest.raises(RemoteError) as exc_info:
            await _transport(create).call(MESSAGES)
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_response_validation_error_is_parse_error(self) -> None:
        response = httpx.Response(200, request=_REQUEST)
        create = AsyncMock(side_effect=APIResponseValidationError(response=response, body=None))
        with pytest.raises(ParseError):
            await _transport(create).call(MESSAGES)

    @pytest.mark.asyncio
    async def test_other_sdk_errors_are_remote(self) -> None:
        create = AsyncMock(side_effect=APIError("stream broke", request=_REQUEST, body=None))
        with pytest.raises(RemoteError) as exc_info:
            await _transport(create).call(MESSAGES)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_no_choices_is_parse_error(self) -> None:
        completion = MagicMock()
        completion.choices = []
        create = AsyncMock(return_value=completion)
        with pytest.raises(ParseError):
            await _transport(create).call(MESSAGES)

    @pytest.mark.asyncio
    async def test_null_content_is_parse_error(self) -> None:
        create = AsyncMock(return_value=_completion(None))
        with pytest.raises(ParseError):
            await _transport(create).call(MESSAGES)


def test_from_settings_builds_client_without_retries() -> None:
    settings = Settings(_env_file=None, groq_api_key="gsk-test", llm_timeout_seconds=12)
    transport = GroqChatTransport.from_settings(settings)

    client = transport._client
    assert str(client.base_url).rstrip("/") == "https://api.groq.com/openai/v1"
    assert client.max_retries == 0
    assert client.timeout.read == 12
