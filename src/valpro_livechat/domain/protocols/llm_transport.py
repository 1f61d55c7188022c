"""Protocolo de domínio para o transporte LLM."""

from __future__ import annotations

from abc import ABC, abstractmethod


class LLMTransport(ABC):
    """Chamada única de chat completion.

    `messages` é a lista de {"role", "content"} já montada pelo motor.
    Levanta NetworkError, ParseError ou RemoteError; nunca faz retry.
    """

    @abstractmethod
    async def call(self, messages: list[dict[str, str]]) -> str: ...
