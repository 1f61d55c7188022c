"""Motor de resposta da IA.

Fluxo por mensagem:
1. Sentimento por frases-gatilho (frustrado antes de positivo)
2. Busca de conhecimento por keyword (máx. 3 itens)
3. Prompt de sistema + bloco "INFORMASI RELEVAN"
4. Janela das últimas 10 entradas de histórico
5. Uma chamada ao transporte, limitada por timeout e cancelável
6. Heurística de handover

Falhas de transporte, timeout e cancelamento viram um único AIEngineError;
não há retry aqui, a política de escalonamento é do pipeline.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from valpro_livechat.ai import prompts
from valpro_livechat.ai.heuristics import classify_sentiment, should_suggest_handover
from valpro_livechat.ai.knowledge import MAX_RELEVANT_ITEMS, KnowledgeIndex
from valpro_livechat.domain.errors import (
    AIEngineError,
    NetworkError,
    ParseError,
    RemoteError,
    TransportError,
)
from valpro_livechat.domain.models import ChatResponse
from valpro_livechat.domain.protocols.llm_transport import LLMTransport
from valpro_livechat.observability.logging import get_logger
from valpro_livechat.observability.timing import timed

logger: logging.Logger = get_logger(__name__)

PLACEHOLDER_CONFIDENCE = 0.8


class AIEngineConfig(BaseModel):
    """Configuração explícita do motor (sem globais de pacote)."""

    model_config = ConfigDict(frozen=True)

    model: str = "llama-3.3-70b-versatile"
    timeout_seconds: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 500
    system_prompt: str = prompts.SYSTEM_PROMPT
    frustrated_phrases: tuple[str, ...] = prompts.FRUSTRATED_PHRASES
    positive_phrases: tuple[str, ...] = prompts.POSITIVE_PHRASES
    human_request_phrases: tuple[str, ...] = prompts.HUMAN_REQUEST_PHRASES
    uncertainty_phrases: tuple[str, ...] = prompts.UNCERTAINTY_PHRASES
    history_window: int = 10
    max_knowledge_items: int = MAX_RELEVANT_ITEMS
    # Placeholder fixo: não derivar de nenhum sinal
    confidence: float = PLACEHOLDER_CONFIDENCE

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> AIEngineConfig:
        values: dict[str, Any] = {
            "model": settings.llm_model,
            "timeout_seconds": settings.llm_timeout_seconds,
            "temperature": settings.llm_temperature,
            "max_tokens": settings.llm_max_tokens,
        }
        values.update(overrides)
        return cls(**values)


def _failure_reason(error: TransportError) -> str:
    if isinstance(error, NetworkError):
        return "network"
    if isinstance(error, ParseError):
        return "parse"
    if isinstance(error, RemoteError):
        return "remote"
    return "transport"


class AIResponseEngine:
    """Transforma mensagem + histórico em ChatResponse."""

    def __init__(
        self,
        config: AIEngineConfig,
        transport: LLMTransport,
        knowledge: KnowledgeIndex | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._knowledge = knowledge or KnowledgeIndex()

    @property
    def config(self) -> AIEngineConfig:
        return self._config

    @property
    def knowledge(self) -> KnowledgeIndex:
        return self._knowledge

    def build_messages(
        self, user_message: str, history: list[dict[str, str]]
    ) -> list[dict[str, str]]:
        """Monta [system, ...últimas N do histórico, user]."""
        relevant = self._knowledge.find_relevant(
            user_message, limit=self._config.max_knowledge_items
        )
        system_prompt = prompts.build_system_prompt(self._config.system_prompt, relevant)

        window = self._config.history_window
        recent = history[-window:] if window > 0 else []

        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": turn["role"], "content": turn["content"]} for turn in recent)
        messages.append({"role": "user", "content": user_message})
        return messages

    async def process_message(
        self,
        user_message: str,
        history: list[dict[str, str]],
        cancel_event: asyncio.Event | None = None,
    ) -> ChatResponse:
        sentiment = classify_sentiment(
            user_message,
            self._config.frustrated_phrases,
            self._config.positive_phrases,
        )
        messages = self.build_messages(user_message, history)

        reply = await self._call_transport(messages, cancel_event)

        suggest_handover = should_suggest_handover(
            sentiment,
            user_message,
            reply,
            self._config.human_request_phrases,
            self._config.uncertainty_phrases,
        )
        return ChatResponse(
            reply=reply,
            confidence=self._config.confidence,
            suggest_handover=suggest_handover,
            sentiment=sentiment,
        )

    async def _call_transport(
        self,
        messages: list[dict[str, str]],
        cancel_event: asyncio.Event | None,
    ) -> str:
        call = asyncio.ensure_future(self._transport.call(messages))
        waiters: set[asyncio.Future[Any]] = {call}
        cancel_waiter: asyncio.Future[Any] | None = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        with timed("llm_call") as watch:
            try:
                done, _ = await asyncio.wait(
                    waiters,
                    timeout=self._config.timeout_seconds,
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                for waiter in waiters:
                    if not waiter.done():
                        waiter.cancel()

        if call in done:
            try:
                return call.result()
            except TransportError as e:
                reason = _failure_reason(e)
                logger.warning(
                    "ai_engine_error",
                    extra={"reason": reason, "error_type": type(e).__name__},
                )
                raise AIEngineError(reason, f"AI engine error: {e}") from e

        await asyncio.gather(call, return_exceptions=True)
        reason = "cancelled" if cancel_waiter is not None and cancel_waiter in done else "timeout"
        logger.warning(
            "ai_engine_error",
            extra={"reason": reason, "elapsed_ms": watch.elapsed_ms},
        )
        raise AIEngineError(reason)
