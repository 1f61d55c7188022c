"""Pipeline por turno do visitante: sessão → histórico → IA → persistência.

A mensagem do visitante já foi gravada por quem chama (para sobreviver a uma
falha da IA); o pipeline só produz e grava a resposta do bot.

Falhas da IA nunca chegam ao visitante: viram uma resposta de escalonamento.
StorageError ao carregar sessão ou histórico propaga.
"""

from __future__ import annotations

import asyncio
import logging

from valpro_livechat.ai.engine import AIResponseEngine
from valpro_livechat.application.escalation import DEFAULT_ESCALATION_THRESHOLD, escalation_reply
from valpro_livechat.application.sessions import SessionService
from valpro_livechat.domain.enums import Sender, SessionStatus, Sentiment
from valpro_livechat.domain.errors import AIEngineError, NotFoundError, StorageError
from valpro_livechat.domain.models import ChatMessage, ChatResponse, ChatSession
from valpro_livechat.observability.context import correlation_scope
from valpro_livechat.observability.logging import get_logger, log_fallback, short_id

logger: logging.Logger = get_logger(__name__)


def build_history(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Converte mensagens gravadas em turnos do LLM (system fica de fora)."""
    history: list[dict[str, str]] = []
    for message in messages:
        if message.sender == Sender.SYSTEM:
            continue
        role = "assistant" if message.sender in (Sender.BOT, Sender.ADMIN) else "user"
        history.append({"role": role, "content": message.content})
    return history


class MessagePipeline:
    def __init__(
        self,
        sessions: SessionService,
        engine: AIResponseEngine,
        history_limit: int = 20,
        escalation_threshold: int = DEFAULT_ESCALATION_THRESHOLD,
    ) -> None:
        self._sessions = sessions
        self._engine = engine
        self._history_limit = history_limit
        self._escalation_threshold = escalation_threshold

    async def process(
        self,
        session_id: str,
        text: str,
        cancel_event: asyncio.Event | None = None,
    ) -> ChatResponse:
        with correlation_scope(session_id):
            session = await self._sessions.get_session(session_id)

            if session.status == SessionStatus.LIVE:
                logger.debug("pipeline_skipped_live_session")
                return ChatResponse(reply="", suggest_handover=False, sentiment=Sentiment.NEUTRAL)

            messages = await self._sessions.get_messages(session_id, self._history_limit)
            history = build_history(messages)

            try:
                response = await self._engine.process_message(text, history, cancel_event)
            except AIEngineError as e:
                response = await self._escalate(session, e)

            await self._save_bot_reply(session_id, response.reply)
            await self._persist_sentiment(session, response.sentiment)

            logger.info(
                "pipeline_turn_completed",
                extra={
                    "session_id": short_id(session_id),
                    "suggest_handover": response.suggest_handover,
                    "sentiment": response.sentiment.value,
                },
            )
            return response

    async def _escalate(self, session: ChatSession, error: AIEngineError) -> ChatResponse:
        try:
            failed_attempts = await self._sessions.record_ai_failure(session)
        except (StorageError, NotFoundError) as e:
            # O contador já foi incrementado no objeto em memória
            failed_attempts = session.failed_attempts
            logger.warning(
                "failed_attempts_persist_failed",
                extra={"session_id": short_id(session.id), "error_type": type(e).__name__},
            )

        response = escalation_reply(failed_attempts, self._escalation_threshold)
        log_fallback(
            logger,
            session.id,
            error.reason,
            failed_attempts,
            suggest_handover=response.suggest_handover,
        )
        return response

    async def _save_bot_reply(self, session_id: str, reply: str) -> None:
        message = ChatMessage(
            session_id=session_id,
            sender=Sender.BOT,
            content=reply,
            timestamp=self._sessions.now(),
        )
        try:
            await self._sessions.save_message(message)
        except StorageError as e:
            logger.warning(
                "bot_reply_save_failed",
                extra={"session_id": short_id(session_id), "error_type": type(e).__name__},
            )

    async def _persist_sentiment(self, session: ChatSession, sentiment: Sentiment) -> None:
        try:
            await self._sessions.update_sentiment(session, sentiment)
        except (StorageError, NotFoundError) as e:
            logger.warning(
                "sentiment_update_failed",
                extra={"session_id": short_id(session.id), "error_type": type(e).__name__},
            )
