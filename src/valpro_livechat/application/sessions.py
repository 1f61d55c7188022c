"""Serviço de sessões de chat: persistência, transições e mensagens de sistema.

Cada operação recebe o id da sessão explicitamente. Transições passam pela
tabela de `domain.session` e gravam somente os campos que mudam (update
parcial); concorrência entre escritores continua last-write-wins.

Mensagens de sistema e o toque em lastMessageAt são best-effort: falhas
são logadas e não derrubam a operação principal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import ValidationError

from valpro_livechat.application.presence import AgentPresenceRegistry
from valpro_livechat.domain import session as fsm
from valpro_livechat.domain.enums import (
    ACTIVE_STATUSES,
    AGENT_VISIBLE_STATUSES,
    Sender,
    SessionStatus,
    Sentiment,
)
from valpro_livechat.domain.errors import NotFoundError, SessionNotFoundError, StorageError
from valpro_livechat.domain.models import ChatMessage, ChatSession, VisitorInfo, utc_now
from valpro_livechat.domain.protocols.document_store import Document, DocumentStore, FieldFilter
from valpro_livechat.observability.logging import get_logger, short_id
from valpro_livechat.utils.text import format_phone_number, truncate

logger: logging.Logger = get_logger(__name__)

HANDOVER_REQUESTED_NOTICE = "Pengunjung meminta untuk dihubungkan dengan admin."
AGENT_JOINED_NOTICE = "{name} telah bergabung ke chat."
RETURNED_TO_BOT_NOTICE = "Sesi telah dikembalikan ke AI. Silakan lanjutkan percakapan Anda."

EMPTY_SUMMARY = "Tidak ada percakapan."
SUMMARY_SOURCE_LIMIT = 50
SUMMARY_TAIL = 5
SUMMARY_CONTENT_MAX = 100

_SENDER_ICONS = {
    Sender.BOT: "🤖",
    Sender.ADMIN: "👨‍💼",
}
_DEFAULT_ICON = "👤"


class SessionService:
    """Dono de ChatSession/ChatMessage no document store."""

    def __init__(
        self,
        store: DocumentStore,
        registry: AgentPresenceRegistry,
        sessions_collection: str = "web_chat_sessions",
        messages_collection: str = "web_chat_messages",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._sessions = sessions_collection
        self._messages = messages_collection
        self._clock = clock or utc_now

    @property
    def registry(self) -> AgentPresenceRegistry:
        return self._registry

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_session(self, visitor: VisitorInfo) -> ChatSession:
        now = self._clock()
        session = ChatSession(
            visitor_id=visitor.visitor_id,
            visitor_name=visitor.name,
            visitor_email=visitor.email,
            visitor_phone=format_phone_number(visitor.phone) if visitor.phone else "",
            current_page=visitor.current_page,
            location=visitor.location,
            status=SessionStatus.BOT,
            sentiment=Sentiment.NEUTRAL,
            failed_attempts=0,
            created_at=now,
            last_message_at=now,
        )
        session_id = await self._store.add(self._sessions, session.to_document())
        session.id = session_id

        logger.info("session_created", extra={"session_id": short_id(session_id)})
        return session

    async def get_session(self, session_id: str) -> ChatSession:
        data = await self._store.get(self._sessions, session_id)
        if data is None:
            raise SessionNotFoundError(session_id, self._sessions)
        return ChatSession.from_document(session_id, data)

    async def get_active_session_for_visitor(self, visitor_id: str) -> ChatSession | None:
        """Sessão não encerrada do visitante, ou None.

        StorageError propaga: "store fora" não se confunde com "sem sessão".
        """
        documents = await self._store.query(
            self._sessions,
            filters=[
                FieldFilter("visitorId", "==", visitor_id),
                FieldFilter("status", "in", [s.value for s in ACTIVE_STATUSES]),
            ],
            limit=1,
        )
        if not documents:
            return None
        return ChatSession.from_document(documents[0].id, documents[0].data)

    async def update_session(self, session: ChatSession) -> None:
        """Sobrescreve o documento inteiro."""
        await self._store.set(self._sessions, session.id, session.to_document())

    async def save_message(self, message: ChatMessage) -> ChatMessage:
        message_id = await self._store.add(self._messages, message.to_document())
        stored = message.model_copy(update={"id": message_id})

        try:
            await self._store.update(
                self._sessions,
                message.session_id,
                {"lastMessageAt": message.timestamp},
            )
        except (StorageError, NotFoundError) as e:
            logger.warning(
                "session_touch_failed",
                extra={
                    "session_id": short_id(message.session_id),
                    "error_type": type(e).__name__,
                },
            )
        return stored

    async def get_messages(self, session_id: str, limit: int = 20) -> list[ChatMessage]:
        """Últimas `limit` mensagens da sessão, em ordem cronológica."""
        documents = await self._store.query(
            self._messages,
            filters=[FieldFilter("sessionId", "==", session_id)],
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        messages = [m for m in (self._parse_message(doc) for doc in documents) if m is not None]
        messages.reverse()
        return messages

    def _parse_message(self, doc: Document) -> ChatMessage | None:
        try:
            return ChatMessage.from_document(doc.id, doc.data)
        except ValidationError:
            logger.warning("message_document_skipped", extra={"document_id": short_id(doc.id)})
            return None

    async def list_queued_and_live(self) -> list[ChatSession]:
        documents = await self._store.query(
            self._sessions,
            filters=[
                FieldFilter("status", "in", [s.value for s in AGENT_VISIBLE_STATUSES]),
            ],
        )
        sessions = [s for s in (self._parse_session(doc) for doc in documents) if s is not None]
        sessions.sort(key=lambda s: s.created_at)
        return sessions

    async def find_inactive_sessions(self, cutoff: datetime) -> list[ChatSession]:
        """Sessões ativas cujo lastMessageAt é anterior a `cutoff`."""
        documents = await self._store.query(
            self._sessions,
            filters=[
                FieldFilter("status", "in", [s.value for s in ACTIVE_STATUSES]),
                FieldFilter("lastMessageAt", "<", cutoff),
            ],
        )
        return [s for s in (self._parse_session(doc) for doc in documents) if s is not None]

    def _parse_session(self, doc: Document) -> ChatSession | None:
        try:
            return ChatSession.from_document(doc.id, doc.data)
        except ValidationError:
            logger.warning("session_document_skipped", extra={"session_id": short_id(doc.id)})
            return None

    # ------------------------------------------------------------------
    # Transições
    # ------------------------------------------------------------------

    async def request_handover(self, session_id: str) -> bool:
        """Coloca a sessão na fila; retorna se há algum atendente online."""
        session = await self.get_session(session_id)
        fsm.request_handover(session.status)

        await self._store.update(
            self._sessions, session_id, {"status": SessionStatus.QUEUED.value}
        )
        await self._append_system_message(session_id, HANDOVER_REQUESTED_NOTICE)

        admin_online = self._registry.is_anyone_online()
        logger.info(
            "handover_requested",
            extra={"session_id": short_id(session_id), "admin_online": admin_online},
        )
        return admin_online

    async def claim_session(self, session_id: str, agent_id: str, agent_name: str) -> ChatSession:
        """Atendente assume a sessão. Capacidade (max_chats) não é verificada."""
        if not agent_id:
            raise ValueError("agent_id must not be empty")

        session = await self.get_session(session_id)
        fsm.claim(session.status)

        await self._store.update(
            self._sessions,
            session_id,
            {"status": SessionStatus.LIVE.value, "assignedAdmin": agent_id},
        )
        await self._append_system_message(session_id, AGENT_JOINED_NOTICE.format(name=agent_name))

        logger.info(
            "session_claimed",
            extra={"session_id": short_id(session_id), "admin_id": short_id(agent_id)},
        )
        return session.model_copy(
            update={"status": SessionStatus.LIVE, "assigned_admin": agent_id}
        )

    async def close_session(
        self,
        session_id: str,
        *,
        sentiment: Sentiment | None = None,
        notice: str | None = None,
        now: datetime | None = None,
    ) -> ChatSession:
        """Encerra a sessão; `sentiment`/`notice` são usados pelo reaper."""
        session = await self.get_session(session_id)
        fsm.close(session.status)

        closed_at = now or self._clock()
        fields: dict[str, object] = {
            "status": SessionStatus.CLOSED.value,
            "closedAt": closed_at,
            "assignedAdmin": "",
        }
        update: dict[str, object] = {
            "status": SessionStatus.CLOSED,
            "closed_at": closed_at,
            "assigned_admin": "",
        }
        if sentiment is not None:
            fields["sentiment"] = sentiment.value
            update["sentiment"] = sentiment

        await self._store.update(self._sessions, session_id, fields)
        if notice:
            await self._append_system_message(session_id, notice)

        logger.info("session_closed", extra={"session_id": short_id(session_id)})
        return session.model_copy(update=update)

    async def return_to_bot(self, session_id: str) -> ChatSession:
        """Devolve a conversa à IA, zerando failedAttempts e assignedAdmin.

        Vale para bot, queued e live. Sessão encerrada é terminal: levanta
        InvalidTransitionError sem gravar nada.
        """
        session = await self.get_session(session_id)
        fsm.return_to_bot(session.status)

        await self._store.update(
            self._sessions,
            session_id,
            {"status": SessionStatus.BOT.value, "assignedAdmin": "", "failedAttempts": 0},
        )
        await self._append_system_message(session_id, RETURNED_TO_BOT_NOTICE)

        logger.info("session_returned_to_bot", extra={"session_id": short_id(session_id)})
        return session.model_copy(
            update={"status": SessionStatus.BOT, "assigned_admin": "", "failed_attempts": 0}
        )

    # ------------------------------------------------------------------
    # Campos isolados
    # ------------------------------------------------------------------

    async def record_ai_failure(self, session: ChatSession) -> int:
        """Incrementa failed_attempts (no objeto e no store) e retorna o total."""
        session.failed_attempts += 1
        await self._store.update(
            self._sessions, session.id, {"failedAttempts": session.failed_attempts}
        )
        return session.failed_attempts

    async def update_sentiment(self, session: ChatSession, sentiment: Sentiment) -> None:
        session.sentiment = sentiment
        await self._store.update(self._sessions, session.id, {"sentiment": sentiment.value})

    # ------------------------------------------------------------------
    # Resumo para o painel de atendentes
    # ------------------------------------------------------------------

    async def summarize(self, session_id: str) -> str:
        messages = await self.get_messages(session_id, SUMMARY_SOURCE_LIMIT)
        if not messages:
            return EMPTY_SUMMARY

        summary = ""
        try:
            session = await self.get_session(session_id)
        except SessionNotFoundError:
            session = None
        if session is not None:
            summary = (
                f"Pengunjung: {session.visitor_name} ({session.visitor_email})\n"
                f"Sentimen: {session.sentiment.value}\n\n"
            )

        summary += "Ringkasan percakapan:\n"
        for message in messages[-SUMMARY_TAIL:]:
            icon = _SENDER_ICONS.get(message.sender, _DEFAULT_ICON)
            summary += f"{icon}: {truncate(message.content, SUMMARY_CONTENT_MAX)}\n"
        return summary

    async def summarize_and_store(self, session_id: str) -> str:
        summary = await self.summarize(session_id)
        await self._store.update(self._sessions, session_id, {"aiSummary": summary})
        return summary

    async def _append_system_message(self, session_id: str, content: str) -> None:
        message = ChatMessage(
            session_id=session_id,
            sender=Sender.SYSTEM,
            content=content,
            timestamp=self._clock(),
        )
        try:
            await self.save_message(message)
        except StorageError as e:
            logger.warning(
                "system_message_failed",
                extra={"session_id": short_id(session_id), "error_type": type(e).__name__},
            )
