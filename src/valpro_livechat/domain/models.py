"""Modelos de domínio do live chat.

Os documentos persistidos usam os nomes camelCase históricos das coleções
(`visitorId`, `assignedAdmin`, `lastMessageAt`...) via alias; atributos Python
ficam em snake_case. O id do documento nunca é gravado dentro do documento.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from valpro_livechat.domain.enums import PresenceState, Sender, SessionStatus, Sentiment


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class VisitorInfo(BaseModel):
    """Identidade do visitante informada no primeiro contato."""

    visitor_id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    current_page: str = ""
    location: str = ""


class ChatSession(BaseModel):
    """Sessão de conversa com um visitante.

    Invariantes:
    - assigned_admin não vazio ⇔ status == live
    - closed_at preenchido ⇔ status == closed
    - failed_attempts volta a 0 sempre que o status entra em bot
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    visitor_id: str = Field(default="", alias="visitorId")
    visitor_name: str = Field(default="", alias="visitorName")
    visitor_email: str = Field(default="", alias="visitorEmail")
    visitor_phone: str = Field(default="", alias="visitorPhone")
    status: SessionStatus = SessionStatus.BOT
    assigned_admin: str = Field(default="", alias="assignedAdmin")
    current_page: str = Field(default="", alias="currentPage")
    ai_summary: str = Field(default="", alias="aiSummary")
    sentiment: Sentiment = Sentiment.NEUTRAL
    failed_attempts: int = Field(default=0, ge=0, alias="failedAttempts")
    last_message_at: datetime = Field(default_factory=utc_now, alias="lastMessageAt")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    location: str = ""
    closed_at: datetime | None = Field(default=None, alias="closedAt")

    @property
    def is_active(self) -> bool:
        return self.status != SessionStatus.CLOSED

    def to_document(self) -> dict[str, Any]:
        """Serializa para o formato da coleção (sem o id)."""
        return self.model_dump(by_alias=True, exclude={"id"})

    @classmethod
    def from_document(cls, document_id: str, data: dict[str, Any]) -> ChatSession:
        return cls.model_validate({**data, "id": document_id})


class ChatMessage(BaseModel):
    """Uma mensagem da conversa; imutável após gravada."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = ""
    session_id: str = Field(alias="sessionId")
    sender: Sender
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"id"})

    @classmethod
    def from_document(cls, document_id: str, data: dict[str, Any]) -> ChatMessage:
        return cls.model_validate({**data, "id": document_id})


class AdminStatus(BaseModel):
    """Presença efêmera de um atendente (apenas em memória)."""

    admin_id: str
    admin_name: str = ""
    status: PresenceState = PresenceState.ONLINE
    active_chats: int = 0
    max_chats: int = 5
    last_seen: datetime = Field(default_factory=utc_now)

    @property
    def has_capacity(self) -> bool:
        """Indicativo apenas; claim_session não verifica capacidade."""
        return self.active_chats < self.max_chats


class KnowledgeItem(BaseModel):
    """Registro estático de FAQ usado para enriquecer o prompt."""

    model_config = ConfigDict(frozen=True)

    topic: str
    question: str = ""
    answer: str
    keywords: tuple[str, ...] = ()


class ChatResponse(BaseModel):
    """Resposta transitória do motor de IA (ou do fallback do pipeline)."""

    reply: str
    confidence: float = 0.0
    suggest_handover: bool = False
    sentiment: Sentiment = Sentiment.NEUTRAL


class ContactSettings(BaseModel):
    """Números de contato dos atendentes e template de mensagem."""

    model_config = ConfigDict(populate_by_name=True)

    agent_phone: str = Field(default="", alias="agentPhone")
    main_number: str = Field(default="", alias="mainNumber")
    secondary_number: str = Field(default="", alias="secondaryNumber")
    message_template: str = Field(default="", alias="messageTemplate")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
