"""Taxonomia de erros do core de live chat.

- StorageError: store indisponível/timeout; propagado ao chamador, sem retry local.
- NotFoundError: documento ausente; consultas de settings recuperam em default.
- InvalidTransitionError: mudança de status proibida pela FSM.
- TransportError (Network/Parse/Remote): falhas do transporte LLM.
- AIEngineError: falha uniforme do motor de IA, recuperada pelo pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from valpro_livechat.domain.enums import SessionStatus


class LiveChatError(Exception):
    """Erro base do pacote."""


class StorageError(LiveChatError):
    """Falha ao ler ou gravar no document store."""


class NotFoundError(LiveChatError):
    """Documento inexistente."""

    def __init__(self, collection: str, document_id: str) -> None:
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Document not found: {collection}/{document_id}")


class SessionNotFoundError(NotFoundError):
    """Sessão de chat inexistente."""

    def __init__(self, session_id: str, collection: str = "web_chat_sessions") -> None:
        super().__init__(collection, session_id)
        self.session_id = session_id


class InvalidTransitionError(LiveChatError):
    def __init__(self, from_status: SessionStatus, to_status: SessionStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid transition: {from_status.value} -> {to_status.value}")


class TransportError(LiveChatError):
    """Falha do transporte LLM (base)."""


class NetworkError(TransportError):
    """Falha de rede, conexão ou timeout HTTP."""


class ParseError(TransportError):
    """Resposta do provedor sem conteúdo utilizável."""


class RemoteError(TransportError):
    """Provedor respondeu com erro explícito."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AIEngineError(LiveChatError):
    """Falha uniforme do motor de IA (transporte, parse, timeout ou cancelamento)."""

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or f"AI engine error: {reason}")
