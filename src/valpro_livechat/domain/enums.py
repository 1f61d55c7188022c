"""Enums de domínio: status de sessão, remetentes, sentimento e presença."""

from __future__ import annotations

from enum import StrEnum


class SessionStatus(StrEnum):
    """Status do ciclo de vida de uma sessão de chat."""

    BOT = "bot"
    QUEUED = "queued"
    LIVE = "live"
    CLOSED = "closed"


ACTIVE_STATUSES: tuple[SessionStatus, ...] = (
    SessionStatus.BOT,
    SessionStatus.QUEUED,
    SessionStatus.LIVE,
)
"""Status em que a sessão ainda aceita mensagens."""

AGENT_VISIBLE_STATUSES: tuple[SessionStatus, ...] = (
    SessionStatus.QUEUED,
    SessionStatus.LIVE,
)
"""Status exibidos no painel dos atendentes."""


class Sender(StrEnum):
    """Autor de uma mensagem."""

    VISITOR = "visitor"
    BOT = "bot"
    ADMIN = "admin"
    SYSTEM = "system"


class Sentiment(StrEnum):
    """Classificação grosseira do humor do visitante.

    TIMEOUT é um sentinela gravado pelo reaper, nunca produzido pelo motor.
    """

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    FRUSTRATED = "frustrated"
    TIMEOUT = "timeout"


class PresenceState(StrEnum):
    """Presença reportada por um atendente."""

    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"
