"""Tabela de transições de status da sessão de chat.

- TRANSITIONS[current_status] = status de destino permitidos
- closed é terminal: não aparece como origem
- Validação pura: sem side effects
"""

from __future__ import annotations

from valpro_livechat.domain.enums import SessionStatus
from valpro_livechat.domain.errors import InvalidTransitionError

TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    # bot → bot é o return-to-bot sobre sessão que já está com a IA
    SessionStatus.BOT: frozenset({SessionStatus.BOT, SessionStatus.QUEUED, SessionStatus.CLOSED}),
    # queued → queued: novo pedido de handover é idempotente
    SessionStatus.QUEUED: frozenset(
        {SessionStatus.QUEUED, SessionStatus.LIVE, SessionStatus.BOT, SessionStatus.CLOSED}
    ),
    # live → live: outro atendente assume a conversa
    SessionStatus.LIVE: frozenset({SessionStatus.LIVE, SessionStatus.BOT, SessionStatus.CLOSED}),
}

TERMINAL_STATUSES = frozenset({SessionStatus.CLOSED})


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """Verifica se a transição é permitida."""
    return target in TRANSITIONS.get(current, frozenset())


def validate_transition(current: SessionStatus, target: SessionStatus) -> SessionStatus:
    """Retorna o status de destino ou lança InvalidTransitionError."""
    if not can_transition(current, target):
        raise InvalidTransitionError(SessionStatus(current), SessionStatus(target))
    return target


def request_handover(current: SessionStatus) -> SessionStatus:
    """Visitante pediu um atendente humano."""
    return validate_transition(current, SessionStatus.QUEUED)


def claim(current: SessionStatus) -> SessionStatus:
    """Atendente assume a conversa."""
    return validate_transition(current, SessionStatus.LIVE)


def return_to_bot(current: SessionStatus) -> SessionStatus:
    """Conversa volta para a IA."""
    return validate_transition(current, SessionStatus.BOT)


def close(current: SessionStatus) -> SessionStatus:
    """Encerramento manual ou por inatividade."""
    return validate_transition(current, SessionStatus.CLOSED)
