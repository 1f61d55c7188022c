"""FSM da sessão de chat: tabela de transições e validadores.

Exporta:
- TRANSITIONS / TERMINAL_STATUSES
- can_transition / validate_transition
- helpers por operação: request_handover, claim, return_to_bot, close
"""

from valpro_livechat.domain.session.transitions import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    can_transition,
    claim,
    close,
    request_handover,
    return_to_bot,
    validate_transition,
)

__all__ = [
    "TRANSITIONS",
    "TERMINAL_STATUSES",
    "can_transition",
    "validate_transition",
    "request_handover",
    "claim",
    "return_to_bot",
    "close",
]
