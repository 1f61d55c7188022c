"""Resposta de fallback quando o motor de IA falha."""

from __future__ import annotations

from valpro_livechat.domain.enums import Sentiment
from valpro_livechat.domain.models import ChatResponse

DEFAULT_ESCALATION_THRESHOLD = 2

OFFER_HANDOVER_REPLY = "Maaf, saya mengalami kesulitan. Mau saya hubungkan dengan admin kami?"
RETRY_REPLY = "Maaf, ada sedikit gangguan. Bisa ulangi pertanyaan Anda?"


def escalation_reply(
    failed_attempts: int, threshold: int = DEFAULT_ESCALATION_THRESHOLD
) -> ChatResponse:
    """A partir de `threshold` falhas acumuladas, oferece o atendente humano."""
    if failed_attempts >= threshold:
        return ChatResponse(
            reply=OFFER_HANDOVER_REPLY,
            suggest_handover=True,
            sentiment=Sentiment.NEUTRAL,
        )
    return ChatResponse(
        reply=RETRY_REPLY,
        suggest_handover=False,
        sentiment=Sentiment.NEUTRAL,
    )
