"""Heurísticas por palavra-chave: sentimento e sugestão de handover.

Todas as verificações são substring case-insensitive.
"""

from __future__ import annotations

from collections.abc import Iterable

from valpro_livechat.domain.enums import Sentiment


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(phrase.lower() in lowered for phrase in phrases if phrase)


def classify_sentiment(
    message: str,
    frustrated_phrases: Iterable[str],
    positive_phrases: Iterable[str],
) -> Sentiment:
    """Frustrado tem precedência: a lista inteira é varrida antes da positiva."""
    if contains_any(message, frustrated_phrases):
        return Sentiment.FRUSTRATED
    if contains_any(message, positive_phrases):
        return Sentiment.POSITIVE
    return Sentiment.NEUTRAL


def should_suggest_handover(
    sentiment: Sentiment,
    user_message: str,
    bot_reply: str,
    human_request_phrases: Iterable[str],
    uncertainty_phrases: Iterable[str],
) -> bool:
    """Sugere atendente se frustrado, se pediu humano ou se a IA admitiu incerteza."""
    if sentiment == Sentiment.FRUSTRATED:
        return True
    if contains_any(user_message, human_request_phrases):
        return True
    return contains_any(bot_reply, uncertainty_phrases)
