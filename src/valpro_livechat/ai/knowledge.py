"""Índice de conhecimento (FAQ) consultado pelo motor de IA.

Busca por palavra-chave: um item é relevante se qualquer keyword (em
minúsculas) for substring da mensagem em minúsculas. A ordem do índice é
preservada e o resultado é limitado aos primeiros itens encontrados.
"""

from __future__ import annotations

from collections.abc import Iterable

from valpro_livechat.domain.models import KnowledgeItem

MAX_RELEVANT_ITEMS = 3

DEFAULT_KNOWLEDGE_BASE: tuple[KnowledgeItem, ...] = (
    KnowledgeItem(
        topic="Pendirian PT",
        question="Bagaimana cara mendirikan PT?",
        answer=(
            "Pendirian PT meliputi pembuatan akta notaris, pengesahan SK Kemenkumham, "
            "dan pendaftaran NIB melalui OSS."
        ),
        keywords=("pendirian pt", "mendirikan pt", "bikin pt", "buat pt", "akta pt"),
    ),
    KnowledgeItem(
        topic="Pendirian CV",
        question="Apa syarat mendirikan CV?",
        answer=(
            "Pendirian CV membutuhkan akta notaris, pendaftaran di Kemenkumham, "
            "dan NIB. Minimal dua pendiri (sekutu aktif dan pasif)."
        ),
        keywords=("pendirian cv", "mendirikan cv", "bikin cv", "buat cv"),
    ),
    KnowledgeItem(
        topic="Sertifikasi ISO",
        question="Sertifikasi ISO apa saja yang tersedia?",
        answer="Kami membantu sertifikasi ISO 9001, 14001, 45001, dan 27001.",
        keywords=("iso", "9001", "14001", "45001", "27001", "sertifikasi"),
    ),
    KnowledgeItem(
        topic="SBU Konstruksi",
        question="Apa itu SBU Konstruksi?",
        answer="SBU adalah Sertifikat Badan Usaha jasa konstruksi yang diterbitkan melalui LPJK.",
        keywords=("sbu", "konstruksi", "lpjk"),
    ),
    KnowledgeItem(
        topic="HAKI",
        question="Apakah bisa mendaftarkan merek?",
        answer="Kami melayani pendaftaran merek, paten, dan hak cipta di DJKI.",
        keywords=("haki", "merek", "paten", "hak cipta", "djki"),
    ),
    KnowledgeItem(
        topic="NIB",
        question="Apa itu NIB?",
        answer="NIB (Nomor Induk Berusaha) adalah identitas pelaku usaha yang diterbitkan OSS.",
        keywords=("nib", "nomor induk berusaha", "oss"),
    ),
)


class KnowledgeIndex:
    """Lookup estático topic → answer/keywords.

    `replace` troca o conteúdo inteiro de uma vez; leitores concorrentes veem
    o índice antigo ou o novo, nunca um estado parcial.
    """

    def __init__(self, items: Iterable[KnowledgeItem] = ()) -> None:
        self._items: tuple[KnowledgeItem, ...] = tuple(items)

    @property
    def items(self) -> tuple[KnowledgeItem, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, items: Iterable[KnowledgeItem]) -> None:
        self._items = tuple(items)

    def find_relevant(self, message: str, limit: int = MAX_RELEVANT_ITEMS) -> list[KnowledgeItem]:
        lowered = message.lower()
        relevant: list[KnowledgeItem] = []
        for item in self._items:
            if any(keyword.lower() in lowered for keyword in item.keywords if keyword):
                relevant.append(item)
                if len(relevant) >= limit:
                    break
        return relevant
