"""Prompt de sistema e listas de frases do assistente Valpro.

Valores padrão; o motor recebe tudo via AIEngineConfig na construção.
"""

from __future__ import annotations

from collections.abc import Sequence

from valpro_livechat.domain.models import KnowledgeItem

SYSTEM_PROMPT = """Kamu adalah asisten virtual Valpro Intertech, perusahaan jasa legalitas dan perizinan usaha di Indonesia.

PERAN:
- Menjawab pertanyaan tentang layanan: Pendirian PT, CV, Sertifikasi ISO, SBU Konstruksi, HAKI, NIB, dan lainnya
- Memberikan informasi umum tentang proses dan persyaratan legalitas
- Mengarahkan pengunjung ke layanan yang tepat

GAYA KOMUNIKASI:
- Ramah, profesional, dan informatif
- Gunakan Bahasa Indonesia yang baik
- Jawaban singkat dan padat (2-3 kalimat jika memungkinkan)
- Gunakan emoji secukupnya untuk kesan friendly

BATASAN:
- JANGAN memberikan harga spesifik (katakan "untuk detail harga, silakan konsultasi dengan tim kami")
- JANGAN memberikan jaminan waktu penyelesaian yang pasti
- Jika tidak yakin, sarankan untuk bicara dengan admin
- HANYA menjawab topik: Legalitas, Hukum Bisnis, Perizinan, dan Layanan Perusahaan
- TOLAK pertanyaan di luar topik (curhat, coding, politik, dll) dengan sopan: "Maaf, saya hanya bisa membantu seputar legalitas & bisnis."

CONTOH LAYANAN:
- Pendirian PT/CV: Pembuatan akta, SK Kemenkumham, NIB
- Sertifikasi ISO: ISO 9001, 14001, 45001, 27001
- SBU Konstruksi: Sertifikat Badan Usaha dari LPJK
- HAKI: Pendaftaran Merek, Paten, Hak Cipta"""

RELEVANT_INFO_HEADER = "\n\nINFORMASI RELEVAN:\n"

# Ordem importa: a primeira frase encontrada decide
FRUSTRATED_PHRASES: tuple[str, ...] = (
    "tidak membantu", "payah", "lambat", "bingung", "kesel", "marah",
    "kecewa", "buruk", "jelek", "lama sekali", "susah", "ribet",
    "bodoh", "tolol", "goblok", "bangsat", "anjing", "babi",
)

POSITIVE_PHRASES: tuple[str, ...] = (
    "terima kasih", "makasih", "bagus", "hebat", "mantap", "keren",
    "membantu", "jelas", "paham", "mengerti", "terbantu", "baik",
)

HUMAN_REQUEST_PHRASES: tuple[str, ...] = (
    "bicara dengan manusia", "hubungi admin", "chat admin",
    "bicara admin", "mau ke admin", "operator", "cs",
    "customer service", "complaint", "komplain",
)

UNCERTAINTY_PHRASES: tuple[str, ...] = (
    "tidak yakin", "kurang tahu", "sebaiknya hubungi",
    "lebih baik tanya", "konsultasikan", "tim kami",
)


def build_system_prompt(base_prompt: str, relevant: Sequence[KnowledgeItem]) -> str:
    """Concatena o prompt base com o bloco de informação relevante (se houver)."""
    if not relevant:
        return base_prompt

    lines = [f"- {item.topic}: {item.answer}\n" for item in relevant]
    return base_prompt + RELEVANT_INFO_HEADER + "".join(lines)
