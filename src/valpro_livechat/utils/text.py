"""Helpers de texto e telefone (formato WhatsApp Indonésia)."""

from __future__ import annotations

import re

_NON_DIGIT = re.compile(r"\D")


def format_phone_number(number: str) -> str:
    """Normaliza para o formato internacional sem '+' (628xxx).

    - remove tudo que não é dígito
    - 08xx → 628xx
    - 8xx → 628xx
    """
    phone = _NON_DIGIT.sub("", number or "")
    if phone.startswith("0"):
        phone = "62" + phone[1:]
    if phone.startswith("8"):
        phone = "62" + phone
    return phone


def format_phone_for_display(number: str) -> str:
    """Formato local para exibição (08xxx)."""
    phone = format_phone_number(number)
    if phone.startswith("62"):
        return "0" + phone[2:]
    return phone


def normalize_newlines(text: str) -> str:
    """Converte CRLF/CR em LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def truncate(text: str, max_len: int) -> str:
    """Corta em max_len caracteres, acrescentando '...' quando cortado."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."
