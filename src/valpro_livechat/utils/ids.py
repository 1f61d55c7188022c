"""Geradores de identificadores."""

from __future__ import annotations

import uuid


def new_document_id() -> str:
    """Gera um id de documento no formato do Firestore (20 caracteres)."""

    return uuid.uuid4().hex[:20]
