"""Re-exports dos Protocolos de domínio para uso por Application."""

from __future__ import annotations

from valpro_livechat.domain.protocols.document_store import (
    Document,
    DocumentStore,
    FieldFilter,
)
from valpro_livechat.domain.protocols.llm_transport import LLMTransport

__all__ = [
    "Document",
    "DocumentStore",
    "FieldFilter",
    "LLMTransport",
]
