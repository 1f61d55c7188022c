"""Carga da base de conhecimento a partir do document store."""

from __future__ import annotations

from pydantic import ValidationError

from valpro_livechat.domain.models import KnowledgeItem
from valpro_livechat.domain.protocols.document_store import DocumentStore
from valpro_livechat.observability.logging import get_logger

logger = get_logger(__name__)


async def load_knowledge_items(
    store: DocumentStore, collection: str = "knowledge_base"
) -> list[KnowledgeItem]:
    """Lê todos os itens da coleção, ordenados por tópico.

    Documentos malformados são ignorados (com log), não derrubam a carga.
    """
    documents = await store.query(collection, order_by="topic")

    items: list[KnowledgeItem] = []
    for doc in documents:
        try:
            items.append(KnowledgeItem.model_validate(doc.data))
        except ValidationError as e:
            logger.warning(
                "knowledge_item_skipped",
                extra={"document_id": doc.id, "errors": e.error_count()},
            )

    logger.info("knowledge_base_loaded", extra={"items": len(items)})
    return items
