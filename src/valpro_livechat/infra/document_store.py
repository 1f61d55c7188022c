"""Factory do document store conforme backend configurado."""

from __future__ import annotations

from typing import Any

from valpro_livechat.domain.protocols.document_store import DocumentStore
from valpro_livechat.infra.document_store_memory import InMemoryDocumentStore
from valpro_livechat.observability.logging import get_logger

logger = get_logger(__name__)


def create_document_store(settings: Any, firestore_client: Any | None = None) -> DocumentStore:
    """Cria o document store a partir de `settings.document_store_backend`.

    Args:
        settings: Objeto Settings com DOCUMENT_STORE_BACKEND, FIRESTORE_PROJECT_ID etc.
        firestore_client: AsyncClient já construído (sobrepõe settings)

    Returns:
        Instância de DocumentStore apropriada
    """
    backend = getattr(settings, "document_store_backend", "memory").lower()

    if backend == "memory":
        logger.info("document_store_backend_selected", extra={"backend": "memory"})
        return InMemoryDocumentStore()

    if backend == "firestore":
        from valpro_livechat.infra.document_store_firestore import FirestoreDocumentStore

        if firestore_client is None:
            from google.cloud import firestore

            firestore_client = firestore.AsyncClient(
                project=settings.firestore_project_id,
                database=settings.firestore_database_id,
            )
        logger.info("document_store_backend_selected", extra={"backend": "firestore"})
        return FirestoreDocumentStore(firestore_client)

    raise ValueError(f"DOCUMENT_STORE_BACKEND inválido: {backend}")
