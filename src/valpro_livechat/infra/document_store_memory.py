"""Implementação de DocumentStore em memória (apenas dev/testes)."""

from __future__ import annotations

import copy
import logging
from typing import Any

from valpro_livechat.domain.errors import NotFoundError
from valpro_livechat.domain.protocols.document_store import Document, DocumentStore, FieldFilter
from valpro_livechat.observability.logging import get_logger
from valpro_livechat.utils.ids import new_document_id

logger: logging.Logger = get_logger(__name__)

_MISSING = object()


def _matches(data: dict[str, Any], flt: FieldFilter) -> bool:
    value = data.get(flt.field_path, _MISSING)
    if value is _MISSING or value is None:
        # Firestore ignora documentos sem o campo filtrado
        return False
    if flt.op == "==":
        return value == flt.value
    if flt.op == "in":
        return value in flt.value
    if flt.op == "<":
        return value < flt.value
    raise ValueError(f"Unsupported filter op: {flt.op}")


class InMemoryDocumentStore(DocumentStore):
    """Armazenamento em memória (não usar em produção).

    Documentos são copiados na entrada e na saída; quem chama nunca recebe
    referência para o estado interno.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        document_id = new_document_id()
        self._collection(collection)[document_id] = copy.deepcopy(data)
        logger.debug(
            "Document added (in-memory)",
            extra={"collection": collection, "document_id": document_id[:8] + "..."},
        )
        return document_id

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        data = self._collection(collection).get(document_id)
        if data is None:
            return None
        return copy.deepcopy(data)

    async def set(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        docs = self._collection(collection)
        if merge and document_id in docs:
            docs[document_id].update(copy.deepcopy(data))
        else:
            docs[document_id] = copy.deepcopy(data)

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        docs = self._collection(collection)
        if document_id not in docs:
            raise NotFoundError(collection, document_id)
        docs[document_id].update(copy.deepcopy(fields))

    async def query(
        self,
        collection: str,
        filters: list[FieldFilter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        results = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(_matches(data, flt) for flt in filters or [])
        ]

        if order_by:
            results = [doc for doc in results if doc.data.get(order_by) is not None]
            results.sort(key=lambda doc: doc.data[order_by], reverse=descending)

        if limit is not None:
            results = results[:limit]
        return results
