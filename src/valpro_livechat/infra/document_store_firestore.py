"""Implementação de DocumentStore usando Firestore (produção)."""

from __future__ import annotations

import logging
from typing import Any

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter as FirestoreFieldFilter

from valpro_livechat.domain.errors import NotFoundError, StorageError
from valpro_livechat.domain.protocols.document_store import Document, DocumentStore, FieldFilter
from valpro_livechat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class FirestoreDocumentStore(DocumentStore):
    """Document store sobre `firestore.AsyncClient`.

    Erros do SDK (GoogleAPIError) são convertidos em StorageError;
    NotFound em `update` vira NotFoundError.
    """

    def __init__(self, client: firestore.AsyncClient) -> None:
        self._client = client

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        try:
            _, doc_ref = await self._client.collection(collection).add(data)
        except GoogleAPIError as e:
            logger.error(
                "Failed to add document to Firestore",
                extra={"collection": collection, "error": str(e)},
            )
            raise StorageError(f"Firestore add failed: {e}") from e
        return doc_ref.id

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        try:
            snapshot = await self._client.collection(collection).document(document_id).get()
        except GoogleAPIError as e:
            logger.error(
                "Failed to load document from Firestore",
                extra={
                    "collection": collection,
                    "document_id": document_id[:8] + "...",
                    "error": str(e),
                },
            )
            raise StorageError(f"Firestore get failed: {e}") from e

        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def set(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        doc_ref = self._client.collection(collection).document(document_id)
        try:
            await doc_ref.set(data, merge=merge)
        except GoogleAPIError as e:
            logger.error(
                "Failed to save document to Firestore",
                extra={
                    "collection": collection,
                    "document_id": document_id[:8] + "...",
                    "error": str(e),
                },
            )
            raise StorageError(f"Firestore set failed: {e}") from e

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        doc_ref = self._client.collection(collection).document(document_id)
        try:
            await doc_ref.update(fields)
        except NotFound as e:
            raise NotFoundError(collection, document_id) from e
        except GoogleAPIError as e:
            logger.error(
                "Failed to update document in Firestore",
                extra={
                    "collection": collection,
                    "document_id": document_id[:8] + "...",
                    "error": str(e),
                },
            )
            raise StorageError(f"Firestore update failed: {e}") from e

    async def query(
        self,
        collection: str,
        filters: list[FieldFilter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        query: Any = self._client.collection(collection)
        for flt in filters or []:
            query = query.where(filter=FirestoreFieldFilter(flt.field_path, flt.op, flt.value))
        if order_by:
            direction = (
                firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            )
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)

        try:
            return [
                Document(id=snapshot.id, data=snapshot.to_dict() or {})
                async for snapshot in query.stream()
            ]
        except GoogleAPIError as e:
            logger.error(
                "Failed to query Firestore",
                extra={"collection": collection, "error": str(e)},
            )
            raise StorageError(f"Firestore query failed: {e}") from e
