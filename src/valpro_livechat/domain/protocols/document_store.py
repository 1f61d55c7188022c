"""Protocolo de domínio para o document store (coleções chaveadas)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal

FilterOp = Literal["==", "in", "<"]


@dataclass(frozen=True)
class FieldFilter:
    """Filtro por campo: igualdade, pertinência a conjunto ou menor-que."""

    field_path: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class Document:
    """Snapshot de um documento (id + dados)."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """Contrato assíncrono mínimo sobre coleções de documentos.

    Falhas de infraestrutura devem ser levantadas como StorageError;
    `update` em documento inexistente levanta NotFoundError.
    """

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Insere documento com id gerado e retorna o id."""

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        """Retorna os dados do documento ou None."""

    @abstractmethod
    async def set(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Grava o documento inteiro (ou mescla campos com merge=True)."""

    @abstractmethod
    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> None:
        """Atualização parcial de campos de um documento existente."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[FieldFilter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        """Consulta por filtros, com ordenação e limite opcionais."""
