"""Camada de infraestrutura: adapters para serviços externos.

Exporta:
- create_document_store: factory memory | firestore
- InMemoryDocumentStore
- ContactSettingsRepository
- load_knowledge_items

O adapter Firestore é importado sob demanda pela factory.
"""

from valpro_livechat.infra.contact_settings import ContactSettingsRepository
from valpro_livechat.infra.document_store import create_document_store
from valpro_livechat.infra.document_store_memory import InMemoryDocumentStore
from valpro_livechat.infra.knowledge_repository import load_knowledge_items

__all__ = [
    "ContactSettingsRepository",
    "InMemoryDocumentStore",
    "create_document_store",
    "load_knowledge_items",
]
