"""Repositório do documento de contatos dos atendentes (settings/whatsapp_settings)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from valpro_livechat.domain.models import ContactSettings, utc_now
from valpro_livechat.domain.protocols.document_store import DocumentStore
from valpro_livechat.observability.logging import get_logger

logger = get_logger(__name__)

CONTACT_SETTINGS_DOCUMENT = "whatsapp_settings"


class ContactSettingsRepository:
    """Leitura e gravação das configurações de contato.

    Documento ausente não é falha: retorna ContactSettings vazio.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str = "settings",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._collection = collection
        self._clock = clock or utc_now

    async def get(self) -> ContactSettings:
        data = await self._store.get(self._collection, CONTACT_SETTINGS_DOCUMENT)
        if data is None:
            logger.debug("contact_settings_not_found_using_defaults")
            return ContactSettings(updated_at=self._clock())
        return ContactSettings.model_validate(data)

    async def save(self, settings: ContactSettings) -> ContactSettings:
        """Grava com merge para não sobrescrever campos mantidos por outros clientes."""
        stored = settings.model_copy(update={"updated_at": self._clock()})
        await self._store.set(
            self._collection,
            CONTACT_SETTINGS_DOCUMENT,
            stored.to_document(),
            merge=True,
        )
        logger.info("contact_settings_updated")
        return stored
