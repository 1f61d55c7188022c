"""Montagem do grafo de objetos do core a partir de Settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from valpro_livechat.ai.engine import AIEngineConfig, AIResponseEngine
from valpro_livechat.ai.knowledge import DEFAULT_KNOWLEDGE_BASE, KnowledgeIndex
from valpro_livechat.ai.llm_client import GroqChatTransport
from valpro_livechat.application.pipeline import MessagePipeline
from valpro_livechat.application.presence import AgentPresenceRegistry
from valpro_livechat.application.reaper import InactivityReaper
from valpro_livechat.application.sessions import SessionService
from valpro_livechat.config.settings import Settings, get_settings
from valpro_livechat.domain.errors import StorageError
from valpro_livechat.domain.protocols.document_store import DocumentStore
from valpro_livechat.domain.protocols.llm_transport import LLMTransport
from valpro_livechat.infra.contact_settings import ContactSettingsRepository
from valpro_livechat.infra.document_store import create_document_store
from valpro_livechat.infra.knowledge_repository import load_knowledge_items
from valpro_livechat.observability.logging import configure_logging, get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass
class LiveChatCore:
    settings: Settings
    store: DocumentStore
    knowledge: KnowledgeIndex
    registry: AgentPresenceRegistry
    sessions: SessionService
    engine: AIResponseEngine
    pipeline: MessagePipeline
    reaper: InactivityReaper
    contact_settings: ContactSettingsRepository

    async def load_knowledge(self) -> int:
        """Troca o índice pelo conteúdo da coleção; mantém o padrão se vazia."""
        try:
            items = await load_knowledge_items(self.store, self.settings.knowledge_collection)
        except StorageError as e:
            logger.warning("knowledge_load_failed", extra={"error_type": type(e).__name__})
            return len(self.knowledge)

        if items:
            self.knowledge.replace(items)
        return len(self.knowledge)

    async def start(self) -> None:
        await self.load_knowledge()
        if self.settings.reaper_enabled:
            self.reaper.start()
        logger.info("livechat_core_started", extra={"knowledge_items": len(self.knowledge)})

    async def stop(self) -> None:
        await self.reaper.stop()
        logger.info("livechat_core_stopped")


def build_core(
    settings: Settings | None = None,
    *,
    document_store: DocumentStore | None = None,
    transport: LLMTransport | None = None,
) -> LiveChatCore:
    """Valida a configuração e constrói o core.

    Raises:
        ValueError: com todos os erros de configuração encontrados
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name)

    errors = settings.validate_all()
    if errors:
        raise ValueError("Invalid configuration: " + "; ".join(errors))

    store = document_store or create_document_store(settings)
    transport = transport or GroqChatTransport.from_settings(settings)

    knowledge = KnowledgeIndex(DEFAULT_KNOWLEDGE_BASE)
    registry = AgentPresenceRegistry(max_chats=settings.presence_max_chats)
    sessions = SessionService(
        store,
        registry,
        sessions_collection=settings.sessions_collection,
        messages_collection=settings.messages_collection,
    )
    engine = AIResponseEngine(AIEngineConfig.from_settings(settings), transport, knowledge)
    pipeline = MessagePipeline(
        sessions,
        engine,
        history_limit=settings.history_limit,
        escalation_threshold=settings.escalation_threshold,
    )
    reaper = InactivityReaper(
        sessions,
        cutoff=timedelta(minutes=settings.reaper_cutoff_minutes),
        interval_seconds=settings.reaper_interval_seconds,
    )
    contact_settings = ContactSettingsRepository(store, settings.settings_collection)

    logger.info(
        "livechat_core_built",
        extra={"environment": settings.environment, "backend": settings.document_store_backend},
    )
    return LiveChatCore(
        settings=settings,
        store=store,
        knowledge=knowledge,
        registry=registry,
        sessions=sessions,
        engine=engine,
        pipeline=pipeline,
        reaper=reaper,
        contact_settings=contact_settings,
    )
