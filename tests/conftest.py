from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from valpro_livechat.application.presence import AgentPresenceRegistry
from valpro_livechat.application.sessions import SessionService
from valpro_livechat.config.settings import get_settings
from valpro_livechat.domain.errors import NetworkError
from valpro_livechat.domain.protocols.llm_transport import LLMTransport
from valpro_livechat.infra.document_store_memory import InMemoryDocumentStore


class FakeClock:
    """Relógio controlável; cada leitura avança `step` para ordenar mensagens."""

    def __init__(self, start: datetime, step: timedelta = timedelta(milliseconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


class ScriptedTransport(LLMTransport):
    """Transporte fake: devolve respostas (ou levanta erros) em sequência."""

    def __init__(self, *outcomes: str | Exception) -> None:
        self.outcomes = list(outcomes) or ["Halo! Ada yang bisa kami bantu?"]
        self.calls: list[list[dict[str, str]]] = []

    async def call(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(messages)
        outcome = self.outcomes[0] if len(self.outcomes) == 1 else self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 15, 9, 0, tzinfo=UTC))


@pytest.fixture()
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def registry(clock: FakeClock) -> AgentPresenceRegistry:
    return AgentPresenceRegistry(clock=clock)


@pytest.fixture()
def sessions(
    store: InMemoryDocumentStore, registry: AgentPresenceRegistry, clock: FakeClock
) -> SessionService:
    return SessionService(store, registry, clock=clock)


@pytest.fixture()
def scripted_transport():
    """Factory: scripted_transport("resposta", NetworkError(...), ...)."""
    return ScriptedTransport


@pytest.fixture()
def ok_transport() -> ScriptedTransport:
    return ScriptedTransport("Pendirian PT bisa kami bantu 😊")


@pytest.fixture()
def failing_transport() -> ScriptedTransport:
    return ScriptedTransport(NetworkError("connection refused"))
