"""Testes do MessagePipeline: modo live, histórico, escalonamento e gravações."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIResponseValidationError

from valpro_livechat.ai.engine import AIEngineConfig, AIResponseEngine
from valpro_livechat.ai.knowledge import DEFAULT_KNOWLEDGE_BASE, KnowledgeIndex
from valpro_livechat.ai.llm_client import GroqChatTransport
from valpro_livechat.application.escalation import OFFER_HANDOVER_REPLY, RETRY_REPLY
from valpro_livechat.application.pipeline import MessagePipeline, build_history
from valpro_livechat.domain.enums import Sender, SessionStatus, Sentiment
from valpro_livechat.domain.errors import NetworkError, SessionNotFoundError, StorageError
from valpro_livechat.domain.models import ChatMessage, VisitorInfo

VISITOR = VisitorInfo(visitor_id="visitor-1", name="Sari", email="sari@example.com")


def _pipeline(sessions, transport) -> MessagePipeline:
    engine = AIResponseEngine(AIEngineConfig(), transport, KnowledgeIndex(DEFAULT_KNOWLEDGE_BASE))
    return MessagePipeline(sessions, engine)


async def _visitor_says(sessions, session_id: str, text: str, clock) -> None:
    await sessions.save_message(
        ChatMessage(session_id=session_id, sender=Sender.VISITOR, content=text, timestamp=clock())
    )


def test_build_history_roles() -> None:
    messages = [
        ChatMessage(session_id="s", sender=Sender.VISITOR, content="v"),
        ChatMessage(session_id="s", sender=Sender.SYSTEM, content="sys"),
        ChatMessage(session_id="s", sender=Sender.BOT, content="b"),
        ChatMessage(session_id="s", sender=Sender.ADMIN, content="a"),
    ]
    assert build_history(messages) == [
        {"role": "user", "content": "v"},
        {"role": "assistant", "content": "b"},
        {"role": "assistant", "content": "a"},
    ]


class TestLiveSession:
    @pytest.mark.asyncio
    async def test_live_session_skips_ai(self, sessions, ok_transport) -> None:
        session = await sessions.create_session(VISITOR)
        await sessions.request_handover(session.id)
        await sessions.claim_session(session.id, "admin-1", "Ani")

        response = await _pipeline(sessions, ok_transport).process(session.id, "halo")

        assert response.reply == ""
        assert response.suggest_handover is False
        assert response.sentiment == Sentiment.NEUTRAL
        assert ok_transport.calls == []


class TestSuccessfulTurn:
    @pytest.mark.asyncio
    async def test_reply_is_saved_and_sentiment_persisted(
        self, sessions, scripted_transport, clock
    ) -> None:
        transport = scripted_transport("Sama-sama! 😊")
        session = await sessions.create_session(VISITOR)
        await _visitor_says(sessions, session.id, "terima kasih", clock)

        response = await _pipeline(sessions, transport).process(session.id, "terima kasih")

        assert response.reply == "Sama-sama! 😊"
        assert response.sentiment == Sentiment.POSITIVE

        messages = await sessions.get_messages(session.id)
        assert messages[-1].sender == Sender.BOT
        assert messages[-1].content == "Sama-sama! 😊"
        assert (await sessions.get_session(session.id)).sentiment == Sentiment.POSITIVE

    @pytest.mark.asyncio
    async def test_history_excludes_system_messages(
        self, sessions, ok_transport, clock
    ) -> None:
        session = await sessions.create_session(VISITOR)
        await _visitor_says(sessions, session.id, "halo", clock)
        await sessions.request_handover(session.id)
        await sessions.return_to_bot(session.id)

        await _pipeline(sessions, ok_transport).process(session.id, "mau bikin pt")

        sent = ok_transport.calls[0]
        contents = [m["content"] for m in sent[1:-1]]
        assert contents == ["halo"]
        assert sent[-1] == {"role": "user", "content": "mau bikin pt"}

    @pytest.mark.asyncio
    async def test_success_does_not_reset_failure_counter(
        self, sessions, scripted_transport
    ) -> None:
        transport = scripted_transport(NetworkError("x"), "ok")
        session = await sessions.create_session(VISITOR)
        pipeline = _pipeline(sessions, transport)

        await pipeline.process(session.id, "halo")
        await pipeline.process(session.id, "halo lagi")

        assert (await sessions.get_session(session.id)).failed_attempts == 1


class TestEscalation:
    @pytest.mark.asyncio
    async def test_two_consecutive_failures_offer_handover(
        self, sessions, failing_transport
    ) -> None:
        session = await sessions.create_session(VISITOR)
        pipeline = _pipeline(sessions, failing_transport)

        first = await pipeline.process(session.id, "halo")
        assert first.reply == RETRY_REPLY
        assert first.suggest_handover is False
        assert (await sessions.get_session(session.id)).failed_attempts == 1

        second = await pipeline.process(session.id, "halo?")
        assert second.reply == OFFER_HANDOVER_REPLY
        assert second.suggest_handover is True
        assert second.sentiment == Sentiment.NEUTRAL
        assert (await sessions.get_session(session.id)).failed_attempts == 2

    @pytest.mark.asyncio
    async def test_fallback_reply_is_saved_as_bot_message(
        self, sessions, failing_transport
    ) -> None:
        session = await sessions.create_session(VISITOR)
        await _pipeline(sessions, failing_transport).process(session.id, "halo")

        messages = await sessions.get_messages(session.id)
        assert [(m.sender, m.content) for m in messages] == [(Sender.BOT, RETRY_REPLY)]

    @pytest.mark.asyncio
    async def test_return_to_bot_restarts_escalation(
        self, sessions, failing_transport
    ) -> None:
        session = await sessions.create_session(VISITOR)
        pipeline = _pipeline(sessions, failing_transport)
        await pipeline.process(session.id, "a")
        await pipeline.process(session.id, "b")

        await sessions.request_handover(session.id)
        await sessions.return_to_bot(session.id)

        response = await pipeline.process(session.id, "c")
        assert response.suggest_handover is False


class TestStorageFailures:
    @pytest.mark.asyncio
    async def test_secondary_writes_are_best_effort(
        self, sessions, store, ok_transport
    ) -> None:
        session = await sessions.create_session(VISITOR)
        store.add = AsyncMock(side_effect=StorageError("down"))
        store.update = AsyncMock(side_effect=StorageError("down"))

        response = await _pipeline(sessions, ok_transport).process(session.id, "halo")

        assert response.reply == "Pendirian PT bisa kami bantu 😊"

    @pytest.mark.asyncio
    async def test_history_load_failure_propagates(self, sessions, store, ok_transport) -> None:
        session = await sessions.create_session(VISITOR)
        store.query = AsyncMock(side_effect=StorageError("down"))

        with pytest.raises(StorageError):
            await _pipeline(sessions, ok_transport).process(session.id, "halo")

    @pytest.mark.asyncio
    async def test_counter_persist_failure_still_escalates(
        self, sessions, store, failing_transport
    ) -> None:
        session = await sessions.create_session(VISITOR)
        await store.update("web_chat_sessions", session.id, {"failedAttempts": 1})
        store.update = AsyncMock(side_effect=StorageError("down"))

        response = await _pipeline(sessions, failing_transport).process(session.id, "halo")

        assert response.suggest_handover is True

    @pytest.mark.asyncio
    async def test_missing_session_propagates(self, sessions, ok_transport) -> None:
        with pytest.raises(SessionNotFoundError):
            await _pipeline(sessions, ok_transport).process("ghost", "halo")


@pytest.mark.asyncio
async def test_queued_session_still_answered_by_ai(sessions, ok_transport) -> None:
    session = await sessions.create_session(VISITOR)
    await sessions.request_handover(session.id)

    response = await _pipeline(sessions, ok_transport).process(session.id, "halo")

    assert response.reply
    assert (await sessions.get_session(session.id)).status == SessionStatus.QUEUED


@pytest.mark.asyncio
async def test_malformed_llm_response_falls_back(sessions) -> None:
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        side_effect=APIResponseValidationError(
            response=httpx.Response(200, request=request), body=None
        )
    )
    transport = GroqChatTransport(client=client)
    session = await sessions.create_session(VISITOR)

    response = await _pipeline(sessions, transport).process(session.id, "halo")

    assert response.reply == RETRY_REPLY
    assert (await sessions.get_session(session.id)).failed_attempts == 1
