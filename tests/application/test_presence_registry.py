"""Testes do registro de presença dos atendentes."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta

import pytest

from valpro_livechat.application.presence import AgentPresenceRegistry, ReadWriteLock
from valpro_livechat.domain.enums import PresenceState


class TestReportStatus:
    def test_offline_for_unknown_admin_is_noop(self, registry: AgentPresenceRegistry) -> None:
        registry.report_status("ghost", "Ghost", "offline")
        assert registry.is_anyone_online() is False
        assert registry.get("ghost") is None

    def test_online_then_offline(self, registry: AgentPresenceRegistry) -> None:
        registry.report_status("a1", "Ani", PresenceState.ONLINE)
        assert registry.is_anyone_online() is True

        registry.report_status("a1", "Ani", PresenceState.OFFLINE)
        assert registry.is_anyone_online() is False
        assert registry.list_online() == []

    def test_new_entry_defaults(self, registry: AgentPresenceRegistry, clock) -> None:
        registry.report_status("a1", "Ani", "online")
        admin = registry.get("a1")
        assert admin is not None
        assert admin.max_chats == 5
        assert admin.active_chats == 0
        assert admin.admin_name == "Ani"

    def test_update_refreshes_last_seen_and_state(
        self, registry: AgentPresenceRegistry, clock
    ) -> None:
        registry.report_status("a1", "Ani", "online")
        first_seen = registry.get("a1").last_seen

        clock.advance(timedelta(minutes=3))
        registry.report_status("a1", "Ani", "away")

        admin = registry.get("a1")
        assert admin.status == PresenceState.AWAY
        assert admin.last_seen > first_seen
        assert registry.is_anyone_online() is False

    def test_invalid_state_rejected(self, registry: AgentPresenceRegistry) -> None:
        with pytest.raises(ValueError):
            registry.report_status("a1", "Ani", "busy")

    def test_logs_truncated_admin_id(self, registry: AgentPresenceRegistry, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="valpro_livechat.application.presence"):
            registry.report_status("admin-123456789", "Ani", "online")
            registry.report_status("admin-123456789", "Ani", "offline")

        assert [r.admin_id for r in caplog.records] == ["admin-12...", "admin-12..."]

    def test_custom_max_chats(self) -> None:
        registry = AgentPresenceRegistry(max_chats=2)
        registry.report_status("a1", "Ani", "online")
        assert registry.get("a1").max_chats == 2


class TestSnapshots:
    def test_list_online_returns_copies(self, registry: AgentPresenceRegistry) -> None:
        registry.report_status("a1", "Ani", "online")
        registry.report_status("a2", "Budi", "away")

        online = registry.list_online()
        assert [a.admin_id for a in online] == ["a1"]

        online[0].active_chats = 99
        assert registry.get("a1").active_chats == 0


def test_concurrent_reports_from_threads() -> None:
    registry = AgentPresenceRegistry()

    def worker(n: int) -> None:
        for i in range(50):
            registry.report_status(f"a{n}", f"Admin {n}", "online" if i % 2 else "away")
            registry.is_anyone_online()
            registry.list_online()
        registry.report_status(f"a{n}", f"Admin {n}", "online")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(registry.list_online()) == 8


def test_write_lock_excludes_readers() -> None:
    lock = ReadWriteLock()
    entered = threading.Event()

    def read() -> None:
        with lock.read():
            entered.set()

    with lock.write():
        reader = threading.Thread(target=read)
        reader.start()
        assert entered.wait(0.05) is False
    assert entered.wait(1.0) is True
    reader.join()
