"""Registro de presença dos atendentes (em memória, por processo).

Nada aqui é persistido: um restart zera a presença e os atendentes voltam
a reportar status. Métodos síncronos, seguros para chamar tanto do event
loop quanto de threads de worker.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from valpro_livechat.domain.enums import PresenceState
from valpro_livechat.domain.models import AdminStatus, utc_now
from valpro_livechat.observability.logging import get_logger, short_id

logger = get_logger(__name__)


class ReadWriteLock:
    """Muitos leitores simultâneos ou um único escritor."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class AgentPresenceRegistry:
    """Diretório admin_id → AdminStatus.

    Leituras devolvem cópias; o estado interno nunca escapa do lock.
    """

    def __init__(
        self,
        max_chats: int = 5,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._max_chats = max_chats
        self._clock = clock or utc_now
        self._lock = ReadWriteLock()
        self._admins: dict[str, AdminStatus] = {}

    def report_status(self, admin_id: str, admin_name: str, state: PresenceState | str) -> None:
        """Atualiza presença; offline remove a entrada (no-op se ausente)."""
        try:
            presence = PresenceState(state)
        except ValueError as e:
            raise ValueError(f"Invalid presence state: {state!r}") from e

        with self._lock.write():
            if presence == PresenceState.OFFLINE:
                removed = self._admins.pop(admin_id, None)
                if removed is not None:
                    logger.info("admin_offline", extra={"admin_id": short_id(admin_id)})
                return

            now = self._clock()
            current = self._admins.get(admin_id)
            if current is None:
                self._admins[admin_id] = AdminStatus(
                    admin_id=admin_id,
                    admin_name=admin_name,
                    status=presence,
                    max_chats=self._max_chats,
                    last_seen=now,
                )
            else:
                current.status = presence
                current.last_seen = now
                if admin_name:
                    current.admin_name = admin_name

        logger.debug(
            "admin_presence_updated",
            extra={"admin_id": short_id(admin_id), "status": presence.value},
        )

    def is_anyone_online(self) -> bool:
        with self._lock.read():
            return any(a.status == PresenceState.ONLINE for a in self._admins.values())

    def list_online(self) -> list[AdminStatus]:
        with self._lock.read():
            return [
                a.model_copy() for a in self._admins.values() if a.status == PresenceState.ONLINE
            ]

    def get(self, admin_id: str) -> AdminStatus | None:
        with self._lock.read():
            current = self._admins.get(admin_id)
            return current.model_copy() if current is not None else None
