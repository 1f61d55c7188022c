"""Reaper de inatividade: encerra sessões sem mensagens há mais de `cutoff`.

`sweep` pode ser chamado diretamente (testes, jobs agendados); `start`/`stop`
controlam a task periódica dentro do event loop.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from valpro_livechat.application.sessions import SessionService
from valpro_livechat.domain.enums import Sentiment
from valpro_livechat.domain.errors import InvalidTransitionError, NotFoundError, StorageError
from valpro_livechat.observability.logging import get_logger, short_id

logger: logging.Logger = get_logger(__name__)

DEFAULT_CUTOFF = timedelta(minutes=6)
DEFAULT_INTERVAL_SECONDS = 60.0

INACTIVITY_NOTICE = (
    "Sesi chat telah berakhir otomatis karena tidak ada aktivitas selama {minutes} menit."
)


class InactivityReaper:
    def __init__(
        self,
        sessions: SessionService,
        cutoff: timedelta = DEFAULT_CUTOFF,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if cutoff <= timedelta(0):
            raise ValueError("cutoff must be positive")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sessions = sessions
        self._cutoff = cutoff
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._notice = INACTIVITY_NOTICE.format(minutes=f"{cutoff.total_seconds() / 60:g}")

    @property
    def cutoff(self) -> timedelta:
        return self._cutoff

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep(self, now: datetime | None = None) -> int:
        """Encerra as sessões ociosas e retorna quantas foram fechadas.

        Falha na consulta propaga como StorageError; falha numa sessão
        individual é logada e a varredura segue.
        """
        now = now or self._sessions.now()
        inactive = await self._sessions.find_inactive_sessions(now - self._cutoff)

        closed = 0
        for session in inactive:
            try:
                await self._sessions.close_session(
                    session.id,
                    sentiment=Sentiment.TIMEOUT,
                    notice=self._notice,
                    now=now,
                )
            except (StorageError, NotFoundError, InvalidTransitionError) as e:
                logger.warning(
                    "reaper_close_failed",
                    extra={"session_id": short_id(session.id), "error_type": type(e).__name__},
                )
                continue
            closed += 1

        if closed:
            logger.info("reaper_sweep_completed", extra={"closed": closed})
        return closed

    def start(self) -> None:
        """Inicia a task periódica (idempotente)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="inactivity-reaper")
        logger.info(
            "reaper_started",
            extra={
                "cutoff_seconds": self._cutoff.total_seconds(),
                "interval_seconds": self._interval,
            },
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("reaper_stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.sweep()
            except StorageError as e:
                logger.error("reaper_sweep_failed", extra={"error_type": type(e).__name__})
            except Exception:
                logger.exception("reaper_sweep_crashed")
            await asyncio.sleep(self._interval)
