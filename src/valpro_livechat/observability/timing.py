"""Context manager and helpers for latency instrumentation."""

from __future__ import annotations

import contextlib
import time
from collections.abc import Generator

from valpro_livechat.observability.logging import get_logger

logger = get_logger(__name__)


class Stopwatch:
    """Tempo decorrido (ms) exposto ao bloco medido."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self.elapsed_ms: float = 0.0

    def stop(self) -> float:
        self.elapsed_ms = round((time.perf_counter() - self._start) * 1000, 2)
        return self.elapsed_ms


@contextlib.contextmanager
def timed(component: str) -> Generator[Stopwatch, None, None]:
    """Context manager to measure and log elapsed time per component.

    Usage:
        with timed("llm_call") as watch:
            reply = await transport.call(messages)

    Logs structured entry with:
        - component: str (name of the measured component)
        - elapsed_ms: float (milliseconds elapsed)
    """
    watch = Stopwatch()
    try:
        yield watch
    finally:
        logger.info(
            "component_latency",
            extra={
                "component": component,
                "elapsed_ms": watch.stop(),
            },
        )
