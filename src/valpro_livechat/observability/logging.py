"""Logging estruturado (JSON) do core de live chat.

Cada linha carrega `service` e `correlation_id` (o id da sessão do turno em
curso). Ids de sessão e de atendente vão truncados via `short_id`; conteúdo
de mensagens do visitante nunca entra nos logs.
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from valpro_livechat.observability.context import get_correlation_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s"

# Bibliotecas de transporte que poluem o log em DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "google.api_core")


class SessionContextFilter(logging.Filter):
    """Preenche correlation_id a partir do escopo da sessão corrente."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: str, service_name: str) -> None:
    formatter = JsonFormatter(
        LOG_FORMAT,
        rename_fields={"levelname": "level", "name": "logger"},
        static_fields={"service": service_name},
    )

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(SessionContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def short_id(value: str | None) -> str | None:
    """Trunca ids para os logs (8 caracteres + reticências)."""

    if not value:
        return None
    return value[:8] + "..."


def log_fallback(
    logger: logging.Logger,
    session_id: str,
    reason: str,
    failed_attempts: int,
    *,
    suggest_handover: bool = False,
) -> None:
    """Registra que o visitante recebeu uma resposta canned no lugar da IA.

    `reason` é o AIEngineError.reason (network, parse, remote, timeout,
    cancelled); `failed_attempts` é o contador após o incremento.
    """
    logger.warning(
        "ai_fallback_reply",
        extra={
            "fallback_used": True,
            "session_id": short_id(session_id),
            "reason": reason,
            "failed_attempts": failed_attempts,
            "suggest_handover": suggest_handover,
        },
    )
