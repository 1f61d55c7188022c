"""Configurações centralizadas do valpro_livechat.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única
- Constantes do endpoint LLM (GROQ_API_BASE_URL, DEFAULT_LLM_MODEL)

Uso típico:
    from valpro_livechat.config import get_settings
"""

from valpro_livechat.config.settings import (
    DEFAULT_LLM_MODEL,
    GROQ_API_BASE_URL,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "GROQ_API_BASE_URL",
    "DEFAULT_LLM_MODEL",
]
