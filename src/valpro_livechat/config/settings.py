"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Nunca hardcode secrets ou valores sensíveis.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Endpoint OpenAI-compatível da Groq
# -----------------------------------------------------------------------------
GROQ_API_BASE_URL: str = "https://api.groq.com/openai/v1"
DEFAULT_LLM_MODEL: str = "llama-3.3-70b-versatile"


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Aplicação
    service_name: str = "valpro_livechat"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Armazenamento (document store)
    document_store_backend: str = "memory"  # memory | firestore
    firestore_project_id: str | None = None
    firestore_database_id: str = "(default)"
    sessions_collection: str = "web_chat_sessions"
    messages_collection: str = "web_chat_messages"
    knowledge_collection: str = "knowledge_base"
    settings_collection: str = "settings"

    # LLM (Groq via SDK openai)
    groq_api_key: str | None = None  # Nunca logar
    llm_base_url: str = GROQ_API_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL
    llm_timeout_seconds: float = 30.0  # Bloqueio máximo por chamada
    llm_temperature: float = 0.7
    llm_max_tokens: int = 500

    # Pipeline de mensagens
    history_limit: int = 20  # Mensagens lidas do store por turno
    escalation_threshold: int = 2  # Falhas consecutivas até oferecer atendente

    # Presença de atendentes
    presence_max_chats: int = 5

    # Reaper de inatividade
    reaper_enabled: bool = True
    reaper_cutoff_minutes: float = 6.0
    reaper_interval_seconds: float = 60.0

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local", "test")

    def validate_document_store_config(self) -> list[str]:
        """Valida backend do document store por ambiente.

        Em staging/prod, memory é proibido (estado perdido a cada restart).
        Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []
        backend = self.document_store_backend.lower()

        valid_backends = {"memory", "firestore"}
        if backend not in valid_backends:
            errors.append(
                f"DOCUMENT_STORE_BACKEND '{backend}' inválido. Valores válidos: {valid_backends}"
            )

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "DOCUMENT_STORE_BACKEND=memory é proibido em staging/production. "
                "Use 'firestore'."
            )

        return errors

    def validate_llm_config(self) -> list[str]:
        """Valida configuração do transporte LLM."""
        errors: list[str] = []
        if not self.groq_api_key and not self.is_development:
            errors.append("GROQ_API_KEY obrigatório fora de development")
        if self.llm_timeout_seconds <= 0:
            errors.append("LLM_TIMEOUT_SECONDS deve ser > 0")
        if not 0 <= self.llm_temperature <= 2:
            errors.append("LLM_TEMPERATURE deve estar entre 0 e 2")
        if self.llm_max_tokens <= 0:
            errors.append("LLM_MAX_TOKENS deve ser > 0")
        return errors

    def validate_pipeline_config(self) -> list[str]:
        """Valida limites do pipeline de mensagens."""
        errors: list[str] = []
        if self.history_limit <= 0:
            errors.append("HISTORY_LIMIT deve ser > 0")
        if self.escalation_threshold < 1:
            errors.append("ESCALATION_THRESHOLD deve ser >= 1")
        if self.presence_max_chats < 1:
            errors.append("PRESENCE_MAX_CHATS deve ser >= 1")
        return errors

    def validate_reaper_config(self) -> list[str]:
        """Valida cutoff e intervalo do reaper."""
        errors: list[str] = []
        if self.reaper_cutoff_minutes <= 0:
            errors.append("REAPER_CUTOFF_MINUTES deve ser > 0")
        if self.reaper_interval_seconds <= 0:
            errors.append("REAPER_INTERVAL_SECONDS deve ser > 0")
        return errors

    def validate_all(self) -> list[str]:
        """Agrega todos os validadores."""
        errors: list[str] = []
        errors.extend(self.validate_document_store_config())
        errors.extend(self.validate_llm_config())
        errors.extend(self.validate_pipeline_config())
        errors.extend(self.validate_reaper_config())
        return errors


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
