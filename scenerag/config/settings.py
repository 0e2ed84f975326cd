from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PrivateAttr
from typing import Optional
from dotenv import load_dotenv, find_dotenv


def _settings_config(prefix: str) -> SettingsConfigDict:
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class LLMConfig(BaseSettings):
    """LLM provider configuration."""

    provider: str = Field(default="openai", description="openai | azure")
    endpoint: Optional[str] = Field(default=None)
    deployment_name: Optional[str] = Field(default=None)
    api_version: str = Field(default="2024-08-01-preview")
    model_name: str = Field(default="gpt-4o")
    use_managed_identity: bool = Field(default=False)
    managed_identity_client_id: Optional[str] = Field(default=None)
    api_key: Optional[str] = Field(default=None)
    timeout: int = Field(default=200)
    max_retries: int = Field(default=2)
    temperature: float = Field(default=0.7)
    max_tokens: int = Field(default=2048)

    model_config = _settings_config("LLM_")


class EmbeddingConfig(BaseSettings):
    """Embedding provider configuration."""

    provider: str = Field(default="local", description="openai | azure | http | local")
    endpoint: Optional[str] = Field(default=None)
    deployment_name: Optional[str] = Field(default=None)
    model_name: str = Field(default="text-embedding-3-small")
    api_version: str = Field(default="2024-08-01-preview")
    api_key: Optional[str] = Field(default=None)
    use_managed_identity: bool = Field(default=False)
    managed_identity_client_id: Optional[str] = Field(default=None)
    timeout: int = Field(default=60)
    dimension: int = Field(default=768, gt=0)

    # Retry and pacing for the resilient wrapper
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    min_request_interval: float = Field(default=0.0, ge=0)
    max_request_interval: float = Field(default=30.0, gt=0)
    rate_limit_step: float = Field(default=0.5, gt=0, description="Delay used on the first 429 when the interval is zero")
    decay_after: int = Field(default=5, ge=1)
    decay_factor: float = Field(default=0.8, gt=0, lt=1)

    model_config = _settings_config("EMBEDDING_")


class StoreConfig(BaseSettings):
    """Document store configuration."""

    provider: str = Field(default="memory", description="memory | json")
    path: str = Field(default="scenerag_store")
    fallback_to_memory: bool = Field(default=True)

    model_config = _settings_config("STORE_")


class StorageConfig(BaseSettings):
    """Object storage configuration."""

    provider: str = Field(default="local", description="local | azure")
    base_path: str = Field(default="./local_storage")
    signing_key: str = Field(default="change-me")
    account_url: Optional[str] = Field(default=None)
    container_name: str = Field(default="scenerag")
    use_managed_identity: bool = Field(default=True)
    managed_identity_client_id: Optional[str] = Field(default=None)
    signed_url_ttl_seconds: int = Field(default=168 * 3600, gt=0)

    model_config = _settings_config("STORAGE_")


class RetrievalConfig(BaseSettings):
    """Scene retrieval tuning."""

    min_similarity: float = Field(default=0.0, ge=-1.0, le=1.0)
    default_limit: int = Field(default=20, ge=1)
    filtered_limit: int = Field(default=10, ge=1)

    model_config = _settings_config("RETRIEVAL_")


class ChatConfig(BaseSettings):
    """Conversation orchestrator configuration."""

    max_iterations: int = Field(default=5, ge=1)
    history_window: int = Field(default=5, ge=0)
    context_size: int = Field(default=10, ge=0)
    temperature: float = Field(default=0.7)
    fallback_message: str = Field(
        default=(
            "I'm sorry, I wasn't able to generate an answer right now. "
            "Please try again in a moment."
        )
    )

    model_config = _settings_config("CHAT_")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    enable_json: bool = Field(default=False)
    enable_file_logging: bool = Field(default=False, validation_alias="LOG_ENABLE_FILE")
    max_file_size: str = Field(default="10 MB")
    retention_days: int = Field(default=7)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )


class SceneRAGConfig(BaseSettings):
    """Main configuration class."""

    app_name: str = Field(default="SceneRAG")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    model_config = _settings_config("")

    _llm: Optional[LLMConfig] = PrivateAttr(default=None)
    _embedding: Optional[EmbeddingConfig] = PrivateAttr(default=None)
    _store: Optional[StoreConfig] = PrivateAttr(default=None)
    _storage: Optional[StorageConfig] = PrivateAttr(default=None)
    _retrieval: Optional[RetrievalConfig] = PrivateAttr(default=None)
    _chat: Optional[ChatConfig] = PrivateAttr(default=None)
    _logging: Optional[LoggingConfig] = PrivateAttr(default=None)

    def __init__(self, **kwargs):
        # Force load environment variables before initializing
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)

    def with_sections(self, **sections) -> "SceneRAGConfig":
        """Pin explicit section configs (llm=LLMConfig(...), chat=..., ...)."""
        for name, value in sections.items():
            if not hasattr(self, f"_{name}"):
                raise ValueError(f"Unknown config section: {name}")
            setattr(self, f"_{name}", value)
        return self

    @property
    def llm(self) -> LLMConfig:
        if self._llm is None:
            self._llm = LLMConfig()
        return self._llm

    @property
    def embedding(self) -> EmbeddingConfig:
        if self._embedding is None:
            self._embedding = EmbeddingConfig()
        return self._embedding

    @property
    def store(self) -> StoreConfig:
        if self._store is None:
            self._store = StoreConfig()
        return self._store

    @property
    def storage(self) -> StorageConfig:
        if self._storage is None:
            self._storage = StorageConfig()
        return self._storage

    @property
    def retrieval(self) -> RetrievalConfig:
        if self._retrieval is None:
            self._retrieval = RetrievalConfig()
        return self._retrieval

    @property
    def chat(self) -> ChatConfig:
        if self._chat is None:
            self._chat = ChatConfig()
        return self._chat

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging
