"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "MailDraft"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Storage
    data_dir: Path = Path("data")
    sqlite_db_path: Path | None = None

    # Mailbox configuration document
    config_path: Path = Path("config/maildraft.yaml")

    # LLM Configuration
    llm_provider: Literal["groq", "openai", "anthropic", "local"] = "openai"
    groq_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None

    # Local vLLM (for local inference)
    vllm_base_url: str = "http://localhost:8000/v1"
    vllm_model_name: str = "gpt-oss-20b"

    # Worker
    poll_interval_seconds: int | None = Field(default=None, ge=1)

    # Retry budgets
    transport_retry_attempts: int = 3
    transport_retry_base_delay: float = 0.4
    draft_retry_attempts: int = 3
    draft_retry_base_delay: float = 0.5
    retry_max_delay: float = 4.0

    @computed_field
    @property
    def database_path(self) -> Path:
        """SQLite file, defaulting to a file inside data_dir."""
        return self.sqlite_db_path or self.data_dir / "maildraft.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
