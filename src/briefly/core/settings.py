"""Application settings using Pydantic Settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = Field(default="dev", description="Deployment environment")
    debug: bool = Field(default=True, description="Enable debug features")
    log_level: str = Field(default="INFO", description="Root log level")
    port: int = Field(default=3000, description="HTTP port for run-server")

    database_url: str = Field(
        default="postgresql+asyncpg://briefly:brieflypass@db:5432/briefly",
        description="SQLAlchemy database URL (async). Use sqlite+aiosqlite:///./briefly.db locally",
    )
    sql_echo: bool = Field(default=False, description="Enable SQLAlchemy echo for debugging")

    # Redis Configuration
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis URL for the cache and the Celery broker (database via /N suffix)",
    )
    cache_ttl_seconds: int = Field(default=3600, description="Summary cache TTL in seconds")
    cache_prefix: str = Field(default="summary:", description="Key prefix for cached summaries")

    # Queue / worker
    queue_name: str = Field(default="summarization-jobs", description="Celery queue carrying job ids")
    job_max_retries: int = Field(
        default=2, ge=0, description="Redeliveries allowed for retryable job failures"
    )
    job_retry_backoff_seconds: float = Field(default=5.0, description="Base retry delay")
    job_retry_backoff_max_seconds: float = Field(default=300.0, description="Retry delay cap")

    # Content resolver
    fetch_timeout_seconds: float = Field(default=10.0, description="URL fetch timeout")
    fetch_max_redirects: int = Field(default=5, description="Redirects followed per fetch")
    fetch_user_agent: str = "Mozilla/5.0 (compatible; ContentSummarizer/1.0)"
    content_max_chars: int = Field(default=4000, description="Character budget for extracted text")

    # Summarization backend
    llm_model: str = Field(
        default="groq/llama-3.1-8b-instant",
        description="LiteLLM model string passed to dspy.LM (e.g. groq/..., openai/..., ollama/...)",
    )
    llm_api_key: str | None = Field(default=None, description="API key for the summarization backend")
    llm_api_base: str | None = Field(default=None, description="Override backend base URL")
    llm_temperature: float = 1.0
    llm_max_tokens: int = 1024
    llm_timeout_seconds: float = Field(default=60.0, description="Per-call backend timeout")

    model_config = SettingsConfigDict(
        env_prefix="BRIEFLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields from .env file
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
