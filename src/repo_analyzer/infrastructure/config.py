"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file).

    Field names map to upper-case variables: ``MAX_FILES``,
    ``OPENAI_BASE_URL``, ``ANALYSIS_TIMEOUT_SECONDS`` and so on.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM provider (any OpenAI-compatible chat-completions endpoint)
    openai_api_key: SecretStr
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None
    llm_timeout_seconds: float = Field(default=120.0, gt=0)

    # GitHub; the token is used when a request does not bring its own
    github_token: SecretStr | None = None
    github_api_base_url: str = "https://api.github.com"
    github_timeout_seconds: float = Field(default=30.0, gt=0)

    # Selection limits
    max_files: int = Field(default=15, ge=1)
    max_total_bytes: int = Field(default=500_000, ge=1)
    max_file_bytes: int = Field(default=100_000, ge=1)
    max_prompt_file_chars: int = Field(default=15_000, ge=1)
    max_readme_chars: int = Field(default=2_000, ge=0)
    fetch_concurrency: int = Field(default=4, ge=1)
    analysis_timeout_seconds: float | None = Field(default=None, gt=0)

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()  # type: ignore[call-arg]
