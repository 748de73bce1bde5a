"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONOTATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Data storage
    data_path: Path = Path("data")
    library_db_name: str = "library.db"

    # Model backend: "direct" (OpenAI-compatible API), "proxy" (edge function), "anthropic"
    ai_mode: Literal["direct", "proxy", "anthropic"] = "direct"
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CONOTATE_API_KEY", "GROQ_API_KEY"),
    )
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama-3.1-8b-instant"

    # Proxy mode: same request shape, forwarded by an intermediary
    proxy_url: str | None = None
    proxy_token: str | None = None

    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-haiku-4-5"

    # Timing
    ai_timeout_seconds: float = 12.0
    debounce_seconds: float = 1.0

    # Classifications below this confidence are routed to "unsorted"
    confidence_threshold: float = 0.6


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
