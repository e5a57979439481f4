"""Application settings loaded from environment variables / .env file."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives at project root (two levels up from platform/backend/)
_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"
_DEFAULT_STORE = Path(__file__).resolve().parent.parent.parent / "data" / "chatbots.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    execution_api_url: str = "http://localhost:8000"
    # Public execution API URL handed to embedded widgets; falls back to execution_api_url
    widget_api_url: str | None = None
    widget_version: str = "1.0.0"
    chatbot_store_path: str = str(_DEFAULT_STORE)
    http_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]

    @property
    def public_api_url(self) -> str:
        return self.widget_api_url or self.execution_api_url


@lru_cache
def get_settings() -> Settings:
    return Settings()
