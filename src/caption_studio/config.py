"""Application configuration loaded from environment variables."""

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # LLM API Keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Captioning model ("openai" | "anthropic")
    caption_provider: str = "openai"
    openai_model: str = "gpt-4o"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    caption_temperature: float = 0.8

    # Poster frame extraction
    poster_seek_sec: float = 1.0
    poster_jpeg_quality: int = 90

    # Uploads (session-scoped, served under /files/uploads)
    upload_dir: str = "./uploads"
    upload_url_prefix: str = "/files/uploads"

    # HTTP
    allowed_origins: str = ""

    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def get_upload_dir() -> Path:
    """Return the upload directory, creating it if needed."""
    path = Path(settings.upload_dir).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


settings = Settings()
