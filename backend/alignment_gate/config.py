"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Alignment policy
    ALIGNMENT_MIN_CONFIDENCE: int = 85
    ALIGNMENT_MAX_NONCRIT_FAILS: int = 2
    ALIGNMENT_CHECK_TIMEOUT_SECONDS: float = 2.0

    # Reference rules
    TOOL_PREREQUISITE_WINDOW_SECONDS: int = 60

    # Server
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
