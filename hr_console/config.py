"""Client configuration via environment variables."""

import logging

from pydantic_settings import BaseSettings

from hr_console.common.constants import DEFAULT_BASE_URL, TOKEN_STORAGE_KEY


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Backend
    HR_API_BASE_URL: str = DEFAULT_BASE_URL

    # Token persistence
    HR_TOKEN_FILE: str = "~/.hr_console/token.json"
    HR_TOKEN_KEY: str = TOKEN_STORAGE_KEY

    # HTTP transport
    HTTP_TIMEOUT_SECONDS: float = 15.0
    HTTP_GET_RETRIES: int = 0
    HTTP_RETRY_BACKOFF_SECONDS: float = 0.5

    # App
    LOG_LEVEL: str = "info"

    @property
    def base_url(self) -> str:
        """Backend base URL without a trailing slash."""
        return self.HR_API_BASE_URL.rstrip("/")

    @property
    def log_level(self) -> int:
        """Parse LOG_LEVEL into a ``logging`` level, INFO when unrecognised."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


def get_settings() -> Settings:
    """Read a fresh ``Settings`` from the current environment."""
    return Settings()
