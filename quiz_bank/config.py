"""Configuration settings using pydantic-settings."""
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram Bot
    BOT_TOKEN: str = Field(default="", description="Telegram Bot API token")
    ADMIN_ID: Optional[int] = Field(
        default=None,
        description="Telegram ID of the only user allowed to reload the question bank"
    )

    # Database
    DATABASE_PATH: str = Field(
        default="data/quiz_bank.db",
        description="Path to SQLite database file"
    )

    # Upload
    STRICT_ANSWER_KEYS: bool = Field(
        default=False,
        description="Reject RADIO/CHECK lines whose right answers are not among the choices"
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=1024 * 1024,
        description="Largest question file accepted by the upload handler"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
