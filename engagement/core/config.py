"""Configuration management using Pydantic Settings"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent
    DB_PATH: Path = PROJECT_ROOT / "data" / "engagement.db"

    # Reply generation
    ANTHROPIC_API_KEY: str = ""
    REPLY_MODEL: str = "claude-sonnet-4-5"
    REPLY_MAX_TOKENS: int = 1024
    REPLY_TIMEOUT_SECONDS: float = 30.0
    HISTORY_LIMIT: int = 30

    # Session continuity
    SESSION_WINDOW_HOURS: int = 24
    OPENING_MESSAGE: str = "Peace to you. What's on your heart today?"
    SYSTEM_PROMPT: str = (
        "You are Linen, a gentle companion. Offer calm, unhurried presence and "
        "embodied awareness, never advice, diagnosis or therapy. If the person "
        "mentions self-harm or severe distress, compassionately suggest calling 988."
    )

    # Personalization
    REFLECTION_NUDGE_HOURS: int = 12
    CONTEXT_SNIPPET_CHARS: int = 60
    STREAK_CELEBRATION_MIN: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()
