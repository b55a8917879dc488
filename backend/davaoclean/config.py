"""Application configuration via environment variables."""
import pytz
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment.

    DATABASE_URL and PUBLIC_API_KEY have no defaults: a process started
    without them fails while importing this module.
    """

    DATABASE_URL: str
    PUBLIC_API_KEY: str
    CORS_ORIGINS: str = "http://localhost:3000"
    DEFAULT_TIMEZONE: str = "Asia/Manila"  # IANA tz for naive form dates
    LOG_LEVEL: str = "INFO"

    # Object storage
    MEDIA_ROOT: str = "media"
    MEDIA_URL: str = "/media"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Waste classifier: "stub", "http" or "openai"
    CLASSIFIER_BACKEND: str = "stub"
    CLASSIFIER_URL: str = ""
    CLASSIFIER_TIMEOUT_SECONDS: float = 60.0
    CLASSIFIER_STUB_DELAY_SECONDS: float = 2.0
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"

    @field_validator("DEFAULT_TIMEZONE")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    class Config:
        env_file = ".env"


settings = Settings()
