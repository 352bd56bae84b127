from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.version import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    PORT: int = 5001
    APP_ENV: Literal["development", "production"] = "production"
    HOST_NAME: str = "http://localhost:5001"

    REDIS_URL: str = "redis://redis:6379/0"
    # Maximum number of connections Redis client will open per process
    REDIS_MAX_CONNECTIONS: int = 20
    REDIS_PROFILE_KEY: str = "tastematch:profile:"
    PROFILE_STORE_BACKEND: Literal["redis", "memory"] = "redis"

    # Embeddings
    OPENAI_API_KEY: str | None = None
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_TIMEOUT_SECONDS: float = 30.0

    # Identity
    FIREBASE_API_KEY: str | None = None
    IDENTITY_TIMEOUT_SECONDS: float = 10.0

    # The two data sources a profile can be built from
    SERVICE_TYPES: tuple[str, str] = ("netflix", "prime")
    # Titles sent to the embedding provider per request
    EMBEDDING_BATCH_SIZE: int = 256

    @field_validator("SERVICE_TYPES")
    @classmethod
    def _distinct_service_types(cls, value: tuple[str, str]) -> tuple[str, str]:
        first, second = (v.strip() for v in value)
        if not first or not second or first == second:
            raise ValueError("SERVICE_TYPES must hold two distinct, non-empty values")
        return first, second


settings = Settings()

APP_VERSION = __version__
