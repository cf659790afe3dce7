from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> str | None:
    cur = Path(__file__).resolve()
    for parent in [cur.parent, *cur.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            return str(candidate)
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_env_file() or ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # auth backend
    AUTH_BASE_URL: str = "http://localhost:3001"
    HTTP_TIMEOUT_SEC: float = 8.0

    # token store
    TOKEN_STORE: Literal["redis", "memory"] = "redis"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    TOKEN_KEY_PREFIX: str = ""
    TOKEN_TTL_SEC: int = 7 * 24 * 3600  # refresh token lifetime; 0 = no expiry

    LOG_LEVEL: str = "INFO"


settings = Settings()
