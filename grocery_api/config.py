import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _env(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Settings(BaseModel):
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/grocery"

    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 1 day

    # Empty string disables the grocery list cache
    redis_url: Optional[str] = "redis://redis:6379/0"
    cache_ttl: int = 600

    # Empty string disables order notifications
    broker_url: Optional[str] = "redis://redis:6379/0"

    environment: str = "development"
    log_level: Optional[str] = None


def load_settings() -> Settings:
    """Build settings from the process environment (and .env, if present)."""
    defaults = Settings()
    return Settings(
        database_url=_env("DATABASE_URL", defaults.database_url),
        jwt_secret=_env("JWT_SECRET", defaults.jwt_secret),
        jwt_algorithm=_env("JWT_ALG", defaults.jwt_algorithm),
        jwt_expire_minutes=_env_int("JWT_EXPIRE_MIN", defaults.jwt_expire_minutes),
        redis_url=_env("REDIS_URL", defaults.redis_url) or None,
        cache_ttl=_env_int("CACHE_TTL", defaults.cache_ttl),
        broker_url=_env("CELERY_BROKER_URL", defaults.broker_url) or None,
        environment=_env("ENVIRONMENT", defaults.environment).lower(),
        log_level=os.getenv("LOG_LEVEL") or None,
    )
