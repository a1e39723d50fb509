import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Text generation (micro-actions, reflections, identity labels)
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    # Document store
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None
    STORE_BACKEND: Optional[str] = None  # "memory" | "sql"; inferred from DATABASE_URL when unset

    # Day boundary used when the client does not send its local date
    TIMEZONE: str = "UTC"

    # Streak / premium policy
    STREAK_GRACE_DAYS: int = 3
    FREE_DREAMS_MAX: int = 1

    # CORS (comma-separated)
    CORS_ORIGINS: str = "http://localhost:3000"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def resolve_store_backend(settings_obj: Optional[Settings] = None) -> str:
    cfg = settings_obj or settings
    if cfg.STORE_BACKEND:
        return cfg.STORE_BACKEND.lower()
    return "sql" if (cfg.DATABASE_URL or cfg.TEST_DATABASE_URL) else "memory"


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("shegoes")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    missing = [] if cfg.GROQ_API_KEY else ["GROQ_API_KEY"]
    if resolve_store_backend(cfg) == "sql" and not (cfg.DATABASE_URL or cfg.TEST_DATABASE_URL):
        missing.append("DATABASE_URL")

    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    if cfg.STREAK_GRACE_DAYS < 1:
        message = "STREAK_GRACE_DAYS must be at least 1"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
