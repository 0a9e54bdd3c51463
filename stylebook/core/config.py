import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    ENVIRONMENT: str = "dev"  # "dev" | "test" | "prod"
    CONFIG_STRICT: bool = False

    # Database
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # AI provider (Groq)
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    AI_TIMEOUT_SECONDS: float = 30.0
    AI_MAX_TOKENS: int = 2048

    # Clerk Auth
    CLERK_SECRET_KEY: Optional[str] = None
    CLERK_ISSUER: Optional[str] = None  # e.g. https://your-instance.clerk.accounts.dev
    CLERK_JWKS_URL: Optional[str] = None  # defaults to {CLERK_ISSUER}/.well-known/jwks.json
    CLERK_AUDIENCE: Optional[str] = None

    # Plan limits
    FREE_SHOE_CARE_LIMIT: int = 3

    # Shopping recommendation throttle
    SHOPPING_MIN_ITEMS: int = 3
    SHOPPING_COOLDOWN_HOURS: int = 24
    SHOPPING_MAX_AGE_DAYS: int = 7

    # Prompt context bounds
    MAX_CONTEXT_ITEMS: int = 150
    RECENT_OUTFITS_LIMIT: int = 5
    CHAT_HISTORY_LIMIT: int = 10

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("stylebook")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
        "CLERK_SECRET_KEY",
        "GROQ_API_KEY",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    if cfg.SHOPPING_COOLDOWN_HOURS > cfg.SHOPPING_MAX_AGE_DAYS * 24:
        message = "SHOPPING_COOLDOWN_HOURS must not exceed SHOPPING_MAX_AGE_DAYS"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
