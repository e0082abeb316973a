import logging

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

# Values treated as "not configured" even when present
PLACEHOLDER_MARKERS = ("YOUR_API_KEY", "your-api-key", "changeme")


class Settings(BaseSettings):
    # Environment
    ENV: str = "development"
    CONFIG_STRICT: bool = False

    # Database
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None

    # Supabase auth
    SUPABASE_JWT_SECRET: Optional[str] = None
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # Text generation
    OPENROUTER_API_KEY: Optional[str] = None
    AI_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    AI_PROXY_URL: Optional[str] = None  # same-origin proxy; holds the key server-side
    AI_MODEL: str = "qwen/qwen-2.5-72b-chat"
    AI_APP_TITLE: str = "GoIndia Travel App"
    AI_TIMEOUT_SECONDS: float = 60.0

    # App
    CORS_ORIGINS: str = "http://localhost:5173"  # comma-separated
    UPGRADE_URL: str = "/pricing"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
settings = Settings()


def is_placeholder(value: Optional[str]) -> bool:
    """True when a credential is missing or still holds a template value."""
    if not value or not value.strip():
        return True
    return any(marker in value for marker in PLACEHOLDER_MARKERS)


def validate_config(strict: Optional[bool] = None, settings_obj: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> bool:
    """Validate required configuration.

    In strict mode raise RuntimeError; otherwise emit warnings only.
    Secrets are not logged, only missing keys.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("goindia")
    strict_mode = strict if strict is not None else getattr(cfg, "CONFIG_STRICT", False)

    required_keys = [
        "DATABASE_URL",
        "SUPABASE_JWT_SECRET",
    ]

    missing = [key for key in required_keys if not getattr(cfg, key, None)]
    # Either a direct credential or a proxy that holds one
    if is_placeholder(getattr(cfg, "OPENROUTER_API_KEY", None)) and not getattr(cfg, "AI_PROXY_URL", None):
        missing.append("OPENROUTER_API_KEY")
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if strict_mode:
            raise RuntimeError(message)
        log.warning(message)

    return True
