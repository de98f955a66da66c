import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None
    max_workers: int = 4
    request_timeout: float = 120.0
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}.")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}.")


def load_settings() -> Settings:
    load_dotenv()

    openai_api_key = os.getenv("OPENAI_API_KEY", "").strip()
    openrouter_key = os.getenv("OPENROUTER_API_KEY", "").strip()
    base_url = os.getenv("OPENAI_BASE_URL", "").strip() or None
    model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()

    if not openai_api_key and openrouter_key:
        openai_api_key = openrouter_key
        base_url = base_url or OPENROUTER_BASE_URL
    if not openai_api_key:
        raise ValueError("Missing OPENAI_API_KEY (or OPENROUTER_API_KEY) in environment.")

    max_workers = _int_env("PROCUREAI_MAX_WORKERS", 4)
    if max_workers < 1:
        raise ValueError("PROCUREAI_MAX_WORKERS must be at least 1.")
    timeout = _float_env("PROCUREAI_REQUEST_TIMEOUT", 120.0)
    if timeout <= 0:
        raise ValueError("PROCUREAI_REQUEST_TIMEOUT must be positive.")

    return Settings(
        openai_api_key=openai_api_key,
        openai_model=model or "gpt-4o-mini",
        openai_base_url=base_url,
        max_workers=max_workers,
        request_timeout=timeout,
        log_level=os.getenv("PROCUREAI_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
