"""Settings from environment variables, with .env support."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from circle.infrastructure.http import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def load_env() -> None:
    """Load .env from repo root or current dir (first one found)."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _default_state_file() -> Path:
    return Path.home() / ".circle" / "session.json"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_BASE_URL
    state_file: Path = _default_state_file()
    http_timeout: float = DEFAULT_TIMEOUT
    debounce_seconds: float = 0.5
    page_size: int = 10
    phone_region: str | None = None
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read CIRCLE_* variables (after loading .env). Invalid numbers raise ValueError."""
    load_env()
    state_file = os.environ.get("CIRCLE_STATE_FILE", "").strip()
    region = os.environ.get("CIRCLE_PHONE_REGION", "").strip().upper()
    return Settings(
        api_url=os.environ.get("CIRCLE_API_URL", DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL,
        state_file=Path(state_file).expanduser() if state_file else _default_state_file(),
        http_timeout=_env_float("CIRCLE_HTTP_TIMEOUT", DEFAULT_TIMEOUT),
        debounce_seconds=_env_int("CIRCLE_SEARCH_DEBOUNCE_MS", 500) / 1000,
        page_size=_env_int("CIRCLE_PAGE_SIZE", 10),
        phone_region=region or None,
        log_level=os.environ.get("CIRCLE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
