from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_STATE_PATH = Path.home() / ".rentals" / "state.json"
DEFAULT_GEOLOCATION_URL = "https://ipapi.co/json/"


@dataclass(slots=True)
class Settings:
    supabase_url: str
    supabase_key: str
    chat_url: str
    chat_timeout_seconds: float | None
    state_path: Path
    geolocation_url: str
    log_level: str

    @classmethod
    def from_env(cls) -> Settings:
        supabase_url = _env_str("SUPABASE_URL")
        supabase_key = _env_str("SUPABASE_PUBLISHABLE_KEY") or _env_str("SUPABASE_ANON_KEY")
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY (or SUPABASE_ANON_KEY) are required.")
        supabase_url = supabase_url.rstrip("/")
        return cls(
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            chat_url=_env_str("CHAT_URL") or f"{supabase_url}/functions/v1/chat",
            chat_timeout_seconds=_env_float("CHAT_TIMEOUT_SECONDS"),
            state_path=state_path_from_env(),
            geolocation_url=_env_str("GEOLOCATION_URL") or DEFAULT_GEOLOCATION_URL,
            log_level=log_level_from_env(),
        )


def state_path_from_env() -> Path:
    return Path(_env_str("RENTALS_STATE_PATH") or DEFAULT_STATE_PATH)


def log_level_from_env() -> str:
    return (_env_str("LOG_LEVEL") or "INFO").upper()


def _env_str(name: str) -> str | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    return raw.strip() or None


def _env_float(name: str) -> float | None:
    raw = _env_str(name)
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None
