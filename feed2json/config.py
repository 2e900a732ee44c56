from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_TIMEOUT_SECONDS = 10.0
# Some feed hosts refuse anything that does not look like a desktop browser.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/42.0.2311.135 Safari/537.36 Edge/12.246"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    static_dir: str = "static"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Build settings from environment variables, loading a .env file first if present."""
        load_dotenv(env_file)
        production = os.getenv("FEED2JSON_ENV", "").lower() == "production"
        return cls(
            timeout_seconds=_env_float("FEED2JSON_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            user_agent=os.getenv("FEED2JSON_USER_AGENT") or DEFAULT_USER_AGENT,
            accept=os.getenv("FEED2JSON_ACCEPT") or DEFAULT_ACCEPT,
            static_dir=os.getenv("FEED2JSON_STATIC_DIR") or "static",
            host=os.getenv("HOST") or "0.0.0.0",
            port=int(os.getenv("PORT") or 3000),
            log_level=(os.getenv("FEED2JSON_LOG_LEVEL") or ("INFO" if production else "DEBUG")).upper(),
        )
