# runtime settings, read from the environment (and a .env file if present)
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from utils.logger import get_logger

_logger = get_logger(__name__)

DEFAULT_API_URL = "http://localhost:5000"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning(f"Ignoring {name}={raw!r}: not a number.")
        return default


def _env_int(name: str, default: int) -> int:
    value = _env_float(name, default)
    if value < 1:
        _logger.warning(f"Ignoring {name}={value}: must be positive.")
        return default
    return int(value)


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    session_db: str = "data/session.sqlite"
    request_timeout: float = 10.0
    debounce_delay: float = 0.3  # seconds
    page_size: int = 10
    orders_refresh_interval: float = 30.0
    dashboard_refresh_interval: float = 30.0

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Settings:
        if dotenv_path is None or os.path.exists(dotenv_path):
            load_dotenv(dotenv_path)

        return cls(
            api_url=os.environ.get("API_URL", DEFAULT_API_URL).rstrip("/"),
            session_db=os.environ.get("SESSION_DB", "data/session.sqlite"),
            request_timeout=_env_float("REQUEST_TIMEOUT", 10.0),
            debounce_delay=_env_float("SEARCH_DEBOUNCE_MS", 300) / 1000,
            page_size=_env_int("PAGE_SIZE", 10),
            orders_refresh_interval=_env_float("ORDERS_REFRESH_SECONDS", 30.0),
            dashboard_refresh_interval=_env_float("DASHBOARD_REFRESH_SECONDS", 30.0),
        )
