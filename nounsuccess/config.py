"""
Runtime configuration.

Values come from (lowest to highest priority):
- built-in defaults
- NOUNSUCCESS_* environment variables
- CLI flags (applied by nounsuccess.cli)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from rich.logging import RichHandler

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 30.0
DEFAULT_STALE_TIME = 60.0


def default_session_path() -> Path:
    """
    Return the default location of the stored session (cookies + user).

    A function rather than a constant so tests can monkeypatch HOME.
    """
    return Path.home() / ".nounsuccess" / "session.json"


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    stale_time: float = DEFAULT_STALE_TIME
    session_path: Optional[Path] = None
    offline_fallback: bool = True
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.session_path is None:
            self.session_path = default_session_path()
        self.api_url = self.api_url.rstrip("/")


def _float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        f = float(value)
    except ValueError:
        return default
    return f if f > 0 else default


def _bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables. Malformed values are ignored.
    """
    env = os.environ if env is None else env
    session = env.get("NOUNSUCCESS_SESSION")
    return Settings(
        api_url=env.get("NOUNSUCCESS_API_URL") or DEFAULT_API_URL,
        timeout=_float(env.get("NOUNSUCCESS_TIMEOUT"), DEFAULT_TIMEOUT),
        stale_time=_float(env.get("NOUNSUCCESS_STALE_TIME"), DEFAULT_STALE_TIME),
        session_path=Path(session).expanduser() if session else None,
        offline_fallback=_bool(env.get("NOUNSUCCESS_OFFLINE_FALLBACK"), True),
        log_level=(env.get("NOUNSUCCESS_LOG_LEVEL") or "WARNING").upper(),
    )


def setup_logging(level: str = "WARNING") -> None:
    """
    Route log records through rich so they match the rest of the terminal output.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )
