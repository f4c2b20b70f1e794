"""
Persistent storage for the user's API session.

This module manages the file (default location from nounsuccess.config):

    ~/.nounsuccess/session.json

It holds the session cookies sent with every request plus the last known
user record, so `nounsuccess whoami` works offline after a first check.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from nounsuccess.config import default_session_path
from nounsuccess.model import SessionUser


@dataclass
class SessionData:
    cookies: dict[str, str] = field(default_factory=dict)
    user: Optional[SessionUser] = None


def _resolve(path: str | Path | None) -> Path:
    return Path(path) if path is not None else default_session_path()


def load_session(path: str | Path | None = None) -> SessionData:
    """
    Load the stored session.

    Returns an empty session if the file does not exist or is invalid;
    a broken file never stops the CLI from running.
    """
    session_path = _resolve(path)

    # First run: nothing stored yet
    if not session_path.exists():
        return SessionData()

    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
        raw_cookies = data.get("cookies", {})
        cookies: dict[str, str] = {}
        if isinstance(raw_cookies, dict):
            for name, value in raw_cookies.items():
                if isinstance(name, str) and name.strip() and isinstance(value, str):
                    cookies[name.strip()] = value
        return SessionData(cookies=cookies, user=SessionUser.from_dict(data.get("user")))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return SessionData()


def save_session(session: SessionData, path: str | Path | None = None) -> None:
    """
    Save the session, creating parent directories if needed.
    """
    session_path = _resolve(path)
    session_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "cookies": dict(sorted(session.cookies.items())),
        "user": session.user.to_dict() if session.user else None,
    }
    session_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def clear_session(path: str | Path | None = None) -> bool:
    """
    Delete the stored session. Returns True if a file was removed.
    """
    session_path = _resolve(path)
    if not session_path.exists():
        return False
    session_path.unlink()
    return True
