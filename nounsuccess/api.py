"""
HTTP client for the Noun Success REST API.

Wraps a requests.Session and converts every response into either a decoded
body or an ApiError carrying a user-facing message:

    401 -> authentication required
    403 -> permission denied
    404 -> not found
    500 -> server error
    other -> the server's own message (JSON "message" or raw text)

Network failures become TransportError. For GET requests they can instead be
replaced by an empty-but-valid fallback body (see normalize.fallback_for) so
the dashboard degrades to empty states.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import requests

from nounsuccess.errors import GENERIC_ERROR, ApiError, TransportError, message_for_status
from nounsuccess.model import SessionUser
from nounsuccess.normalize import fallback_for

log = logging.getLogger(__name__)


def _body_message(text: str) -> Optional[str]:
    """
    Extract the "message" field of a JSON error body, or the raw text.
    """
    if not text:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, Mapping):
        msg = data.get("message")
        if isinstance(msg, str) and msg:
            return msg
        return None
    return text


def decode_response(response: requests.Response) -> Any:
    """
    Raise ApiError for non-2xx responses, otherwise return JSON or text.
    """
    if not response.ok:
        text = response.text or ""
        raise ApiError(message_for_status(response.status_code, _body_message(text)), response.status_code)

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError as exc:
            log.warning("invalid JSON from %s: %s", response.url, exc)
            raise ApiError(GENERIC_ERROR, response.status_code) from exc
    return response.text


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        cookies: Optional[Mapping[str, str]] = None,
        fallback: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.fallback = fallback
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if cookies:
            self.session.cookies.update(dict(cookies))

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, body: Any = None, **kwargs: Any) -> requests.Response:
        url = self.url(path)
        log.debug("%s %s", method, url)
        try:
            return self.session.request(method, url, json=body, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(f"Could not reach {url}: {exc}") from exc

    def get(self, path: str, fallback: Optional[bool] = None) -> Any:
        use_fallback = self.fallback if fallback is None else fallback
        try:
            return decode_response(self.request("GET", path))
        except TransportError as exc:
            if not use_fallback:
                raise
            log.warning("%s; using empty fallback for %s", exc, path)
            return fallback_for(path)

    def post(self, path: str, body: Any = None) -> Any:
        return decode_response(self.request("POST", path, body))

    def stream(self, path: str) -> requests.Response:
        """
        GET with a streamed body (downloads). Caller must close the response.
        """
        response = self.request("GET", path, stream=True)
        if not response.ok:
            try:
                decode_response(response)
            finally:
                response.close()
        return response

    def current_user(self) -> Optional[SessionUser]:
        """
        The logged-in user, or None when the session is not authenticated.
        """
        try:
            body = self.get("/api/auth/me", fallback=False)
        except ApiError as exc:
            if exc.status == 401:
                return None
            raise
        if isinstance(body, Mapping) and "user" in body:
            body = body["user"]
        return SessionUser.from_dict(body)
