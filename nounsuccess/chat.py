"""
AI tutor chat.

ChatSession pairs the cached history query with the "send prompt" mutation:

    idle --send--> sending --ok--> idle   (history invalidated + refetched)
                           --fail-> error -> idle (notification, error re-raised)

Only one send may be in flight per session; a second concurrent send is
rejected with ChatBusyError instead of being queued.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from nounsuccess.api import ApiClient
from nounsuccess.cache import QueryCache
from nounsuccess.errors import GENERIC_ERROR, ChatBusyError, NounSuccessError
from nounsuccess.model import ChatHistory
from nounsuccess.normalize import normalize_chat_history

log = logging.getLogger(__name__)

HISTORY_KEY = "/api/chat/history"
SEND_PATH = "/api/chat"

IDLE = "idle"
SENDING = "sending"
ERROR = "error"

Notifier = Callable[[str, str], None]


def log_notifier(title: str, description: str) -> None:
    log.warning("%s: %s", title, description)


class ChatSession:
    def __init__(self, client: ApiClient, cache: QueryCache, notify: Optional[Notifier] = None) -> None:
        self.client = client
        self.cache = cache
        self.notify = notify or log_notifier
        self.state = IDLE
        self.last_error: Optional[NounSuccessError] = None
        self._in_flight = threading.Lock()

    @property
    def is_sending(self) -> bool:
        return self.state == SENDING

    def history(self) -> ChatHistory:
        """
        Cached conversation history; an empty history if loading failed.
        """
        state = self.cache.get(HISTORY_KEY)
        if state.is_error:
            self.notify("Failed to load chat history", str(state.error or GENERIC_ERROR))
            return ChatHistory()
        return normalize_chat_history(state.data)

    def send_message(self, prompt: str) -> Any:
        """
        Send a prompt and refresh the history.

        Blank prompts are ignored (no request, returns None).
        """
        if not prompt or not prompt.strip():
            return None

        if not self._in_flight.acquire(blocking=False):
            raise ChatBusyError("A message is already being sent.")
        try:
            self.state = SENDING
            try:
                response = self.cache.mutate(HISTORY_KEY, lambda: self.client.post(SEND_PATH, {"prompt": prompt}))
            except NounSuccessError as exc:
                self.state = ERROR
                self.last_error = exc
                self.notify("Failed to send message", str(exc))
                raise
            finally:
                self.state = IDLE
            self.last_error = None
            self.cache.get(HISTORY_KEY)
            return response
        finally:
            self._in_flight.release()
