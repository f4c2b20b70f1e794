"""
Keyed query cache.

The cache is passed explicitly to whatever owns the fetch pipeline (widgets,
chat session). It only knows how to call a fetcher for a key; it does not
retry and never writes entries on behalf of callers.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from nounsuccess.errors import NounSuccessError

log = logging.getLogger(__name__)

T = TypeVar("T")

LOADING = "loading"
ERROR = "error"
SUCCESS = "success"


@dataclass
class QueryState:
    key: str
    status: str = LOADING
    data: Any = None
    error: Optional[NounSuccessError] = None
    updated_at: float = 0.0
    stale: bool = True

    @property
    def is_loading(self) -> bool:
        return self.status == LOADING

    @property
    def is_error(self) -> bool:
        return self.status == ERROR


class QueryCache:
    def __init__(
        self,
        fetcher: Callable[[str], Any],
        stale_time: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._stale_time = stale_time
        self._clock = clock
        self._entries: dict[str, QueryState] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, state: QueryState) -> bool:
        if state.stale or state.status != SUCCESS:
            return False
        return self._clock() - state.updated_at < self._stale_time

    def peek(self, key: str) -> Optional[QueryState]:
        with self._lock:
            return self._entries.get(key)

    def get(self, key: str) -> QueryState:
        """
        Return the cached state for key, fetching when missing or stale.

        Fetch errors are captured in the returned state, not raised.
        """
        with self._lock:
            state = self._entries.get(key)
            if state is not None and self._is_fresh(state):
                return state
            if state is None:
                state = QueryState(key=key)
                self._entries[key] = state
            state.status = LOADING

        log.debug("fetching %s", key)
        try:
            data = self._fetcher(key)
        except NounSuccessError as exc:
            log.debug("fetch of %s failed: %s", key, exc)
            with self._lock:
                state.status = ERROR
                state.error = exc
                state.stale = True
                state.updated_at = self._clock()
            return state

        with self._lock:
            state.status = SUCCESS
            state.data = data
            state.error = None
            state.stale = False
            state.updated_at = self._clock()
        return state

    def invalidate(self, key: str) -> None:
        with self._lock:
            state = self._entries.get(key)
            if state is not None:
                state.stale = True

    def mutate(self, key: str, fn: Callable[[], T]) -> T:
        """
        Run a mutating call; on success mark key stale so the next get refetches.
        """
        result = fn()
        self.invalidate(key)
        return result
