"""
Response normalization and fallbacks.

Every list-bearing endpoint normalizes to a list (possibly empty), never None,
so the widget code downstream never needs a null check.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, TypeVar

from nounsuccess.model import (
    ChatHistory,
    ChatMessage,
    ChatUsage,
    Course,
    Exam,
    ForumPost,
    Job,
    Material,
    UserProgress,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

# (substring, fallback body); first match wins, so more specific paths go first
_FALLBACKS: list[tuple[str, Any]] = [
    ("/api/courses", {"courses": []}),
    ("/api/exams", {"exams": []}),
    ("/api/materials", {"materials": []}),
    ("/api/progress", {"progress": []}),
    ("/api/forum/posts", {"posts": []}),
    ("/api/jobs", {"jobs": []}),
    ("/api/chat/history", {"messages": [], "promptsUsed": 0, "promptLimit": None}),
    ("/api/auth/me", None),
]


def fallback_for(endpoint: str) -> Any:
    """
    Empty-but-valid body for an endpoint, used when the request itself fails.

    Unknown endpoints get an empty dict; /api/auth/me gets None (no user).
    """
    for needle, body in _FALLBACKS:
        if needle in endpoint:
            # fresh copy so callers can't share the list objects
            return None if body is None else {k: (list(v) if isinstance(v, list) else v) for k, v in body.items()}
    return {}


def unwrap_list(body: Any, field: str) -> List[Any]:
    """
    Return body[field] if it is a list, otherwise [].
    """
    if not isinstance(body, Mapping):
        return []
    value = body.get(field)
    if not isinstance(value, list):
        return []
    return list(value)


def _records(body: Any, field: str, build: Callable[[Mapping[str, Any]], T]) -> List[T]:
    out: List[T] = []
    for item in unwrap_list(body, field):
        if not isinstance(item, Mapping):
            log.debug("skipping non-object item in %r: %r", field, item)
            continue
        out.append(build(item))
    return out


def normalize_posts(body: Any) -> List[ForumPost]:
    return _records(body, "posts", ForumPost.from_dict)


def normalize_jobs(body: Any) -> List[Job]:
    return _records(body, "jobs", Job.from_dict)


def normalize_exams(body: Any) -> List[Exam]:
    return _records(body, "exams", Exam.from_dict)


def normalize_courses(body: Any) -> List[Course]:
    return _records(body, "courses", Course.from_dict)


def normalize_materials(body: Any) -> List[Material]:
    return _records(body, "materials", Material.from_dict)


def normalize_progress(body: Any) -> List[UserProgress]:
    return _records(body, "progress", UserProgress.from_dict)


def _usage_number(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    try:
        n = int(x)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def normalize_chat_history(body: Any) -> ChatHistory:
    """
    {messages, promptsUsed, promptLimit} -> ChatHistory.

    A missing or zero promptLimit means "no limit" (None).
    """
    messages = _records(body, "messages", ChatMessage.from_dict)
    data: Mapping[str, Any] = body if isinstance(body, Mapping) else {}
    used = _usage_number(data.get("promptsUsed")) or 0
    limit = _usage_number(data.get("promptLimit"))
    return ChatHistory(messages=messages, usage=ChatUsage(prompts_used=used, prompt_limit=limit))
