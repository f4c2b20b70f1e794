"""
Central data model definitions used across the project.

Every record is built once at the normalization boundary (from_dict), so that:
- optional fields are already resolved to their display defaults
- widgets never have to null-check nested objects
- all modules share the same field names

None of these records is mutated client-side; they are read-only projections
of what the API returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional

from nounsuccess.timefmt import parse_timestamp

UNKNOWN_USER = "Unknown User"
DEFAULT_LOCATION = "Remote"


def _str(x: Any, default: str = "") -> str:
    return default if x is None else str(x)


def _opt_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def _int(x: Any, default: int = 0) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return default


def _opt_int(x: Any) -> Optional[int]:
    if x is None or isinstance(x, bool):
        return None
    try:
        return int(x)
    except (TypeError, ValueError):
        return None


def _mapping(x: Any) -> Optional[Mapping[str, Any]]:
    return x if isinstance(x, Mapping) else None


@dataclass(frozen=True)
class ForumAuthor:
    id: Optional[int]
    first_name: str

    @classmethod
    def unknown(cls) -> "ForumAuthor":
        return cls(id=None, first_name=UNKNOWN_USER)

    @classmethod
    def from_dict(cls, raw: Any) -> "ForumAuthor":
        data = _mapping(raw)
        if data is None:
            return cls.unknown()
        name = _opt_str(data.get("firstName"))
        return cls(id=_opt_int(data.get("id")), first_name=name or UNKNOWN_USER)

    @property
    def initial(self) -> str:
        if not self.first_name or self.first_name == UNKNOWN_USER:
            return "U"
        return self.first_name[0].upper()


@dataclass(frozen=True)
class ForumPost:
    id: int
    title: str
    author: ForumAuthor
    created_at: Optional[datetime]
    views: int = 0
    reply_count: int = 0
    category: str = ""
    content: str = ""

    @property
    def engagement(self) -> int:
        return self.views + self.reply_count

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ForumPost":
        return cls(
            id=_int(data.get("id")),
            title=_str(data.get("title")),
            author=ForumAuthor.from_dict(data.get("author")),
            created_at=parse_timestamp(data.get("createdAt")),
            views=max(0, _int(data.get("views"))),
            reply_count=max(0, _int(data.get("replyCount"))),
            category=_str(data.get("category")),
            content=_str(data.get("content")),
        )


@dataclass(frozen=True)
class Job:
    id: int
    title: str
    company: str
    location: str = DEFAULT_LOCATION
    type: Optional[str] = None
    posted_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Job":
        return cls(
            id=_int(data.get("id")),
            title=_str(data.get("title")),
            company=_str(data.get("company")),
            location=_opt_str(data.get("location")) or DEFAULT_LOCATION,
            type=_opt_str(data.get("type")),
            posted_at=parse_timestamp(data.get("postedAt")),
        )


@dataclass(frozen=True)
class Course:
    id: int
    code: str
    title: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Course":
        return cls(id=_int(data.get("id")), code=_str(data.get("code")), title=_str(data.get("title")))


@dataclass(frozen=True)
class Material:
    """
    A course material (PDF, video, quiz...) as listed by /api/materials.
    """

    id: int
    course_id: Optional[int]
    title: str
    type: str = ""
    content: Optional[str] = None
    file_url: Optional[str] = None
    pages: Optional[int] = None
    duration: Optional[str] = None
    questions: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Material":
        return cls(
            id=_int(data.get("id")),
            course_id=_opt_int(data.get("courseId")),
            title=_str(data.get("title")),
            type=_str(data.get("type")),
            content=_opt_str(data.get("content")),
            file_url=_opt_str(data.get("fileUrl")),
            pages=_opt_int(data.get("pages")),
            duration=_opt_str(data.get("duration")),
            questions=_opt_int(data.get("questions")),
        )


@dataclass(frozen=True)
class Exam:
    id: int
    course_id: Optional[int]
    title: str = ""
    date: Optional[datetime] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Exam":
        return cls(
            id=_int(data.get("id")),
            course_id=_opt_int(data.get("courseId")),
            title=_str(data.get("title")),
            date=parse_timestamp(data.get("date")),
            description=_opt_str(data.get("description")),
        )


@dataclass(frozen=True)
class ProgressRef:
    """
    Nested course / material / exam object embedded in a progress row.
    """

    id: Optional[int]
    title: str = ""
    type: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["ProgressRef"]:
        data = _mapping(raw)
        if data is None:
            return None
        return cls(
            id=_opt_int(data.get("id")),
            title=_str(data.get("title")),
            type=_opt_str(data.get("type")),
            code=_opt_str(data.get("code")),
        )


@dataclass(frozen=True)
class UserProgress:
    id: int
    timestamp: Optional[datetime]
    score: int = 0
    material_id: Optional[int] = None
    exam_id: Optional[int] = None
    course_id: Optional[int] = None
    material: Optional[ProgressRef] = None
    exam: Optional[ProgressRef] = None
    course: Optional[ProgressRef] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProgress":
        score = min(100, max(0, _int(data.get("score"))))
        return cls(
            id=_int(data.get("id")),
            timestamp=parse_timestamp(data.get("timestamp")),
            score=score,
            material_id=_opt_int(data.get("materialId")),
            exam_id=_opt_int(data.get("examId")),
            course_id=_opt_int(data.get("courseId")),
            material=ProgressRef.from_dict(data.get("material")),
            exam=ProgressRef.from_dict(data.get("exam")),
            course=ProgressRef.from_dict(data.get("course")),
        )


@dataclass(frozen=True)
class ChatMessage:
    id: int
    content: str
    is_user_message: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        return cls(
            id=_int(data.get("id")),
            content=_str(data.get("content")),
            is_user_message=bool(data.get("isUserMessage", False)),
            created_at=parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True)
class ChatUsage:
    prompts_used: int = 0
    prompt_limit: Optional[int] = None

    @property
    def remaining(self) -> Optional[int]:
        if self.prompt_limit is None:
            return None
        return max(0, self.prompt_limit - self.prompts_used)


@dataclass(frozen=True)
class ChatHistory:
    messages: List[ChatMessage] = field(default_factory=list)
    usage: ChatUsage = field(default_factory=ChatUsage)


@dataclass(frozen=True)
class SessionUser:
    """
    Authenticated user as carried by the server-side session.
    """

    id: int
    first_name: str
    email: str
    school: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> Optional["SessionUser"]:
        data = _mapping(raw)
        if data is None or data.get("id") is None:
            return None
        return cls(
            id=_int(data.get("id")),
            first_name=_str(data.get("firstName")),
            email=_str(data.get("email")),
            school=_opt_str(data.get("school")),
            role=_opt_str(data.get("role")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "email": self.email,
            "school": self.school,
            "role": self.role,
        }
