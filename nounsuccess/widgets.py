"""
Dashboard widgets: normalize -> transform -> view.

Each widget reads one (or two) cache keys, normalizes the body into model
records, applies a pure transform (sorting, top-N, derived labels) and ends up
in exactly one of four view states:

    loading | error | empty | content
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence

from nounsuccess.cache import QueryCache, QueryState
from nounsuccess.errors import AUTH_REQUIRED, GENERIC_ERROR
from nounsuccess.model import Course, Exam, ForumPost, Job, Material, UserProgress
from nounsuccess.normalize import (
    normalize_courses,
    normalize_exams,
    normalize_jobs,
    normalize_materials,
    normalize_posts,
    normalize_progress,
)
from nounsuccess.timefmt import days_until, parse_timestamp, time_ago, utcnow

FORUM_KEY = "/api/forum/posts"
JOBS_KEY = "/api/jobs"
EXAMS_KEY = "/api/exams"
COURSES_KEY = "/api/courses"
PROGRESS_KEY = "/api/progress"
MATERIALS_KEY = "/api/materials"

LOADING = "loading"
ERROR = "error"
EMPTY = "empty"
CONTENT = "content"

UNKNOWN_COURSE = "Unknown Course"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Forum
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PostItem:
    id: int
    title: str
    author: str
    initial: str
    posted: str


def highlight_posts(posts: Sequence[ForumPost], limit: int = 2) -> List[ForumPost]:
    """
    Newest first; posts created at the same instant are ordered by
    views + replies, most engaged first.
    """
    ranked = sorted(posts, key=lambda p: (p.created_at or _OLDEST, p.engagement), reverse=True)
    return ranked[:limit]


def forum_items(posts: Sequence[ForumPost], now: Optional[datetime] = None) -> List[PostItem]:
    return [
        PostItem(
            id=p.id,
            title=p.title,
            author=p.author.first_name,
            initial=p.author.initial,
            posted=time_ago(p.created_at, now),
        )
        for p in highlight_posts(posts)
    ]


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

NEUTRAL_BADGE = "gray"

_JOB_BADGES = {
    "remote": "green",
    "hybrid": "blue",
    "part-time": "yellow",
    "full-time": "purple",
    "internship": "orange",
}


def job_badge(job_type: Optional[str]) -> str:
    if not job_type:
        return NEUTRAL_BADGE
    return _JOB_BADGES.get(job_type.strip().lower(), NEUTRAL_BADGE)


@dataclass(frozen=True)
class JobItem:
    id: int
    title: str
    company: str
    location: str
    type_label: str
    badge: str
    posted: str


def job_highlights(jobs: Sequence[Job], now: Optional[datetime] = None, limit: int = 3) -> List[JobItem]:
    return [
        JobItem(
            id=j.id,
            title=j.title,
            company=j.company,
            location=j.location,
            type_label=j.type or "Not specified",
            badge=job_badge(j.type),
            posted=time_ago(j.posted_at, now),
        )
        for j in list(jobs)[:limit]
    ]


# ---------------------------------------------------------------------------
# Exams
# ---------------------------------------------------------------------------

URGENT = "urgent"
WARNING = "warning"
INFO = "info"


def exam_severity(days: int) -> str:
    if days <= 3:
        return URGENT
    if days <= 7:
        return WARNING
    return INFO


def days_label(days: int) -> str:
    return "Tomorrow" if days == 1 else f"{days} days"


@dataclass(frozen=True)
class UpcomingExam:
    id: int
    course_id: Optional[int]
    code: str
    title: str
    description: Optional[str]
    date: datetime
    days_until: int

    @property
    def severity(self) -> str:
        return exam_severity(self.days_until)


def _find_course(courses: Sequence[Course], course_id: Optional[int]) -> Optional[Course]:
    for c in courses:
        if c.id == course_id:
            return c
    return None


def upcoming_exams(
    exams: Sequence[Exam],
    courses: Sequence[Course],
    now: Optional[datetime] = None,
    limit: int = 3,
) -> List[UpcomingExam]:
    """
    The nearest exams strictly in the future, joined with their course.
    """
    current = parse_timestamp(now) or utcnow()
    out: List[UpcomingExam] = []
    for exam in exams:
        if exam.date is None or exam.date <= current:
            continue
        days = days_until(exam.date, current)
        if days is None:
            continue
        course = _find_course(courses, exam.course_id)
        out.append(
            UpcomingExam(
                id=exam.id,
                course_id=exam.course_id,
                code=course.code if course else UNKNOWN_COURSE,
                title=course.title if course else UNKNOWN_COURSE,
                description=exam.description,
                date=exam.date,
                days_until=days,
            )
        )
    out.sort(key=lambda e: e.days_until)
    return out[:limit]


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

QUIZ = "quiz"
EXAM = "exam"
SUMMARY = "summary"


def progress_type(item: UserProgress) -> str:
    if item.exam_id is not None:
        return EXAM
    if item.material_id is not None and item.material is not None and item.material.type == "Quiz":
        return QUIZ
    return SUMMARY


def progress_title(item: UserProgress) -> str:
    if item.course is None:
        return "Course Activity"
    activity = (item.material.title if item.material else "") or (item.exam.title if item.exam else "") or "Activity"
    return f"{item.course.code or ''}: {activity}"


@dataclass(frozen=True)
class ProgressItem:
    id: int
    title: str
    when: str
    score: int
    type: str


def recent_progress(progress: Sequence[UserProgress], now: Optional[datetime] = None, limit: int = 3) -> List[ProgressItem]:
    return [
        ProgressItem(
            id=p.id,
            title=progress_title(p),
            when=time_ago(p.timestamp, now),
            score=p.score,
            type=progress_type(p),
        )
        for p in list(progress)[:limit]
    ]


# ---------------------------------------------------------------------------
# Materials
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MaterialItem:
    id: int
    title: str
    type: str
    detail: str
    downloadable: bool


def material_detail(material: Material) -> str:
    if material.pages:
        return f"{material.pages} pages"
    if material.duration:
        return material.duration
    if material.questions:
        return f"{material.questions} questions"
    return ""


def filter_materials(materials: Sequence[Material], search: Optional[str] = None, limit: int = 6) -> List[Material]:
    """
    Case-insensitive match on title, type or content; at most `limit` results
    with or without a search term.
    """
    term = (search or "").strip().lower()
    if not term:
        return list(materials)[:limit]
    out = [
        m
        for m in materials
        if term in m.title.lower() or term in m.type.lower() or term in (m.content or "").lower()
    ]
    return out[:limit]


def material_items(materials: Sequence[Material], search: Optional[str] = None, limit: int = 6) -> List[MaterialItem]:
    return [
        MaterialItem(
            id=m.id,
            title=m.title,
            type=m.type or "Other",
            detail=material_detail(m),
            downloadable=bool(m.file_url),
        )
        for m in filter_materials(materials, search, limit)
    ]


# ---------------------------------------------------------------------------
# View pipeline
# ---------------------------------------------------------------------------


@dataclass
class WidgetView:
    name: str
    state: str
    items: List[Any] = field(default_factory=list)
    error: Optional[str] = None
    retry_hint: Optional[str] = None
    empty_message: Optional[str] = None


def _error_view(name: str, state: QueryState) -> WidgetView:
    message = str(state.error) if state.error is not None else GENERIC_ERROR
    hint = "Log in and run the command again." if message == AUTH_REQUIRED else "Run the command again to retry."
    return WidgetView(name=name, state=ERROR, error=str(message), retry_hint=hint)


def build_view(
    name: str,
    state: QueryState,
    normalize: Callable[[Any], List[Any]],
    transform: Callable[[List[Any]], List[Any]],
) -> WidgetView:
    if state.is_loading:
        return WidgetView(name=name, state=LOADING)
    if state.is_error:
        return _error_view(name, state)
    items = transform(normalize(state.data))
    return WidgetView(name=name, state=CONTENT if items else EMPTY, items=items)


def forum_view(cache: QueryCache, now: Optional[datetime] = None) -> WidgetView:
    return build_view("Forum Highlights", cache.get(FORUM_KEY), normalize_posts, lambda ps: forum_items(ps, now))


def jobs_view(cache: QueryCache, now: Optional[datetime] = None) -> WidgetView:
    return build_view("Job Opportunities", cache.get(JOBS_KEY), normalize_jobs, lambda js: job_highlights(js, now))


def progress_view(cache: QueryCache, now: Optional[datetime] = None) -> WidgetView:
    return build_view(
        "Recent Progress", cache.get(PROGRESS_KEY), normalize_progress, lambda ps: recent_progress(ps, now)
    )


def exams_view(cache: QueryCache, now: Optional[datetime] = None) -> WidgetView:
    # a failed courses query only loses the course names, not the widget
    courses_state = cache.get(COURSES_KEY)
    courses = normalize_courses(courses_state.data) if not courses_state.is_error else []
    return build_view(
        "Upcoming Exams",
        cache.get(EXAMS_KEY),
        normalize_exams,
        lambda es: upcoming_exams(es, courses, now),
    )


def materials_view(cache: QueryCache, search: Optional[str] = None, limit: int = 6) -> WidgetView:
    view = build_view(
        "Course Materials",
        cache.get(MATERIALS_KEY),
        normalize_materials,
        lambda ms: material_items(ms, search, limit),
    )
    if view.state == EMPTY and search and search.strip():
        view.empty_message = "No materials match your search criteria."
    return view


def dashboard(cache: QueryCache, now: Optional[datetime] = None) -> List[WidgetView]:
    return [
        exams_view(cache, now),
        progress_view(cache, now),
        jobs_view(cache, now),
        forum_view(cache, now),
        materials_view(cache),
    ]
