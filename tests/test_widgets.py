"""
Unit tests for the dashboard widget transforms and view states.
"""

import unittest
from datetime import datetime, timedelta, timezone

from nounsuccess.api import ApiClient
from nounsuccess.cache import QueryCache
from nounsuccess.errors import AUTH_REQUIRED, GENERIC_ERROR, ApiError
from nounsuccess.model import Course, Exam, ForumAuthor, ForumPost, Material, UserProgress, ProgressRef
from nounsuccess.normalize import normalize_exams
from nounsuccess.widgets import (
    CONTENT,
    EMPTY,
    ERROR,
    EXAM,
    INFO,
    QUIZ,
    SUMMARY,
    URGENT,
    WARNING,
    days_label,
    exam_severity,
    exams_view,
    filter_materials,
    highlight_posts,
    job_badge,
    jobs_view,
    material_detail,
    material_items,
    materials_view,
    progress_title,
    progress_type,
    recent_progress,
    upcoming_exams,
)

from fakes import FakeSession

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def post(pid: int, created: datetime, views: int = 0, replies: int = 0) -> ForumPost:
    return ForumPost(
        id=pid,
        title=f"post {pid}",
        author=ForumAuthor(id=1, first_name="Ada"),
        created_at=created,
        views=views,
        reply_count=replies,
    )


def material(mid: int, title: str, type: str = "PDF", content: str = "", **kw) -> Material:
    return Material(id=mid, course_id=1, title=title, type=type, content=content, **kw)


class StaticFetcher:
    def __init__(self, bodies: dict) -> None:
        self.bodies = bodies

    def __call__(self, key: str):
        body = self.bodies[key]
        if isinstance(body, Exception):
            raise body
        return body


class TestForumHighlights(unittest.TestCase):
    def test_newer_post_wins_regardless_of_engagement(self) -> None:
        old_popular = post(1, NOW - timedelta(days=1), views=500, replies=40)
        new_quiet = post(2, NOW, views=0)
        self.assertEqual([p.id for p in highlight_posts([old_popular, new_quiet])], [2, 1])

    def test_tie_broken_by_views_plus_replies(self) -> None:
        a = post(1, NOW, views=10, replies=0)
        b = post(2, NOW, views=5, replies=8)
        self.assertEqual([p.id for p in highlight_posts([a, b])], [2, 1])

    def test_top_two_only(self) -> None:
        posts = [post(i, NOW - timedelta(hours=i)) for i in range(5)]
        self.assertEqual([p.id for p in highlight_posts(posts)], [0, 1])


class TestJobBadge(unittest.TestCase):
    def test_case_insensitive(self) -> None:
        for value in ("Remote", "REMOTE", "remote"):
            self.assertEqual(job_badge(value), "green")

    def test_known_types(self) -> None:
        self.assertEqual(job_badge("hybrid"), "blue")
        self.assertEqual(job_badge("Part-Time"), "yellow")
        self.assertEqual(job_badge("full-time"), "purple")
        self.assertEqual(job_badge("Internship"), "orange")

    def test_unknown_and_absent_are_neutral(self) -> None:
        self.assertEqual(job_badge("contract"), "gray")
        self.assertEqual(job_badge(None), "gray")
        self.assertEqual(job_badge(""), "gray")


class TestUpcomingExams(unittest.TestCase):
    def setUp(self) -> None:
        self.courses = [Course(id=1, code="CIT101", title="Intro to Computing")]

    def test_past_and_undated_excluded(self) -> None:
        exams = [
            Exam(id=1, course_id=1, date=NOW - timedelta(hours=1)),
            Exam(id=2, course_id=1, date=NOW),
            Exam(id=3, course_id=1, date=None),
            Exam(id=4, course_id=1, date=NOW + timedelta(minutes=5)),
        ]
        out = upcoming_exams(exams, self.courses, NOW)
        self.assertEqual([e.id for e in out], [4])
        self.assertGreaterEqual(out[0].days_until, 1)

    def test_sorted_nearest_first_top_three(self) -> None:
        exams = [Exam(id=i, course_id=1, date=NOW + timedelta(days=d)) for i, d in enumerate([10, 2, 6, 1, 30])]
        out = upcoming_exams(exams, self.courses, NOW)
        self.assertEqual([e.id for e in out], [3, 1, 2])
        self.assertEqual([e.severity for e in out], [URGENT, URGENT, WARNING])

    def test_unknown_course(self) -> None:
        out = upcoming_exams([Exam(id=1, course_id=99, date=NOW + timedelta(days=9))], self.courses, NOW)
        self.assertEqual(out[0].code, "Unknown Course")
        self.assertEqual(out[0].severity, INFO)

    def test_severity_bands_and_labels(self) -> None:
        self.assertEqual(exam_severity(3), URGENT)
        self.assertEqual(exam_severity(4), WARNING)
        self.assertEqual(exam_severity(7), WARNING)
        self.assertEqual(exam_severity(8), INFO)
        self.assertEqual(days_label(1), "Tomorrow")
        self.assertEqual(days_label(5), "5 days")

    def test_from_raw_dates(self) -> None:
        exams = normalize_exams({"exams": [{"id": 1, "courseId": 1, "date": "2026-03-13"}]})
        out = upcoming_exams(exams, self.courses, NOW)
        self.assertEqual(out[0].days_until, 3)


class TestRecentProgress(unittest.TestCase):
    def test_classification(self) -> None:
        quiz = UserProgress(id=1, timestamp=NOW, material_id=2, material=ProgressRef(id=2, title="W1", type="Quiz"))
        summary = UserProgress(id=2, timestamp=NOW, material_id=3, material=ProgressRef(id=3, title="Notes", type="PDF"))
        exam = UserProgress(id=3, timestamp=NOW, exam_id=4, material_id=2)
        self.assertEqual(progress_type(quiz), QUIZ)
        self.assertEqual(progress_type(summary), SUMMARY)
        self.assertEqual(progress_type(exam), EXAM)

    def test_title(self) -> None:
        course = ProgressRef(id=1, code="CIT101", title="Intro")
        self.assertEqual(progress_title(UserProgress(id=1, timestamp=NOW)), "Course Activity")
        self.assertEqual(progress_title(UserProgress(id=1, timestamp=NOW, course=course)), "CIT101: Activity")
        row = UserProgress(id=1, timestamp=NOW, course=course, exam=ProgressRef(id=2, title="Midterm"))
        self.assertEqual(progress_title(row), "CIT101: Midterm")

    def test_recent_three_with_relative_time(self) -> None:
        rows = [UserProgress(id=i, timestamp=NOW - timedelta(hours=i + 2), score=80) for i in range(5)]
        out = recent_progress(rows, NOW)
        self.assertEqual(len(out), 3)
        self.assertEqual(out[0].when, "2h ago")


class TestMaterials(unittest.TestCase):
    def setUp(self) -> None:
        self.materials = [
            material(1, "Data Structures Notes", "PDF", pages=42, file_url="/files/ds.pdf"),
            material(2, "Recursion Lecture", "Video", duration="45 min"),
            material(3, "Week 1 Quiz", "Quiz", questions=10),
            material(4, "Reading list", "", content="Graph ALGORITHMS and trees"),
        ]

    def test_search_matches_title_type_or_content_case_insensitively(self) -> None:
        self.assertEqual([m.id for m in filter_materials(self.materials, "data STRUCT")], [1])
        self.assertEqual([m.id for m in filter_materials(self.materials, "video")], [2])
        self.assertEqual([m.id for m in filter_materials(self.materials, "algorithms")], [4])
        self.assertEqual(filter_materials(self.materials, "chemistry"), [])

    def test_blank_search_keeps_everything(self) -> None:
        self.assertEqual(len(filter_materials(self.materials, "   ")), 4)
        self.assertEqual(len(filter_materials(self.materials)), 4)

    def test_at_most_six_with_or_without_search(self) -> None:
        many = [material(i, f"Lecture {i}") for i in range(1, 11)]
        self.assertEqual([m.id for m in filter_materials(many)], [1, 2, 3, 4, 5, 6])
        self.assertEqual(len(filter_materials(many, "lecture")), 6)

    def test_detail_and_type_label(self) -> None:
        self.assertEqual([material_detail(m) for m in self.materials], ["42 pages", "45 min", "10 questions", ""])
        items = material_items(self.materials)
        self.assertTrue(items[0].downloadable)
        self.assertFalse(items[1].downloadable)
        self.assertEqual(items[3].type, "Other")

    def test_view_from_raw_body(self) -> None:
        body = {"materials": [{"id": 5, "courseId": 2, "title": "Intro", "type": "PDF", "pages": 3}]}
        view = materials_view(QueryCache(StaticFetcher({"/api/materials": body})))
        self.assertEqual(view.state, CONTENT)
        self.assertEqual(view.items[0].detail, "3 pages")
        self.assertIsNone(view.empty_message)

    def test_search_without_matches_has_own_empty_message(self) -> None:
        body = {"materials": [{"id": 5, "title": "Intro", "type": "PDF"}]}
        cache = QueryCache(StaticFetcher({"/api/materials": body}))
        view = materials_view(cache, search="calculus")
        self.assertEqual(view.state, EMPTY)
        self.assertEqual(view.empty_message, "No materials match your search criteria.")

        self.assertIsNone(materials_view(QueryCache(StaticFetcher({"/api/materials": {}}))).empty_message)


class TestViews(unittest.TestCase):
    def test_jobs_missing_key_is_empty_state(self) -> None:
        cache = QueryCache(StaticFetcher({"/api/jobs": {}}))
        view = jobs_view(cache, NOW)
        self.assertEqual(view.state, EMPTY)
        self.assertEqual(view.items, [])

    def test_jobs_content(self) -> None:
        body = {"jobs": [{"id": 1, "title": "Intern", "company": "NOUN", "type": "Remote", "postedAt": "2026-03-09"}]}
        view = jobs_view(QueryCache(StaticFetcher({"/api/jobs": body})), NOW)
        self.assertEqual(view.state, CONTENT)
        self.assertEqual(view.items[0].badge, "green")
        self.assertEqual(view.items[0].location, "Remote")

    def test_401_renders_error_with_retry(self) -> None:
        cache = QueryCache(StaticFetcher({"/api/jobs": ApiError(AUTH_REQUIRED, 401)}))
        view = jobs_view(cache, NOW)
        self.assertEqual(view.state, ERROR)
        self.assertEqual(view.error, AUTH_REQUIRED)
        self.assertIsNotNone(view.retry_hint)

    def test_malformed_json_is_error_state(self) -> None:
        session = FakeSession({("GET", "/api/jobs"): (200, "{not json", "application/json")})
        client = ApiClient("http://example.test", session=session)
        view = jobs_view(QueryCache(client.get), NOW)
        self.assertEqual(view.state, ERROR)
        self.assertEqual(view.error, GENERIC_ERROR)
        self.assertEqual(view.retry_hint, "Run the command again to retry.")

    def test_exams_survive_failed_courses_query(self) -> None:
        cache = QueryCache(
            StaticFetcher(
                {
                    "/api/courses": ApiError("Server error. Please try again later.", 500),
                    "/api/exams": {"exams": [{"id": 1, "courseId": 1, "date": "2026-03-20"}]},
                }
            )
        )
        view = exams_view(cache, NOW)
        self.assertEqual(view.state, CONTENT)
        self.assertEqual(view.items[0].title, "Unknown Course")


if __name__ == "__main__":
    unittest.main()
