"""Tests for the teacher dashboard reports."""

from datetime import datetime

import pytest

from ekwento.services.report_service import report_service, week_bounds
from ekwento.services.result import ErrorKind
from ekwento.utils.timeutils import utcnow

from conftest import PAGONG_QUIZ

# A Wednesday; the week runs from Sunday 2024-05-12 to Sunday 2024-05-19
NOW = datetime(2024, 5, 15, 12, 0)
THIS_WEEK = datetime(2024, 5, 13, 9, 0)
LAST_WEEK = datetime(2024, 5, 8, 9, 0)


class TestWeekBounds:
    @pytest.mark.parametrize("now", [
        datetime(2024, 5, 12, 0, 0),
        datetime(2024, 5, 15, 12, 0),
        datetime(2024, 5, 18, 23, 59),
    ])
    def test_week_starts_on_sunday(self, now):
        start, end = week_bounds(now)
        assert start == datetime(2024, 5, 12)
        assert end == datetime(2024, 5, 19)


class TestWeeklyTrends:
    def test_deltas(self, db, factory):
        current = factory.story(title="Ngayon", quiz=PAGONG_QUIZ, created_at=THIS_WEEK)
        factory.story(title="Ngayon din", created_at=datetime(2024, 5, 12, 0, 0))
        factory.story(title="Noon", created_at=datetime(2024, 5, 11, 23, 59))
        deleted = factory.story(title="Binura", created_at=THIS_WEEK)
        deleted.deleted_at = NOW
        db.commit()

        code = factory.code(current, "ABCD", created_at=LAST_WEEK)
        factory.code(current, "EFGH", created_at=LAST_WEEK)
        factory.code(current, "IJKL", created_at=THIS_WEEK)

        factory.submission(code, full_name="Juan", score=2, submitted_at=THIS_WEEK)
        factory.submission(code, full_name="Pedro", score=1, submitted_at=THIS_WEEK)
        factory.submission(code, full_name="Ana", score=1, submitted_at=LAST_WEEK)

        trends = report_service.get_weekly_trends(db, now=NOW).data
        assert trends.stories_change == 1
        assert trends.codes_change == -1
        assert trends.submissions_change == 1
        # (100 + 50) / 2 this week against 50 last week
        assert trends.average_score_change == pytest.approx(25.0)
        assert trends.current_average_score == pytest.approx(200 / 3)

    def test_deleted_submissions_are_ignored(self, db, factory):
        story = factory.story(quiz=PAGONG_QUIZ, created_at=LAST_WEEK)
        code = factory.code(story, "ABCD", created_at=LAST_WEEK)
        gone = factory.submission(code, score=2, submitted_at=THIS_WEEK)
        gone.deleted_at = NOW
        db.commit()

        trends = report_service.get_weekly_trends(db, now=NOW).data
        assert trends.submissions_change == 0
        assert trends.current_average_score == 0.0

    def test_story_without_questions_counts_as_one(self, db, factory):
        story = factory.story(title="Walang tanong", created_at=LAST_WEEK)
        code = factory.code(story, "ABCD", created_at=LAST_WEEK)
        factory.submission(code, score=1, submitted_at=THIS_WEEK)

        trends = report_service.get_weekly_trends(db, now=NOW).data
        assert trends.current_average_score == pytest.approx(100.0)

    def test_empty_database(self, db):
        trends = report_service.get_weekly_trends(db).data
        assert trends.stories_change == 0
        assert trends.average_score_change == 0.0


class TestCodesWithStats:
    def test_counts(self, db, factory, seeded):
        factory.view(seeded["code"], full_name="Juan")
        factory.view(seeded["code"], full_name="Pedro")
        factory.submission(seeded["code"], full_name="Juan", score=2)
        gone = factory.submission(seeded["code"], full_name="Pedro", score=1)
        gone.deleted_at = utcnow()
        db.commit()

        codes = report_service.get_codes_with_stats(db).data
        assert len(codes) == 1
        row = codes[0]
        assert row.code == "ABCD"
        assert row.story_title == seeded["story"].title
        assert row.view_count == 2
        assert row.submission_count == 1

    def test_newest_first(self, db, factory, seeded):
        factory.code(seeded["story"], "NEWR", created_at=datetime(2099, 1, 1))
        assert [c.code for c in report_service.get_codes_with_stats(db).data] == ["NEWR", "ABCD"]


class TestCodeDetails:
    def test_views_joined_with_submissions(self, db, factory, seeded):
        first, second = seeded["items"]
        factory.view(seeded["code"], full_name="Juan", viewed_at=datetime(2024, 5, 2))
        factory.view(seeded["code"], full_name="Pedro", viewed_at=datetime(2024, 5, 1))
        factory.submission(
            seeded["code"], full_name="Juan", score=1,
            answers=[(first.id, "Pagong"), (second.id, "Pagong")]
        )
        # Same student name under another code must not match
        other_code = factory.code(seeded["story"], "OTHR")
        factory.submission(other_code, full_name="Pedro", score=2)

        details = report_service.get_code_details_with_student_data(db, seeded["code"].id).data
        assert details.code.code == "ABCD"
        assert details.code.story.title == seeded["story"].title

        juan, pedro = details.student_views
        assert (juan.full_name, juan.has_submission, juan.score, juan.total_questions) == ("Juan", True, 1, 2)
        assert (pedro.full_name, pedro.has_submission, pedro.score) == ("Pedro", False, None)
        assert pedro.total_questions == 2

    def test_deleted_submission_does_not_count(self, db, factory, seeded):
        factory.view(seeded["code"])
        gone = factory.submission(seeded["code"], score=2)
        gone.deleted_at = utcnow()
        db.commit()

        row = report_service.get_code_details_with_student_data(db, seeded["code"].id).data.student_views[0]
        assert row.has_submission is False

    def test_unknown_code(self, db, seeded):
        assert report_service.get_code_details_with_student_data(db, 9999).kind == ErrorKind.not_found


class TestStudentSubmissionDetails:
    def test_answers(self, db, factory, seeded):
        first, second = seeded["items"]
        factory.submission(
            seeded["code"], score=1,
            answers=[(second.id, "Kalabaw"), (first.id, "Pagong")]
        )

        detail = report_service.get_student_submission_details(db, seeded["code"].id, "Juan", "10-A").data
        assert detail.score == 1
        assert [a.quiz_number for a in detail.answers] == [1, 2]
        assert [a.is_correct for a in detail.answers] == [True, False]

    def test_missing(self, db, seeded):
        result = report_service.get_student_submission_details(db, seeded["code"].id, "Juan", "10-A")
        assert result.kind == ErrorKind.not_found


class TestReportsApi:
    def test_endpoints(self, teacher_client, factory, seeded):
        factory.view(seeded["code"])
        code_id = seeded["code"].id

        resp = teacher_client.get("/reports/weekly-trends")
        assert resp.status_code == 200
        assert "current_average_score" in resp.json()["trends"]

        resp = teacher_client.get("/reports/codes")
        assert resp.json()["codes"][0]["view_count"] == 1

        resp = teacher_client.get(f"/reports/codes/{code_id}")
        assert resp.json()["student_views"][0]["full_name"] == "Juan"

        resp = teacher_client.get(
            f"/reports/codes/{code_id}/submission", params={"full_name": "Juan", "section": "10-A"}
        )
        assert resp.status_code == 404

        resp = teacher_client.get("/reports/score-drift")
        assert resp.json() == {"success": True, "count": 0, "submissions": []}
