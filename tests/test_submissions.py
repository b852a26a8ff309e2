"""Tests for quiz submission, results and score drift."""

import pytest
from sqlalchemy.exc import IntegrityError

from ekwento.models import Answer, Notification, StudentSubmission
from ekwento.schemas.quiz import AnswerInput, QuizItemCreate, QuizSubmission
from ekwento.services.quiz_service import quiz_service
from ekwento.services.report_service import report_service
from ekwento.services.result import ErrorKind
from ekwento.services.submission_service import (
    ALREADY_SUBMITTED, SubmissionService, percentage_of, submission_service
)
from ekwento.utils.timeutils import utcnow


def make_submission(seeded, answers, full_name="Juan", section="10-A", code=None):
    code = code or seeded["code"]
    return QuizSubmission(
        code_id=code.id,
        story_id=code.story_id,
        full_name=full_name,
        section=section,
        device_id="d1",
        answers=[AnswerInput(quiz_item_id=item_id, selected_answer=text) for item_id, text in answers]
    )


def all_correct(seeded):
    first, second = seeded["items"]
    return [(first.id, "Pagong"), (second.id, "Matsing")]


class TestSubmitQuiz:
    def test_all_correct(self, db, seeded):
        result = submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        assert result.success is True
        assert result.data.score == 2
        assert result.data.total_questions == 2
        assert result.data.percentage == 100.0

    def test_score_counts_exact_matches_only(self, db, seeded):
        first, second = seeded["items"]
        answers = [(first.id, "pagong"), (second.id, "Matsing")]
        result = submission_service.submit_quiz_answers(db, make_submission(seeded, answers))
        assert result.data.score == 1
        assert result.data.percentage == 50.0

    def test_second_submission_is_refused_without_writes(self, db, seeded):
        submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))

        result = submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        assert result.success is False
        assert result.kind == ErrorKind.conflict
        assert result.error == ALREADY_SUBMITTED
        assert db.query(StudentSubmission).count() == 1
        assert db.query(Answer).count() == 2

    def test_same_name_other_section_may_submit(self, db, seeded):
        submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        result = submission_service.submit_quiz_answers(
            db, make_submission(seeded, all_correct(seeded), section="10-B")
        )
        assert result.success is True

    def test_soft_deleted_submission_frees_the_slot(self, db, factory, seeded):
        old = factory.submission(seeded["code"], score=0)
        old.deleted_at = utcnow()
        db.commit()

        result = submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        assert result.success is True

    def test_missing_answer(self, db, seeded):
        first, _ = seeded["items"]
        result = submission_service.submit_quiz_answers(db, make_submission(seeded, [(first.id, "Pagong")]))
        assert result.kind == ErrorKind.validation
        assert "1 question(s) remaining" in result.error
        assert db.query(StudentSubmission).count() == 0

    def test_unknown_quiz_item(self, db, seeded):
        answers = all_correct(seeded) + [(9999, "Pagong")]
        result = submission_service.submit_quiz_answers(db, make_submission(seeded, answers))
        assert result.kind == ErrorKind.validation

    def test_duplicate_answers(self, db, seeded):
        first, second = seeded["items"]
        answers = [(first.id, "Pagong"), (first.id, "Matsing"), (second.id, "Matsing")]
        result = submission_service.submit_quiz_answers(db, make_submission(seeded, answers))
        assert result.kind == ErrorKind.validation

    def test_deleted_quiz_items_are_not_required(self, db, seeded):
        first, second = seeded["items"]
        second.deleted_at = utcnow()
        db.commit()

        result = submission_service.submit_quiz_answers(db, make_submission(seeded, [(first.id, "Pagong")]))
        assert result.success is True
        assert result.data.total_questions == 1

    def test_code_must_belong_to_story(self, db, factory, seeded):
        other = factory.story(title="Ang Alamat ng Pinya")
        data = make_submission(seeded, all_correct(seeded))
        data.story_id = other.id
        assert submission_service.submit_quiz_answers(db, data).kind == ErrorKind.validation

    def test_deleted_code(self, db, seeded):
        seeded["code"].deleted_at = utcnow()
        db.commit()
        result = submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        assert result.kind == ErrorKind.not_found

    def test_blank_student(self, db, seeded):
        result = submission_service.submit_quiz_answers(
            db, make_submission(seeded, all_correct(seeded), full_name="  ")
        )
        assert result.kind == ErrorKind.validation

    def test_emits_quiz_completed_notification(self, db, seeded):
        submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        notification = db.query(Notification).filter(Notification.type == "quiz_completed").one()
        assert "Juan (10-A)" in notification.message


class TestConcurrentDuplicate:
    def test_unique_index_rejects_second_live_submission(self, db, factory, seeded):
        factory.submission(seeded["code"])
        with pytest.raises(IntegrityError):
            factory.submission(seeded["code"])
        db.rollback()

    def test_index_translates_to_conflict(self, db, factory, seeded, monkeypatch):
        # Simulate a request that passed the pre-check before the other one committed
        factory.submission(seeded["code"], score=1)
        monkeypatch.setattr(SubmissionService, "_live_submission", staticmethod(lambda *args: None))

        result = submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        assert result.kind == ErrorKind.conflict
        assert result.error == ALREADY_SUBMITTED
        assert db.query(StudentSubmission).count() == 1


class TestResults:
    def test_results_mirror_the_write_path(self, db, seeded):
        first, second = seeded["items"]
        submission_service.submit_quiz_answers(
            db, make_submission(seeded, [(first.id, "Pagong"), (second.id, "Kalabaw")])
        )

        result = submission_service.get_submission_results_by_code(db, "abcd", "Juan", "10-A")
        assert result.success is True
        results = result.data
        assert results.score == 1
        assert results.total_questions == 2
        assert results.percentage == 50.0
        assert [a.is_correct for a in results.answers] == [True, False]
        assert results.answers[1].correct_answer == "Matsing"
        assert results.score_consistent is True

    def test_no_submission(self, db, seeded):
        result = submission_service.get_submission_results_by_code(db, "ABCD", "Pedro", "10-A")
        assert result.kind == ErrorKind.not_found

    def test_has_taken_quiz(self, db, seeded):
        assert submission_service.has_student_taken_quiz(db, "ABCD", "Juan", "10-A").data.has_taken is False
        submission_service.submit_quiz_answers(db, make_submission(seeded, all_correct(seeded)))
        status = submission_service.has_student_taken_quiz(db, "abcd", "Juan", "10-A").data
        assert status.has_taken is True
        assert status.submission_id is not None

    def test_percentage_of_empty_quiz(self):
        assert percentage_of(0, 0) == 0.0
        assert percentage_of(1, 3) == 33.33


class TestScoreDrift:
    def test_editing_correct_answer_is_detected(self, db, seeded):
        outcome = submission_service.submit_quiz_answers(
            db, make_submission(seeded, all_correct(seeded))
        ).data
        assert submission_service.find_score_drift(db).data == []

        seeded["items"][0].correct_answer = "Matsing"
        db.commit()

        drifted = submission_service.find_score_drift(db).data
        assert len(drifted) == 1
        assert drifted[0].submission_id == outcome.submission_id
        assert drifted[0].stored_score == 2
        assert drifted[0].recomputed_score == 1

        report = submission_service.verify_submission_score(db, outcome.submission_id).data
        assert report.consistent is False

        results = submission_service.get_submission_results_by_code(db, "ABCD", "Juan", "10-A").data
        assert results.score == 2
        assert results.recomputed_score == 1
        assert results.score_consistent is False

    def test_verify_unknown_submission(self, db, seeded):
        assert submission_service.verify_submission_score(db, 9999).kind == ErrorKind.not_found


class TestQuizReplacedAfterSubmission:
    @pytest.fixture
    def replaced(self, db, factory, seeded):
        factory.view(seeded["code"])
        outcome = submission_service.submit_quiz_answers(
            db, make_submission(seeded, all_correct(seeded))
        ).data
        result = quiz_service.update_story_quiz_items(db, seeded["story"].id, [
            QuizItemCreate(quiz_number=1, question="Who was wiser?", choices=["Pagong", "Matsing"],
                           correct_answer="Pagong")
        ])
        assert result.success is True
        db.expire_all()
        return outcome

    def test_results_keep_the_graded_total(self, db, replaced):
        results = submission_service.get_submission_results_by_code(db, "ABCD", "Juan", "10-A").data
        assert (results.score, results.total_questions, results.percentage) == (2, 2, 100.0)
        assert results.retired_answers == 2
        assert all(a.retired for a in results.answers)
        assert results.score_consistent is False

    def test_replaced_questions_are_reported_as_drift(self, db, replaced):
        drifted = submission_service.find_score_drift(db).data
        assert [d.submission_id for d in drifted] == [replaced.submission_id]
        assert drifted[0].recomputed_score == 2
        assert drifted[0].retired_answers == 2
        assert drifted[0].consistent is False

    def test_reports_agree_with_results(self, db, seeded, replaced):
        row = report_service.get_code_details_with_student_data(db, seeded["code"].id).data.student_views[0]
        assert (row.score, row.total_questions) == (2, 2)

        trends = report_service.get_weekly_trends(db).data
        assert trends.current_average_score == pytest.approx(100.0)
