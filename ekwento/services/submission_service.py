from typing import List, Optional
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ekwento.models.code import Code
from ekwento.models.story import Story, QuizItem
from ekwento.models.student import StudentSubmission, Answer
from ekwento.schemas.quiz import (
    QuizSubmission, SubmissionOutcome, SubmissionResults, AnswerResult, QuizTakenStatus, ScoreDrift
)
from ekwento.services.code_service import CodeService
from ekwento.services.notification_service import notification_service
from ekwento.services.quiz_service import QuizService
from ekwento.services.result import ConflictError, NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED = "Quiz has already been submitted for this student"

def is_correct_answer(selected_answer: str, correct_answer: str) -> bool:
    """Exact, case-sensitive match; the write and read paths both use this"""
    return selected_answer == correct_answer

def percentage_of(score: int, total_questions: int) -> float:
    if total_questions <= 0:
        return 0.0
    return round((score / total_questions) * 100, 2)

class SubmissionService:

    @staticmethod
    def _live_submission(db: Session, code_id: int, full_name: str, section: str) -> Optional[StudentSubmission]:
        return db.query(StudentSubmission).filter(
            StudentSubmission.code_id == code_id,
            StudentSubmission.full_name == full_name,
            StudentSubmission.section == section,
            StudentSubmission.deleted_at.is_(None)
        ).first()

    @staticmethod
    def _check_answer_set(quiz_items: List[QuizItem], answers) -> None:
        if not quiz_items:
            raise ValidationError("This story has no quiz questions")

        answered_ids = [a.quiz_item_id for a in answers]
        if len(set(answered_ids)) != len(answered_ids):
            raise ValidationError("Each question can only be answered once")

        expected_ids = {q.id for q in quiz_items}
        if set(answered_ids) - expected_ids:
            raise ValidationError("Answers contain questions that are not part of this quiz")
        missing = expected_ids - set(answered_ids)
        if missing:
            raise ValidationError(f"Please answer all questions. {len(missing)} question(s) remaining.")

    @staticmethod
    def question_totals(db: Session):
        """
        Questions each submission was graded against, keyed by submission id.

        That is the quiz items it answered, so replacing a story's quiz later
        does not change old percentages. Rows stored without answers fall back
        to the story's live quiz.
        """
        answered = db.query(
            Answer.submission_id.label("submission_id"),
            func.count(Answer.id).label("answered")
        ).group_by(Answer.submission_id).subquery()
        live = db.query(
            QuizItem.story_id.label("story_id"),
            func.count(QuizItem.id).label("live")
        ).filter(
            QuizItem.deleted_at.is_(None)
        ).group_by(QuizItem.story_id).subquery()

        return db.query(
            StudentSubmission.id.label("submission_id"),
            func.coalesce(answered.c.answered, live.c.live, 0).label("total")
        ).outerjoin(
            answered, answered.c.submission_id == StudentSubmission.id
        ).outerjoin(
            live, live.c.story_id == StudentSubmission.story_id
        ).subquery()

    @staticmethod
    def retired_answer_count(submission: StudentSubmission) -> int:
        """Answers pointing at quiz items that were edited out of the story since"""
        return sum(1 for a in submission.answers if a.quiz_item.deleted_at is not None)

    @staticmethod
    def recompute_score(submission: StudentSubmission) -> int:
        return sum(
            1 for a in submission.answers
            if is_correct_answer(a.selected_answer, a.quiz_item.correct_answer)
        )

    @staticmethod
    @service_call("Failed to submit quiz")
    def submit_quiz_answers(db: Session, data: QuizSubmission, now: Optional[datetime] = None) -> SubmissionOutcome:
        full_name = (data.full_name or "").strip()
        section = (data.section or "").strip()
        if not full_name or not section:
            raise ValidationError("Student name and section are required")

        code = db.query(Code).join(Story, Code.story_id == Story.id).filter(
            Code.id == data.code_id,
            Code.deleted_at.is_(None),
            Story.deleted_at.is_(None)
        ).first()
        if not code:
            raise NotFoundError("Code not found")
        if code.story_id != data.story_id:
            raise ValidationError("Code does not belong to this story")

        # Fail fast before any write; the unique index below covers concurrent requests
        if SubmissionService._live_submission(db, code.id, full_name, section):
            raise ConflictError(ALREADY_SUBMITTED)

        quiz_items = QuizService.live_quiz_items(db, data.story_id)
        SubmissionService._check_answer_set(quiz_items, data.answers)
        items_by_id = {q.id: q for q in quiz_items}

        submission = StudentSubmission(
            code_id=code.id,
            story_id=data.story_id,
            full_name=full_name,
            section=section,
            device_id=data.device_id or "",
            submitted_at=now or utcnow()
        )
        db.add(submission)

        score = 0
        for answer in data.answers:
            submission.answers.append(Answer(
                quiz_item_id=answer.quiz_item_id,
                selected_answer=answer.selected_answer
            ))
            if is_correct_answer(answer.selected_answer, items_by_id[answer.quiz_item_id].correct_answer):
                score += 1
        submission.score = score

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(ALREADY_SUBMITTED)
        db.refresh(submission)

        logger.info(
            f"Quiz submitted: code {code.code}, {full_name} ({section}), score {score}/{len(quiz_items)}"
        )
        notification_service.create_notification(
            db, "quiz_completed", f"{full_name} ({section}) completed the quiz for code {code.code}"
        )
        return SubmissionOutcome(
            submission_id=submission.id,
            score=score,
            total_questions=len(quiz_items),
            percentage=percentage_of(score, len(quiz_items))
        )

    @staticmethod
    @service_call("Failed to check quiz status")
    def has_student_taken_quiz(db: Session, code: str, full_name: str, section: str) -> QuizTakenStatus:
        record = CodeService.find_code(db, code, active_only=False)
        submission = SubmissionService._live_submission(db, record.id, full_name, section)
        return QuizTakenStatus(
            has_taken=submission is not None,
            submission_id=submission.id if submission else None,
            submitted_at=submission.submitted_at if submission else None
        )

    @staticmethod
    @service_call("Failed to fetch quiz results")
    def get_submission_results_by_code(db: Session, code: str, full_name: str, section: str) -> SubmissionResults:
        record = CodeService.find_code(db, code, active_only=False)
        submission = SubmissionService._live_submission(db, record.id, full_name, section)
        if not submission:
            raise NotFoundError("Submission not found")

        totals = SubmissionService.question_totals(db)
        total_questions = db.query(totals.c.total).filter(
            totals.c.submission_id == submission.id
        ).scalar() or 0

        answers = sorted(submission.answers, key=lambda a: (a.quiz_item.quiz_number, a.quiz_item_id))
        answer_results = [
            AnswerResult(
                quiz_item_id=a.quiz_item_id,
                quiz_number=a.quiz_item.quiz_number,
                question=a.quiz_item.question,
                selected_answer=a.selected_answer,
                correct_answer=a.quiz_item.correct_answer,
                is_correct=is_correct_answer(a.selected_answer, a.quiz_item.correct_answer),
                retired=a.quiz_item.deleted_at is not None
            ) for a in answers
        ]

        score = submission.score or 0
        recomputed = sum(1 for a in answer_results if a.is_correct)
        retired = sum(1 for a in answer_results if a.retired)
        if recomputed != score or retired:
            logger.warning(
                f"Score drift on submission {submission.id}: stored {score}, recomputed {recomputed}, "
                f"{retired} answer(s) on replaced questions"
            )

        return SubmissionResults(
            submission_id=submission.id,
            code=record.code,
            story_id=submission.story_id,
            story_title=submission.story.title,
            full_name=submission.full_name,
            section=submission.section,
            submitted_at=submission.submitted_at,
            score=score,
            total_questions=total_questions,
            percentage=percentage_of(score, total_questions),
            recomputed_score=recomputed,
            retired_answers=retired,
            score_consistent=recomputed == score and not retired,
            answers=answer_results
        )

    @staticmethod
    def _drift(submission: StudentSubmission) -> ScoreDrift:
        recomputed = SubmissionService.recompute_score(submission)
        retired = SubmissionService.retired_answer_count(submission)
        return ScoreDrift(
            submission_id=submission.id,
            code_id=submission.code_id,
            full_name=submission.full_name,
            section=submission.section,
            stored_score=submission.score,
            recomputed_score=recomputed,
            retired_answers=retired,
            consistent=submission.score == recomputed and not retired
        )

    @staticmethod
    @service_call("Failed to verify submission score")
    def verify_submission_score(db: Session, submission_id: int) -> ScoreDrift:
        submission = db.query(StudentSubmission).filter(
            StudentSubmission.id == submission_id,
            StudentSubmission.deleted_at.is_(None)
        ).first()
        if not submission:
            raise NotFoundError("Submission not found")
        return SubmissionService._drift(submission)

    @staticmethod
    @service_call("Failed to check submission scores")
    def find_score_drift(db: Session, story_id: Optional[int] = None) -> List[ScoreDrift]:
        """Submissions whose cached score no longer matches their answers or whose questions were replaced"""
        query = db.query(StudentSubmission).filter(StudentSubmission.deleted_at.is_(None))
        if story_id is not None:
            query = query.filter(StudentSubmission.story_id == story_id)

        drifted = []
        for submission in query.order_by(StudentSubmission.id).all():
            report = SubmissionService._drift(submission)
            if not report.consistent:
                drifted.append(report)
        if drifted:
            logger.warning(f"{len(drifted)} submission(s) have drifted scores")
        return drifted

submission_service = SubmissionService()
