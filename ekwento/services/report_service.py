"""
Read-only roll-ups for the teacher dashboard.

Average scores are per-submission percentages averaged together, so every
student's attempt weighs the same no matter how many questions its story
has.
"""

from typing import List, Optional, Tuple
from datetime import datetime, timedelta
from sqlalchemy import func, and_
from sqlalchemy.orm import Session
from ekwento.models.code import Code
from ekwento.models.story import Story, QuizItem
from ekwento.models.student import StudentStoryView, StudentSubmission
from ekwento.schemas.reports import (
    WeeklyTrends, CodeWithStats, StudentViewRow, CodeInfo, CodeDetails, StudentSubmissionDetail
)
from ekwento.schemas.quiz import AnswerResult
from ekwento.schemas.stories import StoryBrief
from ekwento.services.submission_service import SubmissionService, is_correct_answer
from ekwento.services.result import NotFoundError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

def week_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """[start, end) of the calendar week containing ``now``; weeks start on Sunday"""
    days_since_sunday = (now.weekday() + 1) % 7
    start = (now - timedelta(days=days_since_sunday)).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=7)

class ReportService:

    @staticmethod
    def _count_between(db: Session, column, deleted_column, start: datetime, end: datetime) -> int:
        return db.query(func.count()).filter(
            column >= start,
            column < end,
            deleted_column.is_(None)
        ).scalar()

    @staticmethod
    def average_percentage(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> float:
        totals = SubmissionService.question_totals(db)
        query = db.query(StudentSubmission.score, totals.c.total).join(
            totals, totals.c.submission_id == StudentSubmission.id
        ).filter(
            StudentSubmission.deleted_at.is_(None),
            StudentSubmission.score.isnot(None)
        )
        if start is not None:
            query = query.filter(StudentSubmission.submitted_at >= start)
        if end is not None:
            query = query.filter(StudentSubmission.submitted_at < end)

        rows = query.all()
        if not rows:
            return 0.0

        # A story without questions counts as one question
        total_percentage = sum((score / (total or 1)) * 100 for score, total in rows)
        return total_percentage / len(rows)

    @staticmethod
    @service_call("Failed to fetch weekly trends")
    def get_weekly_trends(db: Session, now: Optional[datetime] = None) -> WeeklyTrends:
        current_start, current_end = week_bounds(now or utcnow())
        last_start, last_end = current_start - timedelta(days=7), current_start

        def delta(column, deleted_column) -> int:
            current = ReportService._count_between(db, column, deleted_column, current_start, current_end)
            last = ReportService._count_between(db, column, deleted_column, last_start, last_end)
            return current - last

        current_avg = ReportService.average_percentage(db, current_start, current_end)
        last_avg = ReportService.average_percentage(db, last_start, last_end)

        return WeeklyTrends(
            stories_change=delta(Story.created_at, Story.deleted_at),
            codes_change=delta(Code.created_at, Code.deleted_at),
            submissions_change=delta(StudentSubmission.submitted_at, StudentSubmission.deleted_at),
            average_score_change=current_avg - last_avg,
            current_average_score=ReportService.average_percentage(db)
        )

    @staticmethod
    @service_call("Failed to fetch codes")
    def get_codes_with_stats(db: Session) -> List[CodeWithStats]:
        view_count = db.query(func.count(StudentStoryView.id)).filter(
            StudentStoryView.code_id == Code.id
        ).correlate(Code).scalar_subquery()
        submission_count = db.query(func.count(StudentSubmission.id)).filter(
            StudentSubmission.code_id == Code.id,
            StudentSubmission.deleted_at.is_(None)
        ).correlate(Code).scalar_subquery()

        rows = db.query(Code, Story.title, view_count, submission_count).join(
            Story, Code.story_id == Story.id
        ).filter(
            Code.deleted_at.is_(None)
        ).order_by(Code.created_at.desc(), Code.id.desc()).all()

        return [
            CodeWithStats(
                id=code.id,
                code=code.code,
                created_at=code.created_at,
                status=code.status.value,
                story_id=code.story_id,
                story_title=title,
                view_count=views,
                submission_count=submissions
            ) for code, title, views, submissions in rows
        ]

    @staticmethod
    @service_call("Failed to fetch code details")
    def get_code_details_with_student_data(db: Session, code_id: int) -> CodeDetails:
        code = db.query(Code).filter(Code.id == code_id, Code.deleted_at.is_(None)).first()
        if not code:
            raise NotFoundError("Code not found")

        total_questions = db.query(func.count(QuizItem.id)).filter(
            QuizItem.story_id == code.story_id,
            QuizItem.deleted_at.is_(None)
        ).scalar()

        totals = SubmissionService.question_totals(db)

        rows = db.query(StudentStoryView, StudentSubmission, totals.c.total).outerjoin(
            StudentSubmission,
            and_(
                StudentSubmission.code_id == StudentStoryView.code_id,
                StudentSubmission.full_name == StudentStoryView.full_name,
                StudentSubmission.section == StudentStoryView.section,
                StudentSubmission.deleted_at.is_(None)
            )
        ).outerjoin(
            totals, totals.c.submission_id == StudentSubmission.id
        ).filter(
            StudentStoryView.code_id == code.id
        ).order_by(StudentStoryView.viewed_at.desc(), StudentStoryView.id.desc()).all()

        student_views = [
            StudentViewRow(
                id=view.id,
                full_name=view.full_name,
                section=view.section,
                device_id=view.device_id,
                viewed_at=view.viewed_at,
                has_submission=submission is not None,
                score=(submission.score or 0) if submission else None,
                submitted_at=submission.submitted_at if submission else None,
                total_questions=graded if submission else total_questions
            ) for view, submission, graded in rows
        ]

        return CodeDetails(
            code=CodeInfo(
                id=code.id,
                code=code.code,
                created_at=code.created_at,
                status=code.status.value,
                story=StoryBrief.model_validate(code.story)
            ),
            student_views=student_views
        )

    @staticmethod
    @service_call("Failed to fetch submission details")
    def get_student_submission_details(db: Session, code_id: int, full_name: str, section: str) -> StudentSubmissionDetail:
        submission = db.query(StudentSubmission).filter(
            StudentSubmission.code_id == code_id,
            StudentSubmission.full_name == full_name,
            StudentSubmission.section == section,
            StudentSubmission.deleted_at.is_(None)
        ).first()
        if not submission:
            raise NotFoundError("Submission not found")

        answers = sorted(submission.answers, key=lambda a: (a.quiz_item.quiz_number, a.quiz_item_id))
        return StudentSubmissionDetail(
            id=submission.id,
            full_name=submission.full_name,
            section=submission.section,
            submitted_at=submission.submitted_at,
            score=submission.score or 0,
            answers=[
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
        )

report_service = ReportService()
