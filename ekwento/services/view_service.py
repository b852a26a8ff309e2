from typing import List, Optional
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ekwento.models.code import Code
from ekwento.models.story import Story
from ekwento.models.student import StudentStoryView, StudentSubmission
from ekwento.schemas.student import (
    ViewStatus, StoryViewStats, StoryViewCount, StoryViewRecord, ViewedStory
)
from ekwento.services.code_service import CodeService
from ekwento.services.student_session import StudentIdentity
from ekwento.services.result import ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

class ViewService:

    @staticmethod
    def _view_query(db: Session, code: Code, full_name: str, section: str):
        return db.query(StudentStoryView).filter(
            StudentStoryView.code_id == code.id,
            StudentStoryView.story_id == code.story_id,
            StudentStoryView.full_name == full_name,
            StudentStoryView.section == section
        )

    @staticmethod
    def _device_view(db: Session, code: Code, full_name: str, section: str, device_id: str):
        return ViewService._view_query(db, code, full_name, section).filter(
            StudentStoryView.device_id == device_id
        )

    @staticmethod
    def _find_view(db: Session, code: Code, full_name: str, section: str,
                   device_id: Optional[str]) -> Optional[StudentStoryView]:
        # Sessions from before device ids match on name and section alone
        if device_id:
            query = ViewService._device_view(db, code, full_name, section, device_id)
        else:
            query = ViewService._view_query(db, code, full_name, section)
        return query.order_by(StudentStoryView.viewed_at.desc()).first()

    @staticmethod
    @service_call("Failed to track story view")
    def track_story_view(db: Session, code: str, full_name: str, section: str,
                         device_id: Optional[str] = None, now: Optional[datetime] = None) -> ViewStatus:
        """Upsert the view for this student and device; never raises to the caller"""
        if not full_name or not section:
            raise ValidationError("Incomplete student information")

        record = CodeService.find_code(db, code, active_only=False)
        device_id = device_id or ""
        viewed_at = now or utcnow()

        view = ViewService._device_view(db, record, full_name, section, device_id).first()

        if view:
            view.viewed_at = viewed_at
            db.commit()
        else:
            view = StudentStoryView(
                code_id=record.id,
                story_id=record.story_id,
                full_name=full_name,
                section=section,
                device_id=device_id,
                viewed_at=viewed_at
            )
            db.add(view)
            try:
                db.commit()
            except IntegrityError:
                # Another request inserted the same key first; bump that row instead
                db.rollback()
                view = ViewService._device_view(db, record, full_name, section, device_id).one()
                view.viewed_at = viewed_at
                db.commit()

        return ViewStatus(has_viewed=True, viewed_at=viewed_at)

    @staticmethod
    @service_call("Failed to check story view")
    def has_student_viewed_story(db: Session, code: str, full_name: str, section: str,
                                 device_id: Optional[str] = None) -> ViewStatus:
        record = CodeService.find_code(db, code, active_only=False)
        view = ViewService._find_view(db, record, full_name, section, device_id)
        return ViewStatus(has_viewed=view is not None, viewed_at=view.viewed_at if view else None)

    @staticmethod
    @service_call("Failed to get story view statistics")
    def get_story_view_stats(db: Session, story_id: Optional[int] = None) -> StoryViewStats:
        counts_query = db.query(
            StudentStoryView.story_id, func.count(StudentStoryView.id)
        ).group_by(StudentStoryView.story_id)
        views_query = db.query(StudentStoryView)
        if story_id is not None:
            counts_query = counts_query.filter(StudentStoryView.story_id == story_id)
            views_query = views_query.filter(StudentStoryView.story_id == story_id)

        views = views_query.order_by(StudentStoryView.viewed_at.desc()).all()
        return StoryViewStats(
            stats=[StoryViewCount(story_id=sid, view_count=count) for sid, count in counts_query.all()],
            views=[StoryViewRecord.model_validate(v) for v in views]
        )

    @staticmethod
    @service_call("Failed to get viewed stories")
    def get_student_viewed_stories(db: Session, identity: StudentIdentity) -> List[ViewedStory]:
        """The student's library: every story they opened, newest first"""
        rows = db.query(StudentStoryView, Story, Code).join(
            Story, StudentStoryView.story_id == Story.id
        ).join(
            Code, StudentStoryView.code_id == Code.id
        ).filter(
            StudentStoryView.full_name == identity.name,
            StudentStoryView.section == identity.section,
            Story.deleted_at.is_(None),
            Code.deleted_at.is_(None)
        ).order_by(StudentStoryView.viewed_at.desc()).all()

        taken_code_ids = {
            code_id for (code_id,) in db.query(StudentSubmission.code_id).filter(
                StudentSubmission.full_name == identity.name,
                StudentSubmission.section == identity.section,
                StudentSubmission.deleted_at.is_(None)
            ).all()
        }

        library = []
        seen = set()
        for view, story, code in rows:
            # One entry per code even when several devices viewed it
            if code.id in seen:
                continue
            seen.add(code.id)
            library.append(ViewedStory(
                id=story.id,
                title=story.title,
                description=story.description,
                author=story.author,
                file_link=story.file_link,
                viewed_at=view.viewed_at,
                code=code.code,
                has_taken_quiz=code.id in taken_code_ids
            ))
        return library

view_service = ViewService()
