from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from ekwento.models.story import Story, Category, QuizItem
from ekwento.models.code import Code
from ekwento.models.student import StudentSubmission
from ekwento.schemas.stories import (
    StoryCreate, StoryUpdate, StoryResponse, StoryDetail, StoryCodeSummary, CategorySummary
)
from ekwento.services.notification_service import notification_service
from ekwento.services.quiz_service import to_quiz_item_response
from ekwento.services.result import NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

class StoryService:

    @staticmethod
    def _counts(db: Session, story_id: int) -> dict:
        quiz_items = db.query(func.count(QuizItem.id)).filter(
            QuizItem.story_id == story_id,
            QuizItem.deleted_at.is_(None)
        ).scalar()
        codes = db.query(func.count(Code.id)).filter(
            Code.story_id == story_id,
            Code.deleted_at.is_(None)
        ).scalar()
        submissions = db.query(func.count(StudentSubmission.id)).filter(
            StudentSubmission.story_id == story_id,
            StudentSubmission.deleted_at.is_(None)
        ).scalar()
        return {"quiz_item_count": quiz_items, "code_count": codes, "submission_count": submissions}

    @staticmethod
    def _to_response(db: Session, story: Story) -> StoryResponse:
        category = None
        if story.category is not None and story.category.deleted_at is None:
            category = CategorySummary.model_validate(story.category)

        return StoryResponse(
            id=story.id,
            category_id=story.category_id,
            title=story.title,
            author=story.author,
            description=story.description,
            file_link=story.file_link,
            subtitles=story.subtitles or [],
            created_at=story.created_at,
            updated_at=story.updated_at,
            deleted_at=story.deleted_at,
            category=category,
            **StoryService._counts(db, story.id)
        )

    @staticmethod
    def _to_detail(db: Session, story: Story) -> StoryDetail:
        codes = db.query(Code).filter(
            Code.story_id == story.id,
            Code.deleted_at.is_(None)
        ).order_by(Code.created_at.desc()).all()

        return StoryDetail(
            **StoryService._to_response(db, story).model_dump(),
            quiz_items=[to_quiz_item_response(q) for q in story.active_quiz_items],
            codes=[
                StoryCodeSummary(
                    id=c.id,
                    code=c.code,
                    status=c.status.value,
                    created_by=c.created_by,
                    creator_name=c.creator.full_name if c.creator else None,
                    created_at=c.created_at
                ) for c in codes
            ]
        )

    @staticmethod
    def _get_live(db: Session, story_id: int) -> Story:
        story = db.query(Story).filter(Story.id == story_id, Story.deleted_at.is_(None)).first()
        if not story:
            raise NotFoundError("Story not found")
        return story

    @staticmethod
    def _check_category(db: Session, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        exists = db.query(Category.id).filter(
            Category.id == category_id,
            Category.deleted_at.is_(None)
        ).first()
        if not exists:
            raise NotFoundError("Category not found")

    @staticmethod
    @service_call("Failed to fetch stories")
    def get_stories(db: Session) -> List[StoryResponse]:
        stories = db.query(Story).filter(
            Story.deleted_at.is_(None)
        ).order_by(Story.created_at.desc(), Story.id.desc()).all()
        return [StoryService._to_response(db, s) for s in stories]

    @staticmethod
    @service_call("Failed to fetch stories")
    def get_stories_with_quiz(db: Session) -> List[StoryDetail]:
        stories = db.query(Story).filter(
            Story.deleted_at.is_(None)
        ).order_by(Story.created_at.desc(), Story.id.desc()).all()
        return [StoryService._to_detail(db, s) for s in stories]

    @staticmethod
    @service_call("Failed to fetch story")
    def get_story_by_id(db: Session, story_id: int) -> StoryDetail:
        return StoryService._to_detail(db, StoryService._get_live(db, story_id))

    @staticmethod
    @service_call("Failed to create story")
    def create_story(db: Session, data: StoryCreate, user_id: Optional[int] = None) -> StoryResponse:
        if not data.title or not data.title.strip():
            raise ValidationError("Title is required")
        if not data.file_link:
            raise ValidationError("Video link is required")
        StoryService._check_category(db, data.category_id)

        story = Story(
            title=data.title.strip(),
            author=data.author or "Anonymous",
            description=data.description or None,
            file_link=data.file_link,
            subtitles=data.subtitles or [],
            category_id=data.category_id
        )
        db.add(story)
        db.commit()
        db.refresh(story)

        logger.info(f"Story created: {story.title}")
        notification_service.create_notification(
            db, "story_created", f"Story '{story.title}' created", user_id
        )
        return StoryService._to_response(db, story)

    @staticmethod
    @service_call("Failed to update story")
    def update_story(db: Session, story_id: int, data: StoryUpdate, user_id: Optional[int] = None) -> StoryResponse:
        story = StoryService._get_live(db, story_id)
        fields = data.model_dump(exclude_unset=True)

        if fields.get("title"):
            story.title = fields["title"].strip()
        if "author" in fields:
            story.author = fields["author"] or "Anonymous"
        if "description" in fields:
            story.description = fields["description"] or None
        if fields.get("file_link"):
            story.file_link = fields["file_link"]
        if fields.get("subtitles") is not None:
            story.subtitles = fields["subtitles"]
        if "category_id" in fields:
            StoryService._check_category(db, fields["category_id"])
            story.category_id = fields["category_id"]

        db.commit()
        db.refresh(story)

        notification_service.create_notification(
            db, "story_updated", f"Story '{story.title}' updated", user_id
        )
        return StoryService._to_response(db, story)

    @staticmethod
    @service_call("Failed to delete story")
    def delete_story(db: Session, story_id: int, user_id: Optional[int] = None) -> StoryResponse:
        story = StoryService._get_live(db, story_id)
        story.deleted_at = utcnow()
        db.commit()
        db.refresh(story)

        logger.info(f"Story {story_id} deleted")
        notification_service.create_notification(
            db, "story_deleted", f"Story '{story.title}' deleted", user_id
        )
        return StoryService._to_response(db, story)

    @staticmethod
    @service_call("Failed to restore story")
    def restore_story(db: Session, story_id: int) -> StoryResponse:
        story = db.query(Story).filter(Story.id == story_id).first()
        if not story:
            raise NotFoundError("Story not found")

        story.deleted_at = None
        db.commit()
        db.refresh(story)
        return StoryService._to_response(db, story)

story_service = StoryService()
