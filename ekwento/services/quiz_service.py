from typing import List, Optional
from sqlalchemy.orm import Session
from ekwento.models.story import Story, QuizItem, Choice, Category
from ekwento.models.system import SystemConfig
from ekwento.schemas.quiz import (
    QuizItemCreate, QuizItemUpdate, QuizItemResponse, StoryWithQuizCreate, StudentQuizItem
)
from ekwento.services.notification_service import notification_service
from ekwento.services.system_config_service import SystemConfigService
from ekwento.services.result import NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

def to_quiz_item_response(item: QuizItem) -> QuizItemResponse:
    return QuizItemResponse(
        id=item.id,
        story_id=item.story_id,
        quiz_number=item.quiz_number,
        question=item.question,
        correct_answer=item.correct_answer,
        choices=item.choice_texts
    )

def to_student_quiz_item(item: QuizItem) -> StudentQuizItem:
    return StudentQuizItem(
        id=item.id,
        quiz_number=item.quiz_number,
        question=item.question,
        choices=item.choice_texts
    )

class QuizService:

    @staticmethod
    def validate_quiz_item(question: str, choices: List[str], correct_answer: str, config: SystemConfig) -> None:
        if not question or not question.strip():
            raise ValidationError("Question is required")
        if not correct_answer or not correct_answer.strip():
            raise ValidationError("Correct answer is required")
        if any(not c or not c.strip() for c in choices):
            raise ValidationError("Choices cannot be blank")
        if len(choices) < config.min_choices_count:
            raise ValidationError(f"At least {config.min_choices_count} choices are required")
        if len(choices) > config.max_choices_count:
            raise ValidationError(f"No more than {config.max_choices_count} choices are allowed")
        if len(set(choices)) != len(choices):
            raise ValidationError("Choices must be unique")
        if correct_answer not in choices:
            raise ValidationError("Correct answer must be one of the choices")

    @staticmethod
    def validate_quiz_set(quiz_items: List[QuizItemCreate], config: SystemConfig) -> None:
        numbers = [q.quiz_number for q in quiz_items]
        if len(set(numbers)) != len(numbers):
            raise ValidationError("Quiz numbers must be unique within a story")
        for q in quiz_items:
            QuizService.validate_quiz_item(q.question, q.choices, q.correct_answer, config)

    @staticmethod
    def _build_item(story_id: int, data: QuizItemCreate) -> QuizItem:
        item = QuizItem(
            story_id=story_id,
            quiz_number=data.quiz_number,
            question=data.question.strip(),
            correct_answer=data.correct_answer
        )
        item.choices = [Choice(position=i, text=text) for i, text in enumerate(data.choices)]
        return item

    @staticmethod
    def _get_live_story(db: Session, story_id: int) -> Story:
        story = db.query(Story).filter(Story.id == story_id, Story.deleted_at.is_(None)).first()
        if not story:
            raise NotFoundError("Story not found")
        return story

    @staticmethod
    def _get_live_item(db: Session, quiz_item_id: int) -> QuizItem:
        item = db.query(QuizItem).filter(
            QuizItem.id == quiz_item_id,
            QuizItem.deleted_at.is_(None)
        ).first()
        if not item:
            raise NotFoundError("Quiz item not found")
        return item

    @staticmethod
    def live_quiz_items(db: Session, story_id: int) -> List[QuizItem]:
        return db.query(QuizItem).filter(
            QuizItem.story_id == story_id,
            QuizItem.deleted_at.is_(None)
        ).order_by(QuizItem.quiz_number).all()

    @staticmethod
    @service_call("Failed to fetch quiz items")
    def get_quiz_items_by_story(db: Session, story_id: int) -> List[QuizItemResponse]:
        return [to_quiz_item_response(q) for q in QuizService.live_quiz_items(db, story_id)]

    @staticmethod
    @service_call("Failed to fetch quiz item")
    def get_quiz_item_by_id(db: Session, quiz_item_id: int) -> QuizItemResponse:
        return to_quiz_item_response(QuizService._get_live_item(db, quiz_item_id))

    @staticmethod
    @service_call("Failed to create quiz item")
    def create_quiz_item(db: Session, story_id: int, data: QuizItemCreate, user_id: Optional[int] = None) -> QuizItemResponse:
        QuizService._get_live_story(db, story_id)
        config = SystemConfigService.load_config(db)
        QuizService.validate_quiz_item(data.question, data.choices, data.correct_answer, config)

        item = QuizService._build_item(story_id, data)
        db.add(item)
        db.commit()
        db.refresh(item)

        notification_service.create_notification(
            db, "quiz_created", f"Quiz item {item.quiz_number} added to story {story_id}", user_id
        )
        return to_quiz_item_response(item)

    @staticmethod
    @service_call("Failed to update quiz item")
    def update_quiz_item(db: Session, quiz_item_id: int, data: QuizItemUpdate, user_id: Optional[int] = None) -> QuizItemResponse:
        item = QuizService._get_live_item(db, quiz_item_id)
        config = SystemConfigService.load_config(db)

        question = data.question or item.question
        choices = data.choices if data.choices else item.choice_texts
        correct_answer = data.correct_answer or item.correct_answer
        QuizService.validate_quiz_item(question, choices, correct_answer, config)

        item.question = question.strip()
        item.correct_answer = correct_answer
        if data.choices:
            item.choices = [Choice(position=i, text=text) for i, text in enumerate(data.choices)]
        if data.quiz_number is not None:
            item.quiz_number = data.quiz_number

        db.commit()
        db.refresh(item)

        logger.info(f"Quiz item {quiz_item_id} updated")
        notification_service.create_notification(
            db, "quiz_updated", f"Quiz item {item.quiz_number} of story {item.story_id} updated", user_id
        )
        return to_quiz_item_response(item)

    @staticmethod
    @service_call("Failed to delete quiz item")
    def delete_quiz_item(db: Session, quiz_item_id: int) -> QuizItemResponse:
        item = QuizService._get_live_item(db, quiz_item_id)
        item.deleted_at = utcnow()
        db.commit()
        db.refresh(item)
        return to_quiz_item_response(item)

    @staticmethod
    @service_call("Failed to create story with quiz")
    def create_story_with_quiz(db: Session, data: StoryWithQuizCreate, user_id: Optional[int] = None) -> dict:
        """Create the story and all its quiz items in one commit"""
        if not data.title or not data.title.strip():
            raise ValidationError("Title is required")
        if not data.file_link:
            raise ValidationError("Video link is required")
        if data.category_id is not None:
            category = db.query(Category).filter(
                Category.id == data.category_id,
                Category.deleted_at.is_(None)
            ).first()
            if not category:
                raise NotFoundError("Category not found")

        config = SystemConfigService.load_config(db)
        QuizService.validate_quiz_set(data.quiz_items, config)

        story = Story(
            title=data.title.strip(),
            author=data.author or "Anonymous",
            description=data.description or None,
            file_link=data.file_link,
            subtitles=data.subtitles or [],
            category_id=data.category_id
        )
        db.add(story)
        db.flush()

        items = [QuizService._build_item(story.id, q) for q in data.quiz_items]
        db.add_all(items)
        db.commit()
        db.refresh(story)

        logger.info(f"Story '{story.title}' created with {len(items)} quiz items")
        notification_service.create_notification(
            db, "story_created", f"Story '{story.title}' created", user_id
        )
        return {
            "story_id": story.id,
            "quiz_items": [to_quiz_item_response(q) for q in QuizService.live_quiz_items(db, story.id)]
        }

    @staticmethod
    @service_call("Failed to update story quiz items")
    def update_story_quiz_items(db: Session, story_id: int, quiz_items: List[QuizItemCreate], user_id: Optional[int] = None) -> List[QuizItemResponse]:
        """Replace the story's quiz: retire every live item and insert the new set"""
        QuizService._get_live_story(db, story_id)
        config = SystemConfigService.load_config(db)
        QuizService.validate_quiz_set(quiz_items, config)

        now = utcnow()
        db.query(QuizItem).filter(
            QuizItem.story_id == story_id,
            QuizItem.deleted_at.is_(None)
        ).update({QuizItem.deleted_at: now, QuizItem.updated_at: now}, synchronize_session=False)

        db.add_all([QuizService._build_item(story_id, q) for q in quiz_items])
        db.commit()

        logger.info(f"Replaced quiz for story {story_id} with {len(quiz_items)} items")
        notification_service.create_notification(
            db, "quiz_updated", f"Quiz for story {story_id} replaced", user_id
        )
        return [to_quiz_item_response(q) for q in QuizService.live_quiz_items(db, story_id)]

quiz_service = QuizService()
