from typing import List, Optional
import secrets
import string
from sqlalchemy.orm import Session
from ekwento.config import settings
from ekwento.models.code import Code, CodeStatus
from ekwento.models.story import Story
from ekwento.schemas.codes import CodeResponse, ResolvedCode
from ekwento.schemas.stories import StudentStory
from ekwento.services.notification_service import notification_service
from ekwento.services.quiz_service import to_student_quiz_item
from ekwento.services.result import NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_GENERATION_ATTEMPTS = 20

def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()

def to_student_story(story: Story) -> StudentStory:
    return StudentStory(
        id=story.id,
        title=story.title,
        author=story.author,
        description=story.description,
        file_link=story.file_link,
        subtitles=story.subtitles or [],
        quiz_items=[to_student_quiz_item(q) for q in story.active_quiz_items]
    )

class CodeService:

    @staticmethod
    def find_code(db: Session, code: str, active_only: bool = True) -> Code:
        """Look up a live code bound to a live story, raising NotFoundError otherwise"""
        query = db.query(Code).join(Story, Code.story_id == Story.id).filter(
            Code.code == normalize_code(code),
            Code.deleted_at.is_(None),
            Story.deleted_at.is_(None)
        )
        if active_only:
            query = query.filter(Code.status == CodeStatus.active)

        record = query.first()
        if not record:
            raise NotFoundError("Invalid code. Please check and try again.")
        return record

    @staticmethod
    @service_call("Failed to resolve code")
    def resolve_code(db: Session, code: str, active_only: bool = True) -> ResolvedCode:
        record = CodeService.find_code(db, code, active_only=active_only)
        return ResolvedCode(
            code_id=record.id,
            code=record.code,
            is_active=record.is_active,
            story=to_student_story(record.story)
        )

    @staticmethod
    @service_call("Failed to validate code")
    def validate_code_entry(db: Session, code: Optional[str]) -> dict:
        """Student code form: the code must be long enough and resolve to an active story"""
        normalized = normalize_code(code)
        if len(normalized) < settings.min_access_code_length:
            raise ValidationError(
                f"Code must be at least {settings.min_access_code_length} characters long"
            )

        record = CodeService.find_code(db, normalized)
        return {
            "code": record.code,
            "redirect_to": f"/student/info?code={record.code}"
        }

    @staticmethod
    def _random_code(length: int) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    @staticmethod
    @service_call("Failed to generate access code")
    def generate_access_code(db: Session, story_id: int, user_id: Optional[int] = None) -> CodeResponse:
        story = db.query(Story).filter(Story.id == story_id, Story.deleted_at.is_(None)).first()
        if not story:
            raise NotFoundError("Story not found")

        length = max(settings.access_code_length, settings.min_access_code_length)
        for _ in range(MAX_GENERATION_ATTEMPTS):
            candidate = CodeService._random_code(length)
            # Deleted codes keep their value reserved
            if not db.query(Code.id).filter(Code.code == candidate).first():
                break
        else:
            raise RuntimeError("Could not find an unused access code")

        record = Code(code=candidate, story_id=story.id, status=CodeStatus.active, created_by=user_id)
        db.add(record)
        db.commit()
        db.refresh(record)

        logger.info(f"Access code {record.code} generated for story {story.id}")
        notification_service.create_notification(
            db, "code_generated", f"Code {record.code} generated for story '{story.title}'", user_id
        )
        return CodeResponse.model_validate(record)

    @staticmethod
    @service_call("Failed to fetch codes")
    def list_codes(db: Session, story_id: Optional[int] = None) -> List[CodeResponse]:
        query = db.query(Code).filter(Code.deleted_at.is_(None))
        if story_id is not None:
            query = query.filter(Code.story_id == story_id)
        codes = query.order_by(Code.created_at.desc(), Code.id.desc()).all()
        return [CodeResponse.model_validate(c) for c in codes]

    @staticmethod
    def _get_live(db: Session, code_id: int) -> Code:
        record = db.query(Code).filter(Code.id == code_id, Code.deleted_at.is_(None)).first()
        if not record:
            raise NotFoundError("Code not found")
        return record

    @staticmethod
    @service_call("Failed to update code status")
    def update_code_status(db: Session, code_id: int, status: CodeStatus) -> CodeResponse:
        record = CodeService._get_live(db, code_id)
        record.status = status
        db.commit()
        db.refresh(record)

        logger.info(f"Code {record.code} set to {status.value}")
        return CodeResponse.model_validate(record)

    @staticmethod
    @service_call("Failed to delete code")
    def delete_code(db: Session, code_id: int) -> CodeResponse:
        record = CodeService._get_live(db, code_id)
        record.deleted_at = utcnow()
        db.commit()
        db.refresh(record)
        return CodeResponse.model_validate(record)

code_service = CodeService()
