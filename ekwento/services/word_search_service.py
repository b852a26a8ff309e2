from typing import List
from sqlalchemy.orm import Session
from ekwento.models.word_search import WordSearch, WordSearchItem, WordSearchStatus
from ekwento.schemas.word_search import WordSearchCreate, WordSearchResponse
from ekwento.services.result import NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

class WordSearchService:

    @staticmethod
    def _get_live(db: Session, word_search_id: int, active_only: bool = False) -> WordSearch:
        query = db.query(WordSearch).filter(
            WordSearch.id == word_search_id,
            WordSearch.deleted_at.is_(None)
        )
        if active_only:
            query = query.filter(WordSearch.status == WordSearchStatus.active)
        word_search = query.first()
        if not word_search:
            raise NotFoundError("Word search not found")
        return word_search

    @staticmethod
    @service_call("Failed to create word search")
    def create_word_search(db: Session, data: WordSearchCreate) -> WordSearchResponse:
        title = (data.title or "").strip()
        if not title:
            raise ValidationError("Title is required")

        words = [w for w in data.words if w.word and w.word.strip()]
        if not words:
            raise ValidationError("At least one word is required")

        word_search = WordSearch(
            title=title,
            description=(data.description or "").strip() or None,
            status=data.status
        )
        for w in words:
            word_search.items.append(WordSearchItem(
                word=w.word.strip(),
                description=(w.description or "").strip() or None
            ))
        db.add(word_search)
        db.commit()
        db.refresh(word_search)

        logger.info(f"Word search created: {word_search.title} ({len(words)} words)")
        return WordSearchResponse.model_validate(word_search)

    @staticmethod
    @service_call("Failed to fetch word searches")
    def get_word_searches(db: Session, active_only: bool = False) -> List[WordSearchResponse]:
        query = db.query(WordSearch).filter(WordSearch.deleted_at.is_(None))
        if active_only:
            query = query.filter(WordSearch.status == WordSearchStatus.active)
        return [
            WordSearchResponse.model_validate(ws)
            for ws in query.order_by(WordSearch.created_at.desc(), WordSearch.id.desc()).all()
        ]

    @staticmethod
    @service_call("Failed to fetch word search")
    def get_word_search_by_id(db: Session, word_search_id: int, active_only: bool = False) -> WordSearchResponse:
        return WordSearchResponse.model_validate(
            WordSearchService._get_live(db, word_search_id, active_only=active_only)
        )

    @staticmethod
    @service_call("Failed to update word search")
    def update_word_search_status(db: Session, word_search_id: int, status: WordSearchStatus) -> WordSearchResponse:
        word_search = WordSearchService._get_live(db, word_search_id)
        word_search.status = status
        db.commit()
        db.refresh(word_search)
        return WordSearchResponse.model_validate(word_search)

    @staticmethod
    @service_call("Failed to delete word search")
    def delete_word_search(db: Session, word_search_id: int) -> WordSearchResponse:
        word_search = WordSearchService._get_live(db, word_search_id)
        word_search.deleted_at = utcnow()
        db.commit()
        db.refresh(word_search)
        return WordSearchResponse.model_validate(word_search)

word_search_service = WordSearchService()
