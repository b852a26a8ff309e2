from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from ekwento.models.story import Category, Story
from ekwento.schemas.stories import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryDetail, StoryBrief
)
from ekwento.services.notification_service import notification_service
from ekwento.services.result import NotFoundError, ValidationError, service_call
from ekwento.utils.timeutils import utcnow
import logging

logger = logging.getLogger(__name__)

class CategoryService:

    @staticmethod
    def _live_story_count(db: Session, category_id: int) -> int:
        return db.query(func.count(Story.id)).filter(
            Story.category_id == category_id,
            Story.deleted_at.is_(None)
        ).scalar()

    @staticmethod
    def _to_response(db: Session, category: Category) -> CategoryResponse:
        return CategoryResponse(
            id=category.id,
            name=category.name,
            description=category.description,
            story_count=CategoryService._live_story_count(db, category.id),
            created_at=category.created_at,
            updated_at=category.updated_at,
            deleted_at=category.deleted_at
        )

    @staticmethod
    def _get_live(db: Session, category_id: int) -> Category:
        category = db.query(Category).filter(
            Category.id == category_id,
            Category.deleted_at.is_(None)
        ).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    @staticmethod
    @service_call("Failed to fetch categories")
    def get_categories(db: Session) -> List[CategoryResponse]:
        categories = db.query(Category).filter(
            Category.deleted_at.is_(None)
        ).order_by(Category.name).all()
        return [CategoryService._to_response(db, c) for c in categories]

    @staticmethod
    @service_call("Failed to fetch category")
    def get_category_by_id(db: Session, category_id: int) -> CategoryDetail:
        category = CategoryService._get_live(db, category_id)
        stories = db.query(Story).filter(
            Story.category_id == category.id,
            Story.deleted_at.is_(None)
        ).order_by(Story.title).all()

        return CategoryDetail(
            **CategoryService._to_response(db, category).model_dump(),
            stories=[StoryBrief.model_validate(s) for s in stories]
        )

    @staticmethod
    @service_call("Failed to create category")
    def create_category(db: Session, data: CategoryCreate, user_id: Optional[int] = None) -> CategoryResponse:
        if not data.name or not data.name.strip():
            raise ValidationError("Category name is required")

        category = Category(name=data.name.strip(), description=data.description or None)
        db.add(category)
        db.commit()
        db.refresh(category)

        logger.info(f"Category created: {category.name}")
        notification_service.create_notification(
            db, "category_created", f"Category '{category.name}' created", user_id
        )
        return CategoryService._to_response(db, category)

    @staticmethod
    @service_call("Failed to update category")
    def update_category(db: Session, category_id: int, data: CategoryUpdate, user_id: Optional[int] = None) -> CategoryResponse:
        category = CategoryService._get_live(db, category_id)

        if data.name:
            category.name = data.name.strip()
        if data.description is not None:
            category.description = data.description or None

        db.commit()
        db.refresh(category)
        notification_service.create_notification(
            db, "category_updated", f"Category '{category.name}' updated", user_id
        )
        return CategoryService._to_response(db, category)

    @staticmethod
    @service_call("Failed to delete category")
    def delete_category(db: Session, category_id: int, user_id: Optional[int] = None) -> CategoryResponse:
        """Soft delete; refused while any live story still uses the category"""
        category = CategoryService._get_live(db, category_id)

        if CategoryService._live_story_count(db, category.id) > 0:
            raise ValidationError(
                "Cannot delete category that contains stories. Please move or delete the stories first."
            )

        category.deleted_at = utcnow()
        db.commit()
        db.refresh(category)

        logger.info(f"Category {category_id} deleted")
        notification_service.create_notification(
            db, "category_deleted", f"Category '{category.name}' deleted", user_id
        )
        return CategoryService._to_response(db, category)

    @staticmethod
    @service_call("Failed to restore category")
    def restore_category(db: Session, category_id: int) -> CategoryResponse:
        category = db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category not found")

        category.deleted_at = None
        db.commit()
        db.refresh(category)
        return CategoryService._to_response(db, category)

category_service = CategoryService()
