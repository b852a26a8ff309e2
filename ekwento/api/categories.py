from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ekwento.api.errors import raise_for_result
from ekwento.database import get_db
from ekwento.dependencies import get_current_user
from ekwento.models.user import User
from ekwento.schemas.stories import CategoryCreate, CategoryUpdate
from ekwento.services.category_service import category_service

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("")
async def get_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "categories": raise_for_result(category_service.get_categories(db))}

@router.post("")
async def create_category(
    request: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    category = raise_for_result(category_service.create_category(db, request, current_user.id))
    return {"success": True, "category": category}

@router.get("/{category_id}")
async def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Category with its live stories"""
    category = raise_for_result(category_service.get_category_by_id(db, category_id))
    return {"success": True, "category": category}

@router.put("/{category_id}")
async def update_category(
    category_id: int,
    request: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    category = raise_for_result(category_service.update_category(db, category_id, request, current_user.id))
    return {"success": True, "category": category}

@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    raise_for_result(category_service.delete_category(db, category_id, current_user.id))
    return {"success": True, "message": "Category deleted successfully"}

@router.post("/{category_id}/restore")
async def restore_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    category = raise_for_result(category_service.restore_category(db, category_id))
    return {"success": True, "category": category}
